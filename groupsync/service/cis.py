"""
Profile store client for the Change Integration Service (CIS), wraps around
httpx.

Profiles are read from the person API and written through the change API.
Both require an access token obtained through the OAuth client credentials
flow; the token is cached until shortly before it expires.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from groupsync.config.settings import Settings
from groupsync.core.profile import Profile
from groupsync.core.signer import Signer

from .store import DisplayLevel, FetchFailed, GetBy, ProfileStoreClient, PublishFailed


class TokenError(Exception):
    pass


class TokenData(BaseModel):
    access_token: str
    expires_in: int = 86400
    token_type: str = "Bearer"


class CisClient(ProfileStoreClient):
    """
    Talks to CIS over HTTP. Safe to share between tasks on a single event
    loop; the updater only ever has one call outstanding.
    """

    settings: Settings
    signer: Signer
    transport: httpx.AsyncBaseTransport | None

    token: TokenData | None = None
    token_expires: datetime | None = None

    def __init__(
        self,
        settings: Settings,
        signer: Signer,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.signer = signer
        self.transport = transport
        self._lock: asyncio.Lock | None = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport, timeout=self.settings.cis_timeout
        )

    async def _exchange_client_credentials(self) -> TokenData:
        async with self._client() as client:
            response = await client.post(
                self.settings.cis_token_url,
                json={
                    "client_id": self.settings.cis_client_id,
                    "client_secret": self.settings.cis_client_secret,
                    "audience": self.settings.cis_audience,
                    "grant_type": "client_credentials",
                },
            )

        if response.status_code != 200:
            raise TokenError(
                f"Failed to obtain token: {response.status_code} {response.text}"
            )

        try:
            return TokenData.model_validate_json(response.content)
        except ValidationError as e:
            raise TokenError(f"Invalid token response: {e}")

    async def bearer_token(self) -> str:
        # Created lazily so that it binds to the loop the updater runs on.
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            if self.token is None or (
                self.token_expires - datetime.now(tz=timezone.utc)
            ) < timedelta(minutes=5):
                self.token = await self._exchange_client_credentials()
                self.token_expires = datetime.now(tz=timezone.utc) + timedelta(
                    seconds=self.token.expires_in
                )

            return self.token.access_token

    async def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {await self.bearer_token()}",
        }

    async def get_user_by(
        self, user_id: str, by: GetBy, filter: DisplayLevel | None = None
    ) -> Profile:
        url = f"{self.settings.person_api_url}/v2/user/{by.value}/{quote(user_id, safe='')}"
        params = {"filterDisplay": filter.value} if filter is not None else None

        try:
            headers = await self._headers()
            async with self._client() as client:
                response = await client.get(url, params=params, headers=headers)
        except (TokenError, httpx.HTTPError) as e:
            raise FetchFailed(f"Unable to fetch profile for {user_id}: {e}")

        if response.status_code != 200:
            raise FetchFailed(
                f"Unable to fetch profile for {user_id}: {response.status_code}"
            )

        try:
            content = response.json()
        except ValueError:
            raise FetchFailed(f"Invalid profile for {user_id}")

        if not content:
            raise FetchFailed(f"No profile for {user_id}")

        try:
            return Profile.model_validate(content)
        except ValidationError as e:
            raise FetchFailed(f"Invalid profile for {user_id}: {e}")

    async def update_user(self, user_id: str, profile: Profile) -> None:
        url = f"{self.settings.change_api_url}/v2/user"

        try:
            headers = await self._headers()
            async with self._client() as client:
                response = await client.post(
                    url,
                    params={"user_id": user_id},
                    json=profile.to_json(),
                    headers=headers,
                )
        except (TokenError, httpx.HTTPError) as e:
            raise PublishFailed(f"Unable to publish profile for {user_id}: {e}")

        if response.status_code != 200:
            raise PublishFailed(
                f"Unable to publish profile for {user_id}: "
                f"{response.status_code} {response.text}"
            )

    def get_secret_store(self) -> Signer:
        return self.signer
