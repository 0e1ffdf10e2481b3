"""
Tests the CIS client against a mocked transport.
"""

import json

import httpx
import pytest

from groupsync.core.profile import Classification, Profile, StandardAttributeString
from groupsync.service.cis import CisClient
from groupsync.service.mock import MockSigner
from groupsync.service.store import DisplayLevel, FetchFailed, GetBy, PublishFailed

USER_ID = "ad|Mozilla-LDAP|hmuster"

PROFILE = {
    "user_id": {
        "metadata": {
            "classification": "PUBLIC",
            "created": "2019-01-01T00:00:00Z",
            "last_modified": "2019-01-01T00:00:00Z",
            "verified": True,
        },
        "signature": {"publisher": {"name": "ldap", "value": "sig"}},
        "value": USER_ID,
    },
    "active": {"value": True},
    "access_information": {
        "mozilliansorg": {
            "metadata": {"created": "2019-01-01T00:00:00Z"},
            "values": {"nda": None},
        }
    },
    "staff_information": {"director": {"value": False}},
}


class FakeCis:
    """
    Records requests and answers them like the token endpoint, person API
    and change API would.
    """

    def __init__(self, person_status=200, change_status=200, person_body=PROFILE):
        self.requests: list[httpx.Request] = []
        self.person_status = person_status
        self.change_status = change_status
        self.person_body = person_body

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        match request.url.host:
            case "auth.example.com":
                return httpx.Response(
                    200, json={"access_token": "token", "expires_in": 3600}
                )
            case "person.example.com":
                return httpx.Response(self.person_status, json=self.person_body)
            case "change.example.com":
                return httpx.Response(self.change_status, json={})

        return httpx.Response(404)


def client_for(fake: FakeCis, server_settings) -> CisClient:
    return CisClient(
        settings=server_settings,
        signer=MockSigner(),
        transport=httpx.MockTransport(fake),
    )


@pytest.mark.asyncio
async def test_get_user_by(server_settings):
    fake = FakeCis()
    client = client_for(fake, server_settings)

    profile = await client.get_user_by(USER_ID, GetBy.USER_ID, DisplayLevel.STAFF)

    assert profile.user_id.value == USER_ID
    assert profile.active.value is True
    assert profile.access_information.mozilliansorg.values == {"nda": None}

    token_request, person_request = fake.requests
    assert json.loads(token_request.content)["grant_type"] == "client_credentials"
    assert person_request.url.path == f"/v2/user/user_id/{USER_ID}"
    assert person_request.url.params["filterDisplay"] == "staff"
    assert person_request.headers["Authorization"] == "Bearer token"


@pytest.mark.asyncio
async def test_token_is_reused(server_settings):
    fake = FakeCis()
    client = client_for(fake, server_settings)

    await client.get_user_by(USER_ID, GetBy.USER_ID)
    await client.get_user_by(USER_ID, GetBy.USER_ID)

    hosts = [request.url.host for request in fake.requests]
    assert hosts == ["auth.example.com", "person.example.com", "person.example.com"]
    assert "filterDisplay" not in fake.requests[1].url.params


@pytest.mark.asyncio
async def test_get_user_by_fails(server_settings):
    client = client_for(FakeCis(person_status=500), server_settings)

    with pytest.raises(FetchFailed):
        await client.get_user_by(USER_ID, GetBy.USER_ID)


@pytest.mark.asyncio
async def test_get_user_by_empty_profile(server_settings):
    client = client_for(FakeCis(person_body={}), server_settings)

    with pytest.raises(FetchFailed):
        await client.get_user_by(USER_ID, GetBy.USER_ID)


@pytest.mark.asyncio
async def test_get_user_by_undecodable_body(server_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "auth.example.com":
            return httpx.Response(200, json={"access_token": "token"})

        return httpx.Response(200, content=b'{"user_id": "\x80"}')

    client = CisClient(
        settings=server_settings,
        signer=MockSigner(),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(FetchFailed):
        await client.get_user_by(USER_ID, GetBy.USER_ID)


@pytest.mark.asyncio
async def test_get_user_by_staff_only_attributes(server_settings):
    staff_only = {
        "classification": "WORKGROUP CONFIDENTIAL: STAFF ONLY",
        "created": "2019-01-01T00:00:00Z",
        "last_modified": "2019-01-01T00:00:00Z",
        "display": "staff",
        "verified": True,
    }
    body = {
        **PROFILE,
        "access_information": {
            **PROFILE["access_information"],
            "hris": {
                "metadata": staff_only,
                "signature": {"publisher": {"name": "hris", "value": "sig"}},
                "values": {"Mozilla Corporation": None},
            },
            "ldap": {
                "metadata": staff_only,
                "signature": {"publisher": {"name": "ldap", "value": "sig"}},
                "values": {"team_moco": None, "vpn_default": None},
            },
        },
    }
    client = client_for(FakeCis(person_body=body), server_settings)

    profile = await client.get_user_by(USER_ID, GetBy.USER_ID, DisplayLevel.STAFF)

    hris = profile.access_information.hris
    staff_only_classification = Classification.WORKGROUP_CONFIDENTIAL_STAFF_ONLY
    assert hris.metadata.classification == staff_only_classification
    assert hris.values == {"Mozilla Corporation": None}
    assert profile.access_information.ldap.values == {
        "team_moco": None,
        "vpn_default": None,
    }


@pytest.mark.asyncio
async def test_update_user(server_settings):
    fake = FakeCis()
    client = client_for(fake, server_settings)

    profile = Profile(user_id=StandardAttributeString(value=USER_ID))
    profile.access_information.mozilliansorg.values = {"a": None}

    await client.update_user(USER_ID, profile)

    change_request = fake.requests[-1]
    assert change_request.method == "POST"
    assert change_request.url.path == "/v2/user"
    assert change_request.url.params["user_id"] == USER_ID

    body = json.loads(change_request.content)
    assert body["user_id"]["value"] == USER_ID
    assert body["access_information"]["mozilliansorg"]["values"] == {"a": None}


@pytest.mark.asyncio
async def test_update_user_fails(server_settings):
    client = client_for(FakeCis(change_status=400), server_settings)

    with pytest.raises(PublishFailed):
        await client.update_user(USER_ID, Profile.default())


@pytest.mark.asyncio
async def test_token_failure_is_a_fetch_failure(server_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "access_denied"})

    client = CisClient(
        settings=server_settings,
        signer=MockSigner(),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(FetchFailed):
        await client.get_user_by(USER_ID, GetBy.USER_ID)
