"""
Base for profile store clients.
"""

import abc
from enum import Enum

from groupsync.core.profile import Profile
from groupsync.core.signer import Signer


class UpdateError(Exception):
    pass


class FetchFailed(UpdateError):
    pass


class PublishFailed(UpdateError):
    pass


class GetBy(str, Enum):
    USER_ID = "user_id"
    UUID = "uuid"
    PRIMARY_EMAIL = "primary_email"
    PRIMARY_USERNAME = "primary_username"


class DisplayLevel(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    VOUCHED = "vouched"
    NDAED = "ndaed"
    STAFF = "staff"
    PRIVATE = "private"


class ProfileStoreClient(abc.ABC):
    """
    The base class for profile store clients. Downstream must implement:

    - get_user_by: fetch a full profile, raising `FetchFailed` on error.
    - update_user: publish a (partial) profile, raising `PublishFailed` on
                   error.
    - get_secret_store: the signer used for attributes we publish.
    """

    @abc.abstractmethod
    async def get_user_by(
        self, user_id: str, by: GetBy, filter: DisplayLevel | None = None
    ) -> Profile:
        raise NotImplementedError

    @abc.abstractmethod
    async def update_user(self, user_id: str, profile: Profile) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_secret_store(self) -> Signer:
        raise NotImplementedError
