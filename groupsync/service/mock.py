"""
The mock profile store and signer, used for testing and local development.
"""

from groupsync.core.profile import Attribute, Profile, StandardAttributeString
from groupsync.core.signer import Signer, SigningFailed

from .store import DisplayLevel, FetchFailed, GetBy, ProfileStoreClient, PublishFailed


class MockSigner(Signer):
    """
    Stamps a fixed signature value. Fails for any attribute whose values
    contain one of `fail_on_groups`.
    """

    fail_on_groups: set[str]
    calls: int

    def __init__(self, fail_on_groups: set[str] | None = None):
        self.fail_on_groups = fail_on_groups or set()
        self.calls = 0

    def sign_attribute(self, attribute: Attribute) -> None:
        self.calls += 1

        values = getattr(attribute, "values", None) or {}
        if self.fail_on_groups.intersection(values):
            raise SigningFailed("Mock signer refused to sign")

        attribute.signature.publisher.value = "mock-signature"


class MockStoreClient(ProfileStoreClient):
    """
    An in-memory profile store. Unknown users are created on first fetch
    unless `create_missing` is off. Every call is recorded in `fetched` and
    `published` in the order it was made.
    """

    profiles: dict[str, Profile]
    fetched: list[str]
    published: list[tuple[str, Profile]]

    def __init__(
        self,
        signer: Signer | None = None,
        profiles: dict[str, Profile] | None = None,
        fail_fetch: set[str] | None = None,
        fail_publish: set[str] | None = None,
        create_missing: bool = True,
    ):
        self.signer = signer or MockSigner()
        self.profiles = profiles or {}
        self.fail_fetch = fail_fetch or set()
        self.fail_publish = fail_publish or set()
        self.create_missing = create_missing
        self.fetched = []
        self.published = []

    async def get_user_by(
        self, user_id: str, by: GetBy, filter: DisplayLevel | None = None
    ) -> Profile:
        self.fetched.append(user_id)

        if user_id in self.fail_fetch:
            raise FetchFailed(f"Unable to fetch profile for {user_id}")

        if user_id not in self.profiles:
            if not self.create_missing:
                raise FetchFailed(f"No profile for {user_id}")

            self.profiles[user_id] = Profile(
                user_id=StandardAttributeString(value=user_id)
            )

        return self.profiles[user_id].model_copy(deep=True)

    async def update_user(self, user_id: str, profile: Profile) -> None:
        if user_id in self.fail_publish:
            raise PublishFailed(f"Unable to publish profile for {user_id}")

        self.published.append((user_id, profile))

        stored = self.profiles.setdefault(user_id, Profile.default())
        stored.access_information.mozilliansorg = (
            profile.access_information.mozilliansorg.model_copy(deep=True)
        )

    def get_secret_store(self) -> Signer:
        return self.signer
