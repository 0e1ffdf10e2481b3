"""
Group mutation: merge a new group list into a profile and sign the result.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from .profile import Profile, PublisherAuthority
from .signer import Signer, SigningFailed


def utc_now() -> str:
    """
    Current UTC time, ISO-8601 with second precision (2019-05-01T12:00:00Z).
    """
    return datetime.now(tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def update_groups(
    profile: Profile,
    groups: Iterable[str],
    signer: Signer,
    now: str | None = None,
) -> Profile:
    """
    Build a partial profile carrying only `user_id`, `active` and the
    mozilliansorg groups attribute, with `groups` as its values.

    Parameters
    ----------
    profile: Profile
        The current profile, as fetched from the store.
    groups: Iterable[str]
        The full list of groups the user should be in. Duplicates collapse.
    signer: Signer
        Used to sign the resulting attribute.
    now: str | None, optional
        Timestamp to record; defaults to `utc_now()`.

    Raises
    ------
    SigningFailed
        If the signer could not sign the attribute.
    """
    now = now or utc_now()

    updated_profile = Profile.default()
    updated_profile.user_id = profile.user_id.model_copy(deep=True)
    updated_profile.active = profile.active.model_copy(deep=True)

    attribute = profile.access_information.mozilliansorg.model_copy(deep=True)

    # created is write-once
    if attribute.values is None or not attribute.metadata.created:
        attribute.metadata.created = now

    attribute.values = {group: None for group in groups}
    attribute.signature.publisher.name = PublisherAuthority.MOZILLIANSORG
    attribute.metadata.last_modified = now
    attribute.metadata.verified = True

    try:
        signer.sign_attribute(attribute)
    except SigningFailed:
        raise
    except Exception as e:
        raise SigningFailed(f"Signer raised {e!r}") from e

    updated_profile.access_information.mozilliansorg = attribute

    return updated_profile
