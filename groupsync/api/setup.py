"""
Builds the profile store client and signer from settings. In development mode
(`use_mock_store`) we serve from an in-memory store and sign with a freshly
generated key pair.
"""

from structlog.typing import FilteringBoundLogger

from groupsync.config.settings import Settings
from groupsync.core.cryptography import generate_key_pair
from groupsync.core.signer import KeySigner
from groupsync.service.cis import CisClient
from groupsync.service.mock import MockStoreClient
from groupsync.service.store import ProfileStoreClient


def create_store(settings: Settings, log: FilteringBoundLogger) -> ProfileStoreClient:
    if settings.use_mock_store:
        _, private = generate_key_pair(
            key_pair_type=settings.key_pair_type, key_password=settings.key_password
        )
        signer = KeySigner(
            private_key=private,
            key_password=settings.key_password,
            key_pair_type=settings.key_pair_type,
        )
        log.warning("setup.mock_store")
        return MockStoreClient(signer=signer)

    signer = KeySigner(
        private_key=settings.private_key(),
        key_password=settings.key_password,
        key_pair_type=settings.key_pair_type,
    )

    log.info("setup.cis_store", person_api_url=settings.person_api_url)

    return CisClient(settings=settings, signer=signer)
