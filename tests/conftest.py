"""
Core configuration
"""

import pytest_asyncio
import structlog

from groupsync.config.settings import Settings
from groupsync.core.cryptography import generate_key_pair
from groupsync.core.signer import KeySigner

KEY_PASSWORD = "test-password"


@pytest_asyncio.fixture(scope="session")
def key_pair():
    public, private = generate_key_pair(
        key_pair_type="Ed25519", key_password=KEY_PASSWORD
    )
    yield {"public_key": public, "private_key": private}


@pytest_asyncio.fixture(scope="session")
def signer(key_pair):
    yield KeySigner(
        private_key=key_pair["private_key"],
        key_password=KEY_PASSWORD,
        key_pair_type="Ed25519",
    )


@pytest_asyncio.fixture(scope="session")
def server_settings(key_pair):
    yield Settings(
        person_api_url="https://person.example.com",
        change_api_url="https://change.example.com",
        cis_token_url="https://auth.example.com/oauth/token",
        cis_client_id="NONE",
        cis_client_secret="NONE",
        signing_key=key_pair["private_key"],
        key_password=KEY_PASSWORD,
    )


@pytest_asyncio.fixture(scope="session")
def logger():
    yield structlog.get_logger()
