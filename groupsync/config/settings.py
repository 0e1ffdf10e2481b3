"""
Main settings object.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Profile store (CIS) endpoints
    person_api_url: str = "https://person.api.sso.mozilla.com"
    change_api_url: str = "https://change.api.sso.mozilla.com"
    cis_token_url: str = "https://auth.mozilla.auth0.com/oauth/token"
    cis_audience: str = "api.sso.mozilla.com"
    cis_client_id: str | None = None
    cis_client_secret: str | None = None
    cis_timeout: float = 30.0

    # Attribute signing
    key_pair_type: str = "Ed25519"
    key_password: str = "CHANGEME"
    signing_key: str | bytes | None = None
    signing_key_filename: Path | None = None  # Suggest /data/signing_key.pem

    # Update pipeline
    queue_size: int = 100

    # Development setup: serve from an in-memory store with a throwaway key.
    use_mock_store: bool = False

    host: str = "0.0.0.0"
    port: int = 8085
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="GROUPSYNC_", env_file=".env")

    def private_key(self) -> bytes:
        """
        The (encrypted) PEM private key used to sign attributes, read from
        `signing_key_filename` when it is set.
        """
        if self.signing_key_filename:
            with open(self.signing_key_filename, "rb") as handle:
                return handle.read()

        if self.signing_key is None:
            raise RuntimeError("No signing key configured")

        if isinstance(self.signing_key, str):
            return self.signing_key.encode("utf-8")

        return self.signing_key
