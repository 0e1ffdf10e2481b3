"""
A simple CLI for running the service and creating signing keys.
"""

import os
import sys
from pathlib import Path

import uvicorn


def run_server(**kwargs):
    from groupsync.config.settings import Settings

    for k, v in kwargs.items():
        os.environ[k] = v

    settings = Settings()

    uvicorn.run("groupsync.api.app:app", host=settings.host, port=settings.port)


def write_keys(directory: Path):
    from groupsync.config.settings import Settings
    from groupsync.core.cryptography import generate_key_pair

    settings = Settings()

    public, private = generate_key_pair(
        key_pair_type=settings.key_pair_type, key_password=settings.key_password
    )

    directory.mkdir(exist_ok=True, parents=True)

    private_filename = directory / "signing_key.pem"
    with open(private_filename, "wb") as handle:
        handle.write(private)
    private_filename.chmod(0o600)
    print(f"Wrote private key to {private_filename}")

    public_filename = directory / "signing_key.pub.pem"
    with open(public_filename, "wb") as handle:
        handle.write(public)
    print(f"Wrote public key to {public_filename}")


def main():
    try:
        command = sys.argv[1]
    except IndexError:
        command = None

    match command:
        case "run":
            if sys.argv[2:3] == ["dev"]:
                run_server(GROUPSYNC_USE_MOCK_STORE="True")
            else:
                run_server()
        case "keys" if len(sys.argv) > 2:
            write_keys(Path(sys.argv[2]))
        case _:
            print(
                "Only supported commands are groupsync run, groupsync run dev, "
                "or groupsync keys {directory}"
            )
            exit(1)
