"""
Key material for attribute signing.

Attributes are signed with an asymmetric key pair whose private half is kept
encrypted at rest. The key pair type decides both the key class we expect to
load and the JWS algorithm the signature is made with.
"""

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
    load_pem_public_key,
)


class UnsupportedEncryptionMethod(Exception):
    pass


class EncryptionSerializationError(Exception):
    pass


# key pair type -> (private key class, public key class, JWS algorithm)
KEY_PAIR_TYPES = {
    "Ed25519": (Ed25519PrivateKey, Ed25519PublicKey, "EdDSA"),
}


def key_pair_details(key_pair_type: str) -> tuple[type, type, str]:
    try:
        return KEY_PAIR_TYPES[key_pair_type]
    except KeyError:
        raise UnsupportedEncryptionMethod(key_pair_type)


def generate_key_pair(key_pair_type: str, key_password: str) -> tuple[bytes, bytes]:
    """
    Generate a signing key pair.

    Parameters
    ----------
    key_pair_type
        The key pair type to use, currently only Ed25519 is supported.
    key_password
        The password the private key is encrypted with.

    Returns
    -------
    public_key: bytes
        The public (verifying) key, PEM encoded.
    private_key: bytes
        The private (signing) key, encrypted PKCS8 PEM.
    """
    private_class, _, _ = key_pair_details(key_pair_type)
    private = private_class.generate()

    private_key = private.private_bytes(
        encoding=Encoding.PEM,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=BestAvailableEncryption(key_password.encode("utf-8")),
    )
    public_key = private.public_key().public_bytes(
        encoding=Encoding.PEM, format=PublicFormat.SubjectPublicKeyInfo
    )

    return public_key, private_key


def load_signing_key(
    private_key: bytes, key_password: str, key_pair_type: str
) -> tuple[Ed25519PrivateKey, str]:
    """
    Decrypt the private key and return it with the JWS algorithm to sign
    with. The key must be of the configured type.
    """
    private_class, _, algorithm = key_pair_details(key_pair_type)

    try:
        key = load_pem_private_key(
            data=private_key, password=key_password.encode("utf-8")
        )
    except (ValueError, TypeError, UnsupportedAlgorithm):
        raise EncryptionSerializationError("Unable to reconstruct signing key")

    if not isinstance(key, private_class):
        raise EncryptionSerializationError(
            f"Signing key is not a {key_pair_type} private key"
        )

    return key, algorithm


def load_verifying_key(
    public_key: bytes, key_pair_type: str
) -> tuple[Ed25519PublicKey, str]:
    """
    Load the public key used to check attribute signatures, with the JWS
    algorithm signatures must have been made with.
    """
    _, public_class, algorithm = key_pair_details(key_pair_type)

    try:
        key = load_pem_public_key(data=public_key)
    except (ValueError, UnsupportedAlgorithm):
        raise EncryptionSerializationError("Unable to reconstruct verifying key")

    if not isinstance(key, public_class):
        raise EncryptionSerializationError(
            f"Verifying key is not a {key_pair_type} public key"
        )

    return key, algorithm
