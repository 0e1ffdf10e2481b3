"""
Attribute signing.

A signer attaches a JWS over the canonical form of an attribute to the
attribute's publisher signature block. The canonical form is the sorted,
compact JSON of the attribute with the signature value itself blanked out.
"""

import abc
import json

import jwt
from jwt.exceptions import PyJWTError

from .cryptography import (
    EncryptionSerializationError,
    UnsupportedEncryptionMethod,
    load_signing_key,
    load_verifying_key,
)
from .profile import Attribute


class SigningFailed(Exception):
    pass


def canonical_form(attribute: Attribute) -> bytes:
    content = attribute.model_dump(mode="json")
    content["signature"]["publisher"]["value"] = ""

    return json.dumps(content, sort_keys=True, separators=(",", ":")).encode("utf-8")


class Signer(abc.ABC):
    """
    The base class for signers. Downstream must implement `sign_attribute`,
    which mutates the attribute in place and raises `SigningFailed` if it
    cannot.
    """

    @abc.abstractmethod
    def sign_attribute(self, attribute: Attribute) -> None:
        raise NotImplementedError


class KeySigner(Signer):
    """
    Signs attributes with a local (encrypted, PEM serialized) private key.
    """

    private_key: bytes
    key_password: str
    key_pair_type: str

    def __init__(self, private_key: bytes, key_password: str, key_pair_type: str):
        self.private_key = private_key
        self.key_password = key_password
        self.key_pair_type = key_pair_type

    def sign_attribute(self, attribute: Attribute) -> None:
        try:
            key, algorithm = load_signing_key(
                private_key=self.private_key,
                key_password=self.key_password,
                key_pair_type=self.key_pair_type,
            )
        except (EncryptionSerializationError, UnsupportedEncryptionMethod) as e:
            raise SigningFailed(f"Unable to load signing key: {e!r}")

        attribute.signature.publisher.alg = algorithm
        attribute.signature.publisher.typ = "JWS"

        try:
            token = jwt.api_jws.encode(
                canonical_form(attribute), key=key, algorithm=algorithm
            )
        except (PyJWTError, TypeError, ValueError) as e:
            raise SigningFailed(f"Unable to sign attribute: {e!r}")

        attribute.signature.publisher.value = token


def verify_attribute(
    attribute: Attribute, public_key: bytes, key_pair_type: str
) -> bool:
    """
    Check that the publisher signature on `attribute` was made over its current
    content by the private half of `public_key`.
    """
    key, algorithm = load_verifying_key(
        public_key=public_key, key_pair_type=key_pair_type
    )

    try:
        payload = jwt.api_jws.decode(
            attribute.signature.publisher.value, key=key, algorithms=[algorithm]
        )
    except PyJWTError:
        return False

    return payload == canonical_form(attribute)
