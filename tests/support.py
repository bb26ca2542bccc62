"""Signing-side helpers used only by the test suite."""

from collections.abc import Callable
from typing import Any

import uuid_utils
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import BaseModel

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537

SignToken = Callable[..., str]
SignRaw = Callable[[dict[str, Any], Any], str]


class SigningKeyData(BaseModel):
    """An RSA keypair for JWT signing."""

    kid: str
    private_key_pem: str
    public_key_pem: str


def generate_rsa_keypair(key_size: int = RSA_KEY_SIZE) -> SigningKeyData:
    """Generate an RSA keypair with a UUIDv7 kid."""
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=key_size,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return SigningKeyData(
        kid=str(uuid_utils.uuid7()),
        private_key_pem=private_pem,
        public_key_pem=public_pem,
    )
