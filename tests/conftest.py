"""Shared test fixtures for jwks-auth."""

import json
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from jwt.utils import base64url_encode

from jwksauth.crypto.key_store import KeyStore
from jwksauth.crypto.keys import build_jwks_document, pem_to_jwk_entry
from jwksauth.crypto.token_validator import TokenValidator
from support import SignRaw, SignToken, SigningKeyData, generate_rsa_keypair

NOW = 1_700_000_000


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host JWKS_* variables out of settings under test."""
    for name in (
        "JWKS_JWKS_PATH",
        "JWKS_ISSUER",
        "JWKS_AUDIENCE",
        "JWKS_LEEWAY_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def keypair() -> SigningKeyData:
    """RSA keypair shared by the whole test session."""
    return generate_rsa_keypair()


@pytest.fixture(scope="session")
def jwks_document(keypair: SigningKeyData) -> str:
    """JWKS document publishing the session keypair."""
    entry = pem_to_jwk_entry(keypair.public_key_pem, keypair.kid)
    return build_jwks_document([entry])


@pytest.fixture
def now() -> int:
    """Fixed wall-clock time used by the validator fixture."""
    return NOW


@pytest.fixture
def key_store(jwks_document: str) -> KeyStore:
    return KeyStore.from_jwks(jwks_document)


@pytest.fixture
def validator(key_store: KeyStore) -> TokenValidator:
    """Validator with a clock frozen at NOW."""
    return TokenValidator(key_store, clock=lambda: NOW)


@pytest.fixture
def sign_token(keypair: SigningKeyData) -> SignToken:
    """Sign claims with the session key using PyJWT."""

    def _sign(payload: dict[str, Any], kid: str | None = None) -> str:
        return jwt.encode(
            payload,
            keypair.private_key_pem,
            algorithm="RS256",
            headers={"kid": kid or keypair.kid},
        )

    return _sign


@pytest.fixture
def sign_raw(keypair: SigningKeyData) -> SignRaw:
    """RS256-sign an arbitrary header and JSON payload without PyJWT checks."""
    private_key = serialization.load_pem_private_key(
        keypair.private_key_pem.encode(), password=None
    )

    def _sign(header: dict[str, Any], payload: Any) -> str:
        segments = [
            base64url_encode(json.dumps(header).encode()),
            base64url_encode(json.dumps(payload).encode()),
        ]
        signing_input = b".".join(segments)
        signature = private_key.sign(  # type: ignore[union-attr]
            signing_input, padding.PKCS1v15(), hashes.SHA256()
        )
        return b".".join([*segments, base64url_encode(signature)]).decode()

    return _sign
