"""Conversion between JWK and RSA public keys."""

import base64
import binascii
import json
import re

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from jwksauth.crypto.types import RS256, JsonWebKey

MIN_MODULUS_BITS = 2048
MAX_MODULUS_BITS = 4096

_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]+={0,2}$")


def is_base64url(segment: str) -> bool:
    """Whether ``segment`` only uses the base64url alphabet."""
    return _BASE64URL_RE.match(segment) is not None


def b64url_decode(segment: str) -> bytes:
    """Strictly decode base64url text, with or without padding."""
    if not is_base64url(segment):
        raise ValueError("not base64url-encoded")
    unpadded = segment.rstrip("=")
    padded = unpadded + "=" * (-len(unpadded) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except binascii.Error as exc:
        raise ValueError("not base64url-encoded") from exc


def base64url_to_int(value: str) -> int:
    """Decode a base64url unsigned big-endian integer."""
    return int.from_bytes(b64url_decode(value), byteorder="big")


def _int_to_base64url(value: int) -> str:
    """Encode an integer as base64url without padding."""
    byte_length = (value.bit_length() + 7) // 8
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def public_key_from_jwk(jwk: JsonWebKey) -> RSAPublicKey:
    """Build an RSA public key from the ``n`` and ``e`` members of a JWK.

    Raises ``ValueError`` when either member is missing, is not base64url,
    does not describe a usable RSA public key, or has a modulus outside
    2048-4096 bits.
    """
    if not jwk.n or not jwk.e:
        raise ValueError("RSA key requires both 'n' and 'e'")
    modulus = base64url_to_int(jwk.n)
    if not MIN_MODULUS_BITS <= modulus.bit_length() <= MAX_MODULUS_BITS:
        raise ValueError(
            f"RSA modulus must be {MIN_MODULUS_BITS}-{MAX_MODULUS_BITS} bits, "
            f"got {modulus.bit_length()}"
        )
    numbers = rsa.RSAPublicNumbers(e=base64url_to_int(jwk.e), n=modulus)
    return numbers.public_key()


def pem_to_jwk_entry(public_key_pem: str, kid: str) -> JsonWebKey:
    """Convert a PEM public key to JWK format."""
    loaded = serialization.load_pem_public_key(public_key_pem.encode())
    if not isinstance(loaded, RSAPublicKey):
        raise ValueError("only RSA public keys can be exported as JWK")
    numbers = loaded.public_numbers()
    return JsonWebKey(
        kty="RSA",
        kid=kid,
        n=_int_to_base64url(numbers.n),
        e=_int_to_base64url(numbers.e),
        alg=RS256,
        use="sig",
    )


def build_jwks_document(entries: list[JsonWebKey]) -> str:
    """Serialize JWK entries as a JWKS JSON document."""
    return json.dumps(
        {"keys": [entry.model_dump(exclude_none=True) for entry in entries]}
    )
