"""Type definitions for JSON Web Keys, resolved keys, and token validation."""

from typing import Any

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from pydantic import BaseModel, ConfigDict

RS256 = "RS256"

Claims = dict[str, Any]


class JsonWebKey(BaseModel):
    """Single JWK entry in a JWKS document."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kty: str
    kid: str
    n: str | None = None
    e: str | None = None
    alg: str | None = None
    use: str | None = None
    x5c: list[str] | None = None
    x5t: str | None = None


class JWKSet(BaseModel):
    """Top-level JWKS document; entries are validated one by one."""

    keys: list[Any]


class ResolvedKey(BaseModel):
    """A JWK together with its decoded public key material."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kid: str
    kty: str
    alg: str | None = None
    use: str | None = None
    public_key: RSAPublicKey | None = None

    def supports(self, algorithm: str) -> bool:
        """Whether this key can verify signatures made with ``algorithm``."""
        if self.public_key is None or self.kty != "RSA":
            return False
        return self.alg is None or self.alg == algorithm


class ValidationOptions(BaseModel):
    """Optional claim checks applied after signature verification."""

    model_config = ConfigDict(frozen=True)

    issuer: str | None = None
    audience: tuple[str, ...] = ()
    leeway_seconds: int = 0
