"""Immutable key store built from a JSON Web Key Set document."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from pydantic import ValidationError

from jwksauth.crypto.errors import MalformedJwks, MalformedKey
from jwksauth.crypto.keys import public_key_from_jwk
from jwksauth.crypto.types import JsonWebKey, JWKSet, ResolvedKey

logger = logging.getLogger(__name__)


def _resolve(jwk: JsonWebKey) -> ResolvedKey:
    """Decode the key material of a single JWK."""
    public_key = None
    if jwk.kty == "RSA":
        try:
            public_key = public_key_from_jwk(jwk)
        except ValueError as exc:
            raise MalformedKey(f"key {jwk.kid!r}: {exc}") from exc
    return ResolvedKey(
        kid=jwk.kid,
        kty=jwk.kty,
        alg=jwk.alg,
        use=jwk.use,
        public_key=public_key,
    )


class KeyStore:
    """Read-only mapping from ``kid`` to resolved public keys.

    A store never changes after construction, so a single instance can be
    shared by any number of concurrent validators. To pick up rotated keys,
    build a new store and swap the reference.
    """

    __slots__ = ("_keys",)

    def __init__(self, keys: Mapping[str, ResolvedKey]) -> None:
        self._keys: Mapping[str, ResolvedKey] = MappingProxyType(dict(keys))

    @classmethod
    def from_jwks(cls, document: str | bytes) -> "KeyStore":
        """Parse a JWKS JSON document into a key store."""
        try:
            jwks = JWKSet.model_validate_json(document)
        except ValidationError as exc:
            raise MalformedJwks(
                "JWKS document must be an object with a 'keys' array"
            ) from exc

        parsed: list[JsonWebKey] = []
        for index, entry in enumerate(jwks.keys):
            try:
                parsed.append(JsonWebKey.model_validate(entry))
            except ValidationError as exc:
                raise MalformedKey(
                    f"JWKS entry {index} is not a valid JWK"
                ) from exc
        return cls.from_keys(parsed)

    @classmethod
    def from_keys(cls, jwks: Iterable[JsonWebKey]) -> "KeyStore":
        """Build a store from already-parsed JWKs; later duplicates win."""
        keys: dict[str, ResolvedKey] = {}
        for jwk in jwks:
            if jwk.kid in keys:
                logger.warning(
                    "Duplicate kid %r in JWKS; using the later entry", jwk.kid
                )
            keys[jwk.kid] = _resolve(jwk)
        logger.info("Built key store with %d key(s)", len(keys))
        return cls(keys)

    def lookup(self, kid: str) -> ResolvedKey | None:
        """Return the key registered under ``kid``, or None."""
        return self._keys.get(kid)

    @property
    def kids(self) -> tuple[str, ...]:
        return tuple(self._keys)

    def __contains__(self, kid: object) -> bool:
        return kid in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)
