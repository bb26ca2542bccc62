"""RS256 token verification against a JWKS-backed key store."""

import json
import logging
import math
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from jwt.algorithms import RSAAlgorithm

from jwksauth.core.settings import ValidatorSettings
from jwksauth.crypto.errors import (
    Expired,
    InvalidAudience,
    InvalidIssuer,
    InvalidSignature,
    MalformedToken,
    MissingAlgorithm,
    MissingKeyId,
    NotYetValid,
    UnknownKeyId,
    UnsupportedAlgorithm,
)
from jwksauth.crypto.key_store import KeyStore
from jwksauth.crypto.keys import b64url_decode, is_base64url
from jwksauth.crypto.types import RS256, Claims, ResolvedKey, ValidationOptions

logger = logging.getLogger(__name__)

_rs256 = RSAAlgorithm(RSAAlgorithm.SHA256)


def _decode_json_object(segment: str, part: str) -> dict[str, Any]:
    """Decode a base64url JSON segment that must hold an object."""
    try:
        value = json.loads(b64url_decode(segment))
    except (ValueError, RecursionError) as exc:
        raise MalformedToken(f"token {part} is not base64url-encoded JSON") from exc
    if not isinstance(value, dict):
        raise MalformedToken(f"token {part} is not a JSON object")
    return value


def _is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


class TokenValidator:
    """Verifies compact RS256 tokens and returns their claims.

    The validator holds no per-call state. ``validate`` may be called from
    any number of threads; ``update_keys`` replaces the key store with a
    single reference assignment.
    """

    def __init__(
        self,
        key_store: KeyStore,
        options: ValidationOptions | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._key_store = key_store
        self._options = options or ValidationOptions()
        self._clock = clock

    @classmethod
    def from_jwks(
        cls, document: str | bytes, options: ValidationOptions | None = None
    ) -> "TokenValidator":
        """Build a validator directly from a JWKS document."""
        return cls(KeyStore.from_jwks(document), options)

    @classmethod
    def from_settings(cls, settings: ValidatorSettings) -> "TokenValidator":
        """Build a validator from the JWKS file named in settings."""
        if not settings.jwks_path:
            raise ValueError("JWKS_JWKS_PATH is not set")
        document = Path(settings.jwks_path).read_bytes()
        return cls.from_jwks(document, settings.to_options())

    @property
    def key_store(self) -> KeyStore:
        return self._key_store

    @property
    def options(self) -> ValidationOptions:
        return self._options

    def update_keys(self, document: str | bytes) -> KeyStore:
        """Swap in a key store built from a fresh JWKS document.

        The current store stays in place if the new document is invalid.
        """
        store = KeyStore.from_jwks(document)
        self._key_store = store
        return store

    def validate(self, token: str) -> Claims:
        """Verify ``token`` and return its claims.

        Raises a ``TokenValidationError`` subclass describing the first
        check that failed. Claims are only returned once the signature and
        the time window have both been verified.
        """
        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            raise MalformedToken("token must have exactly three non-empty segments")
        if not all(is_base64url(s) for s in segments):
            raise MalformedToken("token segments must be base64url-encoded")
        header_b64, payload_b64, signature_b64 = segments

        header = _decode_json_object(header_b64, "header")
        kid, alg = header.get("kid"), header.get("alg")
        if kid is None:
            raise MissingKeyId("token header has no 'kid'")
        if alg is None:
            raise MissingAlgorithm("token header has no 'alg'")
        if not isinstance(kid, str) or not isinstance(alg, str):
            raise MalformedToken("token header 'kid' and 'alg' must be strings")

        if alg != RS256:
            logger.debug("Rejected token with alg=%r kid=%r", alg, kid)
            raise UnsupportedAlgorithm(f"algorithm {alg!r} is not accepted")

        key = self._key_store.lookup(kid)
        if key is None:
            logger.debug("No key for kid=%r", kid)
            raise UnknownKeyId(f"no key with kid {kid!r}")
        if not key.supports(alg):
            logger.debug("Key kid=%r (kty=%s) cannot verify %s", kid, key.kty, alg)
            raise UnsupportedAlgorithm(f"key {kid!r} does not support {alg}")

        self._verify_signature(key, f"{header_b64}.{payload_b64}", signature_b64)

        claims = _decode_json_object(payload_b64, "payload")
        self._check_time_window(claims)
        self._check_issuer_and_audience(claims)
        return claims

    def _verify_signature(
        self, key: ResolvedKey, signing_input: str, signature_b64: str
    ) -> None:
        try:
            signature = b64url_decode(signature_b64)
        except ValueError as exc:
            raise MalformedToken("token signature is not base64url-encoded") from exc
        if not _rs256.verify(signing_input.encode(), key.public_key, signature):
            logger.debug("Signature mismatch for kid=%r", key.kid)
            raise InvalidSignature("token signature does not match")

    def _check_time_window(self, claims: Claims) -> None:
        now = self._clock()
        leeway = self._options.leeway_seconds
        if "exp" in claims:
            exp = claims["exp"]
            if not _is_number(exp) or now > exp + leeway:
                logger.debug("Token expired (exp=%r, now=%s)", exp, now)
                raise Expired("token has expired")
        if "nbf" in claims:
            nbf = claims["nbf"]
            if not _is_number(nbf) or now < nbf - leeway:
                logger.debug("Token not yet valid (nbf=%r, now=%s)", nbf, now)
                raise NotYetValid("token is not valid yet")

    def _check_issuer_and_audience(self, claims: Claims) -> None:
        issuer = self._options.issuer
        if issuer is not None and claims.get("iss") != issuer:
            raise InvalidIssuer(f"issuer {claims.get('iss')!r} is not accepted")

        accepted = self._options.audience
        if not accepted:
            return
        aud = claims.get("aud")
        presented = [aud] if isinstance(aud, str) else aud
        if not isinstance(presented, list) or not any(
            a in accepted for a in presented if isinstance(a, str)
        ):
            raise InvalidAudience(f"audience {aud!r} is not accepted")
