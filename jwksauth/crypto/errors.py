"""Error taxonomy for key store construction and token validation."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable reason attached to every library error."""

    MALFORMED_JWKS = "malformed_jwks"
    MALFORMED_KEY = "malformed_key"
    MALFORMED_TOKEN = "malformed_token"
    MISSING_KEY_ID = "missing_key_id"
    MISSING_ALGORITHM = "missing_algorithm"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    UNKNOWN_KEY_ID = "unknown_key_id"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    INVALID_ISSUER = "invalid_issuer"
    INVALID_AUDIENCE = "invalid_audience"


class JWKSAuthError(Exception):
    """Base class for all errors raised by this library."""

    kind: ErrorKind


class KeyStoreError(JWKSAuthError):
    """The JWKS document could not be turned into a key store."""


class MalformedJwks(KeyStoreError):
    kind = ErrorKind.MALFORMED_JWKS


class MalformedKey(KeyStoreError):
    kind = ErrorKind.MALFORMED_KEY


class TokenValidationError(JWKSAuthError):
    """The token was rejected; no claims are available."""


class MalformedToken(TokenValidationError):
    kind = ErrorKind.MALFORMED_TOKEN


class MissingKeyId(TokenValidationError):
    kind = ErrorKind.MISSING_KEY_ID


class MissingAlgorithm(TokenValidationError):
    kind = ErrorKind.MISSING_ALGORITHM


class UnsupportedAlgorithm(TokenValidationError):
    kind = ErrorKind.UNSUPPORTED_ALGORITHM


class UnknownKeyId(TokenValidationError):
    """No key matches the token's ``kid``; the provider may have rotated keys."""

    kind = ErrorKind.UNKNOWN_KEY_ID


class InvalidSignature(TokenValidationError):
    kind = ErrorKind.INVALID_SIGNATURE


class Expired(TokenValidationError):
    kind = ErrorKind.EXPIRED


class NotYetValid(TokenValidationError):
    kind = ErrorKind.NOT_YET_VALID


class InvalidIssuer(TokenValidationError):
    kind = ErrorKind.INVALID_ISSUER


class InvalidAudience(TokenValidationError):
    kind = ErrorKind.INVALID_AUDIENCE
