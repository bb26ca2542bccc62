"""FastAPI dependency injection for bearer token validation."""

from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jwksauth.crypto.errors import TokenValidationError
from jwksauth.crypto.token_validator import TokenValidator
from jwksauth.crypto.types import Claims

_security = HTTPBearer()


def install_token_validator(app: FastAPI, validator: TokenValidator) -> None:
    """Make ``validator`` available to ``require_claims`` on this app."""
    app.state.token_validator = validator


def get_token_validator(request: Request) -> TokenValidator:
    """Return the validator installed on the running application."""
    validator = getattr(request.app.state, "token_validator", None)
    if validator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return validator


def require_claims(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_security)],
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
) -> Claims:
    """Validate the Bearer token and return its claims."""
    try:
        return validator.validate(credentials.credentials)
    except TokenValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.kind.value,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


VerifiedClaims = Annotated[Claims, Depends(require_claims)]
