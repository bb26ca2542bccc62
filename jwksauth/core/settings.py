"""Validator settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from jwksauth.crypto.types import ValidationOptions

LEEWAY_SECONDS_DEFAULT = 0


class ValidatorSettings(BaseSettings):
    """JWKS location and optional claim checks."""

    model_config = SettingsConfigDict(env_prefix="JWKS_")

    jwks_path: str = ""
    issuer: str = ""
    audience: str = ""
    leeway_seconds: int = LEEWAY_SECONDS_DEFAULT

    def get_audience_list(self) -> list[str]:
        """Parse comma-separated accepted audiences."""
        if not self.audience:
            return []
        return [a.strip() for a in self.audience.split(",") if a.strip()]

    def to_options(self) -> ValidationOptions:
        """Build validation options; empty values disable the check."""
        return ValidationOptions(
            issuer=self.issuer or None,
            audience=tuple(self.get_audience_list()),
            leeway_seconds=self.leeway_seconds,
        )
