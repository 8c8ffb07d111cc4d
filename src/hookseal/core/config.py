"""Configuration types with environment variable support.

All settings can be configured via environment variables with the WEBHOOK_ prefix.
Example: WEBHOOK_SECRET=s3cr3t sets the default shared secret.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FIVE_MINUTES = 5 * 60 * 1000

DEFAULT_TOLERANCE = FIVE_MINUTES
"""Maximum allowed drift between signer and verifier clocks, in milliseconds."""

DEFAULT_WEBHOOK_SIGNATURE_HEADER = "RW-WEBHOOK-SIGNATURE"


class WebhookSettings(BaseSettings):
    """Process-wide webhook defaults.

    Use get_settings() to get a cached instance.

    Example:
        settings = get_settings()
        print(settings.signature_header)
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    secret: str = Field(
        default="",
        description="Default shared secret used when a call does not pass one.",
    )
    signature_header: str = Field(
        default=DEFAULT_WEBHOOK_SIGNATURE_HEADER,
        description="Header carrying the webhook signature.",
    )
    tolerance: int = Field(
        default=DEFAULT_TOLERANCE,
        ge=0,
        description="Maximum allowed timestamp drift (milliseconds).",
    )

    def to_display_dict(self) -> dict[str, str | int]:
        """Export settings for display, with the secret masked."""
        return {
            "secret": "********" if self.secret else "",
            "signature_header": self.signature_header,
            "tolerance": self.tolerance,
        }


_settings: WebhookSettings | None = None


def get_settings() -> WebhookSettings:
    """Get the global settings instance.

    The environment is read once and the instance cached for the lifetime
    of the process. To reload (e.g., in tests), call clear_settings() first.
    """
    global _settings
    if _settings is None:
        _settings = WebhookSettings()
    return _settings


def clear_settings() -> None:
    """Clear the cached settings.

    Call this to force reloading of environment variables on next
    get_settings() call. Useful for testing.
    """
    global _settings
    _settings = None
