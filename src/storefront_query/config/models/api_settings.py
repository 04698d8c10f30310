"""API configuration models.

This module contains the configuration model for the storefront
resource service.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from storefront_query.shared.constants import APIConfig


class ApiSettings(BaseModel):
    """Resource service configuration.

    Security: auth_token is masked in __repr__.
    """

    base_url: str = Field(
        default=APIConfig.DEFAULT_BASE_URL,
        description="Base URL of the resource service, including the /api prefix",
    )
    timeout: float = Field(
        default=APIConfig.DEFAULT_REQUEST_TIMEOUT,
        gt=0,
        description="Request timeout in seconds",
    )
    auth_token: str = Field(
        default="",
        repr=False,
        description="Optional bearer token sent with every request",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = f"base_url must be an absolute http(s) URL, got: {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")

    def __repr__(self) -> str:
        """Repr with the auth token masked."""
        masked_token = "****" if self.auth_token else "[empty]"
        return (
            f"ApiSettings("
            f"base_url={self.base_url!r}, "
            f"timeout={self.timeout}, "
            f"auth_token={masked_token})"
        )


__all__ = ["ApiSettings"]
