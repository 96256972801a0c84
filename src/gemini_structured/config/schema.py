"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces
configuration values from the environment and programmatic overrides into
the correct types with proper defaults.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gemini_structured.constants import (
    DEFAULT_MODEL,
    MAX_ATTEMPTS,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_JITTER,
    RETRY_MAX_DELAY,
    TRANSIENT_STATUS_CODES,
)


class GeminiStructuredSettings(BaseSettings):
    """Pydantic settings schema for structured queries.

    Integrates with environment variables using the GEMINI_ prefix, so
    ``GEMINI_API_KEY`` populates ``api_key`` and ``GEMINI_MAX_ATTEMPTS``
    populates ``max_attempts``.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=None,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # --- Provider ---

    api_key: str | None = Field(
        default=None,
        description="Google Gemini API key",
    )

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Gemini model identifier",
        min_length=1,
    )

    # --- Transport retries ---

    max_retries: int = Field(
        default=MAX_RETRIES,
        description="Retries after a transient provider error",
        ge=0,
    )

    retry_base_delay: float = Field(
        default=RETRY_BASE_DELAY,
        description="Backoff delay before the first retry, in seconds",
        ge=0,
    )

    retry_max_delay: float = Field(
        default=RETRY_MAX_DELAY,
        description="Upper bound for a single backoff delay, in seconds",
        ge=0,
    )

    retry_jitter: float = Field(
        default=RETRY_JITTER,
        description="Random fraction of the delay added to each backoff",
        ge=0,
        le=1,
    )

    transient_status_codes: frozenset[int] = Field(
        default=TRANSIENT_STATUS_CODES,
        description="Provider status codes treated as transient",
    )

    # --- Conversation repair ---

    max_attempts: int = Field(
        default=MAX_ATTEMPTS,
        description="Model attempts per structured query, including the first",
        ge=1,
    )

    timeout: float | None = Field(
        default=None,
        description="Deadline for a whole structured query, in seconds",
        gt=0,
    )

    # --- Validation Rules ---

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, v: Any) -> Any:
        """Treat an empty or whitespace-only key as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_delay_bounds(self) -> "GeminiStructuredSettings":
        """Ensure the backoff cap is not below the base delay."""
        if self.retry_max_delay < self.retry_base_delay:
            raise ValueError(
                "retry_max_delay must be greater than or equal to retry_base_delay"
            )
        return self

    def to_dict(self, *, redact: bool = True) -> dict[str, Any]:
        """Convert to a plain dictionary, redacting the API key by default."""
        data = self.model_dump()
        data["transient_status_codes"] = sorted(self.transient_status_codes)
        if redact and data.get("api_key"):
            data["api_key"] = "<redacted>"
        return data
