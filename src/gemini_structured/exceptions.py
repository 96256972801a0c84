"""Exceptions raised by the structured-query protocol."""

from __future__ import annotations

from typing import Any


class GeminiStructuredError(Exception):
    """Base exception for all gemini-structured errors."""


class ConfigurationError(GeminiStructuredError):
    """Raised when required configuration (such as the API key) is missing or invalid."""


class ShapeDefinitionError(ConfigurationError):
    """Raised when an answer shape cannot be compiled into a schema."""

    def __init__(
        self,
        message: str,
        *,
        shape_index: int | None = None,
        field_name: str | None = None,
    ) -> None:
        location = []
        if shape_index is not None:
            location.append(f"shape {shape_index}")
        if field_name is not None:
            location.append(f"field {field_name!r}")
        prefix = f"{', '.join(location)}: " if location else ""
        super().__init__(f"{prefix}{message}")
        self.shape_index = shape_index
        self.field_name = field_name


class TransientProviderError(GeminiStructuredError):
    """Raised when the provider stays unavailable after all transport retries."""

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class MalformedResponseError(GeminiStructuredError):
    """Raised when the provider response carries no function-style selection.

    The raw response is kept on the exception for diagnosis.
    """

    def __init__(self, message: str, *, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


class UnknownOptionError(GeminiStructuredError):
    """Raised when the model selects an identifier outside the declared option set."""

    def __init__(self, name: str, known: tuple[str, ...]) -> None:
        super().__init__(
            f"Model responded with unknown function call {name!r}, "
            f"known are {', '.join(known)}"
        )
        self.name = name
        self.known = known


class SchemaViolationError(GeminiStructuredError):
    """Raised (or returned in a Failure) when arguments violate the option schema."""

    def __init__(
        self,
        option_name: str,
        violations: tuple[str, ...],
        message: str | None = None,
    ) -> None:
        if not violations:
            raise ValueError("violations must be non-empty")
        super().__init__(
            message
            or f"{option_name!r} arguments violate the schema: {'; '.join(violations)}"
        )
        self.option_name = option_name
        self.violations = violations

    @property
    def summary(self) -> str:
        """Violations joined one per line, as shown to the model."""
        return "\n".join(self.violations)


class CorrectionAttemptsExceededError(SchemaViolationError):
    """Raised when the model keeps violating the schema after every correction."""

    def __init__(
        self, option_name: str, violations: tuple[str, ...], *, attempts: int
    ) -> None:
        super().__init__(
            option_name,
            violations,
            f"Exceeded correction attempts: gave up after {attempts} attempt(s) "
            f"to get a well-formed response. Last violations: {'; '.join(violations)}",
        )
        self.attempts = attempts


class RequestTimeoutError(GeminiStructuredError):
    """Raised when a structured query does not finish before the caller's deadline."""
