"""Configuration for structured queries.

Settings come from (highest precedence first): programmatic overrides, an
ambient ``config_scope``, ``GEMINI_*`` environment variables, and defaults.

Example:
    config = resolve_config({"max_attempts": 3})

    with config_scope(resolve_config({"model": "gemini-2.5-pro"})):
        answer = await query_structured(...)
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
import contextvars
from typing import Any

from pydantic import ValidationError

from gemini_structured.constants import API_KEY_ENV_VAR
from gemini_structured.exceptions import ConfigurationError

from .schema import GeminiStructuredSettings

# Context variable holding the ambient configuration for the current task
_ambient_config_var: contextvars.ContextVar[GeminiStructuredSettings] = (
    contextvars.ContextVar("gemini_structured_config")
)


def resolve_config(
    overrides: Mapping[str, Any] | None = None,
) -> GeminiStructuredSettings:
    """Resolve configuration from the ambient scope or the environment.

    Args:
        overrides: Field values taking precedence over every other source.
            ``None`` values are ignored.

    Returns:
        A validated, frozen settings object.

    Raises:
        ConfigurationError: If any value fails validation.
    """
    explicit = {k: v for k, v in (overrides or {}).items() if v is not None}
    try:
        ambient = _ambient_config_var.get()
    except LookupError:
        ambient = None

    try:
        if ambient is not None:
            if not explicit:
                return ambient
            return GeminiStructuredSettings.model_validate(
                {**ambient.model_dump(), **explicit}
            )
        return GeminiStructuredSettings(**explicit)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def require_api_key(config: GeminiStructuredSettings) -> str:
    """Return the configured API key.

    Raises:
        ConfigurationError: If no key is configured.
    """
    if not config.api_key:
        raise ConfigurationError(
            f"{API_KEY_ENV_VAR} environment variable is unset and no api_key "
            "was provided"
        )
    return config.api_key


@contextmanager
def config_scope(config: GeminiStructuredSettings) -> Generator[None, None, None]:
    """Temporarily use a different configuration.

    Only ``resolve_config()`` calls made inside the scope see it. The
    scope is task-local, so concurrent queries may use different scopes.
    """
    token = _ambient_config_var.set(config)
    try:
        yield
    finally:
        _ambient_config_var.reset(token)


__all__ = [
    "GeminiStructuredSettings",
    "config_scope",
    "require_api_key",
    "resolve_config",
]
