"""Transport stage: one remote call, retried on transient provider errors.

Only errors in the transient class (service unavailable by default) are
retried, using exponential backoff with jitter. Everything else propagates
on the first occurrence. The transport keeps no conversation state and its
attempt counter is local to each ``send`` call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import dataclasses
import logging
import random
from typing import TYPE_CHECKING

from google.genai import errors

from gemini_structured.constants import (
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_JITTER,
    RETRY_MAX_DELAY,
    TRANSIENT_STATUS_CODES,
)
from gemini_structured.exceptions import TransientProviderError
from gemini_structured.telemetry import TelemetryContext

if TYPE_CHECKING:
    from google.genai import types

    from gemini_structured.config import GeminiStructuredSettings
    from gemini_structured.pipeline.adapters.base import GenerationAdapter
    from gemini_structured.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

# --- Telemetry scopes/keys ---
T_TRANSPORT_SEND = "transport.send"
T_TRANSPORT_ATTEMPT = "transport.attempt"


@dataclasses.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded exponential backoff with jitter for transient errors."""

    max_retries: int = MAX_RETRIES
    base_delay: float = RETRY_BASE_DELAY
    max_delay: float = RETRY_MAX_DELAY
    jitter: float = RETRY_JITTER
    transient_status_codes: frozenset[int] = TRANSIENT_STATUS_CODES

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")
        if not 0 <= self.jitter <= 1:
            raise ValueError("jitter must be between 0 and 1")

    @classmethod
    def from_config(cls, config: GeminiStructuredSettings) -> RetryPolicy:
        return cls(
            max_retries=config.max_retries,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
            jitter=config.retry_jitter,
            transient_status_codes=frozenset(config.transient_status_codes),
        )

    def delay_for(self, retry_index: int, rng: Callable[[], float] = random.random) -> float:
        """Delay before retry number ``retry_index`` (zero-based)."""
        capped = min(self.max_delay, self.base_delay * (2**retry_index))
        return capped * (1 + self.jitter * rng())

    def is_transient(self, error: BaseException) -> bool:
        return (
            isinstance(error, errors.APIError)
            and error.code in self.transient_status_codes
        )


class TransportClient:
    """Performs remote calls through an adapter with bounded transient retry."""

    def __init__(
        self,
        adapter: GenerationAdapter,
        policy: RetryPolicy | None = None,
        *,
        telemetry: TelemetryContextProtocol | None = None,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self._adapter = adapter
        self._policy = policy or RetryPolicy()
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()
        self._rng = rng

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def send(
        self,
        model: str,
        contents: list[types.Content],
        config: types.GenerateContentConfig,
    ) -> types.GenerateContentResponse:
        """Send one request, retrying the identical request on transient errors.

        Raises:
            TransientProviderError: If every one of ``max_retries + 1``
                attempts failed with a transient error.
            Exception: Any non-transient provider error, unchanged.
        """
        policy = self._policy
        total_attempts = policy.max_retries + 1
        with self._telemetry(T_TRANSPORT_SEND, model=model) as tele:
            for attempt in range(total_attempts):
                try:
                    with self._telemetry(T_TRANSPORT_ATTEMPT, attempt=attempt + 1):
                        log.debug(
                            "Sending request to %s (attempt %d/%d)",
                            model,
                            attempt + 1,
                            total_attempts,
                        )
                        return await self._adapter.generate(
                            model=model, contents=contents, config=config
                        )
                except Exception as error:
                    if not policy.is_transient(error):
                        log.error("Provider call failed with non-retryable error: %s", error)
                        raise
                    tele.count("transient_errors")
                    if attempt + 1 == total_attempts:
                        tele.count("retries_exhausted")
                        log.error(
                            "Provider still unavailable after %d attempt(s).",
                            total_attempts,
                        )
                        raise TransientProviderError(
                            f"Provider unavailable after {total_attempts} attempt(s): {error}",
                            attempts=total_attempts,
                        ) from error
                    delay = policy.delay_for(attempt, self._rng)
                    log.warning(
                        "Provider returned transient error %s. Retrying in %.2fs "
                        "(attempt %d/%d)",
                        getattr(error, "code", "?"),
                        delay,
                        attempt + 2,
                        total_attempts,
                    )
                    await asyncio.sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover
