"""Conversation-repair loop for structured queries.

State machine per attempt::

    SENT -> EXTRACTED -> VALIDATED(success)            -> return answer
                      -> VALIDATED(failure) -> CORRECTED -> SENT
                                            -> EXHAUSTED -> raise

Extraction failures and unknown options are fatal on the spot and do not
consume the correction budget. Transient provider errors are handled below
this loop by the transport, with its own independent budget.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gemini_structured.constants import MAX_ATTEMPTS
from gemini_structured.core.types import Success
from gemini_structured.exceptions import CorrectionAttemptsExceededError
from gemini_structured.pipeline.extractor import extract_selection
from gemini_structured.pipeline.request_builder import render_correction
from gemini_structured.pipeline.validator import validate_selection
from gemini_structured.telemetry import TelemetryContext

if TYPE_CHECKING:
    from gemini_structured.pipeline.request_builder import StructuredRequest
    from gemini_structured.pipeline.transport import TransportClient
    from gemini_structured.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

T_RETRY_LOOP = "retry_loop.run"


class ConversationRetryLoop:
    """Drives one request to a validated answer or a fatal error."""

    def __init__(
        self,
        transport: TransportClient,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._transport = transport
        self._max_attempts = max_attempts
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def run(self, request: StructuredRequest) -> dict[str, Any]:
        """Send the request, correcting the model until its answer validates.

        The request's conversation grows by two turns per correction; it is
        owned by this call and must not be shared with another one.

        Returns:
            The normalized answer matching exactly one option.

        Raises:
            CorrectionAttemptsExceededError: If every attempt violated the schema.
            MalformedResponseError: If a response carries no function call.
            UnknownOptionError: If the model names an undeclared option.
            TransientProviderError: If the provider stays unavailable.
        """
        conversation = request.conversation
        config = request.config
        attempts_left = self._max_attempts

        with self._telemetry(T_RETRY_LOOP, options=len(request.options)) as tele:
            while True:
                response = await self._transport.send(
                    request.model, conversation.contents, config
                )
                selection = extract_selection(response)
                result = validate_selection(selection, request.options)
                if isinstance(result, Success):
                    log.debug("Model answered with %s", selection.name)
                    return result.value

                violation = result.error
                tele.count("schema_violations")
                log.warning(
                    "Model returned malformed %s call: %s",
                    selection.name,
                    violation.summary,
                )

                attempts_left -= 1
                if attempts_left <= 0:
                    raise CorrectionAttemptsExceededError(
                        selection.name,
                        violation.violations,
                        attempts=self._max_attempts,
                    ) from violation

                conversation.append_correction(
                    selection.name,
                    selection.args,
                    render_correction(request.options.require(selection.name), violation),
                )
                config = request.correction_config(selection.name)
                tele.count("corrections")
