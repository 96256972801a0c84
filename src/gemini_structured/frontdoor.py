"""Scenario-first entry points for structured queries.

``query_structured`` wires the stages together for the common case:
compile the answer shapes, build the request, and run the repair loop
against Gemini. For finer control, compose the ``pipeline`` stages directly.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
import logging
from typing import TYPE_CHECKING, Any

from gemini_structured.config import (
    GeminiStructuredSettings,
    require_api_key,
    resolve_config,
)
from gemini_structured.core.types import AnswerShape, ContextItem, Query
from gemini_structured.exceptions import RequestTimeoutError
from gemini_structured.pipeline.adapters.gemini import GoogleGenAIAdapter
from gemini_structured.pipeline.request_builder import build_request
from gemini_structured.pipeline.retry_loop import ConversationRetryLoop
from gemini_structured.pipeline.transport import RetryPolicy, TransportClient
from gemini_structured.schema.compiler import compile_options
from gemini_structured.telemetry import TelemetryContext

if TYPE_CHECKING:
    from gemini_structured.pipeline.adapters.base import GenerationAdapter
    from gemini_structured.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

T_QUERY = "query_structured"


async def query_structured(
    query: Query | str,
    context: Sequence[ContextItem | str],
    select: Sequence[AnswerShape | Mapping[str, str]],
    *,
    config: GeminiStructuredSettings | None = None,
    adapter: GenerationAdapter | None = None,
    telemetry: TelemetryContextProtocol | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """Ask the model a question and get back an answer of a declared shape.

    Args:
        query: The instruction for the model.
        context: Background text blocks, joined in order into the system
            instruction.
        select: Candidate answer shapes. The model must pick exactly one.
        config: Settings; resolved from the environment when omitted.
        adapter: Provider adapter. Defaults to the Google GenAI SDK, which
            requires an API key.
        telemetry: Optional telemetry context.
        timeout: Deadline in seconds for the whole query, including retries
            and backoff. Defaults to ``config.timeout``.

    Returns:
        A validated answer matching exactly one shape.

    Raises:
        ConfigurationError: If a shape is malformed or the API key is missing.
            Raised before any network call.
        RequestTimeoutError: If the deadline passes first.
        GeminiStructuredError: Any other fatal protocol error.

    Example:
        ```python
        answer = await query_structured(
            "Greet me",
            context=[],
            select=[
                {"answer": '"Hello, little friend!"', "remarks": "string > 0"},
                {"answer": '"Why are you here?"'},
            ],
        )
        ```
    """
    cfg = config or resolve_config()
    tele: TelemetryContextProtocol = telemetry or TelemetryContext()

    options = compile_options(select)
    request = build_request(
        query if isinstance(query, Query) else Query(query),
        [item if isinstance(item, ContextItem) else ContextItem(item) for item in context],
        options,
        model=cfg.model,
    )
    if adapter is None:
        adapter = GoogleGenAIAdapter(require_api_key(cfg))

    loop = ConversationRetryLoop(
        TransportClient(adapter, RetryPolicy.from_config(cfg), telemetry=tele),
        max_attempts=cfg.max_attempts,
        telemetry=tele,
    )
    deadline = timeout if timeout is not None else cfg.timeout

    with tele(T_QUERY, model=cfg.model):
        log.debug(
            "Structured query with %d option(s), %d context block(s), timeout %s",
            len(options),
            len(context),
            deadline,
        )
        deadline_scope = asyncio.timeout(deadline)
        try:
            async with deadline_scope:
                return await loop.run(request)
        except TimeoutError as e:
            if not deadline_scope.expired():
                raise
            raise RequestTimeoutError(
                f"Structured query did not finish within {deadline}s"
            ) from e


def query_structured_sync(
    query: Query | str,
    context: Sequence[ContextItem | str],
    select: Sequence[AnswerShape | Mapping[str, str]],
    **kwargs: Any,
) -> dict[str, Any]:
    """Blocking wrapper around ``query_structured`` for scripts.

    Must not be called from inside a running event loop.
    """
    return asyncio.run(query_structured(query, context, select, **kwargs))
