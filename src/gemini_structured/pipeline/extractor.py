"""Pull the model's single function-style selection out of a raw response."""

from __future__ import annotations

import logging
from typing import Any

from gemini_structured.core.types import Selection
from gemini_structured.exceptions import MalformedResponseError

log = logging.getLogger(__name__)


def extract_selection(response: Any) -> Selection:
    """Return the selection in the first part of the first candidate.

    Raises:
        MalformedResponseError: If the response carries no function call.
            This usually signals an upstream condition such as rate limiting
            or a safety block, so the full response is logged and attached.
    """
    candidates = getattr(response, "candidates", None) or []
    content = getattr(candidates[0], "content", None) if candidates else None
    parts = getattr(content, "parts", None) or []
    call = getattr(parts[0], "function_call", None) if parts else None

    name = getattr(call, "name", None)
    args = getattr(call, "args", None)
    if not name or args is None:
        log.error("Model response carries no function call: %r", response)
        raise MalformedResponseError(
            "Bad model response: expected exactly one function call",
            response=response,
        )
    return Selection(name=name, args=dict(args))
