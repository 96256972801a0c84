"""Shared test helpers: fake provider responses and a scripted adapter."""

from __future__ import annotations

from collections.abc import Iterable
import dataclasses
from typing import Any

from google.genai import errors, types


def function_call_response(name: str, args: dict[str, Any] | None) -> types.GenerateContentResponse:
    """A response whose first candidate selects ``name`` with ``args``."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[types.Part(function_call=types.FunctionCall(name=name, args=args))],
                )
            )
        ]
    )


def text_response(text: str) -> types.GenerateContentResponse:
    """A response carrying free text instead of a function call."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=text)])
            )
        ]
    )


def unavailable_error() -> errors.ServerError:
    return errors.ServerError(
        503,
        {
            "error": {
                "code": 503,
                "message": "The model is overloaded. Please try again later.",
                "status": "UNAVAILABLE",
            }
        },
    )


def bad_request_error() -> errors.ClientError:
    return errors.ClientError(
        400,
        {
            "error": {
                "code": 400,
                "message": "Request contains an invalid argument.",
                "status": "INVALID_ARGUMENT",
            }
        },
    )


@dataclasses.dataclass
class RecordedCall:
    model: str
    contents: list[types.Content]
    config: types.GenerateContentConfig


class ScriptedAdapter:
    """Adapter that replays a fixed script of responses and errors.

    Each element is either a response (returned) or an exception (raised).
    Every call is recorded with a snapshot of the contents it received.
    """

    def __init__(self, script: Iterable[Any]) -> None:
        self._script = list(script)
        self.calls: list[RecordedCall] = []

    async def generate(
        self,
        *,
        model: str,
        contents: list[types.Content],
        config: types.GenerateContentConfig,
    ) -> types.GenerateContentResponse:
        self.calls.append(RecordedCall(model, list(contents), config))
        if not self._script:
            raise AssertionError("ScriptedAdapter called more times than scripted")
        outcome = self._script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.calls)
