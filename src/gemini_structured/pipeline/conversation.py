"""Append-only conversation log owned by a single structured query."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from google.genai import types


class Conversation:
    """Ordered turns exchanged with the model during one structured query.

    Turns can only be appended. ``contents`` hands out a fresh list so the
    transport never holds a reference into the log itself.
    """

    __slots__ = ("_turns",)

    def __init__(self, first_user_text: str) -> None:
        self._turns: list[types.Content] = [user_turn(first_user_text)]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[types.Content]:
        return iter(tuple(self._turns))

    @property
    def turns(self) -> tuple[types.Content, ...]:
        return tuple(self._turns)

    @property
    def contents(self) -> list[types.Content]:
        return list(self._turns)

    def append_correction(
        self, name: str, args: Mapping[str, Any], correction_text: str
    ) -> None:
        """Record the model's rejected selection followed by the correction.

        Both turns are always appended together, model turn first.
        """
        self._turns.append(model_selection_turn(name, args))
        self._turns.append(user_turn(correction_text))


def user_turn(text: str) -> types.Content:
    return types.Content(role="user", parts=[types.Part(text=text)])


def model_selection_turn(name: str, args: Mapping[str, Any]) -> types.Content:
    return types.Content(
        role="model",
        parts=[types.Part(function_call=types.FunctionCall(name=name, args=dict(args)))],
    )
