"""Assemble the outbound request for a structured query.

The request forces the model to answer with exactly one function call chosen
from the compiled options, at the most deterministic sampling setting. The
user turn repeats every schema in plain text so the instruction is
self-contained and auditable.
"""

from __future__ import annotations

from collections.abc import Sequence
import dataclasses

from google.genai import types

from gemini_structured.constants import DETERMINISTIC_TEMPERATURE
from gemini_structured.core.types import ContextItem, Query
from gemini_structured.exceptions import SchemaViolationError
from gemini_structured.pipeline.conversation import Conversation
from gemini_structured.schema.compiler import CompiledOption, OptionSet


@dataclasses.dataclass(frozen=True, slots=True)
class StructuredRequest:
    """Everything needed to send, and re-send, one structured query."""

    model: str
    options: OptionSet
    config: types.GenerateContentConfig
    conversation: Conversation

    def correction_config(self, name: str) -> types.GenerateContentConfig:
        """Copy of the config that only allows the option being corrected."""
        return self.config.model_copy(
            update={"tool_config": _forced_call_tool_config([name])}
        )


def render_user_message(query: Query, options: OptionSet) -> str:
    return (
        "User message:\n"
        "<user>\n"
        f"{query.value}\n"
        "</user>\n"
        "Answer by using a function call. Strictly follow the schema:\n"
        "<schema>\n"
        f"{options.render_declarations()}\n"
        "</schema>\n"
    )


def render_correction(option: CompiledOption, violation: SchemaViolationError) -> str:
    """Text of the system-authored turn sent after a schema violation."""
    return (
        f'"{option.name}" function call you made above violates the provided schema:\n'
        "<error>\n"
        f"{violation.summary}\n"
        "</error>\n"
        "Correct the function call by strictly adhering to the schema:\n"
        "<schema>\n"
        f"{option.render_schema()}\n"
        "</schema>\n"
        "Retry the corrected function call.\n"
    )


def build_request(
    query: Query,
    context: Sequence[ContextItem],
    options: OptionSet,
    *,
    model: str,
) -> StructuredRequest:
    """Build a fresh request with its own single-turn conversation.

    Args:
        query: The instruction driving the request.
        context: Background blocks joined in order into the system instruction.
        options: Compiled answer options; the model must call exactly one.
        model: Gemini model identifier.
    """
    system_instruction = "\n".join(item.value for item in context) or None
    config = types.GenerateContentConfig(
        system_instruction=system_instruction,
        temperature=DETERMINISTIC_TEMPERATURE,
        tools=[types.Tool(function_declarations=options.function_declarations())],
        tool_config=_forced_call_tool_config(list(options.names)),
    )
    return StructuredRequest(
        model=model,
        options=options,
        config=config,
        conversation=Conversation(render_user_message(query, options)),
    )


def _forced_call_tool_config(allowed: list[str]) -> types.ToolConfig:
    return types.ToolConfig(
        function_calling_config=types.FunctionCallingConfig(
            mode=types.FunctionCallingConfigMode.ANY,
            allowed_function_names=allowed,
        )
    )
