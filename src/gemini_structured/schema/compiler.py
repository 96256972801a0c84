"""Compile answer shapes into selectable, machine-checkable options.

Each shape becomes a ``CompiledOption``: a positional identifier, a JSON
schema advertised to the model as a function declaration, and a pydantic
model that validates the arguments the model sends back. Options live in an
``OptionSet`` addressed by index; identifiers are only meaningful inside the
request that produced them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import dataclasses
import json
import logging
from typing import Any

from google.genai import types
from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from gemini_structured.constants import OPTION_NAME_PREFIX
from gemini_structured.core.predicates import (
    Node,
    PredicateSyntaxError,
    parse_predicate,
)
from gemini_structured.core.types import AnswerShape, Failure, Result, Success
from gemini_structured.exceptions import (
    SchemaViolationError,
    ShapeDefinitionError,
    UnknownOptionError,
)

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class CompiledField:
    """One field of a compiled shape."""

    name: str
    required: bool
    node: Node


@dataclasses.dataclass(frozen=True, slots=True)
class CompiledOption:
    """An answer shape bound to a request-scoped identifier."""

    name: str
    shape: AnswerShape
    fields: tuple[CompiledField, ...]
    json_schema: Mapping[str, Any]
    model: type[BaseModel]

    def validate(self, args: Mapping[str, Any]) -> Result[dict[str, Any], SchemaViolationError]:
        """Validate selection arguments against this option.

        Returns:
            Success with the normalized answer (declared fields only, in
            declaration order, unset optional fields omitted), or Failure
            with a SchemaViolationError listing every violation.
        """
        try:
            instance = self.model.model_validate(dict(args))
        except ValidationError as e:
            return Failure(SchemaViolationError(self.name, _describe_errors(e)))
        return Success(instance.model_dump(by_alias=True, exclude_unset=True))

    def declaration_dict(self) -> dict[str, Any]:
        """Plain-dict form of the function declaration, for prompt rendering."""
        return {"name": self.name, "parametersJsonSchema": dict(self.json_schema)}

    def function_declaration(self) -> types.FunctionDeclaration:
        return types.FunctionDeclaration(
            name=self.name,
            parameters_json_schema=dict(self.json_schema),
        )

    def render_schema(self, indent: int | None = None) -> str:
        return json.dumps(self.json_schema, indent=indent, ensure_ascii=False)


@dataclasses.dataclass(frozen=True, slots=True)
class OptionSet:
    """Ordered, immutable collection of compiled options."""

    options: tuple[CompiledOption, ...]

    def __post_init__(self) -> None:
        names = [o.name for o in self.options]
        if len(set(names)) != len(names):
            raise ShapeDefinitionError(f"duplicate option identifiers: {names}")

    def __len__(self) -> int:
        return len(self.options)

    def __iter__(self):  # noqa: ANN204
        return iter(self.options)

    def __getitem__(self, index: int) -> CompiledOption:
        return self.options[index]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(o.name for o in self.options)

    def lookup(self, name: str) -> CompiledOption | None:
        """Find the option whose identifier is ``name``, if any."""
        if not name.startswith(OPTION_NAME_PREFIX):
            return None
        suffix = name[len(OPTION_NAME_PREFIX) :]
        if not suffix.isdigit():
            return None
        index = int(suffix)
        if index >= len(self.options) or self.options[index].name != name:
            return None
        return self.options[index]

    def require(self, name: str) -> CompiledOption:
        """Like ``lookup`` but raises UnknownOptionError when absent."""
        option = self.lookup(name)
        if option is None:
            raise UnknownOptionError(name, self.names)
        return option

    def function_declarations(self) -> list[types.FunctionDeclaration]:
        return [o.function_declaration() for o in self.options]

    def render_declarations(self) -> str:
        """JSON rendering of every declaration, embedded in the user prompt."""
        return json.dumps(
            [o.declaration_dict() for o in self.options], indent=2, ensure_ascii=False
        )


def option_name(index: int) -> str:
    """Deterministic identifier for the option at ``index``."""
    return f"{OPTION_NAME_PREFIX}{index}"


def compile_option(index: int, shape: AnswerShape | Mapping[str, str]) -> CompiledOption:
    """Compile a single answer shape at the given position.

    Raises:
        ShapeDefinitionError: If the shape is empty or a predicate is malformed.
    """
    try:
        shape = AnswerShape.of(shape)
    except TypeError as e:
        raise ShapeDefinitionError(str(e), shape_index=index) from e
    if len(shape) == 0:
        raise ShapeDefinitionError("shape declares no fields", shape_index=index)

    fields: list[CompiledField] = []
    for raw_name, predicate in shape.fields.items():
        if not isinstance(raw_name, str) or raw_name in ("", "?"):
            raise ShapeDefinitionError(
                "field name must be a non-empty string",
                shape_index=index,
                field_name=str(raw_name),
            )
        required = not raw_name.endswith("?")
        name = raw_name if required else raw_name[:-1]
        try:
            node = parse_predicate(predicate)
        except PredicateSyntaxError as e:
            raise ShapeDefinitionError(str(e), shape_index=index, field_name=name) from e
        fields.append(CompiledField(name, required, node))

    names = [f.name for f in fields]
    if len(set(names)) != len(names):
        raise ShapeDefinitionError("duplicate field names", shape_index=index)

    name = option_name(index)
    return CompiledOption(
        name=name,
        shape=shape,
        fields=tuple(fields),
        json_schema=_object_schema(fields),
        model=_build_model(index, fields),
    )


def compile_options(shapes: Iterable[AnswerShape | Mapping[str, str]]) -> OptionSet:
    """Compile an ordered, non-empty list of answer shapes.

    Raises:
        ShapeDefinitionError: If no shapes are given or any shape is malformed.
    """
    shape_list = list(shapes)
    if not shape_list:
        raise ShapeDefinitionError("at least one answer shape is required")
    option_set = OptionSet(
        tuple(compile_option(i, shape) for i, shape in enumerate(shape_list))
    )
    log.debug("Compiled %d answer option(s): %s", len(option_set), option_set.names)
    return option_set


# --- Internal helpers ---


def _object_schema(fields: list[CompiledField]) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {f.name: f.node.json_schema() for f in fields},
    }
    required = [f.name for f in fields if f.required]
    if required:
        schema["required"] = required
    return schema


def _build_model(index: int, fields: list[CompiledField]) -> type[BaseModel]:
    # Field names are arbitrary strings, so each is stored under a safe
    # attribute name and addressed through its alias.
    definitions: dict[str, Any] = {}
    for position, f in enumerate(fields):
        default = ... if f.required else None
        definitions[f"field_{position}"] = (
            f.node.annotation(),
            Field(default, alias=f.name),
        )
    return create_model(  # type: ignore[call-overload]
        f"Option{index}",
        __config__=ConfigDict(extra="ignore", populate_by_name=False),
        **definitions,
    )


def _describe_errors(error: ValidationError) -> tuple[str, ...]:
    lines = []
    for item in error.errors(include_url=False):
        location = ".".join(str(part) for part in item["loc"]) or "(root)"
        lines.append(f"{location}: {item['msg']}")
    return tuple(lines) or (str(error),)
