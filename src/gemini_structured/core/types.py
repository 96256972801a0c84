"""Core data types that flow through a structured query.

Every value here is immutable. A structured query builds fresh instances for
each call; only the caller's ``AnswerShape`` definitions outlive it.
"""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
from types import MappingProxyType
import typing

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def _freeze_mapping(m: Mapping[str, typing.Any]) -> Mapping[str, typing.Any]:
    if isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m))


# --- Result pair for validation outcomes ---

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[TSuccess]):
    """A successful outcome."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[TFailure]):
    """A failed outcome, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Request inputs ---


@dataclasses.dataclass(frozen=True, slots=True)
class Query:
    """The instruction driving a structured query."""

    value: str

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.value, str),
            message="must be str",
            field_name="value",
            exc=TypeError,
        )
        _require(
            condition=self.value.strip() != "",
            message="cannot be empty",
            field_name="value",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ContextItem:
    """An opaque, pre-rendered background text block.

    Items are order-significant: they are joined in order to form the
    system instruction.
    """

    value: str

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.value, str),
            message="must be str",
            field_name="value",
            exc=TypeError,
        )

    @classmethod
    def tagged(cls, header: str, tag: str, body: str) -> ContextItem:
        """Build a context block with a markdown header and an XML-style tag.

        Example:
            ContextItem.tagged("Task", "task", "Review the build scripts")
        """
        return cls(f"# {header}\n\n<{tag}>\n{body}\n</{tag}>".strip())


@dataclasses.dataclass(frozen=True, slots=True)
class AnswerShape:
    """One acceptable form of a structured answer.

    Maps field names to type predicates such as ``'"Done"'`` (a literal
    discriminant), ``"string > 0"`` or ``"(string > 0)[] > 0"``. A trailing
    ``?`` on a field name marks the field optional.
    """

    fields: Mapping[str, str]

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.fields, Mapping),
            message="must be a mapping of field name to predicate",
            field_name="fields",
            exc=TypeError,
        )
        object.__setattr__(self, "fields", _freeze_mapping(self.fields))

    @classmethod
    def of(cls, shape: AnswerShape | Mapping[str, str]) -> AnswerShape:
        """Coerce a plain mapping into an AnswerShape."""
        if isinstance(shape, AnswerShape):
            return shape
        return cls(shape)

    def __len__(self) -> int:
        return len(self.fields)


# --- Response values ---


@dataclasses.dataclass(frozen=True, slots=True)
class Selection:
    """The single function-style choice made in one model turn."""

    name: str
    args: Mapping[str, typing.Any]

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.name, str) and self.name != "",
            message="must be a non-empty str",
            field_name="name",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.args, Mapping),
            message="must be a mapping",
            field_name="args",
            exc=TypeError,
        )
