"""Type-predicate language for answer-shape fields.

A predicate is a short string describing the accepted values of one field:

    '"Done"'               exact string literal (discriminant)
    "string > 0"           non-empty string
    "(string > 0)[] > 0"   at least one non-empty string
    "integer >= 1"         integer no smaller than 1
    '"yes" | "no"'         either literal

Parsing produces a small immutable tree. Each node renders itself both as a
JSON-schema fragment (sent to the model) and as a pydantic annotation (used
to validate what comes back), so the two can never drift apart.
"""

from __future__ import annotations

import dataclasses
import re
import typing
from typing import Annotated, Any

from pydantic import (
    BeforeValidator,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
)

PRIMITIVES = ("string", "number", "integer", "boolean")


class PredicateSyntaxError(ValueError):
    """Raised when a predicate string cannot be parsed."""

    def __init__(self, predicate: str, message: str) -> None:
        super().__init__(f"cannot parse predicate {predicate!r}: {message}")
        self.predicate = predicate


# --- Tree ---


@dataclasses.dataclass(frozen=True, slots=True)
class Bound:
    """A single comparison such as ``> 0``."""

    op: typing.Literal[">", ">=", "<", "<="]
    limit: float

    def length_limits(self) -> tuple[int | None, int | None]:
        """Translate the bound into inclusive (min, max) length limits."""
        if self.limit != int(self.limit):
            raise ValueError(f"length bound must be an integer, got {self.limit}")
        n = int(self.limit)
        match self.op:
            case ">":
                return n + 1, None
            case ">=":
                return n, None
            case "<":
                return None, n - 1
            case "<=":
                return None, n
        raise ValueError(f"unknown operator {self.op!r}")  # pragma: no cover

    def value_limits(self) -> dict[str, float]:
        """Translate the bound into pydantic numeric constraint keywords."""
        keyword = {">": "gt", ">=": "ge", "<": "lt", "<=": "le"}[self.op]
        return {keyword: self.limit}


@dataclasses.dataclass(frozen=True, slots=True)
class LiteralNode:
    value: str | float | int | bool

    def json_schema(self) -> dict[str, Any]:
        return {"type": _json_type_of(self.value), "const": self.value}

    def annotation(self) -> Any:
        return Annotated[
            typing.Literal[self.value], BeforeValidator(_same_kind_as(self.value))
        ]


@dataclasses.dataclass(frozen=True, slots=True)
class PrimitiveNode:
    kind: str
    bound: Bound | None = None

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.kind}
        if self.bound is None:
            return schema
        if self.kind == "string":
            lo, hi = self.bound.length_limits()
            if lo is not None:
                schema["minLength"] = lo
            if hi is not None:
                schema["maxLength"] = hi
        else:
            keyword = {
                ">": "exclusiveMinimum",
                ">=": "minimum",
                "<": "exclusiveMaximum",
                "<=": "maximum",
            }[self.bound.op]
            schema[keyword] = _as_number(self.bound.limit)
        return schema

    def annotation(self) -> Any:
        if self.kind == "string":
            if self.bound is None:
                return StrictStr
            lo, hi = self.bound.length_limits()
            return Annotated[StrictStr, Field(min_length=lo, max_length=hi)]
        if self.kind == "boolean":
            return StrictBool
        number: Any = (
            StrictInt if self.kind == "integer" else typing.Union[StrictInt, StrictFloat]  # noqa: UP007
        )
        if self.bound is not None:
            number = Annotated[number, Field(**self.bound.value_limits())]
        if self.kind == "integer":
            # Whole floats are integers in JSON; anything else must already be an int.
            number = Annotated[number, BeforeValidator(_whole_float_to_int)]
        return number


@dataclasses.dataclass(frozen=True, slots=True)
class ArrayNode:
    item: Node
    bound: Bound | None = None

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "array", "items": self.item.json_schema()}
        if self.bound is not None:
            lo, hi = self.bound.length_limits()
            if lo is not None:
                schema["minItems"] = lo
            if hi is not None:
                schema["maxItems"] = hi
        return schema

    def annotation(self) -> Any:
        base = list[self.item.annotation()]  # type: ignore[misc]
        if self.bound is None:
            return base
        lo, hi = self.bound.length_limits()
        return Annotated[base, Field(min_length=lo, max_length=hi)]


@dataclasses.dataclass(frozen=True, slots=True)
class UnionNode:
    alternatives: tuple[Node, ...]

    def json_schema(self) -> dict[str, Any]:
        return {"anyOf": [alt.json_schema() for alt in self.alternatives]}

    def annotation(self) -> Any:
        return typing.Union[tuple(alt.annotation() for alt in self.alternatives)]  # noqa: UP007


Node = LiteralNode | PrimitiveNode | ArrayNode | UnionNode


def _json_type_of(value: object) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    return "string"


def _as_number(value: float) -> int | float:
    return int(value) if value == int(value) else value


def _whole_float_to_int(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _same_kind_as(expected: str | float | bool) -> typing.Callable[[Any], Any]:
    """Reject values whose JSON type differs from the literal's.

    Equality alone would let ``True`` match ``1`` and ``1`` match ``true``.
    """
    kind = _json_type_of(expected)
    numeric = ("integer", "number")

    def check(value: Any) -> Any:
        actual = _json_type_of(value) if isinstance(value, str | int | float) else None
        if actual == kind or (kind in numeric and actual in numeric):
            return value
        raise ValueError(f"Input should be {expected!r}")

    return check


# --- Tokenizer ---

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<number>-?\d+(?:\.\d+)?)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>>=|<=|>|<)
  | (?P<brackets>\[\])
  | (?P<punct>[()|])
    """,
    re.VERBOSE,
)


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise PredicateSyntaxError(text, f"unexpected character {text[pos]!r}")
        kind = match.lastgroup or ""
        if kind != "ws":
            tokens.append((kind, match.group()))
        pos = match.end()
    return tokens


def _unquote(raw: str) -> str:
    return re.sub(r"\\(.)", r"\1", raw[1:-1])


# --- Parser ---


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def parse(self) -> Node:
        if not self.tokens:
            raise PredicateSyntaxError(self.text, "empty predicate")
        node = self._union()
        if self.pos != len(self.tokens):
            raise PredicateSyntaxError(
                self.text, f"unexpected {self.tokens[self.pos][1]!r}"
            )
        return node

    def _peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            raise PredicateSyntaxError(self.text, "unexpected end of predicate")
        self.pos += 1
        return token

    def _union(self) -> Node:
        alternatives = [self._term()]
        while self._peek() == ("punct", "|"):
            self.pos += 1
            alternatives.append(self._term())
        if len(alternatives) == 1:
            return alternatives[0]
        return UnionNode(tuple(alternatives))

    def _term(self) -> Node:
        node = self._atom()
        while (token := self._peek()) is not None and token[0] == "brackets":
            self.pos += 1
            node = ArrayNode(node)
        token = self._peek()
        if token is not None and token[0] == "op":
            node = self._bounded(node, self._bound())
        return node

    def _bound(self) -> Bound:
        _, op = self._next()
        kind, raw = self._next()
        if kind != "number":
            raise PredicateSyntaxError(self.text, f"expected a number after {op!r}")
        return Bound(op, float(raw))  # type: ignore[arg-type]

    def _bounded(self, node: Node, bound: Bound) -> Node:
        if isinstance(node, PrimitiveNode) and node.kind != "boolean":
            if node.bound is not None:
                raise PredicateSyntaxError(self.text, "only one bound is allowed")
            checked = dataclasses.replace(node, bound=bound)
        elif isinstance(node, ArrayNode) and node.bound is None:
            checked = dataclasses.replace(node, bound=bound)
        else:
            raise PredicateSyntaxError(
                self.text, f"a bound cannot apply to {type(node).__name__}"
            )
        if isinstance(checked, ArrayNode) or checked.kind == "string":
            try:
                bound.length_limits()
            except ValueError as e:
                raise PredicateSyntaxError(self.text, str(e)) from e
        return checked

    def _atom(self) -> Node:
        kind, raw = self._next()
        if kind == "string":
            return LiteralNode(_unquote(raw))
        if kind == "number":
            number = float(raw)
            return LiteralNode(int(number) if "." not in raw else number)
        if kind == "ident":
            if raw in PRIMITIVES:
                return PrimitiveNode(raw)
            if raw in ("true", "false"):
                return LiteralNode(raw == "true")
            raise PredicateSyntaxError(self.text, f"unknown type {raw!r}")
        if (kind, raw) == ("punct", "("):
            node = self._union()
            if self._next() != ("punct", ")"):
                raise PredicateSyntaxError(self.text, "expected ')'")
            return node
        raise PredicateSyntaxError(self.text, f"unexpected {raw!r}")


def parse_predicate(text: str) -> Node:
    """Parse a predicate string into a tree.

    Raises:
        PredicateSyntaxError: If the predicate is not well formed.
    """
    if not isinstance(text, str):
        raise PredicateSyntaxError(repr(text), "predicate must be a string")
    return _Parser(text).parse()
