import typing

from pydantic import TypeAdapter, ValidationError
import pytest

from gemini_structured.core.predicates import (
    ArrayNode,
    LiteralNode,
    PredicateSyntaxError,
    PrimitiveNode,
    UnionNode,
    parse_predicate,
)

pytestmark = pytest.mark.unit


def _accepts(predicate: str, value: typing.Any) -> bool:
    adapter = TypeAdapter(parse_predicate(predicate).annotation())
    try:
        adapter.validate_python(value)
    except ValidationError:
        return False
    return True


class TestParsing:
    def test_double_quoted_literal(self):
        assert parse_predicate('"Hello, little friend!"') == LiteralNode(
            "Hello, little friend!"
        )

    def test_single_quoted_literal_with_escape(self):
        assert parse_predicate(r"'it\'s'") == LiteralNode("it's")

    def test_non_empty_string(self):
        node = parse_predicate("string > 0")
        assert isinstance(node, PrimitiveNode)
        assert node.kind == "string"
        assert node.json_schema() == {"type": "string", "minLength": 1}

    def test_array_of_non_empty_strings_with_min_items(self):
        node = parse_predicate("(string > 0)[] > 0")
        assert isinstance(node, ArrayNode)
        assert node.json_schema() == {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "minItems": 1,
        }

    def test_union_of_literals(self):
        node = parse_predicate('"yes" | "no"')
        assert isinstance(node, UnionNode)
        assert node.json_schema() == {
            "anyOf": [
                {"type": "string", "const": "yes"},
                {"type": "string", "const": "no"},
            ]
        }

    def test_number_bounds_render_as_json_schema_limits(self):
        assert parse_predicate("number >= 1.5").json_schema() == {
            "type": "number",
            "minimum": 1.5,
        }
        assert parse_predicate("integer < 10").json_schema() == {
            "type": "integer",
            "exclusiveMaximum": 10,
        }

    def test_string_upper_bound(self):
        assert parse_predicate("string <= 3").json_schema() == {
            "type": "string",
            "maxLength": 3,
        }

    def test_boolean_and_bool_literals(self):
        assert parse_predicate("boolean") == PrimitiveNode("boolean")
        assert parse_predicate("true") == LiteralNode(True)

    @pytest.mark.parametrize(
        "predicate",
        [
            "",
            "   ",
            "strng",
            "string >",
            "string > x",
            "(string > 0",
            "string > 0 extra",
            "boolean > 1",
            '"done" > 1',
            "string > 0 > 1",
            "string > 0.5",
            "string @",
        ],
    )
    def test_malformed_predicates_raise(self, predicate):
        with pytest.raises(PredicateSyntaxError):
            parse_predicate(predicate)

    def test_non_string_predicate_raises(self):
        with pytest.raises(PredicateSyntaxError):
            parse_predicate(42)  # type: ignore[arg-type]


class TestAnnotations:
    def test_literal_accepts_only_exact_value(self):
        assert _accepts('"Done"', "Done")
        assert not _accepts('"Done"', "done")

    def test_non_empty_string_rejects_empty_and_non_strings(self):
        assert _accepts("string > 0", "x")
        assert not _accepts("string > 0", "")
        assert not _accepts("string > 0", 5)

    def test_array_requires_at_least_one_non_empty_item(self):
        assert _accepts("(string > 0)[] > 0", ["*.py"])
        assert not _accepts("(string > 0)[] > 0", [])
        assert not _accepts("(string > 0)[] > 0", [""])

    def test_integer_accepts_whole_floats_from_provider(self):
        assert _accepts("integer >= 1", 3.0)
        assert not _accepts("integer >= 1", 0)
        assert not _accepts("integer", 2.5)

    def test_integer_rejects_strings_and_booleans(self):
        assert not _accepts("integer", "5")
        assert not _accepts("integer", True)
        assert not _accepts("integer >= 1", "7")

    def test_literals_do_not_cross_json_types(self):
        assert not _accepts("1", True)
        assert not _accepts("true", 1)
        assert _accepts("1", 1)
        assert _accepts("true", True)

    def test_union_accepts_any_alternative(self):
        assert _accepts('"yes" | "no"', "no")
        assert not _accepts('"yes" | "no"', "maybe")
