"""Check a selection against the option it names."""

from __future__ import annotations

from typing import Any

from gemini_structured.core.types import Result, Selection
from gemini_structured.exceptions import SchemaViolationError
from gemini_structured.schema.compiler import OptionSet


def validate_selection(
    selection: Selection, options: OptionSet
) -> Result[dict[str, Any], SchemaViolationError]:
    """Validate the selection's arguments against the matching option.

    Returns:
        Success with the normalized answer, or Failure carrying the
        violations.

    Raises:
        UnknownOptionError: If the selection names an undeclared option.
    """
    return options.require(selection.name).validate(selection.args)
