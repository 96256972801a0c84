"""Command-line entry point.

Usage:
    python -m gemini_structured request.yaml
    python -m gemini_structured request.json --max-attempts 3 --timeout 120

The request file holds ``query``, optional ``context`` (a list of text
blocks) and ``select`` (a list of answer shapes). The validated answer is
printed as JSON on stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys
from typing import Any

from google.genai import errors
from pydantic import BaseModel, Field, ValidationError, field_validator
import yaml

from gemini_structured.config import resolve_config
from gemini_structured.exceptions import GeminiStructuredError
from gemini_structured.frontdoor import query_structured

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class RequestDocument(BaseModel):
    """Schema of a request file."""

    query: str = Field(min_length=1)
    context: list[str] = Field(default_factory=list)
    select: list[dict[str, str]] = Field(min_length=1)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("query must not be blank")
        return v

    @field_validator("select", mode="before")
    @classmethod
    def scalar_predicates_as_text(cls, v: Any) -> Any:
        """Accept unquoted YAML literals such as ``done: true`` or ``code: 42``."""
        if not isinstance(v, list):
            return v
        return [
            {name: _predicate_text(p) for name, p in shape.items()}
            if isinstance(shape, dict)
            else shape
            for shape in v
        ]


def _predicate_text(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return value


def load_request(path: Path) -> RequestDocument:
    """Read a YAML (or JSON) request document.

    Raises:
        ValueError: If the file cannot be read or does not match the schema.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Cannot read request file {path}: {e}") from e
    try:
        return RequestDocument.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid request file {path}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini-structured",
        description="Ask Gemini a question and print an answer of a declared shape",
    )
    parser.add_argument("request", type=Path, help="YAML or JSON request file")
    parser.add_argument("--model", help="Gemini model identifier")
    parser.add_argument(
        "--max-attempts",
        type=int,
        help="Model attempts including the first (schema corrections)",
    )
    parser.add_argument(
        "--max-retries", type=int, help="Retries after transient provider errors"
    )
    parser.add_argument("--timeout", type=float, help="Deadline in seconds")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity on stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        document = load_request(args.request)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)  # noqa: T201
        return EXIT_USAGE

    overrides: dict[str, Any] = {
        "model": args.model,
        "max_attempts": args.max_attempts,
        "max_retries": args.max_retries,
        "timeout": args.timeout,
    }
    try:
        config = resolve_config(overrides)
        answer = asyncio.run(
            query_structured(
                document.query, document.context, document.select, config=config
            )
        )
    except (GeminiStructuredError, errors.APIError) as e:
        log.debug("Structured query failed", exc_info=True)
        print(f"error: {type(e).__name__}: {e}", file=sys.stderr)  # noqa: T201
        return EXIT_FAILURE

    print(json.dumps(answer, indent=2, ensure_ascii=False))  # noqa: T201
    return EXIT_OK
