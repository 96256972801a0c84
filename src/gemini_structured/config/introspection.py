"""Configuration introspection for debugging and setup checks."""

import json
import sys
from typing import Any

from gemini_structured.exceptions import ConfigurationError

from . import require_api_key, resolve_config

# ruff: noqa: T201


def get_config_summary() -> dict[str, Any]:
    """Resolve configuration and describe it with secrets redacted.

    Returns:
        Dictionary with ``valid``, ``config`` and ``errors`` keys.
    """
    errors: list[str] = []
    config_dict: dict[str, Any] = {}
    try:
        config = resolve_config()
        config_dict = config.to_dict()
        require_api_key(config)
    except ConfigurationError as e:
        errors.append(str(e))
    return {"valid": not errors, "config": config_dict, "errors": errors}


def format_summary(summary: dict[str, Any]) -> str:
    """Human-readable rendering of ``get_config_summary()``."""
    lines = ["gemini-structured configuration", ""]
    for key, value in summary["config"].items():
        lines.append(f"  {key:<24} {value}")
    if summary["errors"]:
        lines.append("")
        lines.append("Problems:")
        lines.extend(f"  - {error}" for error in summary["errors"])
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for configuration introspection."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Inspect gemini-structured configuration",
        prog="python -m gemini_structured.config",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON instead of human-readable format",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Just check if configuration is valid (exit code 0=valid, 1=invalid)",
    )
    args = parser.parse_args(argv)

    summary = get_config_summary()
    if args.check:
        return 0 if summary["valid"] else 1

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(format_summary(summary))
    return 0 if summary["valid"] else 1


if __name__ == "__main__":
    sys.exit(main())
