"""CLI entry point for configuration introspection.

Usage:
    python -m gemini_structured.config
    python -m gemini_structured.config --check
    python -m gemini_structured.config --json
"""

import sys

from .introspection import main

if __name__ == "__main__":
    sys.exit(main())
