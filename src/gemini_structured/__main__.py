"""Allow ``python -m gemini_structured``."""

import sys

from gemini_structured.cli import main

if __name__ == "__main__":
    sys.exit(main())
