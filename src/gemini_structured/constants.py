"""
Project-wide constants for gemini-structured
"""  # noqa: D200, D212, D415

# ==============================================================================
# Model and Request Configuration
# ==============================================================================

DEFAULT_MODEL = "gemini-flash-latest"
API_KEY_ENV_VAR = "GEMINI_API_KEY"

# Most deterministic sampling setting
DETERMINISTIC_TEMPERATURE = 0.0

# Option identifiers are positional: option-0, option-1, ...
OPTION_NAME_PREFIX = "option-"

# ==============================================================================
# Transport Retry Configuration
# ==============================================================================

MAX_RETRIES = 5
RETRY_BASE_DELAY = 2.0  # seconds
RETRY_MAX_DELAY = 60.0  # seconds
RETRY_JITTER = 0.25  # fraction of the delay added at random

# Service unavailable
TRANSIENT_STATUS_CODES = frozenset({503})

# ==============================================================================
# Conversation Repair Configuration
# ==============================================================================

# Model attempts per structured query, including the first one
MAX_ATTEMPTS = 2
