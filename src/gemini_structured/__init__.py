"""Structured answers from Gemini through forced function calling."""

import importlib.metadata
import logging

from gemini_structured.config import (
    GeminiStructuredSettings,
    config_scope,
    resolve_config,
)
from gemini_structured.core.types import (
    AnswerShape,
    ContextItem,
    Failure,
    Query,
    Result,
    Selection,
    Success,
)
from gemini_structured.exceptions import (
    ConfigurationError,
    CorrectionAttemptsExceededError,
    GeminiStructuredError,
    MalformedResponseError,
    RequestTimeoutError,
    SchemaViolationError,
    ShapeDefinitionError,
    TransientProviderError,
    UnknownOptionError,
)
from gemini_structured.frontdoor import query_structured, query_structured_sync
from gemini_structured.pipeline.adapters import GenerationAdapter, GoogleGenAIAdapter
from gemini_structured.pipeline.request_builder import StructuredRequest, build_request
from gemini_structured.pipeline.retry_loop import ConversationRetryLoop
from gemini_structured.pipeline.transport import RetryPolicy, TransportClient
from gemini_structured.schema import CompiledOption, OptionSet, compile_options
from gemini_structured.telemetry import TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("gemini-structured")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Prevent 'No handler found' warnings when the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Entry points
    "query_structured",
    "query_structured_sync",
    # Pipeline stages
    "compile_options",
    "build_request",
    "TransportClient",
    "RetryPolicy",
    "ConversationRetryLoop",
    "GenerationAdapter",
    "GoogleGenAIAdapter",
    # Configuration
    "GeminiStructuredSettings",
    "resolve_config",
    "config_scope",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    # Core types
    "Query",
    "ContextItem",
    "AnswerShape",
    "Selection",
    "CompiledOption",
    "OptionSet",
    "StructuredRequest",
    "Result",
    "Success",
    "Failure",
    # Exceptions
    "GeminiStructuredError",
    "ConfigurationError",
    "ShapeDefinitionError",
    "TransientProviderError",
    "MalformedResponseError",
    "UnknownOptionError",
    "SchemaViolationError",
    "CorrectionAttemptsExceededError",
    "RequestTimeoutError",
]
