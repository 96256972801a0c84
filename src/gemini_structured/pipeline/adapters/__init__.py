"""Provider adapters."""

from gemini_structured.pipeline.adapters.base import GenerationAdapter
from gemini_structured.pipeline.adapters.gemini import GoogleGenAIAdapter

__all__ = ["GenerationAdapter", "GoogleGenAIAdapter"]
