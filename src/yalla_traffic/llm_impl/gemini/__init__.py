"""Gemini turn provider."""

from .core import GeminiTurnProvider, DEFAULT_SAFETY_SETTINGS
from .adapter import GeminiToolAdapter

__all__ = ["GeminiTurnProvider", "GeminiToolAdapter", "DEFAULT_SAFETY_SETTINGS"]
