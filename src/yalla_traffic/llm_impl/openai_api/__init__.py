"""OpenAI turn provider."""

from .core import OpenAITurnProvider
from .adapter import OpenAIToolAdapter

__all__ = ["OpenAITurnProvider", "OpenAIToolAdapter"]
