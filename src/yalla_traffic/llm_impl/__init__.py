"""Language-model turn provider implementations."""

from .gemini import GeminiTurnProvider
from .openai_api import OpenAITurnProvider

__all__ = ["GeminiTurnProvider", "OpenAITurnProvider"]
