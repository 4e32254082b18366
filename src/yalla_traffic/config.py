"""Runtime settings, read from the environment (and a ``.env`` file when present)."""

import os
from typing import Literal, Optional

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field

from .core import get_logger

logger = get_logger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


class Settings(BaseModel):
    """
    Configuration for the assistant.

    Attributes:
        llm_provider: Which language-model backend to use.
        model_name: Model identifier; defaults per provider when unset.
        gemini_api_key: Key for the Gemini API.
        openai_api_key: Key for the OpenAI API.
        openai_base_url: Optional OpenAI-compatible endpoint.
        tomtom_api_key: Key for TomTom routing / traffic APIs.
        google_places_api_key: Key for the Google Places API.
        tool_timeout: Per-tool timeout in seconds.
        http_timeout: Per-request timeout for upstream HTTP calls, in seconds.
        max_tool_cycles: Tool cycles allowed before a conversation fails.
        max_history_turns: Caller-supplied history turns retained per conversation.
        max_message_length: Longest accepted user message.
        environment: ``development`` exposes internal error detail in outcomes.
    """

    llm_provider: Literal["gemini", "openai"] = "gemini"
    model_name: Optional[str] = None
    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    tomtom_api_key: Optional[str] = None
    google_places_api_key: Optional[str] = None
    tool_timeout: float = Field(default=10.0, gt=0)
    http_timeout: float = Field(default=10.0, gt=0)
    max_tool_cycles: int = Field(default=5, ge=1)
    max_history_turns: int = Field(default=10, ge=0)
    max_message_length: int = Field(default=1000, ge=1)
    environment: Literal["production", "development"] = "production"

    @property
    def resolved_model_name(self) -> str:
        if self.model_name:
            return self.model_name
        return DEFAULT_GEMINI_MODEL if self.llm_provider == "gemini" else DEFAULT_OPENAI_MODEL

    @property
    def expose_error_details(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from environment variables, loading ``.env`` first if asked to."""
        if load_env_file:
            env_file = find_dotenv(usecwd=True)
            if env_file:
                logger.debug(f"Loading .env from: {env_file}")
                load_dotenv(env_file)

        values = {
            "llm_provider": os.getenv("YALLA_LLM_PROVIDER"),
            "model_name": os.getenv("YALLA_MODEL"),
            "gemini_api_key": os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            "openai_api_key": os.getenv("OPENAI_API_KEY"),
            "openai_base_url": os.getenv("OPENAI_BASE_URL"),
            "tomtom_api_key": os.getenv("TOMTOM_API_KEY"),
            "google_places_api_key": os.getenv("GOOGLE_PLACES_API_KEY"),
            "tool_timeout": os.getenv("YALLA_TOOL_TIMEOUT"),
            "http_timeout": os.getenv("YALLA_HTTP_TIMEOUT"),
            "max_tool_cycles": os.getenv("YALLA_MAX_TOOL_CYCLES"),
            "max_history_turns": os.getenv("YALLA_MAX_HISTORY_TURNS"),
            "max_message_length": os.getenv("YALLA_MAX_MESSAGE_LENGTH"),
            "environment": os.getenv("YALLA_ENV"),
        }
        # Unset variables fall back to the field defaults
        return cls.model_validate({key: value for key, value in values.items() if value not in (None, "")})
