"""Yalla - a tool-augmented Dubai traffic chat assistant."""

from .core import (
    ConversationEngine,
    ConversationOutcome,
    CancellationToken,
    ResponseAssembler,
    ToolRegistry,
    ToolExecutor,
    UserLocation,
    get_logger,
    setup_logging,
)
from .config import Settings
from .llm_impl import GeminiTurnProvider, OpenAITurnProvider
from .traffic import TrafficAssistant, build_traffic_registry

__all__ = [
    "ConversationEngine",
    "ConversationOutcome",
    "CancellationToken",
    "ResponseAssembler",
    "ToolRegistry",
    "ToolExecutor",
    "UserLocation",
    "get_logger",
    "setup_logging",
    "Settings",
    "GeminiTurnProvider",
    "OpenAITurnProvider",
    "TrafficAssistant",
    "build_traffic_registry",
]
