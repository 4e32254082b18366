"""Public exports for the provider-agnostic conversation core."""

from .base import TurnProvider, ModelTurn
from .tools import ToolRegistry, ToolExecutor
from .exceptions import (
    YallaError,
    LLMToolError,
    ToolRegistrationError,
    ToolExecutionError,
    ToolValidationError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamConfigurationError,
    ConversationError,
    UnknownToolError,
    IterationLimitError,
    MalformedTurnError,
    ModelProviderError,
    ConversationCancelledError,
    InvalidRequestError,
)
from .tools.models import ToolDefinition, ParameterSpec, ToolCallRequest, ToolCallResult
from .logger import get_logger, setup_logging
from .messages import (
    BaseMessage,
    UserMessage,
    AssistantMessage,
    SystemMessage,
    ToolMessage,
    ConversationContext,
)
from .tools.schema import SchemaValidator
from .engine import (
    EngineState,
    EngineResult,
    CancellationToken,
    ConversationEngine,
    UserLocation,
    ConversationOutcome,
    ResponseAssembler,
)

__all__ = [
    "TurnProvider",
    "ModelTurn",
    "ToolDefinition",
    "ParameterSpec",
    "ToolRegistry",
    "ToolExecutor",
    "YallaError",
    "LLMToolError",
    "ToolRegistrationError",
    "ToolExecutionError",
    "ToolValidationError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "UpstreamConfigurationError",
    "ConversationError",
    "UnknownToolError",
    "IterationLimitError",
    "MalformedTurnError",
    "ModelProviderError",
    "ConversationCancelledError",
    "InvalidRequestError",
    "get_logger",
    "setup_logging",
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolMessage",
    "ConversationContext",
    "ToolCallRequest",
    "ToolCallResult",
    "SchemaValidator",
    "EngineState",
    "EngineResult",
    "CancellationToken",
    "ConversationEngine",
    "UserLocation",
    "ConversationOutcome",
    "ResponseAssembler",
]
