"""Export the exception hierarchy used across tools, upstream clients and the conversation engine."""

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

__all__ = [
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
]
