"""
Custom exception classes for the traffic assistant.

This module defines the hierarchy of exceptions raised while registering and
executing tools, talking to upstream data providers, and driving a
conversation with the language model.
"""

from typing import Optional


class YallaError(Exception):
    """Base exception for all errors raised by the package."""

    pass


class LLMToolError(YallaError):
    """Base exception for all tool-related errors."""

    pass


class ToolRegistrationError(LLMToolError):
    """Raised when there is an error registering a tool."""

    pass


class ToolExecutionError(LLMToolError):
    """Raised when a tool fails during execution."""

    pass


class ToolValidationError(LLMToolError):
    """Raised when tool parameters or definition are invalid."""

    pass


class UpstreamError(ToolExecutionError):
    """Raised when an external data provider fails or returns unusable data.

    Attributes:
        service: Short name of the provider (e.g. ``"tomtom"``).
        status_code: HTTP status code, when the failure came with one.
    """

    def __init__(self, message: str, *, service: str = "upstream", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class UpstreamTimeoutError(UpstreamError):
    """Raised when an external data provider does not answer in time."""

    pass


class UpstreamConfigurationError(UpstreamError):
    """Raised when a provider cannot be called because it is not configured."""

    pass


class ConversationError(YallaError):
    """Base class for errors that end a conversation in the failed state.

    Attributes:
        code: Stable, caller-safe identifier of the failure kind.
    """

    code = "conversation_error"


class UnknownToolError(ConversationError):
    """Raised when the model requests a tool that is not registered."""

    code = "unknown_tool"

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Model requested unknown tool '{tool_name}'.")
        self.tool_name = tool_name


class IterationLimitError(ConversationError):
    """Raised when the model keeps calling tools past the cycle limit."""

    code = "iteration_limit_exceeded"

    def __init__(self, max_tool_cycles: int) -> None:
        super().__init__(f"No final answer after {max_tool_cycles} tool cycles.")
        self.max_tool_cycles = max_tool_cycles


class MalformedTurnError(ConversationError):
    """Raised when a model turn carries neither text nor a tool request."""

    code = "malformed_model_turn"


class ModelProviderError(ConversationError):
    """Raised when the language model provider fails after all retries."""

    code = "model_error"


class ConversationCancelledError(YallaError):
    """Raised when a caller abandons a conversation before it finishes."""

    pass


class InvalidRequestError(YallaError):
    """Raised when a chat request violates the inbound preconditions."""

    pass
