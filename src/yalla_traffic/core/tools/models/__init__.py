"""Tool-related data models."""

from .models import ToolDefinition, ParameterSpec
from .tool_call import ToolCallRequest, ToolCallResult

__all__ = ["ToolDefinition", "ParameterSpec", "ToolCallRequest", "ToolCallResult"]
