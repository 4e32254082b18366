from .models import ToolDefinition, ParameterSpec, ToolCallRequest, ToolCallResult
from .registry import ToolRegistry
from .execution import ToolExecutor, normalize_arguments
from .schema import SchemaValidator

__all__ = [
    "ToolDefinition",
    "ParameterSpec",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolRegistry",
    "ToolExecutor",
    "normalize_arguments",
    "SchemaValidator",
]
