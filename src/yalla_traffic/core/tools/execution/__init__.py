"""Tool execution logic."""

from .executor import ToolExecutor, normalize_arguments

__all__ = ["ToolExecutor", "normalize_arguments"]
