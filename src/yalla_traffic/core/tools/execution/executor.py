"""Dispatches a single tool call and converts every tool-level failure into a result."""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, Callable, Dict, Optional

import httpx

from ...exceptions import ToolExecutionError
from ...logger import get_logger
from ..models import ToolCallRequest, ToolCallResult
from ..registry import ToolRegistry

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal error occurred while running the tool."


def normalize_arguments(tool_name: str, raw_args: Any) -> Dict[str, Any]:
    """Normalize tool arguments into a dictionary.

    Handles JSON strings, mappings, or None values.

    Args:
        tool_name: Name of the tool (for error reporting).
        raw_args: The raw arguments (dict, string, or None).

    Returns:
        A dictionary of normalized arguments.

    Raises:
        ToolExecutionError: If arguments cannot be parsed or are invalid.
    """
    if raw_args is None or raw_args == "":
        return {}

    if isinstance(raw_args, dict):
        return raw_args

    if isinstance(raw_args, str):
        try:
            parsed = json.loads(raw_args)
        except json.JSONDecodeError as exc:
            raise ToolExecutionError(f"Failed to parse arguments for tool '{tool_name}': {exc}") from exc

        if parsed is None:
            return {}

        if not isinstance(parsed, dict):
            raise ToolExecutionError(
                f"Failed to parse arguments for tool '{tool_name}': arguments must decode to a JSON object."
            )

        return parsed

    try:
        return dict(raw_args)
    except (TypeError, ValueError) as exc:
        raise ToolExecutionError(f"Failed to parse arguments for tool '{tool_name}': {exc}") from exc


class ToolExecutor:
    """Executes tool calls against a registry.

    The executor handles argument normalization, validation, timeouts and
    error conversion in a provider-agnostic way. Tool-level failures never
    escape :meth:`execute`; they come back as failure results so the model can
    react to them conversationally.
    """

    # Exceptions whose message is safe to return to the LLM.
    # Anything else is logged and replaced by INTERNAL_ERROR_MESSAGE.
    RECOVERABLE_ERRORS = (
        ToolExecutionError,
        httpx.HTTPError,
        ValueError,
        TypeError,
        KeyError,
    )

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        tool_timeout: float = 10.0,
        argument_error_formatter: Optional[Callable[[str, Exception], str]] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            registry: Tool registry used to resolve tool definitions.
            tool_timeout: Timeout in seconds for a single tool execution.
            argument_error_formatter: Optional formatter for argument validation errors.
        """
        self._registry = registry
        self._tool_timeout = tool_timeout
        self._argument_error_formatter = argument_error_formatter or self._default_argument_error

    @property
    def tool_timeout(self) -> float:
        return self._tool_timeout

    async def execute(self, tool_call: ToolCallRequest) -> ToolCallResult:
        """Handle a single tool call request.

        Validates the tool existence, normalizes arguments, validates them
        against the tool's argument model and executes the tool.

        Args:
            tool_call: The tool call request containing name, ID, and arguments.

        Returns:
            The result of the tool execution, including any errors.
        """
        logger.debug(f"Handling tool call: {tool_call.name} (ID: {tool_call.call_id})")

        tool_def = self._registry.lookup(tool_call.name)
        if tool_def is None:
            msg = f"Tool '{tool_call.name}' not found in registry."
            logger.warning(msg)
            return ToolCallResult.failure(tool_call.name, msg, tool_call.call_id)

        try:
            function_args = normalize_arguments(tool_call.name, tool_call.arguments)
        except ToolExecutionError as exc:
            logger.warning(f"Argument normalization failed for '{tool_call.name}': {exc}")
            return ToolCallResult.failure(tool_call.name, str(exc), tool_call.call_id)

        if tool_def.args_model:
            try:
                validated_args = tool_def.args_model(**function_args)
                function_args = validated_args.model_dump()
            except ValueError as validation_error:
                msg = self._argument_error_formatter(tool_call.name, validation_error)
                logger.warning(f"Validation error for '{tool_call.name}': {msg}")
                return ToolCallResult.failure(tool_call.name, msg, tool_call.call_id)

        try:
            logger.info(f"Executing tool '{tool_call.name}' with {function_args}")
            function_result = await self._execute_tool(tool_def.func, function_args)
        except self.RECOVERABLE_ERRORS as exc:
            msg = str(exc) or type(exc).__name__
            logger.warning(f"Recoverable error in '{tool_call.name}': {msg} ({type(exc).__name__})")
            return ToolCallResult.failure(tool_call.name, msg, tool_call.call_id)
        except Exception as exc:
            logger.error(f"Unexpected error executing tool '{tool_call.name}': {exc}", exc_info=True)
            return ToolCallResult.failure(tool_call.name, INTERNAL_ERROR_MESSAGE, tool_call.call_id)

        logger.info(f"Tool '{tool_call.name}' executed successfully.")
        if not isinstance(function_result, dict):
            function_result = {"result": function_result}
        return ToolCallResult.success(tool_call.name, function_result, tool_call.call_id)

    async def _execute_tool(self, tool_function: Any, function_args: Dict[str, Any]) -> Any:
        """Execute the tool function, handling async/sync and timeouts.

        Raises:
            ToolExecutionError: If execution times out.
        """
        try:
            if inspect.iscoroutinefunction(tool_function):
                return await asyncio.wait_for(tool_function(**function_args), timeout=self._tool_timeout)

            return await asyncio.wait_for(
                asyncio.to_thread(tool_function, **function_args),
                timeout=self._tool_timeout,
            )

        except asyncio.TimeoutError as exc:
            raise ToolExecutionError(f"Tool execution timed out after {self._tool_timeout} seconds.") from exc

    @staticmethod
    def _default_argument_error(tool_name: str, error: Exception) -> str:
        return f"Argument validation failed: {error}"
