"""Core abstractions for language-model turn providers."""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional, TypeVar, Generic, Callable, Coroutine, Any

from pydantic import BaseModel, ConfigDict

from ..messages import ConversationContext
from ..logger import get_logger
from ..tools.models import ToolCallRequest

logger = get_logger(__name__)


ProviderResT = TypeVar("ProviderResT")


class ModelTurn(BaseModel, Generic[ProviderResT]):
    """Normalized output of a single model turn.

    Exactly one of ``text`` and ``tool_call`` is expected to be populated.
    A turn with neither is malformed.

    Attributes:
        text: Text content returned by the provider, if any.
        tool_call: The tool the model wants to invoke, if any.
        raw: Provider-specific response payload for advanced use cases.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    text: Optional[str] = None
    tool_call: Optional[ToolCallRequest] = None
    raw: Optional[ProviderResT] = None

    @property
    def is_malformed(self) -> bool:
        return self.tool_call is None and not self.text


class TurnProvider(ABC, Generic[ProviderResT]):
    """Abstract base class for language-model turn providers.

    A provider receives the whole conversation context and returns the next
    model turn: either text or a single tool request. Implementations render
    the tool registry's declarations into their own wire format.
    """

    model_name: str = "unknown"

    def __init__(self, max_retries: int = 2, base_retry_delay: float = 1.0):
        self.max_retries = max_retries
        self.base_retry_delay = base_retry_delay

    async def _execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, ModelTurn[ProviderResT]]],
        *args: Any,
        **kwargs: Any,
    ) -> ModelTurn[ProviderResT]:
        """
        Executes a function with retry logic.

        Args:
            func: The asynchronous function to execute.
            *args: Positional arguments for the function.
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the function call.

        Raises:
            Exception: The last encountered exception if all retries fail.
        """
        delay = self.base_retry_delay
        for attempt in range(self.max_retries + 1):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                if attempt == self.max_retries:
                    raise

                logger.warning(f"API Error (Retry: {attempt + 1}/{self.max_retries}): {e}. Waiting {delay}s...")
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff

        msg = f"Failed to get response after {self.max_retries} retries."
        logger.error(msg)
        raise TimeoutError(msg)

    async def next_turn(self, context: ConversationContext) -> ModelTurn[ProviderResT]:
        """
        Asks the model for its next turn given the conversation so far.

        Args:
            context: The immutable conversation context.

        Returns:
            The normalized model turn.
        """
        return await self._execute_with_retry(self._next_turn_impl, context)

    @abstractmethod
    async def _next_turn_impl(self, context: ConversationContext) -> ModelTurn[ProviderResT]:
        pass
