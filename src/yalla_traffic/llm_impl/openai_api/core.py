from typing import Any, Iterable, List, Optional, cast

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionToolParam

from yalla_traffic.core import TurnProvider, ModelTurn, ToolRegistry, get_logger
from yalla_traffic.core.messages import ConversationContext
from .adapter import OpenAIToolAdapter

logger = get_logger(__name__)


class OpenAITurnProvider(TurnProvider[ChatCompletion]):
    """
    Turn provider backed by OpenAI chat completions.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model_name: str,
        registry: Optional[ToolRegistry] = None,
        temp: float = 0.9,
        max_tokens: int = 1024,
        max_retries: int = 2,
        base_retry_delay: float = 1.0,
    ):
        """
        Initializes the OpenAI turn provider.

        Args:
            client: The initialized AsyncOpenAI client.
            model_name: The identifier for the OpenAI model to use.
            registry: The tool registry whose declarations are offered to the model.
            temp: The temperature for text generation, controlling randomness.
            max_tokens: The maximum number of tokens to generate in the response.
            max_retries: Retries for failed API calls.
            base_retry_delay: Initial backoff delay in seconds.
        """
        super().__init__(max_retries=max_retries, base_retry_delay=base_retry_delay)
        self.client: AsyncOpenAI = client
        self.model_name = model_name
        self.registry = registry
        self.temperature = temp
        self.max_tokens = max_tokens

        self.tools: Optional[List[ChatCompletionToolParam]] = None
        if registry is not None:
            self.tools = OpenAIToolAdapter.build_tool_object(registry)

    async def _next_turn_impl(self, context: ConversationContext) -> ModelTurn[ChatCompletion]:
        messages = OpenAIToolAdapter.convert_context(context)

        kwargs: dict[str, Any] = {}
        if self.tools:
            # parallel_tool_calls=False keeps the model to one tool per turn
            kwargs.update(tools=self.tools, parallel_tool_calls=False)

        # We need to cast messages to Iterable[Any] because the library expects a specific union of message types
        # but we are using List[Dict[str, Any]] which is structurally compatible.
        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=cast(Iterable[Any], messages),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            **kwargs,
        )

        if not response.choices:
            logger.error(f"OpenAI response has no choices: {response.model_dump()}")

        tool_calls = OpenAIToolAdapter.get_tool_calls(response)
        if len(tool_calls) > 1:
            logger.warning(f"Model requested {len(tool_calls)} tools in one turn; only the first runs.")

        text = OpenAIToolAdapter.get_text(response)
        return ModelTurn(
            text=text or None,
            tool_call=tool_calls[0] if tool_calls else None,
            raw=response,
        )
