from typing import List, Optional, Any

from google.genai import types
from google.genai.client import AsyncClient
from google.genai.types import GenerateContentResponse

from yalla_traffic.core import TurnProvider, ModelTurn, ToolRegistry, get_logger
from yalla_traffic.core.messages import ConversationContext
from .adapter import GeminiToolAdapter

logger = get_logger(__name__)

DEFAULT_SAFETY_SETTINGS: List[types.SafetySetting] = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


class GeminiTurnProvider(TurnProvider[GenerateContentResponse]):
    """
    Turn provider backed by Google's Gemini models.

    Every call sends the complete conversation context; the provider keeps
    no chat session of its own, so the engine's context stays the single
    source of truth.
    """

    def __init__(
        self,
        aclient: AsyncClient,
        model_name: str,
        registry: Optional[ToolRegistry] = None,
        temp: float = 0.9,
        top_p: float = 0.95,
        top_k: float = 40,
        max_tokens: int = 1024,
        safety_settings: Optional[List[types.SafetySetting]] = None,
        max_retries: int = 2,
        base_retry_delay: float = 1.0,
    ):
        """
        Initializes the Gemini turn provider.

        Args:
            aclient: The initialized Google GenAI async client.
            model_name: The identifier for the Gemini model to use (e.g. 'gemini-2.0-flash').
            registry: The tool registry whose declarations are offered to the model.
            temp: The temperature for text generation, controlling randomness.
            top_p: Nucleus sampling probability mass.
            top_k: Number of highest-probability tokens considered.
            max_tokens: The maximum number of tokens to generate in the response.
            safety_settings: Content safety settings; defaults to blocking medium-and-above harm.
            max_retries: Retries for failed API calls.
            base_retry_delay: Initial backoff delay in seconds.
        """
        super().__init__(max_retries=max_retries, base_retry_delay=base_retry_delay)
        self.client: AsyncClient = aclient
        self.model_name = model_name
        self.registry = registry
        self.temperature = temp
        self.top_p = top_p
        self.top_k = top_k
        self.max_tokens = max_tokens
        self.safety_settings = DEFAULT_SAFETY_SETTINGS if safety_settings is None else safety_settings

        # Only include tools if there are any registered
        self.tools_config: Optional[List[Any]] = None
        if registry is not None:
            tool_obj = GeminiToolAdapter.build_tool_object(registry)
            if tool_obj:
                self.tools_config = [tool_obj]
                logger.info(f"Registered {len(registry)} tools for Gemini model '{model_name}'.")

        logger.info(f"Initialized GeminiTurnProvider with model='{model_name}', temp={temp}, max_tokens={max_tokens}")

    def build_config(self, context: ConversationContext) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=context.system_instruction,
            temperature=self.temperature,
            top_p=self.top_p,
            top_k=self.top_k,
            max_output_tokens=self.max_tokens,
            safety_settings=self.safety_settings,
            tools=self.tools_config,
        )

    async def _next_turn_impl(self, context: ConversationContext) -> ModelTurn[GenerateContentResponse]:
        contents = GeminiToolAdapter.convert_context(context)
        logger.debug(f"Sending {len(contents)} contents to Gemini model '{self.model_name}'.")

        try:
            response = await self.client.models.generate_content(
                model=self.model_name,
                contents=contents,  # type: ignore[arg-type]
                config=self.build_config(context),
            )
        except Exception as e:
            logger.error(f"Error sending message to Gemini: {e}", exc_info=True)
            raise

        return self._build_turn(response)

    @staticmethod
    def _build_turn(response: GenerateContentResponse) -> ModelTurn[GenerateContentResponse]:
        tool_calls = GeminiToolAdapter.get_tool_calls(response)
        if len(tool_calls) > 1:
            dropped = ", ".join(call.name for call in tool_calls[1:])
            logger.warning(f"Model requested {len(tool_calls)} tools in one turn; only the first runs. Dropped: {dropped}")

        usage = GeminiToolAdapter.usage(response)
        if usage:
            logger.debug(f"Gemini token usage: {usage}")

        text = GeminiToolAdapter.get_text(response)
        return ModelTurn(
            text=text or None,
            tool_call=tool_calls[0] if tool_calls else None,
            raw=response,
        )
