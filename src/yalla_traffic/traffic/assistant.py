"""Caller-facing entry point: request validation, history parsing and wiring."""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from google import genai
from openai import AsyncOpenAI

from yalla_traffic.config import Settings
from yalla_traffic.core import (
    AssistantMessage,
    BaseMessage,
    CancellationToken,
    ConversationEngine,
    ConversationOutcome,
    InvalidRequestError,
    ResponseAssembler,
    ToolRegistry,
    TurnProvider,
    UpstreamConfigurationError,
    UserLocation,
    UserMessage,
    get_logger,
)
from yalla_traffic.llm_impl import GeminiTurnProvider, OpenAITurnProvider
from .clients import GooglePlacesClient, HttpCollaborator, TomTomClient
from .prompt import (
    SUGGESTIONS_WITHOUT_LOCATION,
    SUGGESTIONS_WITH_LOCATION,
    YALLA_GREETING,
    YALLA_SYSTEM_PROMPT,
)
from .tools import build_traffic_registry, offset_timeout_for

logger = get_logger(__name__)

SERVICE_NAME = "yalla-chat"

HistoryEntry = Union[BaseMessage, Mapping[str, Any]]
LocationInput = Union[UserLocation, Mapping[str, Any]]


def provider_key_env(settings: Settings) -> str:
    return "GEMINI_API_KEY" if settings.llm_provider == "gemini" else "OPENAI_API_KEY"


def provider_api_key(settings: Settings) -> Optional[str]:
    return settings.gemini_api_key if settings.llm_provider == "gemini" else settings.openai_api_key


def check_health(settings: Settings) -> Dict[str, str]:
    """
    Report whether the assistant can serve requests with the given settings.

    Returns:
        ``{"status": "healthy", "service": ..., "model": ...}`` or
        ``{"status": "unavailable", "reason": "<KEY> not configured"}``.
    """
    required = {
        provider_key_env(settings): provider_api_key(settings),
        "TOMTOM_API_KEY": settings.tomtom_api_key,
        "GOOGLE_PLACES_API_KEY": settings.google_places_api_key,
    }
    for env_name, value in required.items():
        if not value:
            return {"status": "unavailable", "reason": f"{env_name} not configured"}

    return {"status": "healthy", "service": SERVICE_NAME, "model": settings.resolved_model_name}


def suggestions(has_location: bool) -> List[str]:
    """Conversation starters, tailored to whether the user shared their location."""
    return list(SUGGESTIONS_WITH_LOCATION if has_location else SUGGESTIONS_WITHOUT_LOCATION)


def parse_history(conversation_history: Optional[Sequence[HistoryEntry]]) -> List[BaseMessage]:
    """
    Normalize caller-supplied history into message models.

    Accepts message models, ``{"role", "content"}`` dicts and Gemini-style
    ``{"role", "parts": [{"text"}]}`` dicts. The ``model`` role is read as the
    assistant. Entries without text are dropped. Message models must be user
    turns or assistant turns without tool calls.

    Raises:
        InvalidRequestError: If the history is not a sequence or an entry cannot be read.
    """
    if conversation_history is None:
        return []
    if isinstance(conversation_history, (str, bytes, Mapping)) or not isinstance(conversation_history, Sequence):
        raise InvalidRequestError("Conversation history must be an array")

    messages: List[BaseMessage] = []
    for index, entry in enumerate(conversation_history):
        if isinstance(entry, BaseMessage):
            messages.append(_checked_message(entry, index))
            continue
        if not isinstance(entry, Mapping):
            raise InvalidRequestError(f"History entry {index} must be an object")

        role = entry.get("role")
        text = _entry_text(entry, index)
        if not text:
            logger.debug(f"Skipping empty history entry {index}.")
            continue

        if role == "user":
            messages.append(UserMessage(content=text))
        elif role in ("assistant", "model"):
            messages.append(AssistantMessage(content=text))
        else:
            raise InvalidRequestError(f"History entry {index} has unsupported role '{role}'")

    return messages


def _checked_message(message: BaseMessage, index: int) -> BaseMessage:
    # Only plain chat turns; system and tool turns belong to the engine.
    if isinstance(message, UserMessage):
        return message
    if isinstance(message, AssistantMessage) and not message.tool_calls:
        return message
    raise InvalidRequestError(f"History entry {index} must be a user or assistant message without tool calls")


def _entry_text(entry: Mapping[str, Any], index: int) -> str:
    if "content" in entry:
        content = entry["content"]
        if not isinstance(content, str):
            raise InvalidRequestError(f"History entry {index} content must be a string")
        return content

    parts = entry.get("parts")
    if not isinstance(parts, list):
        raise InvalidRequestError(f"History entry {index} needs 'content' or 'parts'")
    return "".join(part.get("text") or "" for part in parts if isinstance(part, Mapping))


def parse_location(user_location: Optional[LocationInput]) -> Optional[UserLocation]:
    """Accept a :class:`UserLocation` or a ``{"lat", "lon"|"lng"}`` mapping."""
    if user_location is None or isinstance(user_location, UserLocation):
        return user_location
    if not isinstance(user_location, Mapping):
        raise InvalidRequestError("User location must be an object with 'lat' and 'lon'")

    lon = user_location.get("lon", user_location.get("lng"))
    try:
        return UserLocation(lat=float(user_location["lat"]), lon=float(lon))
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidRequestError("User location must be an object with 'lat' and 'lon'") from exc


class TrafficAssistant:
    """
    Runs chat requests against the traffic conversation engine.

    Use :meth:`from_settings` to wire the real collaborators, or pass a
    ready-made engine (e.g. with a scripted provider in tests).
    """

    def __init__(
        self,
        engine: ConversationEngine,
        *,
        assembler: Optional[ResponseAssembler] = None,
        settings: Optional[Settings] = None,
        resources: Sequence[HttpCollaborator] = (),
    ) -> None:
        """
        Args:
            engine: The conversation engine serving every request.
            assembler: Outcome assembler; defaults to one without error detail.
            settings: Settings used for validation limits and health reporting.
            resources: HTTP collaborators closed together with the assistant.
        """
        self.engine = engine
        self.settings = settings or Settings()
        self.assembler = assembler or ResponseAssembler(expose_error_details=self.settings.expose_error_details)
        self._resources = list(resources)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TrafficAssistant":
        """
        Build the assistant with TomTom, Google Places and the configured model provider.

        Raises:
            UpstreamConfigurationError: If the model provider's API key is missing.
        """
        if not provider_api_key(settings):
            raise UpstreamConfigurationError(
                f"{provider_key_env(settings)} not configured", service=settings.llm_provider
            )

        tomtom = TomTomClient(settings.tomtom_api_key, timeout=settings.http_timeout)
        places = GooglePlacesClient(settings.google_places_api_key, timeout=settings.http_timeout)
        registry = build_traffic_registry(tomtom, places, offset_timeout=offset_timeout_for(settings.tool_timeout))

        engine = ConversationEngine(
            provider=cls._build_provider(settings, registry),
            registry=registry,
            system_instruction=YALLA_SYSTEM_PROMPT,
            greeting=YALLA_GREETING,
            max_tool_cycles=settings.max_tool_cycles,
            max_history_turns=settings.max_history_turns,
            tool_timeout=settings.tool_timeout,
        )
        logger.info(f"Yalla assistant ready: provider={settings.llm_provider}, model={settings.resolved_model_name}")
        return cls(engine, settings=settings, resources=(tomtom, places))

    @staticmethod
    def _build_provider(settings: Settings, registry: ToolRegistry) -> TurnProvider:
        model_name = settings.resolved_model_name

        if settings.llm_provider == "gemini":
            client = genai.Client(api_key=settings.gemini_api_key)
            return GeminiTurnProvider(aclient=client.aio, model_name=model_name, registry=registry)

        openai_client = AsyncOpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
        return OpenAITurnProvider(client=openai_client, model_name=model_name, registry=registry)

    async def run_conversation(
        self,
        message: Any,
        user_location: Optional[LocationInput] = None,
        conversation_history: Optional[Sequence[HistoryEntry]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ConversationOutcome:
        """
        Validate a chat request, run it through the engine and assemble the outcome.

        Raises:
            InvalidRequestError: If the message, location or history is invalid.
            ConversationCancelledError: If ``cancel_token`` was cancelled mid-session.
        """
        if not isinstance(message, str) or not message.strip():
            raise InvalidRequestError("Message is required")
        if len(message) > self.settings.max_message_length:
            raise InvalidRequestError(
                f"Message too long (max {self.settings.max_message_length} characters)"
            )

        location = parse_location(user_location)
        history = parse_history(conversation_history)

        result = await self.engine.run(
            message,
            user_location=location,
            history=history,
            cancel_token=cancel_token,
        )
        return self.assembler.assemble(result)

    def health(self) -> Dict[str, str]:
        return check_health(self.settings)

    @staticmethod
    def suggestions(has_location: bool) -> List[str]:
        return suggestions(has_location)

    async def aclose(self) -> None:
        for resource in self._resources:
            await resource.aclose()

    async def __aenter__(self) -> "TrafficAssistant":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
