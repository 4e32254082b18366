"""Bounded request / tool-call / response state machine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, cast

from ..base import TurnProvider, ModelTurn
from ..exceptions import (
    ConversationCancelledError,
    ConversationError,
    IterationLimitError,
    MalformedTurnError,
    ModelProviderError,
    UnknownToolError,
)
from ..logger import get_logger
from ..messages import (
    AssistantMessage,
    BaseMessage,
    ConversationContext,
    SystemMessage,
    ToolMessage,
    UserMessage,
    truncate_history,
)
from ..tools import ToolCallRequest, ToolExecutor, ToolRegistry
from .cancellation import CancellationToken
from .state import EngineResult, EngineState

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserLocation:
    lat: float
    lon: float


class ConversationEngine:
    """
    Drives one conversation from the user's message to a final answer.

    The engine is an explicit state machine::

        AWAITING_MODEL -> EXECUTING_TOOL -> AWAITING_MODEL -> ... -> DONE | FAILED

    Each model turn either ends the session with text or requests exactly one
    tool. Tool results are appended to the context and the model is asked
    again, for at most ``max_tool_cycles`` cycles. The engine holds no
    per-session state between calls to :meth:`run`, so one instance can serve
    any number of concurrent sessions.
    """

    def __init__(
        self,
        provider: TurnProvider,
        registry: ToolRegistry,
        *,
        system_instruction: str,
        greeting: Optional[str] = None,
        executor: Optional[ToolExecutor] = None,
        max_tool_cycles: int = 5,
        max_history_turns: int = 10,
        tool_timeout: float = 10.0,
    ) -> None:
        """
        Initializes the conversation engine.

        Args:
            provider: The language-model turn provider.
            registry: The frozen registry of tools the model may call.
            system_instruction: Persona / system instruction seeded into every session.
            greeting: Optional assistant greeting seeded after the system instruction.
            executor: Tool executor; built from ``registry`` when omitted.
            max_tool_cycles: Maximum number of tool cycles before the session fails.
            max_history_turns: Number of caller-supplied history turns retained.
            tool_timeout: Per-tool timeout in seconds, used when ``executor`` is omitted.
        """
        self.provider = provider
        self.registry = registry
        self.executor = executor or ToolExecutor(registry, tool_timeout=tool_timeout)
        self.system_instruction = system_instruction
        self.greeting = greeting
        self.max_tool_cycles = max_tool_cycles
        self.max_history_turns = max_history_turns

    def build_context(
        self,
        message: str,
        user_location: Optional[UserLocation] = None,
        history: Sequence[BaseMessage] = (),
    ) -> ConversationContext:
        """Seed the initial context: persona, greeting, truncated history and the user's message."""
        seed: List[BaseMessage] = [SystemMessage(content=self.system_instruction)]
        if self.greeting:
            seed.append(AssistantMessage(content=self.greeting))

        seed.extend(truncate_history(history, self.max_history_turns))

        if user_location is not None:
            message = f"[User's current location: lat {user_location.lat}, lon {user_location.lon}]\n\nUser: {message}"
        seed.append(UserMessage(content=message))

        return ConversationContext.from_turns(seed)

    async def run(
        self,
        message: str,
        user_location: Optional[UserLocation] = None,
        history: Sequence[BaseMessage] = (),
        cancel_token: Optional[CancellationToken] = None,
    ) -> EngineResult:
        """
        Runs a conversation session until it reaches ``DONE`` or ``FAILED``.

        Args:
            message: The user's message. Assumed non-empty and length-checked by the caller.
            user_location: Optional current location of the user.
            history: Previous turns; only the most recent ones are kept.
            cancel_token: Optional token the caller can use to abandon the session.

        Returns:
            The terminal engine result.

        Raises:
            ConversationCancelledError: If the caller cancelled the session.
        """
        logger.info(f"Processing message: {message[:50]!r}")

        context = self.build_context(message, user_location, history)
        state = EngineState.AWAITING_MODEL
        tools_used: List[str] = []
        cycles = 0
        pending: Optional[ToolCallRequest] = None
        final_text = ""

        try:
            while not state.is_terminal:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()

                if state is EngineState.AWAITING_MODEL:
                    turn = await self._next_turn(context)
                    if turn.is_malformed:
                        raise MalformedTurnError("Model turn contained neither text nor a tool request.")

                    if turn.tool_call is not None:
                        pending = turn.tool_call
                        if cycles >= self.max_tool_cycles:
                            raise IterationLimitError(self.max_tool_cycles)
                        if pending.name not in self.registry:
                            raise UnknownToolError(pending.name)

                        tools_used.append(pending.name)
                        context = context.append(AssistantMessage(content=turn.text or "", tool_calls=[pending]))
                        state = EngineState.EXECUTING_TOOL
                    else:
                        final_text = turn.text or ""
                        context = context.append(AssistantMessage(content=final_text))
                        state = EngineState.DONE

                else:
                    tool_call = cast(ToolCallRequest, pending)
                    logger.info(f"Loop {cycles + 1}/{self.max_tool_cycles}: executing tool '{tool_call.name}'.")
                    result = await self.executor.execute(tool_call)
                    if not result.ok:
                        logger.warning(f"Tool '{tool_call.name}' failed: {result.error}")

                    context = context.append(
                        ToolMessage.from_response(name=result.name, response=result.response, tool_call_id=result.call_id)
                    )
                    pending = None
                    cycles += 1
                    state = EngineState.AWAITING_MODEL

        except ConversationCancelledError:
            logger.info(f"Session cancelled after {len(tools_used)} tool call(s).")
            raise
        except ConversationError as exc:
            logger.error(f"Conversation failed ({exc.code}): {exc}. Tools used: {tools_used}")
            return EngineResult(state=EngineState.FAILED, tools_used=tuple(tools_used), context=context, error=exc)

        logger.info(f"Response generated ({len(final_text)} chars, {len(tools_used)} tools used)")
        return EngineResult(state=EngineState.DONE, text=final_text, tools_used=tuple(tools_used), context=context)

    async def _next_turn(self, context: ConversationContext) -> ModelTurn:
        try:
            turn = await self.provider.next_turn(context)
        except Exception as exc:
            logger.error(f"Model provider failed: {exc}", exc_info=True)
            raise ModelProviderError(str(exc)) from exc
        return turn
