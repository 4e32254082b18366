from typing import Annotated, Any, Callable, Dict, List, Optional, Sequence, Union

import httpx
import pytest
from pydantic import Field

from yalla_traffic.core import ModelTurn, ToolCallRequest, ToolRegistry, TurnProvider
from yalla_traffic.core.messages import ConversationContext

Script = Sequence[Union[ModelTurn, Exception]]


def text_turn(text: str) -> ModelTurn:
    return ModelTurn(text=text)


def tool_turn(name: str, arguments: Optional[Dict[str, Any]] = None, call_id: Optional[str] = None) -> ModelTurn:
    return ModelTurn(tool_call=ToolCallRequest(name=name, arguments=arguments or {}, call_id=call_id))


class ScriptedProvider(TurnProvider[Any]):
    """Plays back a fixed sequence of model turns and records every context it was given."""

    model_name = "scripted"

    def __init__(self, script: Script, max_retries: int = 0) -> None:
        super().__init__(max_retries=max_retries, base_retry_delay=0)
        self.script = list(script)
        self.contexts: List[ConversationContext] = []

    async def _next_turn_impl(self, context: ConversationContext) -> ModelTurn:
        self.contexts.append(context)
        if not self.script:
            raise AssertionError("Scripted provider ran out of turns")
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step


@pytest.fixture
def echo_registry() -> ToolRegistry:
    registry = ToolRegistry()

    async def echo(value: Annotated[str, Field(description="Value to echo back")]) -> Dict[str, Any]:
        """Echo the given value."""
        return {"echo": value}

    registry.register("echo", func=echo)
    return registry.freeze()


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class RecordingHandler:
    """MockTransport handler returning canned responses and keeping the requests it saw."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]
