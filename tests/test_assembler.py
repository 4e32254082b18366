import pytest

from yalla_traffic.core import (
    ConversationContext,
    EngineResult,
    EngineState,
    IterationLimitError,
    ResponseAssembler,
)
from yalla_traffic.core.engine import FALLBACK_MESSAGE


def test_done_result_is_successful_outcome() -> None:
    result = EngineResult(state=EngineState.DONE, text="Take Al Khail, it's 10 min faster.", tools_used=("calculate_routes",))

    outcome = ResponseAssembler().assemble(result)

    assert outcome.success is True
    assert outcome.message == "Take Al Khail, it's 10 min faster."
    assert outcome.tools_used == ["calculate_routes"]
    assert outcome.error is None


def test_failed_result_gets_fallback_message_and_error_code() -> None:
    result = EngineResult(
        state=EngineState.FAILED,
        tools_used=("get_traffic_flow",) * 5,
        context=ConversationContext(),
        error=IterationLimitError(5),
    )

    outcome = ResponseAssembler().assemble(result)

    assert outcome.success is False
    assert outcome.message == FALLBACK_MESSAGE
    assert outcome.tools_used == ["get_traffic_flow"] * 5
    assert outcome.error == "iteration_limit_exceeded"
    assert outcome.error_detail is None


def test_error_detail_only_when_exposed() -> None:
    result = EngineResult(state=EngineState.FAILED, error=IterationLimitError(5))

    outcome = ResponseAssembler(expose_error_details=True).assemble(result)

    assert outcome.error_detail == "No final answer after 5 tool cycles."


def test_non_terminal_state_is_rejected() -> None:
    with pytest.raises(ValueError):
        ResponseAssembler().assemble(EngineResult(state=EngineState.EXECUTING_TOOL))
