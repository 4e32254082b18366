import asyncio
import logging
from typing import Annotated, Any, Dict

import httpx
import pytest
from pydantic import Field

from yalla_traffic.core import (
    ToolCallRequest,
    ToolExecutionError,
    ToolExecutor,
    ToolRegistry,
    UpstreamError,
)
from yalla_traffic.core.tools import normalize_arguments
from yalla_traffic.core.tools.execution.executor import INTERNAL_ERROR_MESSAGE


def build_registry() -> ToolRegistry:
    registry = ToolRegistry()

    async def get_speed(
        lat: Annotated[float, Field(description="Latitude")],
        lon: Annotated[float, Field(description="Longitude")],
    ) -> Dict[str, Any]:
        """Current speed at a point."""
        return {"lat": lat, "lon": lon, "speed": 80}

    async def slow_tool() -> Dict[str, Any]:
        """Takes too long."""
        await asyncio.sleep(5)
        return {}

    async def upstream_down() -> Dict[str, Any]:
        """Upstream returns 503."""
        raise UpstreamError("External service unavailable", service="tomtom", status_code=503)

    async def transport_error() -> Dict[str, Any]:
        """Raw transport failure."""
        raise httpx.ConnectError("connection refused")

    def sync_count(n: Annotated[int, Field(description="How many")]) -> int:
        """Synchronous tool returning a bare value."""
        return n * 2

    async def crash() -> Dict[str, Any]:
        """Programming error."""
        raise RuntimeError("bug")

    for func in (get_speed, slow_tool, upstream_down, transport_error, sync_count, crash):
        registry.register(func)
    return registry.freeze()


@pytest.fixture
def executor() -> ToolExecutor:
    return ToolExecutor(build_registry(), tool_timeout=0.2)


@pytest.mark.asyncio
async def test_successful_call_returns_payload(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("get_speed", {"lat": 25.2, "lon": 55.3}, call_id="c1"))

    assert result.ok
    assert result.response == {"lat": 25.2, "lon": 55.3, "speed": 80}
    assert result.call_id == "c1"


@pytest.mark.asyncio
async def test_json_string_arguments_are_coerced(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("get_speed", '{"lat": "25.2", "lon": 55}'))

    assert result.ok
    assert result.response["lat"] == 25.2
    assert result.response["lon"] == 55.0


@pytest.mark.asyncio
async def test_unknown_tool_is_a_failure_result(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("nope", {}))

    assert not result.ok
    assert result.response == {"error": "Tool 'nope' not found in registry."}


@pytest.mark.asyncio
async def test_invalid_arguments_are_reported(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("get_speed", {"lat": "north"}))

    assert not result.ok
    assert result.error is not None
    assert result.error.startswith("Argument validation failed")


@pytest.mark.asyncio
async def test_unparseable_arguments_are_reported(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("get_speed", "{not json"))

    assert not result.ok
    assert "Failed to parse arguments for tool 'get_speed'" in result.response["error"]


@pytest.mark.asyncio
async def test_timeout_becomes_failure(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("slow_tool", {}))

    assert not result.ok
    assert result.error == "Tool execution timed out after 0.2 seconds."


@pytest.mark.asyncio
async def test_upstream_error_message_is_passed_through(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("upstream_down", {}))

    assert result.response == {"error": "External service unavailable"}


@pytest.mark.asyncio
async def test_transport_error_is_recoverable(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("transport_error", {}))

    assert not result.ok
    assert result.error == "connection refused"


@pytest.mark.asyncio
async def test_sync_tool_result_is_wrapped(executor: ToolExecutor) -> None:
    result = await executor.execute(ToolCallRequest("sync_count", {"n": 3}))

    assert result.ok
    assert result.response == {"result": 6}


@pytest.mark.asyncio
async def test_unexpected_error_is_sanitized(executor: ToolExecutor, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.ERROR):
        result = await executor.execute(ToolCallRequest("crash", {}))

    assert result.response == {"error": INTERNAL_ERROR_MESSAGE}
    assert "bug" in caplog.text


def test_normalize_arguments() -> None:
    assert normalize_arguments("t", None) == {}
    assert normalize_arguments("t", "") == {}
    assert normalize_arguments("t", "null") == {}
    assert normalize_arguments("t", {"a": 1}) == {"a": 1}
    assert normalize_arguments("t", '{"a": 1}') == {"a": 1}
    assert normalize_arguments("t", [("a", 1)]) == {"a": 1}

    with pytest.raises(ToolExecutionError, match="must decode to a JSON object"):
        normalize_arguments("t", "[1, 2]")
