from datetime import datetime, timezone

import httpx
import pytest

from yalla_traffic.core import UpstreamConfigurationError, UpstreamError, UpstreamTimeoutError
from yalla_traffic.traffic import BoundingBox, Coordinate, TomTomClient
from conftest import RecordingHandler, mock_http_client

ORIGIN = Coordinate(lat=25.2048, lon=55.2708)
DESTINATION = Coordinate(lat=25.1972, lon=55.2744)

ROUTE_PAYLOAD = {
    "routes": [
        {
            "summary": {
                "lengthInMeters": 12345,
                "travelTimeInSeconds": 1290,
                "trafficDelayInSeconds": 150,
                "departureTime": "2026-01-01T08:00:00+04:00",
                "arrivalTime": "2026-01-01T08:21:30+04:00",
            }
        },
        {"summary": {"lengthInMeters": 15000, "travelTimeInSeconds": 1500}},
    ]
}


def make_client(handler: RecordingHandler, api_key: str = "test-key") -> TomTomClient:
    return TomTomClient(api_key, http_client=mock_http_client(handler))


@pytest.mark.asyncio
async def test_calculate_route_parses_summaries() -> None:
    handler = RecordingHandler(httpx.Response(200, json=ROUTE_PAYLOAD))
    client = make_client(handler)

    routes = await client.calculate_route(ORIGIN, DESTINATION, max_alternatives=2)

    assert len(routes) == 2
    assert routes[0].duration_minutes == 22
    assert routes[0].traffic_delay_minutes == 3
    assert routes[0].distance_km == 12.3
    assert routes[1].traffic_delay_minutes == 0

    request = handler.last
    assert request.url.host == "api.tomtom.com"
    assert request.url.path == "/routing/1/calculateRoute/25.2048,55.2708:25.1972,55.2744/json"
    assert request.url.params["key"] == "test-key"
    assert request.url.params["traffic"] == "true"
    assert request.url.params["routeType"] == "fastest"
    assert request.url.params["maxAlternatives"] == "2"
    assert "departAt" not in request.url.params


@pytest.mark.asyncio
async def test_calculate_route_sends_departure_time() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"routes": []}))
    depart_at = datetime(2026, 1, 1, 5, 30, tzinfo=timezone.utc)

    routes = await make_client(handler).calculate_route(ORIGIN, DESTINATION, depart_at=depart_at)

    assert routes == []
    assert handler.last.url.params["departAt"] == "2026-01-01T05:30:00+00:00"
    assert "maxAlternatives" not in handler.last.url.params


@pytest.mark.asyncio
async def test_malformed_route_payload_is_upstream_error() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"routes": [{"legs": []}]}))

    with pytest.raises(UpstreamError, match="Malformed route data"):
        await make_client(handler).calculate_route(ORIGIN, DESTINATION)


@pytest.mark.asyncio
async def test_flow_segment() -> None:
    handler = RecordingHandler(
        httpx.Response(
            200,
            json={
                "flowSegmentData": {
                    "currentSpeed": 35,
                    "freeFlowSpeed": 90,
                    "currentTravelTime": 120,
                    "freeFlowTravelTime": 50,
                    "confidence": 0.95,
                    "roadClosure": False,
                }
            },
        )
    )

    segment = await make_client(handler).flow_segment(ORIGIN)

    assert segment is not None
    assert segment.current_speed == 35
    assert segment.free_flow_speed == 90
    assert segment.road_closure is False
    assert handler.last.url.params["point"] == "25.2048,55.2708"
    assert handler.last.url.params["unit"] == "KMPH"


@pytest.mark.asyncio
async def test_flow_segment_missing_data() -> None:
    handler = RecordingHandler(httpx.Response(200, json={}))

    assert await make_client(handler).flow_segment(ORIGIN) is None


@pytest.mark.asyncio
async def test_incident_details_uses_bbox() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"incidents": [{"properties": {"iconCategory": 1}}]}))
    bbox = BoundingBox(min_lat=25.0, min_lon=55.0, max_lat=25.5, max_lon=55.5)

    incidents = await make_client(handler).incident_details(bbox)

    assert incidents == [{"properties": {"iconCategory": 1}}]
    assert handler.last.url.params["bbox"] == "55.0,25.0,55.5,25.5"
    assert handler.last.url.params["timeValidityFilter"] == "present"


def test_bounding_box_around_point() -> None:
    bbox = BoundingBox.around(Coordinate(lat=0.0, lon=10.0), radius_km=111.0)

    assert bbox.min_lat == pytest.approx(-1.0)
    assert bbox.max_lat == pytest.approx(1.0)
    assert bbox.min_lon == pytest.approx(9.0)
    assert bbox.max_lon == pytest.approx(11.0)


@pytest.mark.asyncio
async def test_missing_api_key_is_configuration_error() -> None:
    handler = RecordingHandler(httpx.Response(200, json={}))

    with pytest.raises(UpstreamConfigurationError, match="TOMTOM_API_KEY not configured"):
        await make_client(handler, api_key="").flow_segment(ORIGIN)
    assert handler.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, message",
    [
        (401, "API authentication failed"),
        (403, "API authentication failed"),
        (429, "Rate limit exceeded"),
        (500, "External service unavailable"),
        (503, "External service unavailable"),
        (400, "tomtom request failed with status 400"),
    ],
)
async def test_status_codes_map_to_safe_messages(status: int, message: str) -> None:
    handler = RecordingHandler(httpx.Response(status, json={"error": {"description": "internal detail"}}))

    with pytest.raises(UpstreamError) as exc_info:
        await make_client(handler).flow_segment(ORIGIN)

    assert str(exc_info.value) == message
    assert exc_info.value.status_code == status
    assert exc_info.value.service == "tomtom"


@pytest.mark.asyncio
async def test_timeout_is_upstream_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    client = TomTomClient("test-key", http_client=mock_http_client(handler))

    with pytest.raises(UpstreamTimeoutError, match="tomtom request timed out"):
        await client.flow_segment(ORIGIN)


@pytest.mark.asyncio
async def test_invalid_json_is_upstream_error() -> None:
    handler = RecordingHandler(httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(UpstreamError, match="Malformed response from tomtom"):
        await make_client(handler).flow_segment(ORIGIN)


@pytest.mark.asyncio
async def test_injected_client_is_not_closed() -> None:
    http_client = mock_http_client(RecordingHandler(httpx.Response(200, json={})))

    async with TomTomClient("test-key", http_client=http_client):
        pass

    assert not http_client.is_closed
    await http_client.aclose()
