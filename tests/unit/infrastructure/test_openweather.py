from __future__ import annotations

import httpx
import pytest

from agrimandi.application.errors import DependencyUnavailable
from agrimandi.infrastructure.weather.openweather import OpenWeatherClient


def client_with(handler) -> OpenWeatherClient:
    return OpenWeatherClient(api_key="k-123", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_current_weather_passes_metric_units_and_key():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"main": {"temp": 31.5}, "name": "Nashik"})

    payload = await client_with(handler).current(lat=19.99, lon=73.79)

    assert payload["main"]["temp"] == 31.5
    params = seen[0].url.params
    assert params["units"] == "metric"
    assert params["appid"] == "k-123"
    assert params["lat"] == "19.99"


@pytest.mark.asyncio
async def test_missing_key_is_dependency_unavailable():
    with pytest.raises(DependencyUnavailable):
        await OpenWeatherClient(api_key=None).current(lat=0, lon=0)


@pytest.mark.asyncio
async def test_upstream_error_status_is_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid API key"})

    with pytest.raises(DependencyUnavailable) as exc_info:
        await client_with(handler).current(lat=1, lon=2)
    assert exc_info.value.details["status"] == 401
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_transport_failure_is_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(DependencyUnavailable):
        await client_with(handler).current(lat=1, lon=2)


@pytest.mark.asyncio
async def test_invalid_json_is_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(DependencyUnavailable):
        await client_with(handler).current(lat=1, lon=2)
