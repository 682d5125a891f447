from __future__ import annotations

import logging
from typing import Any

import httpx

from agrimandi.application.errors import DependencyUnavailable

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    """Server-side proxy for OpenWeather so the API key never reaches browsers."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.openweathermap.org/data/2.5/weather",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def current(self, *, lat: float, lon: float) -> dict[str, Any]:
        if not self.api_key:
            raise DependencyUnavailable("Weather provider is not configured")
        params = {"lat": lat, "lon": lon, "units": "metric", "appid": self.api_key}
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("OpenWeather request failed: %s", exc)
            raise DependencyUnavailable("Weather provider unreachable") from exc
        if response.status_code >= 400:
            logger.warning("OpenWeather returned %s", response.status_code)
            raise DependencyUnavailable(
                "Weather provider request failed",
                details={"status": response.status_code, "body": response.text[:500]},
            )
        try:
            return response.json()
        except ValueError as exc:
            raise DependencyUnavailable("Weather provider returned invalid JSON") from exc
