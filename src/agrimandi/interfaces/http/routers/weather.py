from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from agrimandi.infrastructure.weather.openweather import OpenWeatherClient
from agrimandi.interfaces.http.deps import get_weather_client

router = APIRouter(tags=["weather"])


@router.get("/external-weather")
async def external_weather(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    client: OpenWeatherClient = Depends(get_weather_client),
) -> dict[str, Any]:
    return await client.current(lat=lat, lon=lon)
