from fastapi import APIRouter, Query

from farmlog.schemas.weather import WeatherReport
from farmlog.services.weather import fetch_weather
from farmlog.utils.cache import invalidate_cache

router = APIRouter()


@router.get("/", response_model=WeatherReport)
async def get_weather(
    latitude: float | None = Query(None, ge=-90, le=90),
    longitude: float | None = Query(None, ge=-180, le=180),
    refresh: bool = Query(False, description="Drop cached forecasts before fetching"),
):
    """Current conditions and daily forecast (cached, see weather_cache_ttl)."""
    if refresh:
        await invalidate_cache("weather:*")
    return await fetch_weather(latitude=latitude, longitude=longitude)
