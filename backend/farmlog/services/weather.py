"""Weather feed for the farm location (Open-Meteo forecast API).

One request returns hourly and daily series; the current conditions are
read from the hourly slot matching the current local hour, and each daily
entry becomes a forecast row.  Every row carries a short piece of farming
advice.  Results are cached in Redis for ``settings.weather_cache_ttl``.
"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx

from farmlog.config import settings
from farmlog.middleware.exceptions import WeatherUnavailableError
from farmlog.schemas.weather import CurrentWeather, DailyForecast, WeatherReport
from farmlog.services.statistics import round_half_up
from farmlog.utils.cache import cached

logger = logging.getLogger(__name__)

HOURLY_FIELDS = "temperature_2m,relative_humidity_2m,precipitation,weather_code,wind_speed_10m"
DAILY_FIELDS = "weather_code,temperature_2m_max,temperature_2m_min,precipitation_sum"

# WMO weather interpretation codes → (description, icon)
WEATHER_CODES: dict[int, tuple[str, str]] = {
    0: ("Clear sky", "clear"),
    1: ("Mainly clear", "partly-cloudy"),
    2: ("Partly cloudy", "partly-cloudy"),
    3: ("Overcast", "cloudy"),
    45: ("Fog", "fog"),
    48: ("Rime fog", "fog"),
    51: ("Light rain", "rain"),
    53: ("Rain", "rain"),
    55: ("Heavy rain", "rain"),
    61: ("Light rain", "rain"),
    63: ("Rain", "rain"),
    65: ("Heavy rain", "rain"),
    71: ("Light snow", "snow"),
    73: ("Snow", "snow"),
    75: ("Heavy snow", "snow"),
    77: ("Snow grains", "snow"),
    80: ("Light rain showers", "rain"),
    81: ("Rain showers", "rain"),
    82: ("Heavy rain showers", "rain"),
    85: ("Light snow showers", "snow"),
    86: ("Heavy snow showers", "snow"),
    95: ("Thunderstorm with rain", "thunderstorm"),
    96: ("Thunderstorm with snow", "thunderstorm"),
    99: ("Severe thunderstorm with rain", "thunderstorm"),
}
UNKNOWN_WEATHER = ("Unknown", "unknown")


def describe_weather(code: int | None) -> tuple[str, str]:
    if code is None:
        return UNKNOWN_WEATHER
    return WEATHER_CODES.get(int(code), UNKNOWN_WEATHER)


def weather_advice(temperature: float, description: str) -> str:
    """Farming advice for a temperature (°C) and a weather description.

    Precipitation wins over temperature, temperature over clear skies.
    """
    desc = description.lower()
    if "rain" in desc or "snow" in desc:
        return "Rain or snow expected. Keep field work light and protect crops where needed."
    if temperature > 30:
        return "High temperatures. Water crops thoroughly and avoid working in the midday heat."
    if temperature < 5:
        return "Low temperatures. Protect crops from the cold."
    if "clear" in desc:
        return "Clear weather. Water appropriately and provide shade where needed."
    return "Normal farm work is possible."


def _round1(value: float | None) -> float:
    return round_half_up((value or 0) * 10) / 10


def current_hour_index(times: list[str], now: datetime) -> int:
    """Index of the hourly slot for *now* (local time, ``YYYY-MM-DDTHH``).

    Falls back to the first slot with the same hour of day, then to 0.
    """
    stamp = now.strftime("%Y-%m-%dT%H")
    for i, t in enumerate(times):
        if t.startswith(stamp):
            return i
    for i, t in enumerate(times):
        if len(t) >= 13 and t[11:13] == f"{now.hour:02d}":
            return i
    return 0


def parse_forecast(data: dict, now: datetime | None = None) -> WeatherReport:
    """Turn an Open-Meteo response body into a ``WeatherReport``."""
    now = now or datetime.now(ZoneInfo(settings.timezone))
    try:
        hourly = data["hourly"]
        daily = data["daily"]
        idx = current_hour_index(hourly["time"], now)

        temperature = round_half_up(hourly["temperature_2m"][idx])
        description, icon = describe_weather(hourly["weather_code"][idx])
        current = CurrentWeather(
            observed_at=now,
            temperature=temperature,
            humidity=round_half_up(hourly["relative_humidity_2m"][idx]),
            description=description,
            icon=icon,
            precipitation=_round1(hourly["precipitation"][idx]),
            wind_speed=_round1(hourly["wind_speed_10m"][idx]),
            advice=weather_advice(temperature, description),
        )

        forecast = []
        for i, day in enumerate(daily["time"]):
            description, icon = describe_weather(daily["weather_code"][i])
            high = round_half_up(daily["temperature_2m_max"][i])
            forecast.append(DailyForecast(
                date=day,
                temperature_max=high,
                temperature_min=round_half_up(daily["temperature_2m_min"][i]),
                description=description,
                icon=icon,
                precipitation=_round1(daily["precipitation_sum"][i]),
                advice=weather_advice(high, description),
            ))
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise WeatherUnavailableError(f"Unexpected weather response: {e}") from e

    return WeatherReport(
        latitude=data.get("latitude", 0.0),
        longitude=data.get("longitude", 0.0),
        current=current,
        forecast=forecast,
    )


@cached(ttl=settings.weather_cache_ttl, prefix="weather")
async def fetch_weather(
    client: httpx.AsyncClient | None = None,
    *,
    latitude: float | None = None,
    longitude: float | None = None,
) -> WeatherReport:
    """Fetch the current conditions and the daily forecast."""
    latitude = settings.weather_latitude if latitude is None else latitude
    longitude = settings.weather_longitude if longitude is None else longitude
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": HOURLY_FIELDS,
        "daily": DAILY_FIELDS,
        "timezone": settings.timezone,
    }

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=settings.weather_timeout_seconds)
    try:
        response = await client.get(settings.weather_api_url, params=params)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.warning("Weather API returned %s", e.response.status_code)
        raise WeatherUnavailableError(
            f"Failed to fetch weather data (status {e.response.status_code})"
        ) from e
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Weather API request failed: %s", e)
        raise WeatherUnavailableError("Failed to fetch weather data") from e
    finally:
        if owns_client:
            await client.aclose()

    report = parse_forecast(data)
    return WeatherReport(
        latitude=latitude,
        longitude=longitude,
        current=report.current,
        forecast=report.forecast,
    )
