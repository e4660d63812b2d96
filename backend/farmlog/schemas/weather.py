from datetime import datetime

from farmlog.schemas.common import CalendarDate, CamelModel


class CurrentWeather(CamelModel):
    observed_at: datetime
    temperature: int
    humidity: int
    description: str
    icon: str
    precipitation: float
    wind_speed: float
    advice: str


class DailyForecast(CamelModel):
    date: CalendarDate
    temperature_max: int
    temperature_min: int
    description: str
    icon: str
    precipitation: float
    advice: str


class WeatherReport(CamelModel):
    latitude: float
    longitude: float
    current: CurrentWeather
    forecast: list[DailyForecast]
