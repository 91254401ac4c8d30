"""
WeatherProvider implementation using OpenWeatherMap's current weather API.

Free tier: 1000 calls/day. Requires OPENWEATHER_API_KEY.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from cultural_bot.models import FetchResult, WeatherSnapshot
from cultural_bot.providers.base import Provider, ProviderMetadata, ProviderResponseError
from cultural_bot.providers.utils import http_get_json


def parse_weather(data: Dict[str, Any]) -> WeatherSnapshot:
    """Map an OpenWeatherMap `/weather` payload to a WeatherSnapshot."""
    try:
        main = data["main"]
        conditions = data.get("weather") or [{}]
        wind = data.get("wind") or {}
        temperature = int(round(float(main["temp"])))
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderResponseError(f"Unexpected weather payload: {e}", provider_name="weather")

    dt = data.get("dt")
    if dt:
        stamp = datetime.fromtimestamp(int(dt), tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    else:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

    return WeatherSnapshot(
        temperature=temperature,
        condition=conditions[0].get("description", "unknown"),
        humidity=main.get("humidity", 0),
        wind_speed=wind.get("speed", 0.0),
        pressure=main.get("pressure"),
        timestamp_text=stamp,
        source="OpenWeatherMap (LIVE)",
        is_live=True,
    )


class WeatherProvider(Provider):
    """Current conditions by city name."""

    async def get_metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="openweathermap",
            version="2.5",
            description="OpenWeatherMap current weather",
            capabilities=["current_weather"],
            rate_limit=1000,
        )

    async def current_weather(self, city: str) -> FetchResult[WeatherSnapshot]:
        self._require_enabled()
        params = {
            "q": city,
            "appid": self.config.api_key,
            "units": "metric",
        }
        data = await http_get_json(
            f"{self.config.base_url}/weather",
            params=params,
            timeout=self.timeout,
            session=self.session,
            provider_name=self.name,
        )
        if not isinstance(data, dict) or "main" not in data:
            return FetchResult.empty()
        return FetchResult.ok(parse_weather(data))
