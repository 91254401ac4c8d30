from cultural_bot.providers.base import (
    Provider,
    ProviderMetadata,
    ProviderError,
    ProviderNotAvailableError,
    ProviderHTTPError,
    ProviderTimeoutError,
    ProviderResponseError,
)
from cultural_bot.providers.caching import TTLCache, cache_key, fetch_with_fallback
from cultural_bot.providers.weather_provider import WeatherProvider
from cultural_bot.providers.places_provider import PlacesProvider, normalize_place
from cultural_bot.providers.ai_provider import AIProvider
from cultural_bot.providers.news_provider import NewsProvider

__all__ = [
    "Provider",
    "ProviderMetadata",
    "ProviderError",
    "ProviderNotAvailableError",
    "ProviderHTTPError",
    "ProviderTimeoutError",
    "ProviderResponseError",
    "TTLCache",
    "cache_key",
    "fetch_with_fallback",
    "WeatherProvider",
    "PlacesProvider",
    "normalize_place",
    "AIProvider",
    "NewsProvider",
]
