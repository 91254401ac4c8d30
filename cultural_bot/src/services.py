"""
Per-capability pipelines.

Each service pairs one provider with its TTLCache, the fallback tables and the
session's ApiCallCounter, and exposes one coroutine that runs
`fetch_with_fallback`. Callers always get `(value, is_live)` and never see a
provider error.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from cultural_bot.data.fallback_data import FallbackData
from cultural_bot.models import FetchResult, NewsArticle, PlaceResult, WeatherSnapshot, canonical_category
from cultural_bot.providers.caching import TTLCache, cache_key, fetch_with_fallback
from cultural_bot.providers.news_provider import NewsProvider
from cultural_bot.providers.places_provider import PlacesProvider
from cultural_bot.providers.weather_provider import WeatherProvider
from cultural_bot.src.metrics import ApiCallCounter
from cultural_bot.src.ranking import ResultRanker

logger = logging.getLogger(__name__)


class _Service:
    """Shared wiring: provider, cache, TTL, fallback tables, call counter."""

    counter_name = ""

    def __init__(self, provider, fallback_data: FallbackData, ttl: float,
                 cache: Optional[TTLCache] = None, counter: Optional[ApiCallCounter] = None):
        self.provider = provider
        self.fallback_data = fallback_data
        self.ttl = ttl
        self.cache = cache if cache is not None else TTLCache(self.counter_name)
        self.counter = counter if counter is not None else ApiCallCounter()

    @property
    def enabled(self) -> bool:
        return self.provider.enabled

    def _on_success(self) -> None:
        self.counter.increment(self.counter_name)

    async def _timed(self, coro):
        start = time.perf_counter()
        try:
            return await coro
        finally:
            self.counter.observe_latency(self.counter_name, (time.perf_counter() - start) * 1000)


class WeatherService(_Service):
    counter_name = "weather"

    def __init__(self, provider: WeatherProvider, fallback_data: FallbackData, ttl: float = 600, **kwargs):
        super().__init__(provider, fallback_data, ttl, **kwargs)

    async def current(self, city: str) -> Tuple[WeatherSnapshot, bool]:
        return await fetch_with_fallback(
            self.cache,
            cache_key("weather", city),
            self.ttl,
            lambda: self._timed(self.provider.current_weather(city)),
            lambda: self.fallback_data.weather(city),
            enabled=self.enabled,
            on_success=self._on_success,
        )


class NewsService(_Service):
    counter_name = "news"

    def __init__(self, provider: NewsProvider, fallback_data: FallbackData, ttl: float = 3600, **kwargs):
        super().__init__(provider, fallback_data, ttl, **kwargs)

    async def city_news(self, city: str) -> Tuple[List[NewsArticle], bool]:
        return await fetch_with_fallback(
            self.cache,
            cache_key("news", city),
            self.ttl,
            lambda: self._timed(self.provider.city_news(city)),
            lambda: self.fallback_data.news(city),
            enabled=self.enabled,
            on_success=self._on_success,
        )


class PlacesService(_Service):
    """Planned multi-query place search with ranking.

    The live step runs every planned query in order, `query_delay` seconds
    apart, pools the raw hits and ranks them. A query that fails contributes
    nothing; only an empty ranked list sends the request to fallback data.
    """

    counter_name = "places"

    def __init__(
        self,
        provider: PlacesProvider,
        fallback_data: FallbackData,
        planner,
        ranker: Optional[ResultRanker] = None,
        ttl: float = 1800,
        query_delay: float = 0.1,
        results_per_query: int = 5,
        **kwargs,
    ):
        super().__init__(provider, fallback_data, ttl, **kwargs)
        self.planner = planner
        self.ranker = ranker or ResultRanker()
        self.query_delay = query_delay
        self.results_per_query = results_per_query

    async def _run_queries(self, queries: List[str]) -> List[Dict[str, Any]]:
        hits: List[Dict[str, Any]] = []
        for i, query in enumerate(queries):
            if i > 0 and self.query_delay > 0:
                await asyncio.sleep(self.query_delay)
            try:
                result = await self._timed(self.provider.search(query, limit=self.results_per_query))
            except Exception as e:
                logger.warning(f"Place query {query!r} failed: {e}")
                continue
            if result.is_ok:
                hits.extend(result.value)
        return hits

    async def search(self, city: str, category: str) -> Tuple[List[PlaceResult], bool]:
        category = canonical_category(category)
        # Known cities are searched under their proper name ("New York", not "newyork")
        search_city = self.fallback_data.city_name(city) if self.fallback_data.has_city(city) else city

        async def live() -> FetchResult[List[PlaceResult]]:
            queries = await self.planner.plan(search_city, category)
            logger.info(f"Searching {category} in {search_city} with {len(queries)} queries")
            hits = await self._run_queries(queries)
            ranked = self.ranker.rank(hits, category)
            if not ranked:
                return FetchResult.empty()
            return FetchResult.ok(ranked)

        return await fetch_with_fallback(
            self.cache,
            cache_key("places", city, category),
            self.ttl,
            live,
            lambda: self.fallback_data.places(city, category),
            enabled=self.enabled,
            on_success=self._on_success,
        )
