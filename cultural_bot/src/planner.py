"""
Query planning for places searches.

Given (city, category) a planner produces up to five search strings, most
precise first. Two interchangeable strategies share the async `plan` contract:

- KeywordQueryPlanner: curated per-city strings, else generic templates
- HostedModelQueryPlanner: asks a hosted text model for specific names and
  falls back to the generic templates when that yields nothing
"""

import logging
import re
from typing import Callable, Iterable, List, Optional

from cultural_bot.data.fallback_data import FallbackData
from cultural_bot.models import FetchResult, canonical_category
from cultural_bot.providers.ai_provider import AIProvider
from cultural_bot.providers.caching import TTLCache, cache_key, fetch_with_fallback

logger = logging.getLogger(__name__)

MAX_QUERIES = 5
MAX_GENERATED_QUERIES = 4

GENERIC_TEMPLATES = {
    'culture': ["museums {city}", "temples {city}", "heritage sites {city}", "art galleries {city}"],
    'food': ["restaurants {city}", "food markets {city}", "local cuisine {city}", "best places to eat {city}"],
    'shopping': ["shopping malls {city}", "markets {city}", "shopping streets {city}", "shopping districts {city}"],
    'places': ["tourist attractions {city}", "landmarks {city}", "famous places {city}", "sightseeing {city}"],
}

CATEGORY_PROMPTS = {
    'culture': "List 5 specific cultural sites in {city}: museums, temples, galleries, historical monuments, cultural centers. Only names:",
    'food': "List 5 specific food places in {city}: famous restaurants, food markets, dining areas, local eateries, culinary districts. Only names:",
    'places': "List 5 specific tourist attractions in {city}: landmarks, towers, parks, famous buildings, must-see places. Only names:",
    'shopping': "List 5 specific shopping locations in {city}: shopping centers, markets, commercial streets, malls, shopping districts. Only names:",
}

_ENUMERATION = re.compile(r'^\s*(?:\d+\s*[.)]?\s*)?[-•*]?\s*')
_QUOTES = re.compile(r'[\'"“”‘’]')


def generic_queries(city: str, category: str) -> List[str]:
    templates = GENERIC_TEMPLATES.get(canonical_category(category))
    if templates is None:
        return [f"{category} in {city}", f"top {category} {city}"]
    return [t.format(city=city) for t in templates]


def finalize_queries(queries: Iterable[str], city: str, category: str, max_queries: int = MAX_QUERIES) -> List[str]:
    """Append the two catch-all queries, drop repeats, cap the list."""
    combined = list(queries) + [f"{category} in {city}", f"top {category} {city}"]
    seen = set()
    out = []
    for query in combined:
        query = " ".join(query.split())
        key = query.lower()
        if not query or key in seen:
            continue
        seen.add(key)
        out.append(query)
    return out[:max_queries]


def parse_generated_queries(text: str, city: str, limit: int = MAX_GENERATED_QUERIES) -> List[str]:
    """Split model output into place names and suffix each with the city."""
    queries = []
    for line in re.split(r'[,\n]', text or ''):
        cleaned = _QUOTES.sub('', _ENUMERATION.sub('', line.strip())).strip()
        if len(cleaned) <= 2 or 'list' in cleaned.lower():
            continue
        queries.append(f"{cleaned} {city}")
    return queries[:limit]


def build_prompt(city: str, category: str) -> str:
    template = CATEGORY_PROMPTS.get(canonical_category(category), CATEGORY_PROMPTS['places'])
    return template.format(city=city)


class KeywordQueryPlanner:
    """Curated strings first, generic templates when a city has none."""

    source = "curated"

    def __init__(self, fallback_data: FallbackData, max_queries: int = MAX_QUERIES):
        self.fallback_data = fallback_data
        self.max_queries = max_queries

    def queries_for(self, city: str, category: str) -> List[str]:
        curated = self.fallback_data.curated_queries(city, category)[:self.max_queries]
        base = curated if curated else generic_queries(city, category)
        return finalize_queries(base, city, category, self.max_queries)

    async def plan(self, city: str, category: str) -> List[str]:
        return self.queries_for(city, category)


class HostedModelQueryPlanner:
    """Ask a hosted generation model for specific names to search for."""

    source = "huggingface"

    def __init__(
        self,
        ai_provider: AIProvider,
        cache: TTLCache,
        ttl: float,
        max_queries: int = MAX_QUERIES,
        on_success: Optional[Callable[[], None]] = None,
    ):
        self.ai_provider = ai_provider
        self.cache = cache
        self.ttl = ttl
        self.max_queries = max_queries
        self.on_success = on_success

    async def plan(self, city: str, category: str) -> List[str]:
        async def live() -> FetchResult[List[str]]:
            result = await self.ai_provider.generate(build_prompt(city, category))
            if not result.is_ok:
                return result
            parsed = parse_generated_queries(result.value, city)
            if not parsed:
                logger.info(f"AI output for {category} in {city} had no usable names")
                return FetchResult.empty()
            return FetchResult.ok(finalize_queries(parsed, city, category, self.max_queries))

        def fallback() -> List[str]:
            return finalize_queries(generic_queries(city, category), city, category, self.max_queries)

        queries, _ = await fetch_with_fallback(
            self.cache,
            cache_key("ai_queries", city, category),
            self.ttl,
            live,
            fallback,
            enabled=self.ai_provider.enabled,
            on_success=self.on_success,
        )
        return queries


def build_planner(
    fallback_data: FallbackData,
    ai_provider: Optional[AIProvider] = None,
    cache: Optional[TTLCache] = None,
    ttl: float = 3600,
    max_queries: int = MAX_QUERIES,
    on_success: Optional[Callable[[], None]] = None,
):
    """Pick the planner strategy once, from whether the AI provider is usable."""
    if ai_provider is not None and ai_provider.enabled:
        logger.info("Using hosted model query planner")
        return HostedModelQueryPlanner(ai_provider, cache or TTLCache("ai"), ttl, max_queries, on_success)
    return KeywordQueryPlanner(fallback_data, max_queries)
