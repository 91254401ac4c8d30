"""
Fallback data loader - static, hand-curated content used whenever a live
provider is disabled, fails, or returns nothing usable.

Every accessor returns well-formed, non-empty content for any city: cities
without their own tables get the `default` section with the city name filled in.
"""

import copy
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from cultural_bot.models import NewsArticle, PlaceResult, Suggestion, WeatherSnapshot, canonical_category

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).resolve().parent / "fallback_data.json"

PLACES_SOURCE = "Demo Data (curated fallback)"
WEATHER_SOURCE = "Demo Data (Add API key for live weather)"
NEWS_SOURCE = "Demo Data (Add API key for live news)"


def normalize_city(city: str) -> str:
    """Lowercase identifier used as the table key ('New York' -> 'newyork')."""
    return "".join((city or "").lower().split())


def display_city(city: str) -> str:
    city = (city or "").strip()
    return city[:1].upper() + city[1:] if city else "Your City"


class FallbackData:
    """Read-only access to the bundled demo tables."""

    def __init__(self, data_file: Optional[Path] = None, data: Optional[Dict[str, Any]] = None):
        self._data_file = Path(data_file) if data_file else DEFAULT_DATA_FILE
        if data is not None:
            self._data = data
        else:
            self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self._data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            logger.info(f"Loaded fallback data: {data.get('source', 'unknown')} v{data.get('version', 'unknown')}")
            return data
        except FileNotFoundError:
            logger.error(f"Fallback data file not found: {self._data_file}")
        except json.JSONDecodeError as e:
            logger.error(f"Fallback data file is not valid JSON: {e}")
        return {"cities": {}, "default": {}}

    @property
    def cities(self) -> List[str]:
        return sorted(self._data.get("cities", {}).keys())

    def has_city(self, city: str) -> bool:
        return normalize_city(city) in self._data.get("cities", {})

    def city_name(self, city: str) -> str:
        table = self._data.get("cities", {}).get(normalize_city(city)) or {}
        return table.get("display_name") or display_city(city)

    def _section(self, city: str, section: str) -> Any:
        """Return a city's section, else the default section with {City} filled in."""
        table = self._data.get("cities", {}).get(normalize_city(city)) or {}
        value = table.get(section)
        if value:
            return copy.deepcopy(value)
        default = self._data.get("default", {}).get(section)
        if not default:
            return None
        logger.debug(f"Using default {section} fallback for {city}")
        return self._fill_city(copy.deepcopy(default), display_city(city))

    def _fill_city(self, value: Any, city: str) -> Any:
        if isinstance(value, str):
            return value.replace("{City}", city)
        if isinstance(value, list):
            return [self._fill_city(v, city) for v in value]
        if isinstance(value, dict):
            return {k: self._fill_city(v, city) for k, v in value.items()}
        return value

    def weather(self, city: str) -> WeatherSnapshot:
        raw = self._section(city, "weather") or {}
        return WeatherSnapshot(
            temperature=int(raw.get("temperature", 20)),
            condition=raw.get("condition", "pleasant"),
            humidity=int(raw.get("humidity", 60)),
            wind_speed=float(raw.get("wind_speed", 2.5)),
            pressure=raw.get("pressure"),
            timestamp_text=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
            source=WEATHER_SOURCE,
            is_live=False,
        )

    def places(self, city: str, category: str) -> List[PlaceResult]:
        category = canonical_category(category)
        by_category = self._section(city, "places") or {}
        entries = by_category.get(category)
        if not entries:
            # Categories without a table still get something to show
            entries = by_category.get("places") or []
        if not entries:
            name = display_city(city)
            entries = [{"name": f"{name} city centre", "address": name, "type": "attraction", "category": category}]
        return [
            PlaceResult(
                name=e["name"],
                address=e.get("address") or display_city(city),
                latitude=e.get("lat"),
                longitude=e.get("lon"),
                type=e.get("type") or "attraction",
                category=e.get("category") or category,
                importance=float(e.get("importance") or 0),
                source=PLACES_SOURCE,
            )
            for e in entries
        ]

    def curated_queries(self, city: str, category: str) -> List[str]:
        """Hand-picked search strings; empty when the city/category has none."""
        category = canonical_category(category)
        table = self._data.get("cities", {}).get(normalize_city(city)) or {}
        return list((table.get("curated_queries") or {}).get(category) or [])

    def news(self, city: str) -> List[NewsArticle]:
        has_own = self.has_city(city)
        entries = self._section(city, "news") or [{"title": f"{display_city(city)} Events Today", "description": ""}]
        return [
            NewsArticle(
                title=e["title"],
                description=e.get("description") or "No description available",
                url=e.get("url"),
                published_at=e.get("published_at") or "",
                source="Demo News" if has_own else NEWS_SOURCE,
            )
            for e in entries
        ]

    def _suggestions(self, city: str, section: str) -> List[Suggestion]:
        entries = self._section(city, section) or []
        return [Suggestion(title=e["title"], description=e.get("description", ""), source="Demo Data") for e in entries]

    def clothing(self, city: str) -> List[Suggestion]:
        return self._suggestions(city, "clothing")

    def local_tips(self, city: str) -> List[Suggestion]:
        return self._suggestions(city, "local")

    def food_tips(self, city: str) -> List[Suggestion]:
        return self._suggestions(city, "food_tips")
