"""
Place search using OpenStreetMap's Nominatim free-text search.

No key is needed, but Nominatim asks for an identifying User-Agent and at most
one request per second, which is why callers space their queries out.
"""

import math
from typing import Any, Dict, List, Optional

from cultural_bot.models import FetchResult, PlaceResult
from cultural_bot.providers.base import Provider, ProviderMetadata
from cultural_bot.providers.utils import http_get_json

PLACES_SOURCE = "OpenStreetMap (AI-Enhanced)"


def extract_place_name(record: Dict[str, Any]) -> str:
    """Pick a display name: `name`, else the first address segment, else the type."""
    name = (record.get("name") or "").strip()
    if name:
        return name
    display_name = record.get("display_name") or ""
    first_part = display_name.split(",")[0].strip()
    if first_part and len(first_part) < 50:
        return first_part
    return record.get("type") or "Place"


def normalize_place(record: Dict[str, Any], source: str = PLACES_SOURCE) -> Optional[PlaceResult]:
    """Turn a raw Nominatim record into a PlaceResult.

    Records without a display name or finite coordinates are dropped (None).
    """
    if not isinstance(record, dict):
        return None
    display_name = record.get("display_name")
    lat = record.get("lat")
    lon = record.get("lon")
    if not display_name or lat in (None, "") or lon in (None, ""):
        return None
    try:
        latitude = float(lat)
        longitude = float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return None
    try:
        importance = float(record.get("importance") or 0)
    except (TypeError, ValueError):
        importance = 0.0

    return PlaceResult(
        name=extract_place_name(record),
        address=display_name,
        latitude=latitude,
        longitude=longitude,
        type=record.get("type") or "attraction",
        category=record.get("class") or record.get("category") or "general",
        importance=importance,
        source=source,
    )


class PlacesProvider(Provider):
    """Geocoded free-text place search."""

    def __init__(self, config, timeout=10.0, session=None, user_agent="CulturalBot/1.0 (travel chatbot)"):
        super().__init__(config, timeout=timeout, session=session)
        self.user_agent = user_agent

    async def get_metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="nominatim",
            version="1.0.0",
            description="OpenStreetMap Nominatim place search",
            capabilities=["search"],
            rate_limit=86400,  # 1 request per second
        )

    async def search(self, query: str, limit: int = 5) -> FetchResult[List[Dict[str, Any]]]:
        """Run one search query and return the raw records."""
        self._require_enabled()
        params = {
            "q": query,
            "format": "json",
            "limit": limit,
            "addressdetails": 1,
            "extratags": 1,
        }
        headers = {
            "User-Agent": self.user_agent,
            "Accept-Language": "en",
        }
        data = await http_get_json(
            f"{self.config.base_url}/search",
            params=params,
            headers=headers,
            timeout=self.timeout,
            session=self.session,
            provider_name=self.name,
        )
        if not isinstance(data, list) or not data:
            return FetchResult.empty()
        return FetchResult.ok(data)
