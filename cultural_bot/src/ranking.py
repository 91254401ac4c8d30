"""
Result ranking for places searches.

A free-text geocoder answers "restaurants Tokyo" with a mix of restaurants,
stations and districts. The ranker turns the union of several query batches
into a short list: normalize, dedupe by rounded coordinates, keep
category-relevant hits, score, sort and truncate.
"""

import dataclasses
import logging
import math
from typing import Any, Iterable, List, Optional, Set

from cultural_bot.models import CATEGORY_ALIASES, PlaceResult, canonical_category
from cultural_bot.providers.places_provider import normalize_place

logger = logging.getLogger(__name__)

FILTER_KEYWORDS = {
    'culture': ['museum', 'temple', 'shrine', 'gallery', 'cultural', 'heritage', 'historical',
                'monument', 'palace', 'church', 'cathedral', 'mosque', 'art'],
    'food': ['restaurant', 'cafe', 'food', 'dining', 'market', 'cuisine', 'eatery', 'kitchen',
             'bistro', 'deli', 'bakery'],
    'places': ['attraction', 'landmark', 'tower', 'park', 'square', 'bridge', 'building', 'site',
               'place', 'center'],
    'shopping': ['shop', 'shopping', 'mall', 'market', 'store', 'center', 'plaza', 'bazaar',
                 'outlet', 'commercial'],
}

HIGH_VALUE_KEYWORDS = {
    'culture': ['museum', 'temple', 'gallery', 'heritage', 'palace'],
    'food': ['restaurant', 'market', 'cuisine', 'dining'],
    'places': ['landmark', 'attraction', 'tower', 'famous'],
    'shopping': ['mall', 'shopping', 'market', 'center'],
}

RANKING_MODES = ('relevance', 'importance')


def _category_names(category: str) -> Set[str]:
    """The requested category plus every alias that maps onto it."""
    canonical = canonical_category(category)
    names = {canonical}
    names.update(alias for alias, target in CATEGORY_ALIASES.items() if target == canonical)
    return names


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def dedupe_key(place: PlaceResult) -> str:
    """`lower(name)_round(lat*1000)_round(lon*1000)`; ~100m coordinate buckets."""
    lat = _round_half_up(place.latitude * 1000) if place.latitude is not None else 'na'
    lon = _round_half_up(place.longitude * 1000) if place.longitude is not None else 'na'
    return f"{place.name.lower()}_{lat}_{lon}"


def dedupe_places(places: Iterable[PlaceResult]) -> List[PlaceResult]:
    """Keep the first place for each dedupe key, preserving order."""
    seen = set()
    unique = []
    for place in places:
        key = dedupe_key(place)
        if key in seen:
            continue
        seen.add(key)
        unique.append(place)
    return unique


def filter_by_category(places: Iterable[PlaceResult], category: str) -> List[PlaceResult]:
    """Keep places whose name/type/category/address mention a category keyword."""
    canonical = canonical_category(category)
    keywords = FILTER_KEYWORDS.get(canonical, [canonical])
    kept = []
    for place in places:
        text = f"{place.name} {place.type} {place.category} {place.address}".lower()
        if any(keyword in text for keyword in keywords):
            kept.append(place)
    return kept


def relevance_score(place: PlaceResult, category: str) -> int:
    """+2 per high-value keyword in name/type/category, +3 each for an exact
    category or type match."""
    canonical = canonical_category(category)
    text = f"{place.name} {place.type} {place.category}".lower()
    score = 0
    for keyword in HIGH_VALUE_KEYWORDS.get(canonical, []):
        if keyword in text:
            score += 2

    names = _category_names(category)
    if (place.category or '').lower() in names:
        score += 3
    if (place.type or '').lower() in names:
        score += 3
    return score


class ResultRanker:
    """Turn raw geocoder records (or PlaceResults) into a ranked short list.

    Modes:
        relevance   normalize, dedupe, category filter, score, sort by
                    (score, importance), keep `limit` (default 6)
        importance  normalize, dedupe, sort by provider importance, keep
                    `limit` (default 5)
    """

    def __init__(self, mode: str = 'relevance', limit: Optional[int] = None):
        if mode not in RANKING_MODES:
            raise ValueError(f"Unknown ranking mode: {mode}")
        self.mode = mode
        self.limit = limit if limit is not None else (6 if mode == 'relevance' else 5)

    def normalize(self, records: Iterable[Any]) -> List[PlaceResult]:
        places = []
        for record in records:
            if isinstance(record, PlaceResult):
                place = record
            else:
                place = normalize_place(record)
            if place is None or not place.name or place.latitude is None or place.longitude is None:
                continue
            places.append(place)
        return places

    def rank(self, records: Iterable[Any], category: str) -> List[PlaceResult]:
        places = dedupe_places(self.normalize(records))

        if self.mode == 'importance':
            ordered = sorted(places, key=lambda p: -(p.importance or 0))
            return ordered[:self.limit]

        relevant = filter_by_category(places, category)
        scored = [
            dataclasses.replace(p, relevance_score=relevance_score(p, category))
            for p in relevant
        ]
        # sorted() is stable, so equal (score, importance) keeps input order
        ordered = sorted(scored, key=lambda p: (-p.relevance_score, -(p.importance or 0)))
        logger.debug(f"Ranked {len(ordered)} of {len(places)} {category} places")
        return ordered[:self.limit]
