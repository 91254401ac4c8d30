import pytest

from cultural_bot.models import PlaceResult
from cultural_bot.src.ranking import (
    ResultRanker,
    dedupe_key,
    dedupe_places,
    filter_by_category,
    relevance_score,
)


def place(name, lat=35.0, lon=139.0, type="attraction", category="general", importance=0.0, address=""):
    return PlaceResult(name=name, address=address or name, latitude=lat, longitude=lon,
                       type=type, category=category, importance=importance, source="test")


def nominatim(name, lat, lon, type, cls, importance):
    return {
        "name": name,
        "display_name": f"{name}, Tokyo, Japan",
        "lat": str(lat),
        "lon": str(lon),
        "type": type,
        "class": cls,
        "importance": importance,
    }


def test_red_fort_near_duplicates_collapse():
    hits = [place("Red Fort", 28.6562, 77.2410), place("red fort", 28.6561, 77.2411)]
    assert dedupe_key(hits[0]) == dedupe_key(hits[1])
    unique = dedupe_places(hits)
    assert len(unique) == 1
    assert unique[0].name == "Red Fort"


def test_dedupe_keeps_distinct_coordinates():
    hits = [place("Market", 35.0, 139.0), place("Market", 35.01, 139.0)]
    assert len(dedupe_places(hits)) == 2


def test_dedupe_is_idempotent():
    hits = [place("A"), place("a"), place("B", 36.0), place("C", 37.0), place("b", 36.0)]
    once = dedupe_places(hits)
    assert dedupe_places(once) == once
    assert [p.name for p in once] == ["A", "B", "C"]


def test_filter_by_category_keywords():
    hits = [
        place("Tokyo National Museum", type="museum"),
        place("Tokyo Station", type="station", category="railway"),
        place("Somewhere", address="1 Temple Road"),
    ]
    kept = filter_by_category(hits, "culture")
    assert [p.name for p in kept] == ["Tokyo National Museum", "Somewhere"]


def test_filter_unknown_category_uses_its_name():
    hits = [place("Nightlife Alley"), place("Quiet Park")]
    assert [p.name for p in filter_by_category(hits, "nightlife")] == ["Nightlife Alley"]


def test_relevance_score():
    museum = place("National Museum", type="museum", category="culture")
    # +2 for "museum", +3 for the exact category
    assert relevance_score(museum, "culture") == 5

    gallery = place("City Gallery", type="gallery", category="tourism")
    assert relevance_score(gallery, "culture") == 2

    both = place("Dining Hall", type="food", category="food")
    # +2 dining, +3 category, +3 type
    assert relevance_score(both, "food") == 8


def test_relevance_ranking_sorts_and_breaks_ties_by_importance_then_order():
    hits = [
        place("Old Temple", 1.0, type="temple", category="culture", importance=0.2),
        place("Big Museum", 2.0, type="museum", category="tourism", importance=0.9),
        place("Small Museum", 3.0, type="museum", category="tourism", importance=0.9),
        place("Art Space", 4.0, type="art", category="tourism", importance=0.1),
    ]
    ranked = ResultRanker().rank(hits, "culture")
    assert [p.name for p in ranked] == ["Old Temple", "Big Museum", "Small Museum", "Art Space"]
    assert ranked[0].relevance_score == 5
    assert ranked[-1].relevance_score == 0


def test_ranking_normalizes_raw_records_and_limits():
    records = [nominatim(f"Museum {i}", 35.0 + i, 139.0, "museum", "tourism", 0.5) for i in range(8)]
    records.append({"display_name": "No coordinates museum"})
    ranked = ResultRanker().rank(records, "culture")
    assert len(ranked) == 6
    assert all(p.latitude is not None for p in ranked)


def test_non_finite_coordinates_do_not_sink_the_batch():
    records = [
        nominatim("Tokyo National Museum", 35.7188, 139.7765, "museum", "tourism", 0.7),
        {"display_name": "Broken museum, Tokyo", "lat": "nan", "lon": "139.7", "type": "museum"},
        {"display_name": "Far museum, Tokyo", "lat": "35.7", "lon": "-inf", "type": "museum"},
    ]
    ranked = ResultRanker().rank(records, "culture")
    assert [p.name for p in ranked] == ["Tokyo National Museum"]


def test_importance_mode():
    records = [
        nominatim("Station", 35.1, 139.1, "station", "railway", 0.9),
        nominatim("Temple", 35.2, 139.2, "temple", "amenity", 0.3),
        nominatim("Museum", 35.3, 139.3, "museum", "tourism", 0.6),
    ] + [nominatim(f"Park {i}", 36.0 + i, 139.0, "park", "leisure", 0.1) for i in range(4)]
    ranked = ResultRanker(mode="importance").rank(records, "culture")
    assert len(ranked) == 5
    assert [p.name for p in ranked[:3]] == ["Station", "Museum", "Temple"]


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        ResultRanker(mode="random")
