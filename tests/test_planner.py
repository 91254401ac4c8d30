import pytest

from cultural_bot.data.fallback_data import FallbackData
from cultural_bot.models import FetchResult
from cultural_bot.providers.caching import TTLCache
from cultural_bot.src.planner import (
    HostedModelQueryPlanner,
    KeywordQueryPlanner,
    build_planner,
    finalize_queries,
    generic_queries,
    parse_generated_queries,
)


class FakeAI:
    """Minimal AIProvider stand-in: `enabled` plus a scripted generate()."""

    def __init__(self, output=None, enabled=True):
        self.output = output
        self.enabled = enabled
        self.prompts = []

    async def generate(self, prompt, max_new_tokens=150, temperature=0.2):
        self.prompts.append(prompt)
        if isinstance(self.output, Exception):
            raise self.output
        return self.output


@pytest.fixture
def fallback_data():
    return FallbackData()


@pytest.mark.asyncio
async def test_unknown_city_gets_generic_food_queries(fallback_data):
    planner = KeywordQueryPlanner(fallback_data)
    assert await planner.plan("veniceXYZ", "food") == [
        "restaurants veniceXYZ",
        "food markets veniceXYZ",
        "local cuisine veniceXYZ",
        "best places to eat veniceXYZ",
        "food in veniceXYZ",
    ]


def test_curated_queries_come_first(fallback_data):
    planner = KeywordQueryPlanner(fallback_data)
    assert planner.queries_for("Tokyo", "culture") == [
        "Senso-ji Temple Tokyo",
        "Meiji Shrine Tokyo",
        "Tokyo National Museum",
        "Mori Art Museum Tokyo",
        "culture in Tokyo",
    ]


def test_short_curated_list_is_padded_with_catch_alls(fallback_data):
    queries = KeywordQueryPlanner(fallback_data).queries_for("Tokyo", "food")
    assert queries[:3] == ["Tsukiji Outer Market Tokyo", "Omoide Yokocho Shinjuku", "Ramen Street Tokyo Station"]
    assert queries[3:] == ["food in Tokyo", "top food Tokyo"]


def test_category_without_templates():
    assert generic_queries("Lisbon", "nightlife") == ["nightlife in Lisbon", "top nightlife Lisbon"]
    assert finalize_queries(generic_queries("Lisbon", "nightlife"), "Lisbon", "nightlife") == [
        "nightlife in Lisbon", "top nightlife Lisbon",
    ]


def test_tourist_alias_uses_places_templates():
    assert generic_queries("Lisbon", "tourist")[0] == "tourist attractions Lisbon"


def test_finalize_dedupes_case_insensitively_and_truncates():
    queries = finalize_queries(["A x", "a X", "B x", "C x", "D x", "E x"], "x", "food")
    assert queries == ["A x", "B x", "C x", "D x", "E x"]


def test_parse_generated_queries():
    text = '1. Senso-ji Temple\n2. Meiji Shrine, "Ueno Park"\nHere is a list:\n- ab'
    assert parse_generated_queries(text, "Tokyo") == [
        "Senso-ji Temple Tokyo",
        "Meiji Shrine Tokyo",
        "Ueno Park Tokyo",
    ]


def test_parse_generated_queries_keeps_four():
    text = "One Place, Two Place, Red Place, Blue Place, Green Place"
    assert len(parse_generated_queries(text, "Oslo")) == 4
    assert parse_generated_queries("", "Oslo") == []


@pytest.mark.asyncio
async def test_hosted_planner_uses_model_output_and_caches_it():
    ai = FakeAI(FetchResult.ok("Senso-ji Temple, Meiji Shrine"))
    planner = HostedModelQueryPlanner(ai, TTLCache("ai"), ttl=3600)

    queries = await planner.plan("Tokyo", "culture")
    assert queries == ["Senso-ji Temple Tokyo", "Meiji Shrine Tokyo", "culture in Tokyo", "top culture Tokyo"]
    assert "cultural sites in Tokyo" in ai.prompts[0]

    assert await planner.plan("Tokyo", "culture") == queries
    assert len(ai.prompts) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("output", [
    RuntimeError("model loading"),
    FetchResult.unavailable("503"),
    FetchResult.ok("list:\n1."),
])
async def test_hosted_planner_falls_back_to_templates(output):
    planner = HostedModelQueryPlanner(FakeAI(output), TTLCache("ai"), ttl=3600)
    assert await planner.plan("veniceXYZ", "food") == [
        "restaurants veniceXYZ",
        "food markets veniceXYZ",
        "local cuisine veniceXYZ",
        "best places to eat veniceXYZ",
        "food in veniceXYZ",
    ]


def test_build_planner_picks_strategy(fallback_data):
    assert isinstance(build_planner(fallback_data), KeywordQueryPlanner)
    assert isinstance(build_planner(fallback_data, FakeAI(enabled=False)), KeywordQueryPlanner)
    assert isinstance(build_planner(fallback_data, FakeAI()), HostedModelQueryPlanner)
