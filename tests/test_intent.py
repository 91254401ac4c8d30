import pytest

from cultural_bot.config import DEFAULT_PRESET_CITIES
from cultural_bot.models import FetchResult, Intent
from cultural_bot.providers.caching import TTLCache
from cultural_bot.src.intent import (
    HostedIntentClassifier,
    KeywordIntentClassifier,
    build_classifier,
    detect_city,
    keyword_intent,
)


class FakeAI:
    def __init__(self, output=None, enabled=True):
        self.output = output
        self.enabled = enabled
        self.calls = []

    async def classify(self, text, labels):
        self.calls.append((text, labels))
        if isinstance(self.output, Exception):
            raise self.output
        return self.output


@pytest.mark.asyncio
async def test_weather_question():
    result = await KeywordIntentClassifier().classify("What's the weather like?")
    assert result.intent == Intent.WEATHER
    assert result.confidence == 0.9
    assert result.source == "keyword"


@pytest.mark.parametrize("message, intent", [
    ("Where should I go to eat sushi?", Intent.FOOD),
    ("Where can I get seafood?", Intent.FOOD),
    ("any streetfood stalls", Intent.FOOD),
    ("Any good restaurants nearby", Intent.FOOD),
    ("Show me museums", Intent.CULTURE),
    ("I love temples", Intent.CULTURE),
    ("Where should I go shopping", Intent.SHOPPING),
    ("Any festivals this week?", Intent.EVENTS),
    ("latest news", Intent.EVENTS),
    ("What should I wear to a wedding", Intent.CLOTHING),
    ("tell me about the kimono", Intent.CLOTHING),
    ("best tourist attractions", Intent.PLACES),
    ("any local tips?", Intent.LOCAL),
    ("Is it rainy today? I want to visit a museum", Intent.WEATHER),
    ("is there a supermarket nearby", Intent.SHOPPING),
    ("streetwear brands", Intent.CLOTHING),
    ("what is the dress code for temples", Intent.CULTURE),
    ("food market", Intent.FOOD),
])
def test_keyword_rules(message, intent):
    assert keyword_intent(message).intent == intent


@pytest.mark.parametrize("message", [
    "hello there",
    "thanks, that's all",
    "what is the address",
    "how do I start",
    "which train goes there",
    "",
    "   ",
    None,
    42,
])
def test_unmatched_or_odd_input_is_general(message):
    result = keyword_intent(message)
    assert result.intent == Intent.GENERAL
    assert result.confidence == 0.7


@pytest.mark.asyncio
async def test_hosted_classifier_maps_labels_and_caches():
    ai = FakeAI(FetchResult.ok(("food and restaurants", 0.83)))
    classifier = HostedIntentClassifier(ai, TTLCache("ai"), ttl=3600)

    result = await classifier.classify("Where do locals go in the evening?")
    assert result.intent == Intent.FOOD
    assert result.confidence == pytest.approx(0.83)
    assert result.source == "huggingface"
    assert "general conversation" in ai.calls[0][1]

    await classifier.classify("where do locals go in the evening?")
    assert len(ai.calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("output", [
    RuntimeError("timeout"),
    FetchResult.unavailable("401"),
    FetchResult.ok(("astrology", 0.99)),
])
async def test_hosted_classifier_falls_back_to_keywords(output):
    classifier = HostedIntentClassifier(FakeAI(output), TTLCache("ai"), ttl=3600)
    result = await classifier.classify("What's the weather like?")
    assert result.intent == Intent.WEATHER
    assert result.source == "keyword"


@pytest.mark.asyncio
async def test_hosted_classifier_skips_empty_input():
    ai = FakeAI(FetchResult.ok(("weather", 0.9)))
    result = await HostedIntentClassifier(ai, TTLCache("ai"), ttl=3600).classify("")
    assert result.intent == Intent.GENERAL
    assert ai.calls == []


def test_build_classifier_picks_strategy():
    assert isinstance(build_classifier(), KeywordIntentClassifier)
    assert isinstance(build_classifier(FakeAI(enabled=False)), KeywordIntentClassifier)
    assert isinstance(build_classifier(FakeAI()), HostedIntentClassifier)


@pytest.mark.parametrize("message, city", [
    ("Tell me about New York", "newyork"),
    ("I'm in PARIS now", "paris"),
    ("delhi food please", "delhi"),
    ("newyork weather", "newyork"),
    ("Is this a fair comparison?", None),
    ("hello", None),
    ("", None),
])
def test_detect_city(message, city):
    assert detect_city(message, DEFAULT_PRESET_CITIES) == city
