"""
Intent classification for chat messages.

Two strategies share the async `classify(text) -> IntentResult` contract:

- KeywordIntentClassifier: ordered keyword rules, no network
- HostedIntentClassifier: zero-shot labels from the hosted model, with the
  keyword rules as its fallback

`detect_city` is separate: a message naming a preset city switches the
session's city before any intent dispatch happens.
"""

import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from cultural_bot.models import FetchResult, Intent, IntentResult
from cultural_bot.providers.ai_provider import AIProvider
from cultural_bot.providers.caching import TTLCache, cache_key, fetch_with_fallback

logger = logging.getLogger(__name__)

KEYWORD_CONFIDENCE = 0.9
GENERAL_CONFIDENCE = 0.7

# Checked in order; the first rule with a keyword anywhere in the message wins.
# Short stems that sit inside common words ("eat" in "great", "art" in "start",
# "dress" in "address", "rain" in "train") are spelled out longer.
KEYWORD_RULES: List[Tuple[Intent, List[str]]] = [
    (Intent.WEATHER, ['weather', 'temperature', 'climate', 'forecast', 'rainy', 'raining']),
    (Intent.FOOD, ['food', 'restaurant', 'to eat', 'eating', 'eatery', 'cuisine', 'dining', 'dish',
                   'cafe', 'hungry']),
    (Intent.CULTURE, ['culture', 'cultural', 'museum', 'temple', 'shrine', 'heritage', 'arts',
                      'artwork', 'gallery', 'histor', 'monument', 'palace', 'church', 'mosque']),
    (Intent.SHOPPING, ['shop', 'mall', 'market', 'buy', 'store', 'souvenir', 'bazaar']),
    (Intent.EVENTS, ['event', 'news', 'festival', 'happening', 'concert']),
    (Intent.CLOTHING, ['cloth', 'dress code', 'dresses', 'wear', 'costume', 'kimono', 'saree',
                       'attire', 'outfit']),
    (Intent.PLACES, ['place', 'attraction', 'visit', 'tourist', 'sightseeing', 'landmark', 'sights']),
    (Intent.LOCAL, ['local', 'tips', 'recommend', 'advice', 'etiquette', 'customs']),
]

HOSTED_LABELS: Dict[str, Intent] = {
    'weather': Intent.WEATHER,
    'food and restaurants': Intent.FOOD,
    'culture and museums': Intent.CULTURE,
    'events and news': Intent.EVENTS,
    'tourist attractions': Intent.PLACES,
    'shopping': Intent.SHOPPING,
    'traditional clothing': Intent.CLOTHING,
    'local recommendations': Intent.LOCAL,
    'general conversation': Intent.GENERAL,
}


def keyword_intent(text) -> IntentResult:
    """Classify by keyword rules. Total: any input yields an IntentResult."""
    if not isinstance(text, str) or not text.strip():
        return IntentResult(Intent.GENERAL, GENERAL_CONFIDENCE, source="keyword")
    lowered = text.lower()
    for intent, keywords in KEYWORD_RULES:
        if any(keyword in lowered for keyword in keywords):
            return IntentResult(intent, KEYWORD_CONFIDENCE, source="keyword")
    return IntentResult(Intent.GENERAL, GENERAL_CONFIDENCE, source="keyword")


class KeywordIntentClassifier:
    source = "keyword"

    async def classify(self, text) -> IntentResult:
        return keyword_intent(text)


class HostedIntentClassifier:
    """Zero-shot classification over HOSTED_LABELS.

    Results are cached per lowercased message. A disabled provider, a failed
    call or a label outside HOSTED_LABELS falls back to keyword rules.
    """

    source = "huggingface"

    def __init__(
        self,
        ai_provider: AIProvider,
        cache: TTLCache,
        ttl: float,
        on_success: Optional[Callable[[], None]] = None,
    ):
        self.ai_provider = ai_provider
        self.cache = cache
        self.ttl = ttl
        self.on_success = on_success

    async def classify(self, text) -> IntentResult:
        if not isinstance(text, str) or not text.strip():
            return keyword_intent(text)

        async def live() -> FetchResult[IntentResult]:
            result = await self.ai_provider.classify(text, list(HOSTED_LABELS))
            if not result.is_ok:
                return result
            label, score = result.value
            intent = HOSTED_LABELS.get(label)
            if intent is None:
                return FetchResult.unavailable(f"unknown label {label!r}")
            return FetchResult.ok(IntentResult(intent, score, source=self.source))

        intent_result, _ = await fetch_with_fallback(
            self.cache,
            cache_key("intent", text),
            self.ttl,
            live,
            lambda: keyword_intent(text),
            enabled=self.ai_provider.enabled,
            on_success=self.on_success,
        )
        return intent_result


def build_classifier(
    ai_provider: Optional[AIProvider] = None,
    cache: Optional[TTLCache] = None,
    ttl: float = 3600,
    on_success: Optional[Callable[[], None]] = None,
):
    """Pick the classifier strategy once, from whether the AI provider is usable."""
    if ai_provider is not None and ai_provider.enabled:
        logger.info("Using hosted intent classifier")
        return HostedIntentClassifier(ai_provider, cache or TTLCache("ai"), ttl, on_success)
    return KeywordIntentClassifier()


def detect_city(text, cities: Iterable[str]) -> Optional[str]:
    """Return the first city id from `cities` named in `text`, else None.

    City ids are compact ('newyork'); the message may space them out
    ('New York').
    """
    if not isinstance(text, str) or not text:
        return None
    lowered = text.lower()
    for city in cities:
        letters = [re.escape(ch) for ch in city.lower() if not ch.isspace()]
        if not letters:
            continue
        if re.search(r'\b' + r'\s*'.join(letters) + r'\b', lowered):
            return city
    return None
