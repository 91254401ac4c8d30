"""
TravelAssistant: one chat session.

The assistant owns the current city, the three services, the intent
classifier and the API call counter. `handle_message` turns one user message
into a BotReply:

1. empty input -> help
2. a preset city named in the message -> switch city (and answer the rest)
3. classify -> dispatch to exactly one handler

Handlers always produce content: live data when a provider answers, curated
fallback content otherwise. Nothing raised below `handle_message` reaches
the caller.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from cultural_bot.config import Config, get_config
from cultural_bot.data.fallback_data import FallbackData, normalize_city
from cultural_bot.models import (
    BotMessage,
    BotReply,
    CityOverview,
    Intent,
    NewsArticle,
    PlaceResult,
    Suggestion,
    WeatherSnapshot,
    canonical_category,
)
from cultural_bot.providers.ai_provider import AIProvider
from cultural_bot.providers.caching import TTLCache
from cultural_bot.providers.news_provider import NewsProvider
from cultural_bot.providers.places_provider import PlacesProvider
from cultural_bot.providers.weather_provider import WeatherProvider
from cultural_bot.src.intent import build_classifier, detect_city
from cultural_bot.src.metrics import ApiCallCounter
from cultural_bot.src.planner import build_planner
from cultural_bot.src.ranking import ResultRanker
from cultural_bot.src.services import NewsService, PlacesService, WeatherService

logger = logging.getLogger(__name__)

ERROR_TEXT = "Sorry, I encountered an error. Please try again."
HELP_TEXT = ("I can help you find cultural sites, restaurants, tourist attractions, shopping areas, "
             "weather, and news. What interests you?")
GENERAL_SUGGESTIONS = [
    "Ask about weather in the current city",
    "Find restaurants and food places",
    "Discover cultural sites and museums",
    "Explore shopping areas and markets",
    "Get tourist attractions and landmarks",
    "Learn about traditional clothing and local tips",
]

# category -> (heading, sender)
PLACE_HEADINGS = {
    'culture': ("Cultural sites and museums in {city}:", "🏛️ Cultural Sites"),
    'food': ("Restaurants and dining in {city}:", "🍽️ Food & Dining"),
    'shopping': ("Shopping areas in {city}:", "🛍️ Shopping"),
    'places': ("Tourist attractions in {city}:", "🗺️ Tourist Attractions"),
}

# Button label -> category, in display order
QUICK_ACTIONS = [
    ("🏛️ Culture", "culture"),
    ("🍽️ Food", "food"),
    ("🗺️ Tourist", "tourist"),
    ("🛍️ Shopping", "shopping"),
    ("🌤️ Weather", "weather"),
    ("📰 News", "news"),
    ("👘 Clothing", "clothing"),
    ("💡 Local Tips", "local"),
]

_QUICK_ACTION_INTENTS = {
    'culture': Intent.CULTURE,
    'food': Intent.FOOD,
    'places': Intent.PLACES,
    'shopping': Intent.SHOPPING,
    'weather': Intent.WEATHER,
    'news': Intent.EVENTS,
    'events': Intent.EVENTS,
    'clothing': Intent.CLOTHING,
    'local': Intent.LOCAL,
}


def format_place(place: PlaceResult) -> str:
    lines = [
        place.name,
        f"  📍 Address: {place.address}",
        f"  🏷️ Type: {place.type}",
        f"  ⭐ Category: {place.category}",
        f"  📊 Source: {place.source}",
    ]
    if place.latitude is not None and place.longitude is not None:
        lines.append(f"  🗺️ Coordinates: {place.latitude}, {place.longitude}")
    return "\n".join(lines)


def format_weather(weather: WeatherSnapshot) -> str:
    lines = [
        f"🌡️ {weather.temperature}°C",
        f"  Condition: {weather.condition}",
        f"  Humidity: {weather.humidity}%",
        f"  Wind: {weather.wind_speed} m/s",
    ]
    if weather.pressure is not None:
        lines.append(f"  Pressure: {weather.pressure} hPa")
    lines.append(f"  📡 Source: {weather.source} ({weather.timestamp_text})")
    return "\n".join(lines)


def format_article(article: NewsArticle) -> str:
    lines = [article.title, f"  {article.description}", f"  📊 Source: {article.source}"]
    if article.published_at:
        lines.append(f"  📅 Published: {article.published_at[:10]}")
    if article.url:
        lines.append(f"  🔗 {article.url}")
    return "\n".join(lines)


def format_suggestion(suggestion: Suggestion) -> str:
    return f"{suggestion.title}\n  {suggestion.description}"


class TravelAssistant:
    """A chat session bound to one current city."""

    def __init__(
        self,
        config: Config,
        fallback_data: FallbackData,
        weather_service: WeatherService,
        places_service: PlacesService,
        news_service: NewsService,
        classifier,
        counter: ApiCallCounter,
        ai_enabled: bool = False,
        city: Optional[str] = None,
    ):
        self.config = config
        self.fallback_data = fallback_data
        self.weather_service = weather_service
        self.places_service = places_service
        self.news_service = news_service
        self.classifier = classifier
        self.counter = counter
        self.ai_enabled = ai_enabled
        self.current_city = self._city_id(city or config.default_city)

        self._handlers = {
            Intent.WEATHER: self.handle_weather,
            Intent.CULTURE: self.handle_culture,
            Intent.FOOD: self.handle_food,
            Intent.SHOPPING: self.handle_shopping,
            Intent.PLACES: self.handle_places,
            Intent.EVENTS: self.handle_events,
            Intent.CLOTHING: self.handle_clothing,
            Intent.LOCAL: self.handle_local,
        }

    @classmethod
    def create(
        cls,
        config: Optional[Config] = None,
        session: Optional[aiohttp.ClientSession] = None,
        fallback_data: Optional[FallbackData] = None,
        city: Optional[str] = None,
    ) -> "TravelAssistant":
        """Wire providers, caches and services from configuration."""
        config = config or get_config()
        fallback_data = fallback_data or FallbackData()
        counter = ApiCallCounter()
        timeouts = config.timeout_config
        ttls = config.cache_config
        search = config.search_config

        weather_provider = WeatherProvider(config.weather, timeout=timeouts.weather, session=session)
        places_provider = PlacesProvider(config.places, timeout=timeouts.places, session=session,
                                         user_agent=config.user_agent)
        ai_provider = AIProvider(config.ai, timeout=timeouts.ai, session=session,
                                 classification_model=config.classification_model,
                                 generation_model=config.generation_model)
        news_provider = NewsProvider(config.news, timeout=timeouts.news, session=session)

        ai_cache = TTLCache("ai")
        planner = build_planner(fallback_data, ai_provider, ai_cache, ttls.ttl_ai,
                                search.max_queries, counter.counter_for("ai"))
        classifier = build_classifier(ai_provider, ai_cache, ttls.ttl_ai, counter.counter_for("ai"))

        return cls(
            config=config,
            fallback_data=fallback_data,
            weather_service=WeatherService(weather_provider, fallback_data, ttls.ttl_weather, counter=counter),
            places_service=PlacesService(
                places_provider,
                fallback_data,
                planner,
                ranker=ResultRanker(search.ranking, search.result_limit),
                ttl=ttls.ttl_places,
                query_delay=search.query_delay,
                results_per_query=search.results_per_query,
                counter=counter,
            ),
            news_service=NewsService(news_provider, fallback_data, ttls.ttl_news, counter=counter),
            classifier=classifier,
            counter=counter,
            ai_enabled=ai_provider.enabled,
            city=city,
        )

    def _city_id(self, city: str) -> str:
        """Known cities are keyed by their compact id; others keep their spelling."""
        city = " ".join((city or "").split())
        if not city:
            raise ValueError("City name must not be empty")
        if self.fallback_data.has_city(city):
            return normalize_city(city)
        return city

    @property
    def city_name(self) -> str:
        return self.fallback_data.city_name(self.current_city)

    def set_city(self, city: str) -> str:
        """Switch the session city; returns its display name."""
        self.current_city = self._city_id(city)
        logger.info(f"City switched to {self.current_city}")
        return self.city_name

    def welcome(self) -> BotReply:
        text = (f"🤖 CulturalBot ready! Exploring {self.city_name}. "
                "Ask about weather, food, culture, shopping, places, clothing, local tips or events.")
        return BotReply([BotMessage(text, "🚀 System Ready")], city=self.city_name)

    def help_reply(self) -> BotReply:
        return BotReply([BotMessage(HELP_TEXT, "🤖 Help")], city=self.city_name)

    async def handle_message(self, text: str) -> BotReply:
        """Answer one user message. Never raises."""
        if not isinstance(text, str) or not text.strip():
            return self.help_reply()
        try:
            switched = detect_city(text, self.config.preset_cities)
            switch_message = None
            if switched and switched != self.current_city:
                name = self.set_city(switched)
                switch_message = BotMessage(
                    f"🌍 Switched to {name}! What would you like to explore?", "🗺️ City Changed")

            result = await self.classifier.classify(text)
            logger.debug(f"Classified {text!r} as {result.intent.value} ({result.confidence:.2f}, {result.source})")

            if switch_message is not None and result.intent == Intent.GENERAL:
                return BotReply([switch_message], city=self.city_name)

            reply = await self.dispatch(result.intent, text)
            if switch_message is not None:
                reply.messages.insert(0, switch_message)
            return reply
        except Exception:
            logger.exception(f"Failed to handle message {text!r}")
            return BotReply([BotMessage(ERROR_TEXT, "⚠️ Error")], city=self.city_name)

    async def dispatch(self, intent: Intent, text: str = "") -> BotReply:
        handler = self._handlers.get(intent)
        if handler is None:
            return await self.handle_general(text)
        return await handler()

    async def quick_action(self, category: str) -> BotReply:
        """Run the handler behind a category button ('tourist', 'news', ...)."""
        category = canonical_category(category)
        intent = _QUICK_ACTION_INTENTS.get(category)
        if intent is None:
            return self.help_reply()
        try:
            return await self.dispatch(intent)
        except Exception:
            logger.exception(f"Quick action {category} failed")
            return BotReply([BotMessage(ERROR_TEXT, "⚠️ Error")], city=self.city_name)

    async def handle_weather(self) -> BotReply:
        weather, is_live = await self.weather_service.current(self.city_name)
        messages = [
            BotMessage(f"Here's the current weather in {self.city_name}:", "🌤️ Weather"),
            BotMessage(format_weather(weather), "🌤️ Weather"),
        ]
        return BotReply(messages, Intent.WEATHER, self.city_name, [weather], is_live)

    async def _places_reply(self, category: str, intent: Intent) -> BotReply:
        places, is_live = await self.places_service.search(self.city_name, category)
        heading, sender = PLACE_HEADINGS[category]
        messages = [BotMessage(heading.format(city=self.city_name), sender)]
        if not is_live:
            messages.append(BotMessage(
                f"I could not find live results for {self.city_name}, so here are curated suggestions.",
                "🤖 Suggestion",
            ))
        messages.extend(BotMessage(format_place(p), sender) for p in places)
        return BotReply(messages, intent, self.city_name, list(places), is_live)

    async def handle_culture(self) -> BotReply:
        return await self._places_reply('culture', Intent.CULTURE)

    async def handle_food(self) -> BotReply:
        reply = await self._places_reply('food', Intent.FOOD)
        tips = self.fallback_data.food_tips(self.current_city)
        if tips:
            reply.messages.append(BotMessage(f"Local food tips for {self.city_name}:", "🍜 Food Tips"))
            reply.messages.extend(BotMessage(format_suggestion(t), "🍜 Food Tips") for t in tips)
        return reply

    async def handle_shopping(self) -> BotReply:
        return await self._places_reply('shopping', Intent.SHOPPING)

    async def handle_places(self) -> BotReply:
        return await self._places_reply('places', Intent.PLACES)

    async def handle_events(self) -> BotReply:
        articles, is_live = await self.news_service.city_news(self.city_name)
        messages = [BotMessage(f"Latest news and events in {self.city_name}:", "📰 News & Events")]
        if not is_live:
            messages.append(BotMessage(
                "Live news is not available right now. Check local news websites for current events.",
                "🤖 Suggestion",
            ))
        messages.extend(BotMessage(format_article(a), "📰 News & Events") for a in articles)
        return BotReply(messages, Intent.EVENTS, self.city_name, list(articles), is_live)

    def _suggestions_reply(self, suggestions: List[Suggestion], heading: str, sender: str,
                           intent: Intent) -> BotReply:
        messages = [BotMessage(heading, sender)]
        messages.extend(BotMessage(format_suggestion(s), sender) for s in suggestions)
        return BotReply(messages, intent, self.city_name, list(suggestions), False)

    async def handle_clothing(self) -> BotReply:
        return self._suggestions_reply(
            self.fallback_data.clothing(self.current_city),
            f"Traditional clothing in {self.city_name}:", "👘 Traditional Clothing", Intent.CLOTHING)

    async def handle_local(self) -> BotReply:
        return self._suggestions_reply(
            self.fallback_data.local_tips(self.current_city),
            f"Local recommendations for {self.city_name}:", "💡 Local Tips", Intent.LOCAL)

    async def handle_general(self, text: str = "") -> BotReply:
        if text.strip():
            opening = f'I understand you\'re asking about: "{text.strip()}". Let me help you with specific information!'
        else:
            opening = HELP_TEXT
        suggestions = "Try asking about:\n" + "\n".join(f"  • {s}" for s in GENERAL_SUGGESTIONS)
        messages = [BotMessage(opening, "🤖 Assistant"), BotMessage(suggestions, "🤖 Assistant")]
        return BotReply(messages, Intent.GENERAL, self.city_name)

    async def city_overview(self) -> CityOverview:
        """Weather, cultural sites, clothing and news for the current city, fetched in parallel."""
        city = self.city_name
        (weather, weather_live), (culture, culture_live), (news, news_live) = await asyncio.gather(
            self.weather_service.current(city),
            self.places_service.search(city, 'culture'),
            self.news_service.city_news(city),
        )
        return CityOverview(
            city=city,
            weather=weather,
            culture=culture,
            clothing=self.fallback_data.clothing(self.current_city),
            news=news,
            live={'weather': weather_live, 'places': culture_live, 'news': news_live},
        )

    def api_status(self) -> Dict[str, Any]:
        """Live/demo state per provider plus the call counters."""
        def mode(enabled: bool) -> str:
            return "live" if enabled else "demo"

        return {
            'city': self.city_name,
            'providers': {
                'weather': mode(self.weather_service.enabled),
                'places': mode(self.places_service.enabled),
                'ai': mode(self.ai_enabled),
                'news': mode(self.news_service.enabled),
            },
            'calls': self.counter.snapshot(),
        }
