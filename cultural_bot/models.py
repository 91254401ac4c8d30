"""
Normalized result shapes shared by providers, services and the assistant.

Providers map each external API's response into one of these dataclasses so
the rest of the bot never touches raw JSON.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar('T')


class Intent(Enum):
    """Categories a user message can be routed to."""
    WEATHER = "weather"
    FOOD = "food"
    CULTURE = "culture"
    EVENTS = "events"
    PLACES = "places"
    SHOPPING = "shopping"
    CLOTHING = "clothing"
    LOCAL = "local"
    GENERAL = "general"


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and the wall-clock time it was stored."""
    value: T
    stored_at: float

    def is_fresh(self, ttl: float, now: float) -> bool:
        return now - self.stored_at < ttl


class FetchStatus(Enum):
    """Outcome of a single live provider call."""
    OK = "ok"
    UNAVAILABLE = "unavailable"
    EMPTY = "empty"


@dataclass
class FetchResult(Generic[T]):
    """Tagged result of a live call: OK(value), UNAVAILABLE(error) or EMPTY."""
    status: FetchStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "FetchResult[T]":
        return cls(FetchStatus.OK, value=value)

    @classmethod
    def unavailable(cls, error: str) -> "FetchResult[T]":
        return cls(FetchStatus.UNAVAILABLE, error=error)

    @classmethod
    def empty(cls) -> "FetchResult[T]":
        return cls(FetchStatus.EMPTY)

    @property
    def is_ok(self) -> bool:
        return self.status == FetchStatus.OK


@dataclass
class PlaceResult:
    """A place normalized from a geocoder hit or the fallback tables."""
    name: str
    address: str
    latitude: Optional[float]
    longitude: Optional[float]
    type: str = "attraction"
    category: str = "general"
    importance: float = 0.0
    source: str = ""
    relevance_score: int = 0


@dataclass
class WeatherSnapshot:
    """Current conditions for a city, live or demo."""
    temperature: int
    condition: str
    humidity: int
    wind_speed: float
    pressure: Optional[int]
    timestamp_text: str
    source: str
    is_live: bool = False


@dataclass
class NewsArticle:
    title: str
    description: str
    url: Optional[str]
    published_at: str
    source: str


@dataclass
class Suggestion:
    """A fallback content card (clothing, local tips, food tips)."""
    title: str
    description: str
    source: str = "Demo Data"


@dataclass
class IntentResult:
    intent: Intent
    confidence: float
    source: str = "keyword"


@dataclass
class BotMessage:
    text: str
    sender: str = "🤖 CulturalBot"


@dataclass
class BotReply:
    """Structured reply handed back to whatever renders the chat."""
    messages: List[BotMessage]
    intent: Intent = Intent.GENERAL
    city: str = ""
    items: List[Any] = field(default_factory=list)
    is_live: bool = False

    @property
    def text(self) -> str:
        return "\n".join(m.text for m in self.messages)


# Alternate spellings users and older callers send for the same category
CATEGORY_ALIASES = {
    "tourist": "places",
    "attractions": "places",
    "restaurants": "food",
}


def canonical_category(category: str) -> str:
    category = (category or "").strip().lower()
    return CATEGORY_ALIASES.get(category, category)


@dataclass
class CityOverview:
    """Everything shown for a city at once, gathered in parallel."""
    city: str
    weather: WeatherSnapshot
    culture: List[PlaceResult]
    clothing: List[Suggestion]
    news: List[NewsArticle]
    live: Dict[str, bool] = field(default_factory=dict)
