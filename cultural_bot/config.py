"""
Centralized configuration management with validation and type conversion.

Every setting the bot needs is read once from the environment (optionally
seeded from a `.env` file) into typed dataclasses:
- Provider keys, base URLs and the derived live/demo switch
- Per-provider request timeouts and cache TTLs
- Places search tuning (query delay, ranking mode, result limit)
- Logging
"""

import os
import logging
from typing import Optional, Dict, Any, List
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PRESET_CITIES = [
    'tokyo', 'delhi', 'mumbai', 'paris', 'london', 'newyork', 'barcelona', 'istanbul'
]

RANKING_MODES = ("relevance", "importance")


@dataclass(frozen=True)
class ProviderConfig:
    """Settings for one external provider.

    `enabled` is derived: the provider must be switched on and, when it needs
    a key, hold a real one rather than the placeholder sentinel.
    """
    name: str
    base_url: str
    api_key: Optional[str] = None
    placeholder: Optional[str] = None
    requires_key: bool = True
    enabled_flag: bool = True

    @property
    def enabled(self) -> bool:
        if not self.enabled_flag:
            return False
        if not self.requires_key:
            return True
        if not self.api_key:
            return False
        return self.api_key != self.placeholder


@dataclass
class TimeoutConfig:
    """Request timeouts in seconds, per provider."""
    weather: float = 10.0
    places: float = 10.0
    ai: float = 30.0
    news: float = 10.0

    def get(self, provider: str) -> float:
        return getattr(self, provider, self.places)


@dataclass
class CacheConfig:
    """Cache TTLs in seconds, per provider."""
    ttl_weather: int = 600  # 10 minutes
    ttl_places: int = 1800  # 30 minutes
    ttl_ai: int = 3600  # 1 hour
    ttl_news: int = 3600  # 1 hour


@dataclass
class SearchConfig:
    """Places search tuning."""
    query_delay: float = 0.1
    max_queries: int = 5
    results_per_query: int = 5
    ranking: str = "relevance"
    result_limit: Optional[int] = None

    def __post_init__(self):
        if self.result_limit is None:
            self.result_limit = 6 if self.ranking == "relevance" else 5


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5


class Config:
    """Centralized configuration with validation and type conversion."""

    def __init__(self, load_env_file: bool = True):
        """Initialize configuration from environment variables."""
        if load_env_file:
            load_dotenv()

        self.debug = self._get_bool("DEBUG", False)

        self.weather = ProviderConfig(
            name="weather",
            base_url=self._get_str("OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5"),
            api_key=self._get_optional("OPENWEATHER_API_KEY"),
            placeholder="YOUR_OPENWEATHER_API_KEY",
        )
        self.places = ProviderConfig(
            name="places",
            base_url=self._get_str("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"),
            requires_key=False,
            enabled_flag=self._get_bool("PLACES_ENABLED", True),
        )
        self.ai = ProviderConfig(
            name="ai",
            base_url=self._get_str("HUGGINGFACE_BASE_URL", "https://api-inference.huggingface.co"),
            api_key=self._get_optional("HUGGINGFACE_TOKEN"),
            placeholder="YOUR_HUGGING_FACE_TOKEN",
        )
        self.news = ProviderConfig(
            name="news",
            base_url=self._get_str("NEWS_BASE_URL", "https://newsapi.org/v2"),
            api_key=self._get_optional("NEWS_API_KEY"),
            placeholder="YOUR_NEWSAPI_KEY",
        )

        self.classification_model = self._get_str("HF_CLASSIFICATION_MODEL", "facebook/bart-large-mnli")
        self.generation_model = self._get_str("HF_GENERATION_MODEL", "microsoft/DialoGPT-medium")
        self.user_agent = self._get_str("USER_AGENT", "CulturalBot/1.0 (travel chatbot)")

        self.timeout_config = TimeoutConfig(
            weather=self._get_float("TIMEOUT_WEATHER", 10.0),
            places=self._get_float("TIMEOUT_PLACES", 10.0),
            ai=self._get_float("TIMEOUT_AI", 30.0),
            news=self._get_float("TIMEOUT_NEWS", 10.0),
        )

        self.cache_config = CacheConfig(
            ttl_weather=self._get_int("CACHE_TTL_WEATHER", 600),
            ttl_places=self._get_int("CACHE_TTL_PLACES", 1800),
            ttl_ai=self._get_int("CACHE_TTL_AI", 3600),
            ttl_news=self._get_int("CACHE_TTL_NEWS", 3600),
        )

        ranking = self._get_str("PLACES_RANKING", "relevance").lower()
        limit = self._get_optional("PLACES_RESULT_LIMIT")
        self.search_config = SearchConfig(
            query_delay=self._get_float("PLACES_QUERY_DELAY", 0.1),
            max_queries=self._get_int("PLACES_MAX_QUERIES", 5),
            results_per_query=self._get_int("PLACES_RESULTS_PER_QUERY", 5),
            ranking=ranking,
            result_limit=self._get_int("PLACES_RESULT_LIMIT", 0) if limit else None,
        )

        self.logging_config = LoggingConfig(
            level=self._get_str("LOG_LEVEL", "INFO"),
            format=self._get_str("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            file=self._get_optional("LOG_FILE"),
            max_bytes=self._get_int("LOG_MAX_BYTES", 10485760),
            backup_count=self._get_int("LOG_BACKUP_COUNT", 5),
        )

        self.preset_cities: List[str] = [
            c.lower() for c in self._get_list("PRESET_CITIES", DEFAULT_PRESET_CITIES)
        ]
        self.default_city = self._get_str("DEFAULT_CITY", "tokyo").lower()

        self._validate()

    def _get_optional(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return os.getenv(key, default)

    def _get_str(self, key: str, default: str) -> str:
        return os.getenv(key, default)

    def _get_int(self, key: str, default: int) -> int:
        """Get integer environment variable with default.

        Raises:
            ValueError: If value cannot be converted to int
        """
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Invalid integer for {key}: {value}")

    def _get_float(self, key: str, default: float) -> float:
        """Get float environment variable with default.

        Raises:
            ValueError: If value cannot be converted to float
        """
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"Invalid float for {key}: {value}")

    def _get_bool(self, key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ('1', 'true', 'yes', 'on')

    def _get_list(self, key: str, default: list) -> list:
        value = os.getenv(key)
        if value is None:
            return list(default)
        return [item.strip() for item in value.split(',') if item.strip()]

    def _validate(self):
        """Validate configuration values."""
        for name in ('weather', 'places', 'ai', 'news'):
            timeout = self.timeout_config.get(name)
            if timeout <= 0:
                raise ValueError(f"Invalid timeout for {name}: {timeout}")

        for name in ('ttl_weather', 'ttl_places', 'ttl_ai', 'ttl_news'):
            ttl = getattr(self.cache_config, name)
            if ttl < 0:
                raise ValueError(f"Invalid cache TTL for {name}: {ttl}")

        if self.search_config.ranking not in RANKING_MODES:
            raise ValueError(f"Invalid ranking mode: {self.search_config.ranking}")
        if self.search_config.result_limit <= 0:
            raise ValueError(f"Invalid result limit: {self.search_config.result_limit}")
        if self.search_config.query_delay < 0:
            raise ValueError(f"Invalid query delay: {self.search_config.query_delay}")

        # Missing keys only mean demo mode
        if not self.weather.enabled:
            logger.warning("OPENWEATHER_API_KEY not set - weather will use demo data")
        if not self.ai.enabled:
            logger.warning("HUGGINGFACE_TOKEN not set - AI search and classification disabled")
        if not self.news.enabled:
            logger.warning("NEWS_API_KEY not set - events will use demo data")

    def providers(self) -> Dict[str, ProviderConfig]:
        return {
            'weather': self.weather,
            'places': self.places,
            'ai': self.ai,
            'news': self.news,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for debugging (keys omitted)."""
        return {
            'debug': self.debug,
            'providers': {
                name: {'base_url': p.base_url, 'enabled': p.enabled}
                for name, p in self.providers().items()
            },
            'timeout_config': {
                'weather': self.timeout_config.weather,
                'places': self.timeout_config.places,
                'ai': self.timeout_config.ai,
                'news': self.timeout_config.news,
            },
            'cache_config': {
                'ttl_weather': self.cache_config.ttl_weather,
                'ttl_places': self.cache_config.ttl_places,
                'ttl_ai': self.cache_config.ttl_ai,
                'ttl_news': self.cache_config.ttl_news,
            },
            'search_config': {
                'query_delay': self.search_config.query_delay,
                'ranking': self.search_config.ranking,
                'result_limit': self.search_config.result_limit,
            },
            'preset_cities': self.preset_cities,
            'default_city': self.default_city,
        }


_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance, building it on first use."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Discard the global configuration (useful for testing)."""
    global _config
    _config = None


def setup_logging(config: Optional[Config] = None):
    """Set up logging based on configuration."""
    from logging.handlers import RotatingFileHandler

    config = config or get_config()

    logging.basicConfig(
        level=getattr(logging, config.logging_config.level.upper(), logging.INFO),
        format=config.logging_config.format,
    )

    if config.logging_config.file:
        file_handler = RotatingFileHandler(
            config.logging_config.file,
            maxBytes=config.logging_config.max_bytes,
            backupCount=config.logging_config.backup_count,
        )
        file_handler.setFormatter(logging.Formatter(config.logging_config.format))
        logging.getLogger().addHandler(file_handler)

    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
