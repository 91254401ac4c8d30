"""
Pytest configuration for CulturalBot tests.

Every test starts from a clean environment: no API keys, no .env file, and no
cached global config. Tests that need live providers set keys explicitly and
hand the providers a FakeSession instead of a real aiohttp session.
"""
import pytest

from cultural_bot.config import Config, reset_config

ENV_VARS = [
    "OPENWEATHER_API_KEY", "HUGGINGFACE_TOKEN", "NEWS_API_KEY", "PLACES_ENABLED",
    "OPENWEATHER_BASE_URL", "NOMINATIM_BASE_URL", "HUGGINGFACE_BASE_URL", "NEWS_BASE_URL",
    "HF_CLASSIFICATION_MODEL", "HF_GENERATION_MODEL", "USER_AGENT",
    "TIMEOUT_WEATHER", "TIMEOUT_PLACES", "TIMEOUT_AI", "TIMEOUT_NEWS",
    "CACHE_TTL_WEATHER", "CACHE_TTL_PLACES", "CACHE_TTL_AI", "CACHE_TTL_NEWS",
    "PLACES_RANKING", "PLACES_RESULT_LIMIT", "PLACES_QUERY_DELAY", "PLACES_MAX_QUERIES",
    "PLACES_RESULTS_PER_QUERY", "PRESET_CITIES", "DEFAULT_CITY", "DEBUG",
    "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Strip bot settings from the environment and drop the cached config."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Places is keyless, so it would otherwise go live
    monkeypatch.setenv("PLACES_ENABLED", "false")
    monkeypatch.setenv("PLACES_QUERY_DELAY", "0")
    reset_config()
    yield
    reset_config()


@pytest.fixture
def make_config(monkeypatch):
    """Build a Config from the given env overrides, ignoring any .env file."""
    def _make(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, str(value))
        return Config(load_env_file=False)
    return _make


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    async def json(self, content_type=None):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession.

    `handler(method, url, params_or_json)` returns a payload, a
    FakeResponse, or raises. Every call is recorded in `calls`.
    """

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def _respond(self, method, url, data):
        result = self.handler(method, url, data)
        if isinstance(result, FakeResponse):
            return result
        return FakeResponse(result)

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(("GET", url, params, headers))
        return self._respond("GET", url, params)

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append(("POST", url, json, headers))
        return self._respond("POST", url, json)


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse
