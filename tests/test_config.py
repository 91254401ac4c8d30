import logging

import pytest

from cultural_bot import config as config_module
from cultural_bot.config import Config, get_config, reset_config
from cultural_bot.src.metrics import ApiCallCounter


def test_defaults(make_config, monkeypatch):
    monkeypatch.delenv("PLACES_ENABLED")
    monkeypatch.delenv("PLACES_QUERY_DELAY")
    config = make_config()

    assert not config.weather.enabled
    assert not config.ai.enabled
    assert not config.news.enabled
    assert config.places.enabled
    assert config.timeout_config.ai == 30.0
    assert config.cache_config.ttl_weather == 600
    assert config.cache_config.ttl_places == 1800
    assert config.search_config.ranking == "relevance"
    assert config.search_config.result_limit == 6
    assert config.search_config.query_delay == 0.1
    assert config.default_city == "tokyo"
    assert "newyork" in config.preset_cities


def test_placeholder_keys_mean_demo_mode(make_config, caplog):
    with caplog.at_level(logging.WARNING):
        config = make_config(OPENWEATHER_API_KEY="YOUR_OPENWEATHER_API_KEY", NEWS_API_KEY="real-news-key")
    assert not config.weather.enabled
    assert config.news.enabled
    assert "OPENWEATHER_API_KEY not set" in caplog.text


def test_importance_ranking_defaults_to_five(make_config):
    config = make_config(PLACES_RANKING="Importance")
    assert config.search_config.ranking == "importance"
    assert config.search_config.result_limit == 5
    assert make_config(PLACES_RESULT_LIMIT="3").search_config.result_limit == 3


def test_lists_and_bools(make_config):
    config = make_config(PRESET_CITIES="Rome, Lisbon ,", PLACES_ENABLED="yes", DEBUG="1")
    assert config.preset_cities == ["rome", "lisbon"]
    assert config.places.enabled
    assert config.debug


@pytest.mark.parametrize("env", [
    {"TIMEOUT_WEATHER": "fast"},
    {"TIMEOUT_AI": "0"},
    {"CACHE_TTL_NEWS": "-1"},
    {"PLACES_RANKING": "random"},
    {"PLACES_RESULT_LIMIT": "0"},
])
def test_invalid_values_raise(make_config, env):
    with pytest.raises(ValueError):
        make_config(**env)


def test_to_dict_omits_keys(make_config):
    data = make_config(OPENWEATHER_API_KEY="secret-key").to_dict()
    assert data["providers"]["weather"]["enabled"] is True
    assert "secret-key" not in repr(data)


def test_global_config_is_cached_until_reset(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    first = get_config()
    assert get_config() is first
    reset_config()
    assert get_config() is not first
    assert isinstance(first, Config)


def test_call_counter_snapshot():
    counter = ApiCallCounter()
    counter.increment("weather")
    counter.counter_for("places")()
    counter.counter_for("places")()
    counter.observe_latency("places", 100.0)
    counter.observe_latency("places", 120.0)
    counter.observe_latency("places", 200.0)

    snap = counter.snapshot()
    assert snap["counters"] == {"weather": 1, "places": 2, "ai": 0, "news": 0}
    assert snap["total"] == 3
    assert snap["latencies"]["places"] == {"count": 3, "avg_ms": 140.0, "p50_ms": 120.0}

    counter.reset()
    assert counter.snapshot() == {"counters": {"weather": 0, "places": 0, "ai": 0, "news": 0},
                                  "total": 0, "latencies": {}}


def test_latency_samples_are_trimmed():
    counter = ApiCallCounter(max_samples=2)
    for ms in (1.0, 2.0, 3.0):
        counter.observe_latency("news", ms)
    assert counter.snapshot()["latencies"]["news"]["count"] == 2
