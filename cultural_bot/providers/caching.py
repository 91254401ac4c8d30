"""
Caching utilities for providers.

Each provider owns a TTLCache. `fetch_with_fallback` is the one pipeline every
service runs through: fresh cache hit, else live call, else fallback data.
Only confirmed live results are cached, so an outage never pins demo data in
the cache for a whole TTL window.
"""
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from cultural_bot.models import CacheEntry, FetchResult

logger = logging.getLogger(__name__)

T = TypeVar('T')


class TTLCache:
    """A key -> CacheEntry map with lazy expiry.

    Stale entries are not evicted; they are ignored on read and overwritten
    by the next successful store.
    """

    def __init__(self, name: str = "cache", clock: Callable[[], float] = time.time):
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def now(self) -> float:
        return self._clock()

    def get(self, key: str, ttl: float) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(ttl, self.now()):
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self.now())

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def cache_key(*parts: Any) -> str:
    """Build a cache key such as `places_tokyo_culture` from request parameters.

    Parts are lower-cased and stripped; None parts are skipped.
    """
    out = []
    for part in parts:
        if part is None:
            continue
        out.append(str(part).strip().lower())
    return "_".join(out)


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple, dict, str)):
        return len(value) > 0
    return True


async def fetch_with_fallback(
    cache: TTLCache,
    key: str,
    ttl: float,
    live_fn: Callable[[], Awaitable[FetchResult]],
    fallback_fn: Callable[[], T],
    *,
    enabled: bool = True,
    on_success: Optional[Callable[[], None]] = None,
) -> Tuple[T, bool]:
    """Return `(value, is_live)` for `key`.

    Live-call failures never propagate; `fallback_fn` must not fail.

    1. A fresh cache entry is returned without any network activity.
    2. If `enabled`, `live_fn` is awaited; an OK result with a non-empty value
       is cached and returned.
    3. Any exception, UNAVAILABLE or EMPTY result falls through to
       `fallback_fn`, whose value is returned uncached.
    """
    cached = cache.get(key, ttl)
    if cached is not None:
        logger.debug(f"[{cache.name}] cache hit for {key}")
        return cached, True

    if enabled:
        try:
            result = await live_fn()
            if result is not None and result.is_ok and _has_value(result.value):
                cache.set(key, result.value)
                if on_success is not None:
                    on_success()
                logger.debug(f"[{cache.name}] stored live result for {key}")
                return result.value, True
            if result is not None and result.error:
                logger.warning(f"[{cache.name}] live call unavailable for {key}: {result.error}")
            else:
                logger.info(f"[{cache.name}] live call returned no results for {key}")
        except Exception as e:
            logger.warning(f"[{cache.name}] live call failed for {key}: {e}")
    else:
        logger.debug(f"[{cache.name}] provider disabled, using fallback for {key}")

    return fallback_fn(), False
