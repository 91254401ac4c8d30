"""
Lightweight in-process counters for live API calls.

Design:
- Counters: one tally per provider name, bumped after each successful live call
- Latency samples: newest first, trimmed to the last `max_samples`
- snapshot() aggregates counters and computes simple stats for latency
  samples (count, avg, p50)

One ApiCallCounter belongs to one chat session; nothing is shared globally.
"""

from typing import Any, Dict, Iterable, List
import statistics

PROVIDER_NAMES = ('weather', 'places', 'ai', 'news')


class ApiCallCounter:

    def __init__(self, names: Iterable[str] = PROVIDER_NAMES, max_samples: int = 1000):
        self._counters: Dict[str, int] = {name: 0 for name in names}
        self._lats: Dict[str, List[float]] = {}
        self.max_samples = max_samples

    def increment(self, name: str, amount: int = 1) -> None:
        """Increment a named counter by amount"""
        self._counters[name] = self._counters.get(name, 0) + amount

    def counter_for(self, name: str):
        """Return a zero-argument callback that increments `name`."""
        return lambda: self.increment(name)

    def observe_latency(self, name: str, ms: float) -> None:
        """Record a latency sample (milliseconds) for a named metric"""
        samples = self._lats.setdefault(name, [])
        samples.insert(0, ms)
        if len(samples) > self.max_samples:
            del samples[self.max_samples:]

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    @property
    def total(self) -> int:
        return sum(self._counters.values())

    def reset(self) -> None:
        for name in self._counters:
            self._counters[name] = 0
        self._lats.clear()

    def snapshot(self) -> Dict[str, Any]:
        """Return a JSON-serializable dict: counters, total and latency stats"""
        out: Dict[str, Any] = {"counters": dict(self._counters), "total": self.total, "latencies": {}}
        for name, vals in self._lats.items():
            if vals:
                out['latencies'][name] = {
                    'count': len(vals),
                    'avg_ms': sum(vals) / len(vals),
                    'p50_ms': float(statistics.median(vals)),
                }
        return out
