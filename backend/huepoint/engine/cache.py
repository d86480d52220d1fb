"""Result caches.

WholeImageCache holds the last whole-image result for a short window, keyed
by raster identity and mode. ResultCache is a generic LRU with a TTL and a
byte budget, keyed by content.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

from huepoint.engine.models import Mode, SegmentationResult
from huepoint.engine.raster import RasterImage

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

_MAX_CACHE_BYTES = 10 * 1024 * 1024
_STATS_LOG_INTERVAL = 20

# rough per-object costs used by estimate_size
_SEGMENT_BYTES = 256
_POINT_BYTES = 32


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def default_max_bytes() -> int:
    """min(10 MiB, physical memory / 8)."""
    try:
        physical = os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
    except (AttributeError, ValueError, OSError):
        return _MAX_CACHE_BYTES
    return int(min(_MAX_CACHE_BYTES, physical // 8))


def estimate_size(value: Any) -> int:
    if isinstance(value, SegmentationResult):
        points = sum(len(s.contour) for s in value.segments)
        return 128 + len(value.segments) * _SEGMENT_BYTES + points * _POINT_BYTES
    return sys.getsizeof(value)


@dataclass
class CacheEntry:
    key: str
    value: Any
    size: int
    created_ms: float


class WholeImageCache:
    """Single-entry cache for the last whole-image result."""

    def __init__(self, validity_ms: float = 2000.0, clock: Clock = monotonic_ms) -> None:
        self.validity_ms = validity_ms
        self._clock = clock
        self._image: RasterImage | None = None
        self._mode: Mode | None = None
        self._result: SegmentationResult | None = None
        self._created_ms = 0.0

    def get(self, image: RasterImage, mode: Mode) -> SegmentationResult | None:
        if self._result is None or self._image is not image or self._mode is not mode:
            return None
        if self._clock() - self._created_ms >= self.validity_ms:
            return None
        return self._result

    def put(self, image: RasterImage, mode: Mode, result: SegmentationResult) -> None:
        self._image = image
        self._mode = mode
        self._result = result
        self._created_ms = self._clock()

    def invalidate(self) -> None:
        self._image = None
        self._mode = None
        self._result = None


class ResultCache:
    """LRU cache bounded by estimated bytes, entries expire after ``ttl_ms``."""

    def __init__(
        self,
        ttl_ms: float = 60_000.0,
        max_bytes: int | None = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        self.ttl_ms = ttl_ms
        self.max_bytes = max_bytes if max_bytes is not None else default_max_bytes()
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self.current_bytes = 0
        self.hits = 0
        self.misses = 0

    @staticmethod
    def generate_key(image: RasterImage, mode: Mode, sensitivity: int) -> str:
        return f"{image.width}x{image.height}_{mode.value}_{sensitivity}_{image.content_hash()}"

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.created_ms > self.ttl_ms:
            self._remove(key)
            entry = None

        if entry is None:
            self.misses += 1
            value = None
        else:
            self._entries.move_to_end(key)
            self.hits += 1
            value = entry.value

        if (self.hits + self.misses) % _STATS_LOG_INTERVAL == 0:
            logger.debug(
                "Result cache: %d hits, %d misses, %d entries, %d/%d bytes",
                self.hits, self.misses, len(self._entries), self.current_bytes, self.max_bytes,
            )
        return value

    def put(self, key: str, value: Any, size: int | None = None) -> None:
        size = estimate_size(value) if size is None else size
        if size > self.max_bytes:
            logger.debug("Result cache: %s too large (%d bytes), not stored", key, size)
            return
        if key in self._entries:
            self._remove(key)
        while self._entries and self.current_bytes + size > self.max_bytes:
            oldest = next(iter(self._entries))
            self._remove(oldest)
        self._entries[key] = CacheEntry(key=key, value=value, size=size, created_ms=self._clock())
        self.current_bytes += size

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key)
        self.current_bytes -= entry.size

    def clear(self) -> None:
        self._entries.clear()
        self.current_bytes = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
