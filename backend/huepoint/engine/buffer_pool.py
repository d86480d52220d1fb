"""Bounded pools of reusable numpy buffers at one fixed size.

Buffers are handed out dirty: whoever borrows one overwrites it before
reading. A buffer whose shape no longer matches the pool is discarded on
release.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

MAX_POOL_SIZE = 5

# kind -> (channels, dtype); channels 0 means a 2-D buffer
BUFFER_KINDS: dict[str, tuple[int, type]] = {
    "rgb": (3, np.uint8),
    "gray": (0, np.uint8),
    "mask": (0, np.bool_),
    "labels": (0, np.int32),
    "float": (0, np.float64),
}


class BufferPool:
    def __init__(self, width: int, height: int, max_per_kind: int = MAX_POOL_SIZE) -> None:
        self.width = width
        self.height = height
        self.max_per_kind = max_per_kind
        self._free: dict[str, list[NDArray]] = {kind: [] for kind in BUFFER_KINDS}
        self.allocations = 0

    def fits(self, width: int, height: int) -> bool:
        return self.width == width and self.height == height

    def shape_of(self, kind: str) -> tuple[int, ...]:
        channels, _ = BUFFER_KINDS[kind]
        if channels:
            return (self.height, self.width, channels)
        return (self.height, self.width)

    def acquire(self, kind: str) -> NDArray:
        if kind not in BUFFER_KINDS:
            raise KeyError(f"Unknown buffer kind: {kind}")
        free = self._free[kind]
        if free:
            return free.pop()
        self.allocations += 1
        return np.empty(self.shape_of(kind), dtype=BUFFER_KINDS[kind][1])

    def release(self, kind: str, buffer: NDArray) -> None:
        free = self._free[kind]
        if buffer.shape != self.shape_of(kind) or len(free) >= self.max_per_kind:
            return
        if any(b is buffer for b in free):
            return
        free.append(buffer)

    @contextmanager
    def borrow(self, kind: str) -> Iterator[NDArray]:
        buffer = self.acquire(kind)
        try:
            yield buffer
        finally:
            self.release(kind, buffer)

    def free_count(self, kind: str) -> int:
        return len(self._free[kind])

    def clear(self) -> None:
        for free in self._free.values():
            free.clear()
        logger.debug("Buffer pool %dx%d cleared", self.width, self.height)
