"""FastAPI dependency injection."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from huepoint.config import settings
from huepoint.engine.config import SegmentationConfig
from huepoint.engine.engine import SegmentationEngine
from huepoint.engine.models import Mode

_engine: SegmentationEngine | None = None
_engine_lock = threading.Lock()


def get_settings():
    return settings


def get_engine() -> SegmentationEngine:
    global _engine
    if _engine is None:
        _engine = SegmentationEngine(
            config=SegmentationConfig(target_fps=settings.target_fps),
            mode=Mode(settings.default_mode),
        )
    return _engine


@contextmanager
def engine_session() -> Iterator[SegmentationEngine]:
    """Exclusive access to the shared engine for one request."""
    with _engine_lock:
        yield get_engine()
