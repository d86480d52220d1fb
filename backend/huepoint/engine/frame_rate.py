"""Frame pacing for the live preview path."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_STATS_LOG_INTERVAL = 30


@dataclass
class FrameStats:
    processed: int
    dropped: int
    average_ms: float
    last_ms: float


class FrameRateController:
    """Drops frames that arrive sooner than 1000 / target_fps ms after the last one."""

    def __init__(self, target_fps: float = 15.0) -> None:
        if target_fps <= 0:
            raise ValueError(f"target_fps must be positive, got {target_fps}")
        self.target_fps = target_fps
        self.target_frame_ms = 1000.0 / target_fps
        self.reset()

    def reset(self) -> None:
        self._last_start_ms: float | None = None
        self._current_start_ms: float | None = None
        self.processed = 0
        self.dropped = 0
        self._total_ms = 0.0
        self._last_ms = 0.0

    def should_process(self, now_ms: float) -> bool:
        if self._last_start_ms is not None and now_ms - self._last_start_ms < self.target_frame_ms:
            self.dropped += 1
            return False
        return True

    def on_frame_start(self, now_ms: float) -> None:
        self._last_start_ms = now_ms
        self._current_start_ms = now_ms

    def on_frame_end(self, now_ms: float) -> None:
        if self._current_start_ms is None:
            return
        self._last_ms = now_ms - self._current_start_ms
        self._current_start_ms = None
        self._total_ms += self._last_ms
        self.processed += 1
        if self.processed % _STATS_LOG_INTERVAL == 0:
            s = self.stats()
            logger.info(
                "Frames: %d processed, %d dropped, avg %.1fms (target %.1fms)",
                s.processed, s.dropped, s.average_ms, self.target_frame_ms,
            )

    def stats(self) -> FrameStats:
        avg = self._total_ms / self.processed if self.processed else 0.0
        return FrameStats(processed=self.processed, dropped=self.dropped, average_ms=avg, last_ms=self._last_ms)
