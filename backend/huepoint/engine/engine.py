"""Segmentation engine: mode dispatch, caching, coordinate mapping.

Usage:
    engine = SegmentationEngine()
    result = engine.segment(RasterImage.from_pil(img))
    tapped = engine.segment_by_color(image, x=120, y=80, sensitivity=40)

One engine serves one session and is not thread-safe. A second call while
the first is still computing raises EngineBusyError.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager

from numpy.typing import NDArray

from huepoint.engine.buffer_pool import BufferPool
from huepoint.engine.cache import Clock, ResultCache, WholeImageCache, monotonic_ms
from huepoint.engine.color_names import describe_color
from huepoint.engine.colorspace import RGB, ciede2000_distance, oklab_distance, rgb_to_oklab
from huepoint.engine.config import SegmentationConfig
from huepoint.engine.errors import EngineBusyError, InvalidRasterError
from huepoint.engine.frame_rate import FrameRateController
from huepoint.engine.models import (
    ColorAnalysis,
    EngineState,
    Mode,
    Region,
    Segment,
    SegmentationResult,
)
from huepoint.engine.raster import RasterImage, fit_to_resolution, window_mean_color
from huepoint.engine.strategies import ExtractionContext, StrategySpec, get_registry

logger = logging.getLogger(__name__)


def _check_raster(image: RasterImage) -> None:
    if not isinstance(image, RasterImage):
        raise InvalidRasterError(f"Expected RasterImage, got {type(image).__name__}")


def _check_sensitivity(sensitivity: int) -> None:
    if not 0 <= sensitivity <= 100:
        raise ValueError(f"Sensitivity must be in [0, 100], got {sensitivity}")


class SegmentationEngine:
    def __init__(
        self,
        config: SegmentationConfig | None = None,
        mode: Mode = Mode.STREAMING,
        clock: Clock = monotonic_ms,
    ) -> None:
        self.config = config or SegmentationConfig()
        self._mode = mode
        self._clock = clock
        self._registry = get_registry()
        self.whole_image_cache = WholeImageCache(self.config.whole_image_cache_ms, clock)
        self.result_cache = ResultCache(self.config.result_cache_ttl_ms, self.config.result_cache_max_bytes, clock)
        self.frame_controller = FrameRateController(self.config.target_fps)
        self._pool: BufferPool | None = None
        self._state = EngineState.IDLE

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def pool(self) -> BufferPool | None:
        return self._pool

    def set_mode(self, mode: Mode) -> None:
        if mode is not self._mode:
            logger.info("Mode %s -> %s", self._mode.value, mode.value)
            self.whole_image_cache.invalidate()
        self._mode = mode

    @contextmanager
    def _computing(self) -> Iterator[None]:
        if self._state is EngineState.COMPUTING:
            raise EngineBusyError("Engine is already computing a request")
        self._state = EngineState.COMPUTING
        try:
            yield
        finally:
            self._state = EngineState.READY

    def reset(self) -> None:
        """Drop caches, pooled buffers and frame statistics."""
        self.whole_image_cache.invalidate()
        self.result_cache.clear()
        if self._pool is not None:
            self._pool.clear()
            self._pool = None
        self.frame_controller.reset()
        self._state = EngineState.IDLE

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _prepare(self, image: RasterImage, spec: StrategySpec) -> tuple[NDArray, float, float]:
        processed, sx, sy = fit_to_resolution(image.rgb, spec.processing_resolution)
        h, w = processed.shape[:2]
        if self._pool is None or not self._pool.fits(w, h):
            if self._pool is not None:
                self._pool.clear()
            self._pool = BufferPool(w, h, self.config.buffer_pool_size)
        return processed, sx, sy

    @staticmethod
    def _to_segment(segment_id: int, region: Region, sx: float, sy: float, with_contour: bool) -> Segment:
        contour: tuple[tuple[int, int], ...] = ()
        if with_contour:
            contour = tuple((int(round(px * sx)), int(round(py * sy))) for px, py in region.contour)
        return Segment(
            id=segment_id,
            bbox=region.bbox.scaled(sx, sy),
            color=describe_color(region.color),
            area=int(round(region.area * sx * sy)),
            contour=contour,
            confidence=1.0,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def segment(self, image: RasterImage, mode: Mode | None = None) -> SegmentationResult:
        """All regions of the image, largest first.

        Repeated calls with the same raster object and mode inside the
        whole-image cache window return the identical result.
        """
        _check_raster(image)
        mode = mode or self._mode
        cached = self.whole_image_cache.get(image, mode)
        if cached is not None:
            logger.debug("Whole-image cache hit (%s)", mode.value)
            return cached

        spec = self._registry.get(mode)
        with self._computing():
            start = time.perf_counter()
            try:
                processed, sx, sy = self._prepare(image, spec)
                regions = spec.extract_regions(processed, ExtractionContext(self.config, self._pool))
                segments = [self._to_segment(i, r, sx, sy, spec.uses_contours) for i, r in enumerate(regions)]
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                logger.exception("Segmentation failed in %s mode", mode.value)
                return SegmentationResult.failure(f"{type(e).__name__}: {e}", elapsed, mode)
            elapsed = (time.perf_counter() - start) * 1000

        result = SegmentationResult.ok(segments, elapsed, mode)
        self.whole_image_cache.put(image, mode, result)
        logger.info(
            "Segmented %dx%d (%s): %d segments in %.1fms",
            image.width, image.height, mode.value, len(segments), elapsed,
        )
        return result

    def segment_by_color(
        self,
        image: RasterImage,
        x: float,
        y: float,
        sensitivity: int = 50,
        rgb: RGB | None = None,
        mode: Mode | None = None,
    ) -> Segment | None:
        """The single region under (x, y), or None when nothing qualifies.

        ``rgb`` overrides the seed color; by default the pixel under the
        seed is used.
        """
        _check_raster(image)
        _check_sensitivity(sensitivity)
        if not image.in_bounds(x, y):
            return None

        mode = mode or self._mode
        spec = self._registry.get(mode)
        with self._computing():
            start = time.perf_counter()
            processed, sx, sy = self._prepare(image, spec)
            h, w = processed.shape[:2]
            px = min(int(x / sx), w - 1)
            py = min(int(y / sy), h - 1)
            region = spec.extract_seeded_region(
                processed, px, py, sensitivity, rgb, ExtractionContext(self.config, self._pool),
            )
            elapsed = (time.perf_counter() - start) * 1000

        if region is None:
            logger.info("No region at (%s, %s) in %s mode (%.1fms)", x, y, mode.value, elapsed)
            return None
        logger.info("Region at (%s, %s) in %s mode: area %d (%.1fms)", x, y, mode.value, region.area, elapsed)
        return self._to_segment(0, region, sx, sy, spec.uses_contours)

    def process_frame(self, image: RasterImage) -> SegmentationResult | None:
        """Whole-image segmentation paced by the frame controller; None when skipped."""
        now = self._clock()
        if not self.frame_controller.should_process(now):
            return None
        self.frame_controller.on_frame_start(now)
        try:
            return self.segment(image)
        finally:
            self.frame_controller.on_frame_end(self._clock())

    def analyze_color(
        self,
        image: RasterImage,
        x: int,
        y: int,
        radius: int = 2,
        mode: Mode | None = None,
    ) -> ColorAnalysis | None:
        """Mean color in a (2r+1)^2 window around (x, y)."""
        _check_raster(image)
        if not image.in_bounds(x, y):
            return None
        mode = mode or self._mode
        x, y = int(x), int(y)

        key = f"color_{x}_{y}_{radius}_{self.result_cache.generate_key(image, mode, 0)}"
        cached = self.result_cache.get(key)
        if cached is not None:
            return cached

        rgb, count = window_mean_color(image.rgb, x, y, radius)
        analysis = ColorAnalysis(
            x=x,
            y=y,
            rgb=rgb,
            oklab=rgb_to_oklab(*rgb),
            metric="OKLAB" if mode is Mode.STREAMING else "CIEDE2000",
            descriptor=describe_color(rgb),
            sample_count=count,
        )
        self.result_cache.put(key, analysis)
        return analysis

    def color_difference(self, rgb1: RGB, rgb2: RGB, mode: Mode | None = None) -> float:
        """OKLAB distance in streaming mode, CIEDE2000 otherwise."""
        mode = mode or self._mode
        c1 = rgb_to_oklab(*rgb1)
        c2 = rgb_to_oklab(*rgb2)
        if mode is Mode.STREAMING:
            return oklab_distance(c1, c2)
        return ciede2000_distance(c1, c2)


def format_result_text(result: SegmentationResult) -> str:
    """Human-readable summary, one line per segment."""
    if not result.success:
        return f"Segmentation failed: {result.error}"
    mode = result.mode.value if result.mode else "unknown"
    lines = [f"{result.segment_count} segments ({mode}, {result.elapsed_ms:.1f}ms)"]
    for s in result.segments:
        b = s.bbox
        lines.append(
            f"  #{s.id:<3} {s.color.name:<20} {s.color.hex}  "
            f"box=({b.x},{b.y},{b.width}x{b.height})  area={s.area}  "
            f"contrast={s.color.contrast:.2f} {s.color.rating.value}"
        )
    return "\n".join(lines)
