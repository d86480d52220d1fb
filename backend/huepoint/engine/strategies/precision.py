"""Precision strategy: multi-threshold contours on an edge-preserving blur.

The smoothed image is binarized at several gray levels and every outer
contour at every level becomes a region. Overlapping regions from different
levels are all kept, so a dark object on a mid-gray wall appears both as its
own contour and inside the wall's.
"""

from __future__ import annotations

import logging
import time

import numpy as np
from numpy.typing import NDArray

from huepoint.engine.colorspace import rgb_pixel_to_hsv8, rgb_to_hsv8
from huepoint.engine.models import BoundingBox, Mode, Region
from huepoint.engine.raster import hsv_window_mask, smooth_edge_preserving, to_gray
from huepoint.engine.strategies.registry import ExtractionContext, StrategySpec, register_strategy
from huepoint.utils.contour import Component, external_components
from huepoint.utils.morphology import close_mask, ellipse, open_mask

logger = logging.getLogger(__name__)


def _to_region(comp: Component, smoothed: NDArray[np.uint8], epsilon: float) -> Region:
    return Region(
        bbox=BoundingBox(comp.x, comp.y, comp.width, comp.height),
        area=comp.area,
        color=comp.mean_color(smoothed),
        contour=comp.polyline(epsilon),
    )


def extract_regions(rgb: NDArray[np.uint8], ctx: ExtractionContext) -> list[Region]:
    cfg = ctx.config.precision
    start = time.perf_counter()

    smoothed = smooth_edge_preserving(rgb, cfg.smooth_spatial, cfg.smooth_color)
    gray = to_gray(smoothed)
    kernel = ellipse(cfg.open_kernel)

    regions: list[Region] = []
    with ctx.pool.borrow("mask") as binary:
        for threshold in cfg.thresholds:
            np.greater(gray, threshold, out=binary)
            for comp in external_components(open_mask(binary, kernel)):
                if comp.area < cfg.min_area:
                    continue
                regions.append(_to_region(comp, smoothed, cfg.contour_epsilon))

    regions.sort(key=lambda r: r.area, reverse=True)
    regions = regions[: cfg.max_regions]
    logger.debug("Precision: %d regions in %.1fms", len(regions), (time.perf_counter() - start) * 1000)
    return regions


def extract_seeded_region(
    rgb: NDArray[np.uint8],
    x: int,
    y: int,
    sensitivity: int,
    seed_rgb: tuple[int, int, int] | None,
    ctx: ExtractionContext,
) -> Region | None:
    """HSV window around the seed color, cleaned, first contour covering the seed."""
    cfg = ctx.config.precision
    h, w = rgb.shape[:2]
    if not (0 <= x < w and 0 <= y < h):
        return None

    smoothed = smooth_edge_preserving(rgb, cfg.smooth_spatial, cfg.smooth_color)
    hsv = rgb_to_hsv8(smoothed)
    seed_hsv = rgb_pixel_to_hsv8(seed_rgb) if seed_rgb is not None else tuple(int(c) for c in hsv[y, x])

    factor = sensitivity / 50.0
    mask = hsv_window_mask(
        hsv, seed_hsv,
        cfg.seed_hue_range * factor,
        cfg.seed_sat_range * factor,
        cfg.seed_val_range * factor,
    )
    kernel = ellipse(cfg.seed_kernel)
    mask = open_mask(close_mask(mask, kernel), kernel)

    for comp in external_components(mask):
        if comp.contains(x, y):
            return _to_region(comp, smoothed, cfg.contour_epsilon)
    logger.debug("No contour contains seed (%d, %d)", x, y)
    return None


STRATEGY = register_strategy(StrategySpec(
    mode=Mode.PRECISION,
    extract_regions=extract_regions,
    extract_seeded_region=extract_seeded_region,
    processing_resolution=200,
    uses_contours=True,
    description="Multi-threshold external contours on a bilateral-smoothed image",
))
