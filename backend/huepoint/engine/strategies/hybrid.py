"""Hybrid strategy: color-family masks split by watershed, boxes only.

1. Bilateral + 3x3 Gaussian smoothing, Canny edges
2. Adaptive V/S thresholds split the image into dark, gray and 24 hue bins
3. Each family mask is cleaned, cut along edges and split into basins by a
   distance-transform watershed
4. Candidates pass a hierarchy filter as they are collected, then the
   merge / drop / NMS refinement
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage
from skimage.feature import canny
from skimage.segmentation import watershed

from huepoint.engine.colorspace import rgb_pixel_to_hsv8, rgb_to_hsv8
from huepoint.engine.config import HybridConfig
from huepoint.engine.models import BoundingBox, Mode, Region
from huepoint.engine.postprocess import add_with_hierarchy_filter, refine
from huepoint.engine.raster import gaussian_3x3, hsv_window_mask, smooth_edge_preserving, to_gray
from huepoint.engine.strategies.registry import ExtractionContext, StrategySpec, register_strategy
from huepoint.utils.contour import Component, external_components, largest_component
from huepoint.utils.morphology import close_mask, dilate, ellipse, label_components, normalized_distance, open_mask

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared preprocessing
# ---------------------------------------------------------------------------

def _smooth(rgb: NDArray[np.uint8], cfg: HybridConfig) -> NDArray[np.uint8]:
    return gaussian_3x3(smooth_edge_preserving(rgb, cfg.smooth_spatial, cfg.smooth_color))


def edge_mask(smoothed: NDArray[np.uint8], cfg: HybridConfig) -> NDArray[np.bool_]:
    gray = to_gray(smoothed).astype(np.float64)
    edges = canny(gray, sigma=0.5, low_threshold=cfg.canny_low, high_threshold=cfg.canny_high, mode="nearest")
    if cfg.edge_dilate_kernel > 1:
        edges = dilate(edges, ellipse(cfg.edge_dilate_kernel))
    return edges


def adaptive_thresholds(hsv: NDArray[np.uint8], cfg: HybridConfig) -> tuple[float, float]:
    """(v_thresh, s_thresh) from the image's mean value and saturation."""
    v_thresh = float(np.clip(hsv[..., 2].mean() * cfg.v_factor, cfg.v_min, cfg.v_max))
    s_thresh = float(np.clip(hsv[..., 1].mean() * cfg.s_factor, cfg.s_min, cfg.s_max))
    return v_thresh, s_thresh


def family_masks(
    hsv: NDArray[np.uint8],
    cfg: HybridConfig,
    out: NDArray[np.bool_],
) -> Iterator[tuple[str, NDArray[np.bool_]]]:
    """Yield (name, mask) for dark, gray and each hue bin.

    Every mask is written into ``out``; consume one before asking for the next.
    """
    v_thresh, s_thresh = adaptive_thresholds(hsv, cfg)
    hue = hsv[..., 0]
    bright = hsv[..., 2] >= v_thresh
    saturated = hsv[..., 1] >= s_thresh

    np.logical_not(bright, out=out)
    yield "dark", out
    np.logical_and(bright, ~saturated, out=out)
    yield "gray", out

    colored = bright & saturated
    step = 180.0 / cfg.hue_bins
    for i in range(cfg.hue_bins):
        lo = i * step
        if i == cfg.hue_bins - 1:
            in_bin = (hue >= lo) & (hue <= 180)
        else:
            in_bin = (hue >= lo) & (hue < lo + step)
        np.logical_and(colored, in_bin, out=out)
        yield f"hue{i}", out


def _mask_components(
    mask: NDArray[np.bool_],
    edges: NDArray[np.bool_],
    cfg: HybridConfig,
) -> list[Component]:
    kernel = ellipse(cfg.mask_kernel)
    clean = close_mask(open_mask(mask, kernel), kernel)
    clean &= ~edges
    if not clean.any():
        return []

    dist = normalized_distance(clean)
    peaks = dilate(dist > cfg.peak_threshold, kernel)
    markers, count = label_components(peaks, connectivity=8)

    # label count includes the background
    if not (1 < count + 1 <= cfg.max_watershed_labels):
        return external_components(clean)

    basins = watershed(-dist, markers, mask=clean)
    components = []
    for idx, sl in enumerate(ndimage.find_objects(basins), start=1):
        if sl is None:
            continue
        local = largest_component(basins[sl] == idx)
        if local is not None:
            components.append(local.offset(sl[1].start, sl[0].start))
    return components


def _to_region(comp: Component, smoothed: NDArray[np.uint8]) -> Region:
    return Region(
        bbox=BoundingBox(comp.x, comp.y, comp.width, comp.height),
        area=comp.area,
        color=comp.mean_color(smoothed),
    )


# ---------------------------------------------------------------------------
# Strategy entry points
# ---------------------------------------------------------------------------

def extract_regions(rgb: NDArray[np.uint8], ctx: ExtractionContext) -> list[Region]:
    cfg = ctx.config.hybrid
    post = ctx.config.postprocess
    start = time.perf_counter()

    h, w = rgb.shape[:2]
    smoothed = _smooth(rgb, cfg)
    edges = edge_mask(smoothed, cfg)
    hsv = rgb_to_hsv8(smoothed)
    min_area = cfg.min_area_fraction * w * h

    regions: list[Region] = []
    candidates = 0
    with ctx.pool.borrow("mask") as buffer:
        for name, mask in family_masks(hsv, cfg, buffer):
            if int(mask.sum()) <= min_area:
                continue
            for comp in _mask_components(mask, edges, cfg):
                if comp.area < min_area:
                    continue
                aspect = comp.width / comp.height
                if not (cfg.min_aspect < aspect < cfg.max_aspect):
                    continue
                candidates += 1
                regions = add_with_hierarchy_filter(regions, _to_region(comp, smoothed), post)
            logger.debug("Hybrid mask %s: %d regions so far", name, len(regions))

    regions = refine(regions, post)
    regions.sort(key=lambda r: r.area, reverse=True)
    regions = regions[: cfg.max_regions]
    logger.debug(
        "Hybrid: %d candidates -> %d regions in %.1fms",
        candidates, len(regions), (time.perf_counter() - start) * 1000,
    )
    return regions


def extract_seeded_region(
    rgb: NDArray[np.uint8],
    x: int,
    y: int,
    sensitivity: int,
    seed_rgb: tuple[int, int, int] | None,
    ctx: ExtractionContext,
) -> Region | None:
    """Seed-colored HSV window, then the watershed basin under the seed."""
    cfg = ctx.config.hybrid
    h, w = rgb.shape[:2]
    if not (0 <= x < w and 0 <= y < h):
        return None

    smoothed = _smooth(rgb, cfg)
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

    dist = normalized_distance(mask)
    markers, count = label_components(dist > cfg.seed_peak_threshold, connectivity=8)
    if count > 0:
        basins = watershed(-dist, markers, mask=mask)
        basin = int(basins[y, x])
        if basin == 0:
            return None
        comp = largest_component(basins == basin)
        return _to_region(comp, smoothed) if comp is not None else None

    for comp in external_components(mask):
        if comp.contains(x, y):
            return _to_region(comp, smoothed)
    return None


STRATEGY = register_strategy(StrategySpec(
    mode=Mode.HYBRID,
    extract_regions=extract_regions,
    extract_seeded_region=extract_seeded_region,
    processing_resolution=400,
    uses_contours=False,
    description="HSV family masks split by distance-transform watershed",
))
