"""Streaming strategy: quantized Lab connected components.

Built for live preview. The frame is halved, converted to 8-bit Lab and
each channel is cut into a few levels; every connected patch of one
quantized color is a candidate region. No smoothing and no contours.

Seeded queries run a fixed-range flood fill in Lab from the tapped pixel.
"""

from __future__ import annotations

import logging
import time

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from huepoint.engine.colorspace import rgb_to_lab8
from huepoint.engine.models import BoundingBox, Mode, Region
from huepoint.engine.raster import downscale_half, mask_bbox, masked_mean_color
from huepoint.engine.strategies.registry import ExtractionContext, StrategySpec, register_strategy
from huepoint.utils.morphology import label_components

logger = logging.getLogger(__name__)

# Regions are found at half resolution and scaled back by this factor.
_DOWNSCALE = 2


def quantize_lab(lab: NDArray[np.uint8], levels: int) -> NDArray[np.int32]:
    """Map each 8-bit Lab pixel to one of ``levels ** 3`` integer keys."""
    step = 256 // levels
    q = (lab // step).astype(np.int32)
    return q[..., 0] * levels * levels + q[..., 1] * levels + q[..., 2]


def extract_regions(rgb: NDArray[np.uint8], ctx: ExtractionContext) -> list[Region]:
    cfg = ctx.config.streaming
    start = time.perf_counter()

    small = downscale_half(rgb)
    keys = quantize_lab(rgb_to_lab8(small), cfg.quant_levels)
    flat_colors = [small[..., c].ravel().astype(np.float64) for c in range(3)]

    regions: list[Region] = []
    for key in np.unique(keys):
        labels, count = label_components(keys == key, connectivity=8)
        if count == 0:
            continue
        flat = labels.ravel()
        areas = np.bincount(flat, minlength=count + 1)
        sums = [np.bincount(flat, weights=ch, minlength=count + 1) for ch in flat_colors]

        for idx, sl in enumerate(ndimage.find_objects(labels), start=1):
            if sl is None:
                continue
            area = int(areas[idx])
            w = sl[1].stop - sl[1].start
            h = sl[0].stop - sl[0].start
            if area < cfg.min_area or w < cfg.min_side or h < cfg.min_side:
                continue
            r, g, b = (int(round(s[idx] / area)) for s in sums)
            regions.append(Region(
                bbox=BoundingBox(sl[1].start * _DOWNSCALE, sl[0].start * _DOWNSCALE, w * _DOWNSCALE, h * _DOWNSCALE),
                area=area * _DOWNSCALE * _DOWNSCALE,
                color=(r, g, b),
            ))

    regions.sort(key=lambda r: r.area, reverse=True)
    regions = regions[: cfg.max_regions]
    logger.debug("Streaming: %d regions in %.1fms", len(regions), (time.perf_counter() - start) * 1000)
    return regions


def extract_seeded_region(
    rgb: NDArray[np.uint8],
    x: int,
    y: int,
    sensitivity: int,
    seed_rgb: tuple[int, int, int] | None,
    ctx: ExtractionContext,
) -> Region | None:
    """Flood fill from (x, y) with a fixed Lab tolerance, 4-connected."""
    cfg = ctx.config.streaming
    h, w = rgb.shape[:2]
    if not (0 <= x < w and 0 <= y < h):
        return None

    lab = rgb_to_lab8(rgb).astype(np.int16)
    if seed_rgb is None:
        seed = lab[y, x]
    else:
        seed = rgb_to_lab8(np.array([[seed_rgb]], dtype=np.uint8))[0, 0].astype(np.int16)
    tolerance = cfg.seed_tolerance_base + cfg.seed_tolerance_per_sensitivity * sensitivity

    with ctx.pool.borrow("mask") as within, ctx.pool.borrow("labels") as labels:
        np.all(np.abs(lab - seed) <= tolerance, axis=-1, out=within)
        label_components(within, connectivity=4, output=labels)
        target = labels[y, x]
        if target == 0:
            return None
        region_mask = labels == target

    area = int(region_mask.sum())
    if area < cfg.seed_min_area:
        logger.debug("Seeded fill at (%d, %d) too small: %d px", x, y, area)
        return None

    bx, by, bw, bh = mask_bbox(region_mask)
    return Region(bbox=BoundingBox(bx, by, bw, bh), area=area, color=masked_mean_color(rgb, region_mask))


STRATEGY = register_strategy(StrategySpec(
    mode=Mode.STREAMING,
    extract_regions=extract_regions,
    extract_seeded_region=extract_seeded_region,
    processing_resolution=480,
    uses_contours=False,
    description="Quantized Lab connected components at half resolution",
))
