"""Region post-processing: hierarchy filter, merge, degenerate drop, NMS.

All functions take and return plain lists of Region; inputs are never
mutated in place.
"""

from __future__ import annotations

import logging

from huepoint.engine.colorspace import rgb_distance
from huepoint.engine.config import PostprocessConfig
from huepoint.engine.models import Region
from huepoint.utils.geometry import iou, is_inside, union

logger = logging.getLogger(__name__)

_DEFAULTS = PostprocessConfig()


def add_with_hierarchy_filter(
    regions: list[Region],
    new: Region,
    cfg: PostprocessConfig = _DEFAULTS,
) -> list[Region]:
    """Append ``new`` unless it duplicates an existing region.

    Existing regions that sit inside ``new`` and are clearly smaller are
    replaced by it.
    """
    for existing in regions:
        if iou(existing.bbox, new.bbox) > cfg.duplicate_iou:
            return list(regions)

    kept = [
        r for r in regions
        if not (
            is_inside(r.bbox, new.bbox, cfg.inside_tolerance)
            and r.area < cfg.inside_area_ratio * new.area
        )
    ]
    kept.append(new)
    return kept


def _should_merge(a: Region, b: Region, cfg: PostprocessConfig) -> bool:
    if iou(a.bbox, b.bbox) <= cfg.merge_iou:
        return False
    if rgb_distance(a.color, b.color) >= cfg.merge_color_dist:
        return False
    if b.area <= 0:
        return False
    ratio = a.area / b.area
    return cfg.merge_area_ratio_min <= ratio <= cfg.merge_area_ratio_max


def merge_pair(a: Region, b: Region) -> Region:
    """Union box, summed area, area-weighted mean color. Contours are dropped."""
    total = a.area + b.area
    if total > 0:
        color = tuple(int(round((ca * a.area + cb * b.area) / total)) for ca, cb in zip(a.color, b.color))
    else:
        color = a.color
    return Region(bbox=union(a.bbox, b.bbox), area=total, color=color)  # type: ignore[arg-type]


def merge_similar(regions: list[Region], cfg: PostprocessConfig = _DEFAULTS) -> list[Region]:
    """Repeated pairwise sweeps; stops early once a sweep merges nothing.

    A region that grows is compared again against every other region,
    earlier ones included, before the sweep moves on.
    """
    merged = list(regions)
    for iteration in range(cfg.merge_iterations):
        changed = False
        i = 0
        while i < len(merged):
            j = 0
            while j < len(merged):
                if j != i and _should_merge(merged[i], merged[j], cfg):
                    merged[i] = merge_pair(merged[i], merged[j])
                    del merged[j]
                    if j < i:
                        i -= 1
                    changed = True
                    j = 0
                else:
                    j += 1
            i += 1
        if not changed:
            break
        logger.debug("Merge sweep %d: %d regions", iteration + 1, len(merged))
    return merged


def drop_degenerate(regions: list[Region], cfg: PostprocessConfig = _DEFAULTS) -> list[Region]:
    kept = []
    for r in regions:
        w, h = r.bbox.width, r.bbox.height
        if w <= 0 or h <= 0:
            continue
        if max(w, h) / min(w, h) > cfg.drop_max_aspect:
            continue
        if r.area < cfg.drop_min_area:
            continue
        kept.append(r)
    return kept


def non_maximum_suppression(regions: list[Region], threshold: float = _DEFAULTS.nms_iou) -> list[Region]:
    """Keep larger regions; drop any that overlap a kept one by IoU > threshold."""
    kept: list[Region] = []
    for r in sorted(regions, key=lambda r: r.area, reverse=True):
        if all(iou(r.bbox, k.bbox) <= threshold for k in kept):
            kept.append(r)
    return kept


def refine(regions: list[Region], cfg: PostprocessConfig = _DEFAULTS) -> list[Region]:
    """merge -> drop -> NMS."""
    merged = merge_similar(regions, cfg)
    dropped = drop_degenerate(merged, cfg)
    final = non_maximum_suppression(dropped, cfg.nms_iou)
    logger.debug("Refined %d -> %d -> %d -> %d regions", len(regions), len(merged), len(dropped), len(final))
    return final
