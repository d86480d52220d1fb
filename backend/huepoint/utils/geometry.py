"""Leaf-node box geometry helpers. No strategy imports."""

from __future__ import annotations

from huepoint.engine.models import BoundingBox


def intersection_area(a: BoundingBox, b: BoundingBox) -> int:
    w = min(a.right, b.right) - max(a.x, b.x)
    h = min(a.bottom, b.bottom) - max(a.y, b.y)
    if w <= 0 or h <= 0:
        return 0
    return w * h


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """Intersection over union of two boxes, 0.0 when either is empty."""
    inter = intersection_area(a, b)
    union_area = a.area + b.area - inter
    if union_area <= 0:
        return 0.0
    return inter / union_area


def is_inside(inner: BoundingBox, outer: BoundingBox, tol: int = 1) -> bool:
    """True when ``inner`` sits at least ``tol`` px inside every edge of ``outer``."""
    return (
        inner.x >= outer.x + tol
        and inner.y >= outer.y + tol
        and inner.right <= outer.right - tol
        and inner.bottom <= outer.bottom - tol
    )


def union(a: BoundingBox, b: BoundingBox) -> BoundingBox:
    x = min(a.x, b.x)
    y = min(a.y, b.y)
    return BoundingBox(x, y, max(a.right, b.right) - x, max(a.bottom, b.bottom) - y)


def aspect_ratio(box: BoundingBox) -> float:
    if box.height <= 0:
        return float("inf")
    return box.width / box.height
