"""External components, boundary polylines, RDP simplification."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage
from skimage.measure import find_contours

from huepoint.utils.morphology import EIGHT_CONNECTED


@dataclass
class Component:
    """One outer component of a mask, holes filled."""
    slices: tuple[slice, slice]
    mask: NDArray[np.bool_]                # local mask, shape of the bbox
    area: int

    @property
    def x(self) -> int:
        return self.slices[1].start

    @property
    def y(self) -> int:
        return self.slices[0].start

    @property
    def width(self) -> int:
        return self.slices[1].stop - self.slices[1].start

    @property
    def height(self) -> int:
        return self.slices[0].stop - self.slices[0].start

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def offset(self, dx: int, dy: int) -> Component:
        rows, cols = self.slices
        return Component(
            slices=(slice(rows.start + dy, rows.stop + dy), slice(cols.start + dx, cols.stop + dx)),
            mask=self.mask,
            area=self.area,
        )

    def mean_color(self, image: NDArray[np.uint8]) -> tuple[int, int, int]:
        pixels = image[self.slices][self.mask]
        r, g, b = (int(round(v)) for v in pixels[:, :3].mean(axis=0))
        return (r, g, b)

    def polyline(self, epsilon: float = 1.0) -> tuple[tuple[float, float], ...]:
        return boundary_polyline(self.mask, (self.x, self.y), epsilon)


def external_components(mask: NDArray[np.bool_]) -> list[Component]:
    """Outer boundaries of a mask as components, in raster order.

    Holes are filled first, so a ring yields a single solid component.
    """
    if not mask.any():
        return []
    filled = ndimage.binary_fill_holes(mask)
    labels, count = ndimage.label(filled, structure=EIGHT_CONNECTED)
    areas = np.bincount(labels.ravel(), minlength=count + 1)
    components = []
    for idx, sl in enumerate(ndimage.find_objects(labels), start=1):
        if sl is None:
            continue
        components.append(Component(slices=sl, mask=labels[sl] == idx, area=int(areas[idx])))
    return components


def largest_component(mask: NDArray[np.bool_]) -> Component | None:
    components = external_components(mask)
    if not components:
        return None
    return max(components, key=lambda c: c.area)


def rdp_simplify(
    points: NDArray[np.float64],
    epsilon: float,
) -> NDArray[np.float64]:
    """Ramer-Douglas-Peucker line simplification.

    Reduces point count while preserving shape within epsilon tolerance.
    """
    if len(points) <= 2:
        return points

    start = points[0]
    end = points[-1]
    line_vec = end - start
    line_len = np.linalg.norm(line_vec)

    if line_len < 1e-10:
        distances = np.linalg.norm(points - start, axis=1)
    else:
        line_unit = line_vec / line_len
        vecs = points - start
        closest = start + np.outer(np.dot(vecs, line_unit), line_unit)
        distances = np.linalg.norm(points - closest, axis=1)

    max_idx = int(np.argmax(distances))
    if distances[max_idx] > epsilon:
        left = rdp_simplify(points[: max_idx + 1], epsilon)
        right = rdp_simplify(points[max_idx:], epsilon)
        return np.vstack([left[:-1], right])
    return points[[0, -1]]


def simplify_closed(points: NDArray[np.float64], epsilon: float) -> NDArray[np.float64]:
    """RDP for a closed ring: split at the point farthest from the start."""
    if len(points) <= 3:
        return points
    far = int(np.argmax(np.linalg.norm(points - points[0], axis=1)))
    if far == 0:
        return points[[0]]
    first = rdp_simplify(points[: far + 1], epsilon)
    second = rdp_simplify(points[far:], epsilon)
    return np.vstack([first[:-1], second])


def boundary_polyline(
    local_mask: NDArray[np.bool_],
    offset: tuple[int, int] = (0, 0),
    epsilon: float = 1.0,
) -> tuple[tuple[float, float], ...]:
    """Ordered (x, y) outer boundary of a local mask, shifted by ``offset``."""
    padded = np.pad(local_mask, 1, mode="constant", constant_values=False).astype(np.float64)
    rings = find_contours(padded, 0.5)
    if not rings:
        return ()
    ring = max(rings, key=len)
    # (row, col) -> (x, y), undo the padding
    xy = ring[:, ::-1] - 1.0
    xy[:, 0] += offset[0]
    xy[:, 1] += offset[1]
    simplified = simplify_closed(xy, epsilon)
    return tuple((round(float(x), 1), round(float(y), 1)) for x, y in simplified)
