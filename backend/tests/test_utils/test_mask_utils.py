"""Tests for morphology, component and box helpers."""

from __future__ import annotations

import numpy as np

from huepoint.engine.models import BoundingBox
from huepoint.utils.contour import (
    boundary_polyline,
    external_components,
    largest_component,
    rdp_simplify,
    simplify_closed,
)
from huepoint.utils.geometry import aspect_ratio, intersection_area, iou, is_inside, union
from huepoint.utils.morphology import (
    close_mask,
    ellipse,
    label_components,
    normalized_distance,
    open_mask,
)


def _square_mask(size=30, x=10, y=5, side=10):
    mask = np.zeros((size, size), dtype=bool)
    mask[y : y + side, x : x + side] = True
    return mask


# -- Morphology --

def test_ellipse_kernel():
    k = ellipse(3)
    assert k.shape == (3, 3)
    assert not k[0, 0]
    assert k[1].all()
    assert ellipse(5).shape == (5, 5)


def test_open_removes_specks():
    mask = _square_mask()
    mask[25, 25] = True
    opened = open_mask(mask, ellipse(3))
    assert not opened[25, 25]
    assert opened[10, 15]


def test_close_bridges_gaps():
    mask = np.zeros((10, 10), dtype=bool)
    mask[2:8, 2:4] = True
    mask[2:8, 5:8] = True
    assert close_mask(mask, ellipse(3))[5, 4]


def test_open_keeps_border_regions():
    mask = np.ones((10, 10), dtype=bool)
    assert open_mask(mask, ellipse(5)).all()


def test_label_connectivity():
    mask = np.zeros((5, 5), dtype=bool)
    mask[1, 1] = mask[2, 2] = True
    assert label_components(mask, connectivity=8)[1] == 1
    assert label_components(mask, connectivity=4)[1] == 2


def test_label_into_buffer():
    out = np.empty((30, 30), dtype=np.int32)
    labels, count = label_components(_square_mask(), output=out)
    assert labels is out
    assert count == 1


def test_normalized_distance_peaks_inside():
    dist = normalized_distance(np.ones((9, 9), dtype=bool))
    assert dist.max() == 1.0
    assert dist[4, 4] == 1.0
    assert dist[0, 0] < dist[4, 4]
    assert normalized_distance(np.zeros((4, 4), dtype=bool)).max() == 0.0


# -- Components --

def test_external_components_fill_holes():
    mask = _square_mask()
    mask[8:12, 13:17] = False
    comps = external_components(mask)
    assert len(comps) == 1
    comp = comps[0]
    assert (comp.x, comp.y, comp.width, comp.height) == (10, 5, 10, 10)
    assert comp.area == 100


def test_largest_component_and_offset():
    mask = _square_mask()
    mask[25:28, 25:28] = True
    comp = largest_component(mask)
    assert comp.area == 100
    moved = comp.offset(5, 2)
    assert (moved.x, moved.y) == (15, 7)
    assert moved.contains(15, 7)
    assert not moved.contains(25, 7)
    assert largest_component(np.zeros((4, 4), dtype=bool)) is None


def test_component_mean_color():
    image = np.zeros((30, 30, 3), dtype=np.uint8)
    image[5:15, 10:20] = (10, 200, 30)
    comp = largest_component(_square_mask())
    assert comp.mean_color(image) == (10, 200, 30)


# -- Polylines --

def test_rdp_collinear_points():
    pts = np.array([[0, 0], [1, 0.1], [2, -0.1], [3, 0]], dtype=np.float64)
    assert len(rdp_simplify(pts, 0.5)) == 2


def test_rdp_keeps_corner():
    pts = np.array([[0, 0], [5, 0], [5, 5]], dtype=np.float64)
    assert len(rdp_simplify(pts, 0.5)) == 3


def test_simplify_closed_square_ring():
    ring = np.array(
        [[0, 0], [1, 0], [2, 0], [2, 1], [2, 2], [1, 2], [0, 2], [0, 1], [0, 0]],
        dtype=np.float64,
    )
    simplified = simplify_closed(ring, 0.1)
    assert 4 <= len(simplified) <= 5


def test_boundary_polyline_traces_square():
    comp = largest_component(_square_mask())
    line = comp.polyline(1.0)
    assert len(line) >= 4
    for x, y in line:
        assert 9 <= x <= 20
        assert 4 <= y <= 15
    assert boundary_polyline(np.zeros((3, 3), dtype=bool)) == ()


# -- Boxes --

def test_box_geometry():
    a = BoundingBox(0, 0, 10, 10)
    b = BoundingBox(5, 5, 10, 10)
    assert intersection_area(a, b) == 25
    assert iou(a, b) == 25 / 175
    assert iou(a, BoundingBox(20, 20, 5, 5)) == 0.0
    assert union(a, b) == BoundingBox(0, 0, 15, 15)
    assert is_inside(BoundingBox(1, 1, 8, 8), a)
    assert not is_inside(BoundingBox(1, 1, 9, 10), a)
    assert not is_inside(BoundingBox(-1, 0, 10, 10), a)
    assert not is_inside(b, a)
    assert aspect_ratio(BoundingBox(0, 0, 20, 5)) == 4.0


def test_scaled_box_keeps_shared_edges():
    left = BoundingBox(0, 0, 3, 5)
    right = BoundingBox(3, 0, 3, 5)
    sl, sr = left.scaled(1.5, 1.5), right.scaled(1.5, 1.5)
    assert sl.right == sr.x
    assert sr == BoundingBox(4, 0, 5, 7)
    assert BoundingBox(80, 80, 40, 40).scaled(2.0, 2.0) == BoundingBox(160, 160, 80, 80)
