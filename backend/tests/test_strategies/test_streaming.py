"""Tests for the streaming (quantized Lab) strategy."""

from __future__ import annotations

import numpy as np

from huepoint.engine.config import SegmentationConfig
from huepoint.engine.strategies import ExtractionContext, get_registry
from huepoint.engine.strategies.streaming import extract_regions, extract_seeded_region, quantize_lab
from huepoint.engine.models import Mode
from huepoint.engine.buffer_pool import BufferPool
from tests.conftest import (
    RED,
    SQUARE,
    SQUARE_CENTER,
    assert_box_close,
    make_context,
    make_red_square,
    make_uniform,
)


def test_registered_as_streaming():
    spec = get_registry().get(Mode.STREAMING)
    assert spec.processing_resolution == 480
    assert not spec.uses_contours


def test_quantize_lab_has_64_keys():
    lab = np.random.default_rng(0).integers(0, 256, size=(20, 20, 3), dtype=np.uint8)
    keys = quantize_lab(lab, 4)
    assert keys.min() >= 0
    assert keys.max() < 64
    assert quantize_lab(np.array([[[255, 255, 255]]], dtype=np.uint8), 4)[0, 0] == 63


def test_red_square_found():
    regions = extract_regions(make_red_square(), make_context())
    assert len(regions) == 2
    background, square = regions
    assert background.area > square.area
    assert (square.bbox.x, square.bbox.y, square.bbox.width, square.bbox.height) == SQUARE
    assert square.area == 1600
    assert square.color == RED
    assert square.contour == ()


def test_uniform_image_single_region():
    regions = extract_regions(make_uniform(100), make_context(100, 100))
    assert len(regions) == 1
    assert regions[0].area == 10000


def test_small_patches_dropped():
    img = make_uniform(200)
    img[10:24, 10:24] = RED        # 7x7 after halving, below the 10 px side
    regions = extract_regions(img, make_context())
    assert len(regions) == 1


def test_region_cap():
    cfg = SegmentationConfig()
    cfg.streaming.max_regions = 1
    ctx = ExtractionContext(config=cfg, pool=BufferPool(200, 200))
    regions = extract_regions(make_red_square(), ctx)
    assert len(regions) == 1
    assert regions[0].bbox.width == 200


class TestSeeded:
    def test_flood_fill_red_square(self):
        x, y = SQUARE_CENTER
        region = extract_seeded_region(make_red_square(), x, y, 20, None, make_context())
        assert region is not None
        assert_box_close(region.bbox, SQUARE, tol=0)
        assert region.area == 1600
        assert region.color == RED

    def test_sensitivity_is_monotonic(self):
        img = make_red_square()
        x, y = SQUARE_CENTER
        areas = []
        for sensitivity in (0, 20, 50, 100):
            region = extract_seeded_region(img, x, y, sensitivity, None, make_context())
            areas.append(region.area if region else 0)
        assert areas == sorted(areas)
        assert areas[-1] == 200 * 200

    def test_tiny_region_rejected(self):
        img = make_uniform(200)
        img[50:55, 50:55] = RED
        assert extract_seeded_region(img, 52, 52, 0, None, make_context()) is None

    def test_out_of_bounds(self):
        assert extract_seeded_region(make_red_square(), 200, 200, 50, None, make_context()) is None

    def test_seed_color_override(self):
        x, y = SQUARE_CENTER
        region = extract_seeded_region(make_red_square(), x, y, 10, RED, make_context())
        assert region is not None
        assert region.area == 1600

    def test_pool_buffers_returned(self):
        ctx = make_context()
        x, y = SQUARE_CENTER
        extract_seeded_region(make_red_square(), x, y, 20, None, ctx)
        assert ctx.pool.free_count("mask") == 1
        assert ctx.pool.free_count("labels") == 1
