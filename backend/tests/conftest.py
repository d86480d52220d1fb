"""Shared test fixtures."""

from __future__ import annotations

import base64
import io

import numpy as np
import pytest
from PIL import Image

from huepoint.engine.buffer_pool import BufferPool
from huepoint.engine.config import SegmentationConfig
from huepoint.engine.engine import SegmentationEngine
from huepoint.engine.raster import RasterImage
from huepoint.engine.strategies import ExtractionContext


# Synthetic scenes

GRAY = (128, 128, 128)
RED = (255, 0, 0)

IMAGE_SIZE = 200
# (x, y, width, height) of the red square in the 200x200 scene
SQUARE = (80, 80, 40, 40)
SQUARE_CENTER = (100, 100)


def make_red_square(size: int = IMAGE_SIZE) -> np.ndarray:
    img = np.full((size, size, 3), GRAY, dtype=np.uint8)
    x, y, w, h = SQUARE
    img[y : y + h, x : x + w] = RED
    return img


def make_uniform(size: int = 100, color: tuple[int, int, int] = GRAY) -> np.ndarray:
    return np.full((size, size, 3), color, dtype=np.uint8)


def to_base64_png(pixels: np.ndarray) -> str:
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def assert_box_close(bbox, expected: tuple[int, int, int, int], tol: int = 2) -> None:
    x, y, w, h = expected
    assert abs(bbox.x - x) <= tol, bbox
    assert abs(bbox.y - y) <= tol, bbox
    assert abs(bbox.right - (x + w)) <= tol, bbox
    assert abs(bbox.bottom - (y + h)) <= tol, bbox


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 10_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def red_square() -> RasterImage:
    return RasterImage.from_array(make_red_square())


@pytest.fixture
def uniform_image() -> RasterImage:
    return RasterImage.from_array(make_uniform())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> SegmentationEngine:
    return SegmentationEngine(clock=clock)


def make_context(width: int = IMAGE_SIZE, height: int = IMAGE_SIZE) -> ExtractionContext:
    return ExtractionContext(config=SegmentationConfig(), pool=BufferPool(width, height))
