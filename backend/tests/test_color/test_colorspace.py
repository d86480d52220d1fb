"""Tests for OKLAB, CIE-Lab, CIEDE2000 and WCAG math."""

from __future__ import annotations

import numpy as np
import pytest
from skimage.color import deltaE_ciede2000, rgb2lab

from huepoint.engine.colorspace import (
    OklabColor,
    ciede2000,
    ciede2000_distance,
    contrast_ratio,
    oklab_distance,
    oklab_to_rgb,
    rgb_array_to_oklab,
    rgb_pixel_to_hsv8,
    rgb_to_lab,
    rgb_to_lab8,
    rgb_to_oklab,
    wcag_luminance,
)
from huepoint.engine.models import ContrastRating


@pytest.mark.parametrize("rgb", [
    (0, 0, 0),
    (255, 255, 255),
    (255, 0, 0),
    (12, 200, 77),
    (3, 4, 5),
    (128, 128, 128),
    (250, 128, 114),
    (0, 0, 139),
])
def test_oklab_round_trip(rgb):
    back = oklab_to_rgb(rgb_to_oklab(*rgb))
    assert all(abs(a - b) <= 1 for a, b in zip(rgb, back))


def test_oklab_reference_values():
    red = rgb_to_oklab(255, 0, 0)
    assert red.L == pytest.approx(0.62796, abs=1e-3)
    assert red.a == pytest.approx(0.22486, abs=1e-3)
    assert red.b == pytest.approx(0.12585, abs=1e-3)

    white = rgb_to_oklab(255, 255, 255)
    assert white.L == pytest.approx(1.0, abs=1e-3)
    assert white.chroma < 1e-3


def test_out_of_gamut_is_clamped():
    r, g, b = oklab_to_rgb(OklabColor(0.9, 0.4, 0.4))
    assert all(0 <= c <= 255 for c in (r, g, b))


def test_hue_in_degrees():
    assert 0.0 <= rgb_to_oklab(0, 0, 255).hue < 360.0
    assert rgb_to_oklab(255, 0, 0).hue == pytest.approx(29.2, abs=1.0)


def test_oklab_distance_symmetric_and_zero():
    c1 = rgb_to_oklab(10, 120, 200)
    c2 = rgb_to_oklab(200, 40, 30)
    assert oklab_distance(c1, c1) == 0.0
    assert oklab_distance(c1, c2) == pytest.approx(oklab_distance(c2, c1))
    assert oklab_distance(c1, c2) > 0.1


def test_array_conversion_matches_scalar():
    pixels = np.array([[255, 0, 0], [0, 128, 0], [30, 60, 90]], dtype=np.uint8)
    arr = rgb_array_to_oklab(pixels)
    for row, px in zip(arr, pixels):
        scalar = rgb_to_oklab(*(int(c) for c in px))
        assert row == pytest.approx(scalar.as_tuple(), abs=1e-9)


# -- CIEDE2000 --

# Sharma, Wu & Dalal (2005) test data
SHARMA_PAIRS = [
    ((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485), 2.0425),
    ((50.0, 0.0, 0.0), (50.0, -1.0, 2.0), 2.3669),
    ((50.0, 2.5, 0.0), (73.0, 25.0, -18.0), 27.1492),
    ((60.2574, -34.0099, 36.2677), (60.4626, -34.1751, 39.4387), 1.2644),
    ((2.0776, 0.0795, -1.1350), (0.9033, -0.0636, -0.5514), 0.9082),
]


@pytest.mark.parametrize("lab1,lab2,expected", SHARMA_PAIRS)
def test_ciede2000_reference_pairs(lab1, lab2, expected):
    assert ciede2000(lab1, lab2) == pytest.approx(expected, rel=1e-4, abs=1e-4)
    assert ciede2000(lab2, lab1) == pytest.approx(expected, rel=1e-4, abs=1e-4)


def test_ciede2000_distance_on_oklab():
    c1 = rgb_to_oklab(255, 0, 0)
    c2 = rgb_to_oklab(0, 0, 255)
    assert ciede2000_distance(c1, c1) == pytest.approx(0.0, abs=1e-9)
    assert ciede2000_distance(c1, c2) == pytest.approx(ciede2000_distance(c2, c1))
    assert ciede2000_distance(c1, c2) > 20


def test_scalar_lab_and_ciede2000_match_image_conversion():
    rng = np.random.default_rng(5)
    pixels = rng.integers(0, 256, size=(2, 20, 3), dtype=np.uint8)
    lab = rgb2lab(pixels)
    expected = deltaE_ciede2000(lab[0], lab[1])
    for i in range(pixels.shape[1]):
        lab1 = rgb_to_lab(*(int(c) for c in pixels[0, i]))
        lab2 = rgb_to_lab(*(int(c) for c in pixels[1, i]))
        assert lab1 == pytest.approx(tuple(lab[0, i]), abs=1e-9)
        assert ciede2000(lab1, lab2) == pytest.approx(expected[i], abs=1e-9)


def test_rgb_to_lab_white_and_black():
    L, a, b = rgb_to_lab(255, 255, 255)
    assert L == pytest.approx(100.0, abs=0.01)
    assert a == pytest.approx(0.0, abs=0.01)
    assert b == pytest.approx(0.0, abs=0.01)
    assert rgb_to_lab(0, 0, 0)[0] == pytest.approx(0.0, abs=1e-6)


# -- WCAG --

def test_luminance_extremes():
    assert wcag_luminance((0, 0, 0)) == 0.0
    assert wcag_luminance((255, 255, 255)) == pytest.approx(1.0)


def test_contrast_ratio():
    assert contrast_ratio((0, 0, 0)) == pytest.approx(21.0)
    assert contrast_ratio((255, 255, 255)) == pytest.approx(1.0)
    assert contrast_ratio((255, 0, 0)) == pytest.approx(4.0, abs=0.01)


@pytest.mark.parametrize("ratio,rating", [
    (21.0, ContrastRating.AAA),
    (7.0, ContrastRating.AAA),
    (6.99, ContrastRating.AA),
    (4.5, ContrastRating.AA),
    (3.0, ContrastRating.A),
    (2.99, ContrastRating.LOW),
])
def test_contrast_rating_thresholds(ratio, rating):
    assert ContrastRating.from_ratio(ratio) is rating


# -- 8-bit image spaces --

def test_hsv8_ranges():
    assert rgb_pixel_to_hsv8((255, 0, 0)) == (0, 255, 255)
    assert rgb_pixel_to_hsv8((0, 0, 255)) == (120, 255, 255)
    h, s, v = rgb_pixel_to_hsv8((128, 128, 128))
    assert s == 0 and v == 128


def test_lab8_neutral_offsets():
    lab = rgb_to_lab8(np.full((2, 2, 3), 128, dtype=np.uint8))
    assert lab.dtype == np.uint8
    assert int(lab[0, 0, 1]) == 128
    assert int(lab[0, 0, 2]) == 128
    assert 130 <= int(lab[0, 0, 0]) <= 140
