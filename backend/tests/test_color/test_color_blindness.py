"""Tests for color vision deficiency simulation."""

from __future__ import annotations

import numpy as np
import pytest

from huepoint.engine.color_blindness import (
    VisionType,
    adapted_color_name,
    are_distinguishable,
    matrix_for,
    simulate_image,
    transform_color,
)


def test_every_vision_has_a_matrix():
    for vision in VisionType:
        assert matrix_for(vision).shape == (3, 3)


def test_normal_is_identity():
    assert transform_color((12, 200, 77), VisionType.NORMAL) == (12, 200, 77)


def test_achromatopsia_is_gray():
    r, g, b = transform_color((200, 50, 10), VisionType.ACHROMATOPSIA)
    assert r == g == b


def test_white_stays_white():
    for vision in VisionType:
        assert transform_color((255, 255, 255), vision) == (255, 255, 255)


def test_same_luma_collapses_without_color_vision():
    red = (255, 0, 0)
    green = (0, 130, 0)
    assert are_distinguishable(red, green, VisionType.NORMAL)
    assert not are_distinguishable(red, green, VisionType.ACHROMATOPSIA)


def test_adapted_name_mentions_vision():
    name = adapted_color_name((255, 0, 0), VisionType.PROTANOPIA)
    assert name.endswith("(as seen with protanopia)")
    assert adapted_color_name((255, 0, 0), VisionType.NORMAL) == "red"


def test_simulate_image_keeps_alpha_and_source():
    img = np.zeros((4, 5, 4), dtype=np.uint8)
    img[..., 0] = 255
    img[..., 3] = 77
    before = img.copy()

    out = simulate_image(img, VisionType.DEUTERANOPIA)

    assert out.shape == img.shape
    assert np.array_equal(img, before)
    assert np.all(out[..., 3] == 77)
    assert tuple(out[0, 0, :3]) == transform_color((255, 0, 0), VisionType.DEUTERANOPIA)


def test_simulate_image_rejects_bad_shape():
    with pytest.raises(ValueError):
        simulate_image(np.zeros((4, 4), dtype=np.uint8), VisionType.NORMAL)
