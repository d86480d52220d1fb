"""Color vision deficiency simulation.

Each vision type is a fixed 3x3 matrix (Machado-style approximation)
applied to normalized RGB.
"""

from __future__ import annotations

import enum
import math

import numpy as np
from numpy.typing import NDArray

from huepoint.engine.colorspace import RGB
from huepoint.engine.color_names import color_name


class VisionType(str, enum.Enum):
    NORMAL = "normal"
    PROTANOPIA = "protanopia"
    DEUTERANOPIA = "deuteranopia"
    TRITANOPIA = "tritanopia"
    PROTANOMALY = "protanomaly"
    DEUTERANOMALY = "deuteranomaly"
    TRITANOMALY = "tritanomaly"
    ACHROMATOPSIA = "achromatopsia"

    @property
    def label(self) -> str:
        return self.value


_MATRICES: dict[VisionType, NDArray[np.float64]] = {
    VisionType.NORMAL: np.eye(3),
    VisionType.PROTANOPIA: np.array([
        [0.567, 0.433, 0.0],
        [0.558, 0.442, 0.0],
        [0.0, 0.242, 0.758],
    ]),
    VisionType.DEUTERANOPIA: np.array([
        [0.625, 0.375, 0.0],
        [0.7, 0.3, 0.0],
        [0.0, 0.3, 0.7],
    ]),
    VisionType.TRITANOPIA: np.array([
        [0.95, 0.05, 0.0],
        [0.0, 0.433, 0.567],
        [0.0, 0.475, 0.525],
    ]),
    VisionType.PROTANOMALY: np.array([
        [0.817, 0.183, 0.0],
        [0.333, 0.667, 0.0],
        [0.0, 0.125, 0.875],
    ]),
    VisionType.DEUTERANOMALY: np.array([
        [0.8, 0.2, 0.0],
        [0.258, 0.742, 0.0],
        [0.0, 0.142, 0.858],
    ]),
    VisionType.TRITANOMALY: np.array([
        [0.967, 0.033, 0.0],
        [0.0, 0.733, 0.267],
        [0.0, 0.183, 0.817],
    ]),
    # luminance only
    VisionType.ACHROMATOPSIA: np.array([
        [0.299, 0.587, 0.114],
        [0.299, 0.587, 0.114],
        [0.299, 0.587, 0.114],
    ]),
}

# Euclidean RGB distance above which two simulated colors stay distinct.
_DISTINGUISHABLE_RGB_DIST = 50.0


def matrix_for(vision: VisionType) -> NDArray[np.float64]:
    return _MATRICES[vision]


def transform_color(rgb: RGB, vision: VisionType) -> RGB:
    c = np.array(rgb, dtype=np.float64) / 255.0
    out = np.clip(_MATRICES[vision] @ c, 0.0, 1.0) * 255.0
    r, g, b = (int(round(v)) for v in out)
    return (r, g, b)


def simulate_image(image: NDArray[np.uint8], vision: VisionType) -> NDArray[np.uint8]:
    """Return a simulated copy of an H x W x 3|4 image. Alpha passes through."""
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected H x W x 3|4 image, got shape {image.shape}")
    out = image.copy()
    rgb = image[..., :3].astype(np.float64) / 255.0
    simulated = np.clip(rgb @ _MATRICES[vision].T, 0.0, 1.0) * 255.0
    out[..., :3] = np.rint(simulated).astype(np.uint8)
    return out


def adapted_color_name(rgb: RGB, vision: VisionType) -> str:
    if vision is VisionType.NORMAL:
        return color_name(rgb)
    return f"{color_name(transform_color(rgb, vision))} (as seen with {vision.label})"


def are_distinguishable(rgb1: RGB, rgb2: RGB, vision: VisionType) -> bool:
    t1 = transform_color(rgb1, vision)
    t2 = transform_color(rgb2, vision)
    return math.dist(t1, t2) > _DISTINGUISHABLE_RGB_DIST
