"""Color space math: sRGB, OKLAB, CIE-Lab, CIEDE2000, WCAG contrast.

Scalar functions work on a single (r, g, b) triple of 0-255 ints and are the
source of truth for naming, merging and contrast. The array helpers at the
bottom convert whole images for the extraction strategies.

OKLAB reference: Björn Ottosson, "A perceptual color space for image
processing" (2020). CIEDE2000 reference: Sharma, Wu & Dalal (2005).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from skimage.color import deltaE_ciede2000, rgb2hsv, rgb2lab


RGB = tuple[int, int, int]

WHITE: RGB = (255, 255, 255)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Linear sRGB -> LMS (cone response)
_M1 = np.array([
    [0.4122214708, 0.5363325363, 0.0514459929],
    [0.2119034982, 0.6806995451, 0.1073969566],
    [0.0883024619, 0.2817188376, 0.6299787005],
])

# Non-linear LMS' -> OKLAB
_M2 = np.array([
    [0.2104542553, 0.7936177850, -0.0040720468],
    [1.9779984951, -2.4285922050, 0.4505937099],
    [0.0259040371, 0.7827717662, -0.8086757660],
])

# OKLAB -> LMS' (rows: l', m', s'; columns: L, a, b)
_M2_INV = np.array([
    [1.0, 0.3963377774, 0.2158037573],
    [1.0, -0.1055613458, -0.0638541728],
    [1.0, -0.0894841775, -1.2914855480],
])

# LMS -> linear sRGB
_M1_INV = np.array([
    [4.0767416621, -3.3077115913, 0.2309699292],
    [-1.2684380046, 2.6097574011, -0.3413193965],
    [-0.0041960863, -0.7034186147, 1.7076147010],
])

# WCAG 2.0 relative luminance weights (Rec. 709 primaries)
_WCAG_WEIGHTS = (0.2126, 0.7152, 0.0722)
_WCAG_KNEE = 0.03928


# ---------------------------------------------------------------------------
# OKLAB value type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OklabColor:
    """A color in OKLAB: L in [0, 1], a and b roughly in [-0.4, 0.4]."""
    L: float
    a: float
    b: float

    @property
    def chroma(self) -> float:
        return math.hypot(self.a, self.b)

    @property
    def hue(self) -> float:
        """Hue angle in degrees, [0, 360)."""
        return math.degrees(math.atan2(self.b, self.a)) % 360.0

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.L, self.a, self.b)


# ---------------------------------------------------------------------------
# Gamma
# ---------------------------------------------------------------------------

def srgb_to_linear(c: float) -> float:
    """Decode one sRGB channel in [0, 1] to linear light."""
    if c <= 0.04045:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def linear_to_srgb(c: float) -> float:
    """Encode one linear channel to sRGB in [0, 1] (unclamped)."""
    if c <= 0.0031308:
        return 12.92 * c
    return 1.055 * (c ** (1.0 / 2.4)) - 0.055


def _clamp_byte(v: float) -> int:
    return max(0, min(255, int(round(v))))


# ---------------------------------------------------------------------------
# Scalar conversions
# ---------------------------------------------------------------------------

def rgb_to_oklab(r: int, g: int, b: int) -> OklabColor:
    linear = np.array([srgb_to_linear(r / 255.0), srgb_to_linear(g / 255.0), srgb_to_linear(b / 255.0)])
    lms = _M1 @ linear
    lms_ = np.cbrt(lms)
    L, a, b_ = _M2 @ lms_
    return OklabColor(float(L), float(a), float(b_))


def oklab_to_rgb(color: OklabColor) -> RGB:
    """Inverse of rgb_to_oklab. Out-of-gamut channels are clamped to 0-255."""
    lms_ = _M2_INV @ np.array(color.as_tuple())
    lms = lms_ ** 3
    linear = _M1_INV @ lms
    r, g, b = (_clamp_byte(linear_to_srgb(float(c)) * 255.0) for c in linear)
    return (r, g, b)


def rgb_to_lab(r: int, g: int, b: int) -> tuple[float, float, float]:
    """sRGB -> CIE-Lab (D65)."""
    L, a, b_ = rgb2lab(np.array([[[r, g, b]]], dtype=np.uint8))[0, 0]
    return (float(L), float(a), float(b_))


# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------

def oklab_distance(c1: OklabColor, c2: OklabColor) -> float:
    return math.sqrt((c1.L - c2.L) ** 2 + (c1.a - c2.a) ** 2 + (c1.b - c2.b) ** 2)


def ciede2000(lab1: tuple[float, float, float], lab2: tuple[float, float, float]) -> float:
    """CIEDE2000 color difference between two CIE-Lab colors (kL = kC = kH = 1)."""
    return float(deltaE_ciede2000(np.asarray(lab1, dtype=np.float64), np.asarray(lab2, dtype=np.float64)))


def ciede2000_distance(c1: OklabColor, c2: OklabColor) -> float:
    """CIEDE2000 between two OKLAB colors, measured through their sRGB values."""
    return ciede2000(rgb_to_lab(*oklab_to_rgb(c1)), rgb_to_lab(*oklab_to_rgb(c2)))


# ---------------------------------------------------------------------------
# WCAG
# ---------------------------------------------------------------------------

def wcag_luminance(rgb: RGB) -> float:
    def channel(v: int) -> float:
        c = v / 255.0
        return c / 12.92 if c <= _WCAG_KNEE else ((c + 0.055) / 1.055) ** 2.4

    return sum(w * channel(v) for w, v in zip(_WCAG_WEIGHTS, rgb))


def contrast_ratio(rgb1: RGB, rgb2: RGB = WHITE) -> float:
    """WCAG contrast ratio, 1.0 (identical) to 21.0 (black on white)."""
    l1 = wcag_luminance(rgb1)
    l2 = wcag_luminance(rgb2)
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)


def rgb_distance(rgb1: RGB, rgb2: RGB) -> float:
    return math.sqrt(sum((int(p) - int(q)) ** 2 for p, q in zip(rgb1, rgb2)))


# ---------------------------------------------------------------------------
# Array conversions
# ---------------------------------------------------------------------------

def rgb_array_to_oklab(rgb: NDArray) -> NDArray[np.float64]:
    """Vectorized rgb_to_oklab for any (..., 3) array of 0-255 values."""
    c = np.asarray(rgb, dtype=np.float64) / 255.0
    linear = np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)
    lms = linear @ _M1.T
    return np.cbrt(lms) @ _M2.T


def rgb_to_lab8(rgb: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """8-bit Lab: L scaled to 0-255, a and b offset by 128."""
    lab = rgb2lab(rgb)
    out = np.empty_like(lab)
    out[..., 0] = lab[..., 0] * 255.0 / 100.0
    out[..., 1] = lab[..., 1] + 128.0
    out[..., 2] = lab[..., 2] + 128.0
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def rgb_to_hsv8(rgb: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """8-bit HSV: H in [0, 180), S and V in [0, 255]."""
    hsv = rgb2hsv(rgb)
    out = np.empty(hsv.shape, dtype=np.uint8)
    out[..., 0] = (np.rint(hsv[..., 0] * 180.0) % 180).astype(np.uint8)
    out[..., 1] = np.clip(np.rint(hsv[..., 1] * 255.0), 0, 255).astype(np.uint8)
    out[..., 2] = np.clip(np.rint(hsv[..., 2] * 255.0), 0, 255).astype(np.uint8)
    return out


def rgb_pixel_to_hsv8(rgb: RGB) -> tuple[int, int, int]:
    h, s, v = rgb_to_hsv8(np.array([[rgb]], dtype=np.uint8))[0, 0]
    return (int(h), int(s), int(v))
