"""Raster wrapper and the image-level operations the strategies share."""

from __future__ import annotations

import hashlib
import logging

import numpy as np
from numpy.typing import NDArray
from PIL import Image
from skimage.color import rgb2gray
from skimage.filters import gaussian
from skimage.restoration import denoise_bilateral

from huepoint.engine.colorspace import RGB
from huepoint.engine.errors import InvalidRasterError

logger = logging.getLogger(__name__)


class RasterImage:
    """Read-only H x W x 3|4 uint8 image.

    The pixel array is copied on construction and marked non-writeable, so
    the engine can key caches on the instance itself.
    """

    def __init__(self, pixels: NDArray) -> None:
        arr = np.asarray(pixels)
        if arr.ndim == 2:
            arr = np.stack([arr] * 3, axis=-1)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise InvalidRasterError(f"Expected H x W x 3|4 pixels, got shape {arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise InvalidRasterError("Raster has zero width or height")
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        self._pixels = np.array(arr, copy=True)
        self._pixels.flags.writeable = False

    @classmethod
    def from_array(cls, pixels: NDArray) -> RasterImage:
        return cls(pixels)

    @classmethod
    def from_pil(cls, image: Image.Image) -> RasterImage:
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGB")
        return cls(np.asarray(image))

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def pixels(self) -> NDArray[np.uint8]:
        return self._pixels

    @property
    def rgb(self) -> NDArray[np.uint8]:
        return self._pixels[..., :3]

    def pixel(self, x: int, y: int) -> RGB:
        r, g, b = self._pixels[y, x, :3]
        return (int(r), int(g), int(b))

    def in_bounds(self, x: float, y: float) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def content_hash(self) -> str:
        h = hashlib.blake2b(digest_size=16)
        h.update(f"{self.width}x{self.height}x{self._pixels.shape[2]}".encode())
        h.update(self._pixels.tobytes())
        return h.hexdigest()

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height})"


# ---------------------------------------------------------------------------
# Resampling
# ---------------------------------------------------------------------------

def fit_to_resolution(rgb: NDArray[np.uint8], size: int) -> tuple[NDArray[np.uint8], float, float]:
    """Nearest-neighbour downscale so the longer side is at most ``size``.

    Returns (image, scale_x, scale_y) where the scales map processing
    coordinates back to the input.
    """
    h, w = rgb.shape[:2]
    longest = max(w, h)
    if longest <= size:
        return rgb, 1.0, 1.0
    scale = size / longest
    new_w = max(1, int(w * scale))
    new_h = max(1, int(h * scale))
    resized = np.asarray(Image.fromarray(np.ascontiguousarray(rgb)).resize((new_w, new_h), Image.Resampling.NEAREST))
    logger.debug("Downscaled %dx%d -> %dx%d", w, h, new_w, new_h)
    return resized, w / new_w, h / new_h


def downscale_half(rgb: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """Halve both sides by averaging 2x2 blocks (bilinear at exactly 0.5)."""
    h, w = rgb.shape[:2]
    h2, w2 = h // 2, w // 2
    if h2 == 0 or w2 == 0:
        return rgb.copy()
    blocks = rgb[: h2 * 2, : w2 * 2].astype(np.uint16)
    summed = blocks[0::2, 0::2] + blocks[1::2, 0::2] + blocks[0::2, 1::2] + blocks[1::2, 1::2]
    return ((summed + 2) // 4).astype(np.uint8)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def smooth_edge_preserving(rgb: NDArray[np.uint8], spatial_radius: int, color_radius: float) -> NDArray[np.uint8]:
    """Bilateral smoothing that flattens texture but keeps color boundaries.

    ``color_radius`` is in 0-255 units, ``spatial_radius`` in pixels.
    """
    win_size = max(3, spatial_radius // 2 * 2 + 1)
    smoothed = denoise_bilateral(
        rgb.astype(np.float64) / 255.0,
        win_size=win_size,
        sigma_color=color_radius / 255.0,
        sigma_spatial=max(1.0, spatial_radius / 2.0),
        mode="edge",
        channel_axis=-1,
    )
    return np.clip(np.rint(smoothed * 255.0), 0, 255).astype(np.uint8)


def gaussian_3x3(rgb: NDArray[np.uint8]) -> NDArray[np.uint8]:
    # sigma 0.8 with truncate 1.25 gives a radius-1 (3x3) kernel
    blurred = gaussian(rgb.astype(np.float64), sigma=0.8, truncate=1.25, mode="nearest",
                       preserve_range=True, channel_axis=-1)
    return np.clip(np.rint(blurred), 0, 255).astype(np.uint8)


def to_gray(rgb: NDArray[np.uint8]) -> NDArray[np.uint8]:
    return np.clip(np.rint(rgb2gray(rgb) * 255.0), 0, 255).astype(np.uint8)


def masked_mean_color(rgb: NDArray[np.uint8], mask: NDArray[np.bool_]) -> RGB:
    pixels = rgb[mask]
    if len(pixels) == 0:
        return (0, 0, 0)
    r, g, b = (int(round(v)) for v in pixels[:, :3].mean(axis=0))
    return (r, g, b)


def window_mean_color(rgb: NDArray[np.uint8], x: int, y: int, radius: int) -> tuple[RGB, int]:
    """Mean color of the square window around (x, y), clipped to the image."""
    h, w = rgb.shape[:2]
    x0, x1 = max(0, x - radius), min(w, x + radius + 1)
    y0, y1 = max(0, y - radius), min(h, y + radius + 1)
    window = rgb[y0:y1, x0:x1, :3].reshape(-1, 3)
    r, g, b = (int(round(v)) for v in window.mean(axis=0))
    return (r, g, b), len(window)


def mask_bbox(mask: NDArray[np.bool_]) -> tuple[int, int, int, int] | None:
    """(x, y, width, height) of the true pixels, None for an empty mask."""
    rows = np.flatnonzero(mask.any(axis=1))
    if len(rows) == 0:
        return None
    cols = np.flatnonzero(mask.any(axis=0))
    return (int(cols[0]), int(rows[0]), int(cols[-1] - cols[0] + 1), int(rows[-1] - rows[0] + 1))


def hsv_window_mask(
    hsv: NDArray[np.uint8],
    seed_hsv: tuple[int, int, int],
    hue_range: float,
    sat_range: float,
    val_range: float,
) -> NDArray[np.bool_]:
    """Pixels whose 8-bit HSV lies within the clamped window around the seed.

    Hue does not wrap, so a seed near 0 only matches upward.
    """
    h, s, v = seed_hsv
    lo = np.array([max(0.0, h - hue_range), max(0.0, s - sat_range), max(0.0, v - val_range)])
    hi = np.array([min(180.0, h + hue_range), min(255.0, s + sat_range), min(255.0, v + val_range)])
    return np.all((hsv >= lo) & (hsv <= hi), axis=-1)
