"""Perceptual color naming.

Names come from the CSS/X11 named colors, grouped by family. Lookup is a
linear nearest-neighbour scan in OKLAB; near-neutral colors skip the palette
and fall into five lightness buckets instead.
"""

from __future__ import annotations

import logging

import numpy as np

from huepoint.engine.colorspace import (
    RGB,
    OklabColor,
    contrast_ratio,
    oklab_distance,
    rgb_array_to_oklab,
    rgb_to_oklab,
)
from huepoint.engine.models import ColorDescriptor, ContrastRating

logger = logging.getLogger(__name__)


# Below this OKLAB chroma a color reads as gray to most observers.
_ACHROMATIC_CHROMA = 0.05

# Order matters: on an exact distance tie the earlier entry wins.
PALETTE: dict[str, RGB] = {
    # reds
    "indian red": (205, 92, 92),
    "light coral": (240, 128, 128),
    "salmon": (250, 128, 114),
    "dark salmon": (233, 150, 122),
    "light salmon": (255, 160, 122),
    "crimson": (220, 20, 60),
    "red": (255, 0, 0),
    "fire brick": (178, 34, 34),
    "dark red": (139, 0, 0),
    # pinks
    "pink": (255, 192, 203),
    "light pink": (255, 182, 193),
    "hot pink": (255, 105, 180),
    "deep pink": (255, 20, 147),
    "medium violet red": (199, 21, 133),
    "pale violet red": (219, 112, 147),
    # oranges
    "coral": (255, 127, 80),
    "tomato": (255, 99, 71),
    "orange red": (255, 69, 0),
    "dark orange": (255, 140, 0),
    "orange": (255, 165, 0),
    # yellows
    "gold": (255, 215, 0),
    "yellow": (255, 255, 0),
    "light yellow": (255, 255, 224),
    "lemon chiffon": (255, 250, 205),
    "papaya whip": (255, 239, 213),
    "moccasin": (255, 228, 181),
    "peach puff": (255, 218, 185),
    "pale goldenrod": (238, 232, 170),
    "khaki": (240, 230, 140),
    "dark khaki": (189, 183, 107),
    # purples
    "lavender": (230, 230, 250),
    "thistle": (216, 191, 216),
    "plum": (221, 160, 221),
    "violet": (238, 130, 238),
    "orchid": (218, 112, 214),
    "magenta": (255, 0, 255),
    "medium orchid": (186, 85, 211),
    "medium purple": (147, 112, 219),
    "blue violet": (138, 43, 226),
    "dark violet": (148, 0, 211),
    "dark orchid": (153, 50, 204),
    "dark magenta": (139, 0, 139),
    "purple": (128, 0, 128),
    "indigo": (75, 0, 130),
    "slate blue": (106, 90, 205),
    "dark slate blue": (72, 61, 139),
    # greens
    "green yellow": (173, 255, 47),
    "chartreuse": (127, 255, 0),
    "lawn green": (124, 252, 0),
    "lime": (0, 255, 0),
    "lime green": (50, 205, 50),
    "pale green": (152, 251, 152),
    "light green": (144, 238, 144),
    "medium spring green": (0, 250, 154),
    "spring green": (0, 255, 127),
    "medium sea green": (60, 179, 113),
    "sea green": (46, 139, 87),
    "forest green": (34, 139, 34),
    "green": (0, 128, 0),
    "dark green": (0, 100, 0),
    "yellow green": (154, 205, 50),
    "olive drab": (107, 142, 35),
    "olive": (128, 128, 0),
    "dark olive green": (85, 107, 47),
    "medium aquamarine": (102, 205, 170),
    "dark sea green": (143, 188, 143),
    "light sea green": (32, 178, 170),
    "dark cyan": (0, 139, 139),
    "teal": (0, 128, 128),
    # blues
    "cyan": (0, 255, 255),
    "light cyan": (224, 255, 255),
    "pale turquoise": (175, 238, 238),
    "aquamarine": (127, 255, 212),
    "turquoise": (64, 224, 208),
    "medium turquoise": (72, 209, 204),
    "dark turquoise": (0, 206, 209),
    "cadet blue": (95, 158, 160),
    "steel blue": (70, 130, 180),
    "light steel blue": (176, 196, 222),
    "powder blue": (176, 224, 230),
    "light blue": (173, 216, 230),
    "sky blue": (135, 206, 235),
    "light sky blue": (135, 206, 250),
    "deep sky blue": (0, 191, 255),
    "dodger blue": (30, 144, 255),
    "cornflower blue": (100, 149, 237),
    "royal blue": (65, 105, 225),
    "blue": (0, 0, 255),
    "medium blue": (0, 0, 205),
    "dark blue": (0, 0, 139),
    "navy": (0, 0, 128),
    "midnight blue": (25, 25, 112),
    # browns
    "cornsilk": (255, 248, 220),
    "blanched almond": (255, 235, 205),
    "bisque": (255, 228, 196),
    "navajo white": (255, 222, 173),
    "wheat": (245, 222, 179),
    "burlywood": (222, 184, 135),
    "tan": (210, 180, 140),
    "rosy brown": (188, 143, 143),
    "sandy brown": (244, 164, 96),
    "goldenrod": (218, 165, 32),
    "dark goldenrod": (184, 134, 11),
    "peru": (205, 133, 63),
    "chocolate": (210, 105, 30),
    "saddle brown": (139, 69, 19),
    "sienna": (160, 82, 45),
    "brown": (165, 42, 42),
    "maroon": (128, 0, 0),
    # tinted whites
    "ivory": (255, 255, 240),
    "beige": (245, 245, 220),
    "linen": (250, 240, 230),
    "lavender blush": (255, 240, 245),
    "misty rose": (255, 228, 225),
    # tinted grays
    "slate gray": (112, 128, 144),
    "light slate gray": (119, 136, 153),
    "dark slate gray": (47, 79, 79),
}

_PALETTE_NAMES = tuple(PALETTE)
_PALETTE_OKLAB = tuple(
    OklabColor(float(L), float(a), float(b))
    for L, a, b in rgb_array_to_oklab(np.array(list(PALETTE.values()), dtype=np.float64))
)
logger.debug("Color palette: %d named colors", len(_PALETTE_NAMES))


def _gray_name(lightness: float) -> str:
    if lightness < 0.2:
        return "black"
    if lightness > 0.9:
        return "white"
    if lightness < 0.4:
        return "dark gray"
    if lightness > 0.7:
        return "light gray"
    return "gray"


def nearest_palette_name(color: OklabColor) -> str:
    best_name = _PALETTE_NAMES[0]
    best_dist = float("inf")
    for name, ref in zip(_PALETTE_NAMES, _PALETTE_OKLAB):
        d = oklab_distance(color, ref)
        if d < best_dist:
            best_dist = d
            best_name = name
    return best_name


def color_name(rgb: RGB) -> str:
    oklab = rgb_to_oklab(*rgb)
    if oklab.chroma < _ACHROMATIC_CHROMA:
        return _gray_name(oklab.L)

    name = nearest_palette_name(oklab)
    if oklab.L < 0.25 and "dark" not in name:
        return f"dark {name}"
    if oklab.L > 0.85 and "light" not in name:
        return f"light {name}"
    return name


def brightness_descriptor(rgb: RGB) -> str:
    lightness = rgb_to_oklab(*rgb).L
    if lightness > 0.85:
        return "very light"
    if lightness > 0.65:
        return "light"
    if lightness > 0.45:
        return "medium"
    if lightness > 0.25:
        return "dark"
    return "very dark"


def color_description(rgb: RGB) -> str:
    return f"{color_name(rgb)}, {brightness_descriptor(rgb)} shade"


def hex_code(rgb: RGB) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


def describe_color(rgb: RGB) -> ColorDescriptor:
    """Build the full descriptor for a color. Inputs are clamped to 0-255."""
    rgb = tuple(max(0, min(255, int(c))) for c in rgb)  # type: ignore[assignment]
    ratio = contrast_ratio(rgb)
    return ColorDescriptor(
        rgb=rgb,
        name=color_name(rgb),
        hex=hex_code(rgb),
        contrast=round(ratio, 2),
        rating=ContrastRating.from_ratio(ratio),
        description=color_description(rgb),
    )
