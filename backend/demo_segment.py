"""Run every segmentation mode on synthetic scenes (and any image paths given)."""

import sys
import time
from pathlib import Path

import numpy as np
from PIL import Image

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from huepoint.engine.engine import SegmentationEngine, format_result_text
from huepoint.engine.models import Mode
from huepoint.engine.raster import RasterImage


def _red_square() -> np.ndarray:
    img = np.full((240, 320, 3), 128, dtype=np.uint8)
    img[80:160, 120:200] = (220, 30, 30)
    return img


def _color_blocks() -> np.ndarray:
    img = np.full((300, 400, 3), 235, dtype=np.uint8)
    img[30:130, 30:170] = (30, 90, 200)
    img[160:270, 40:150] = (40, 160, 60)
    img[60:240, 220:360] = (250, 200, 20)
    img[120:180, 260:320] = (90, 40, 20)
    return img


def _noisy_stripes() -> np.ndarray:
    rng = np.random.default_rng(7)
    img = np.zeros((200, 300, 3), dtype=np.int16)
    img[:, :100] = (200, 60, 60)
    img[:, 100:200] = (60, 200, 60)
    img[:, 200:] = (60, 60, 200)
    img += rng.integers(-12, 13, size=img.shape, dtype=np.int16)
    return np.clip(img, 0, 255).astype(np.uint8)


SCENES = {
    "Red square": _red_square,
    "Color blocks": _color_blocks,
    "Noisy stripes": _noisy_stripes,
}


def run(name: str, raster: RasterImage, engine: SegmentationEngine) -> None:
    print(f"\n{'=' * 70}\n{name} ({raster.width}x{raster.height})\n{'=' * 70}")
    cx, cy = raster.width // 2, raster.height // 2
    for mode in Mode:
        t0 = time.perf_counter()
        result = engine.segment(raster, mode)
        print(f"\n[{mode.value}] {(time.perf_counter() - t0) * 1000:.0f}ms wall")
        print(format_result_text(result))

        tapped = engine.segment_by_color(raster, cx, cy, sensitivity=30, mode=mode)
        if tapped is None:
            print(f"  tap ({cx}, {cy}): nothing")
        else:
            b = tapped.bbox
            print(f"  tap ({cx}, {cy}): {tapped.color.description}, box=({b.x},{b.y},{b.width}x{b.height})")

    analysis = engine.analyze_color(raster, cx, cy)
    if analysis is not None:
        print(f"\ncolor at center: {analysis.descriptor.name} {analysis.descriptor.hex} "
              f"(L={analysis.oklab.L:.3f}, metric {analysis.metric})")


def main() -> None:
    engine = SegmentationEngine()
    for name, build in SCENES.items():
        run(name, RasterImage.from_array(build()), engine)

    for arg in sys.argv[1:]:
        path = Path(arg)
        with Image.open(path) as img:
            run(path.name, RasterImage.from_pil(img), engine)


if __name__ == "__main__":
    main()
