"""Binary morphology and connected-component labeling on boolean masks."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage
from skimage.morphology import disk


FOUR_CONNECTED = ndimage.generate_binary_structure(2, 1)
EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)


def ellipse(size: int) -> NDArray[np.bool_]:
    """Elliptical structuring element of odd side ``size`` (3 -> cross)."""
    return disk(max(0, size // 2)).astype(bool)


def erode(mask: NDArray[np.bool_], kernel: NDArray[np.bool_]) -> NDArray[np.bool_]:
    # pixels outside the image count as foreground so border regions survive
    return ndimage.binary_erosion(mask, structure=kernel, border_value=1)


def dilate(mask: NDArray[np.bool_], kernel: NDArray[np.bool_]) -> NDArray[np.bool_]:
    return ndimage.binary_dilation(mask, structure=kernel, border_value=0)


def open_mask(mask: NDArray[np.bool_], kernel: NDArray[np.bool_]) -> NDArray[np.bool_]:
    """Erode then dilate: removes specks smaller than the kernel."""
    return dilate(erode(mask, kernel), kernel)


def close_mask(mask: NDArray[np.bool_], kernel: NDArray[np.bool_]) -> NDArray[np.bool_]:
    """Dilate then erode: bridges gaps smaller than the kernel."""
    return erode(dilate(mask, kernel), kernel)


def label_components(
    mask: NDArray[np.bool_],
    connectivity: int = 8,
    output: NDArray[np.int32] | None = None,
) -> tuple[NDArray[np.int32], int]:
    """Label connected components. Returns (labels, count), background is 0."""
    structure = EIGHT_CONNECTED if connectivity == 8 else FOUR_CONNECTED
    if output is not None:
        count = ndimage.label(mask, structure=structure, output=output)
        return output, int(count)
    labels, count = ndimage.label(mask, structure=structure)
    return labels.astype(np.int32, copy=False), int(count)


def normalized_distance(mask: NDArray[np.bool_]) -> NDArray[np.float64]:
    """Euclidean distance to the nearest background pixel, scaled to [0, 1].

    The image border counts as background, so a full mask still has a peak.
    """
    padded = np.pad(mask, 1, mode="constant", constant_values=False)
    dist = ndimage.distance_transform_edt(padded)[1:-1, 1:-1]
    peak = float(dist.max()) if dist.size else 0.0
    if peak > 0:
        dist /= peak
    return dist
