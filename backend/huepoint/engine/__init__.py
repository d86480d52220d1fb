"""HuePoint segmentation and perceptual color engine."""

from huepoint.engine.errors import EngineBusyError, InvalidRasterError
from huepoint.engine.models import (
    BoundingBox,
    ColorDescriptor,
    Mode,
    Region,
    Segment,
    SegmentationResult,
)

__all__ = [
    "BoundingBox",
    "ColorDescriptor",
    "EngineBusyError",
    "InvalidRasterError",
    "Mode",
    "Region",
    "Segment",
    "SegmentationResult",
]
