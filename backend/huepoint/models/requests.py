"""API request models."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from huepoint.engine.color_blindness import VisionType
from huepoint.engine.models import Mode

Channel = Annotated[int, Field(ge=0, le=255)]


class SegmentRequest(BaseModel):
    image: str = Field(..., description="Base64-encoded PNG or JPEG, optionally as a data URL")
    mode: Mode | None = Field(default=None, description="Segmentation mode; server default when omitted")


class SegmentPointRequest(BaseModel):
    image: str = Field(..., description="Base64-encoded PNG or JPEG, optionally as a data URL")
    x: float = Field(..., description="Tap x coordinate in image pixels")
    y: float = Field(..., description="Tap y coordinate in image pixels")
    sensitivity: int | None = Field(default=None, ge=0, le=100, description="Color tolerance, 0-100")
    mode: Mode | None = Field(default=None, description="Segmentation mode; server default when omitted")


class ColorRequest(BaseModel):
    rgb: list[Channel] = Field(..., min_length=3, max_length=3, description="[r, g, b], 0-255")
    vision: VisionType = Field(default=VisionType.NORMAL, description="Color vision to simulate")
    compare_with: list[Channel] | None = Field(
        default=None,
        min_length=3,
        max_length=3,
        description="Optional second color to test for distinguishability",
    )
