"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    modes: list[str] = Field(default_factory=list)


class ColorModel(BaseModel):
    rgb: list[int]
    name: str
    hex: str
    contrast: float
    rating: str
    description: str = ""


class BoundingBoxModel(BaseModel):
    x: int
    y: int
    width: int
    height: int


class SegmentModel(BaseModel):
    id: int
    bbox: BoundingBoxModel
    color: ColorModel
    area: int
    confidence: float = 1.0
    contour: list[list[int]] = Field(default_factory=list)


class SegmentResponse(BaseModel):
    success: bool
    mode: str
    segments: list[SegmentModel] = Field(default_factory=list)
    error: str | None = None
    processing_time_ms: float = 0.0
    cached: bool = False


class SegmentPointResponse(BaseModel):
    mode: str
    segment: SegmentModel | None = None
    processing_time_ms: float = 0.0


class ColorResponse(BaseModel):
    color: ColorModel
    brightness: str
    vision: str
    adapted_name: str
    simulated_rgb: list[int]
    distinguishable: bool | None = None
