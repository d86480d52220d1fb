"""Result types shared by the strategies, the engine and the HTTP layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from huepoint.engine.colorspace import RGB, OklabColor


class Mode(str, enum.Enum):
    STREAMING = "streaming"
    PRECISION = "precision"
    HYBRID = "hybrid"


class EngineState(enum.Enum):
    IDLE = "idle"
    COMPUTING = "computing"
    READY = "ready"


class ContrastRating(str, enum.Enum):
    AAA = "AAA"
    AA = "AA"
    A = "A"
    LOW = "Low"

    @classmethod
    def from_ratio(cls, ratio: float) -> ContrastRating:
        if ratio >= 7.0:
            return cls.AAA
        if ratio >= 4.5:
            return cls.AA
        if ratio >= 3.0:
            return cls.A
        return cls.LOW


Point = tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    @property
    def center(self) -> tuple[int, int]:
        return (self.x + self.width // 2, self.y + self.height // 2)

    def contains_point(self, x: float, y: float) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def scaled(self, sx: float, sy: float) -> BoundingBox:
        """Scale both corners; width and height are their difference."""
        x0, y0 = int(self.x * sx), int(self.y * sy)
        x1, y1 = int(self.right * sx), int(self.bottom * sy)
        return BoundingBox(x0, y0, x1 - x0, y1 - y0)


@dataclass(frozen=True)
class Region:
    """A raw region in processing coordinates, before segment construction."""
    bbox: BoundingBox
    area: int
    color: RGB                             # mean RGB under the region mask
    contour: tuple[Point, ...] = ()        # ordered (x, y) boundary, may be empty


@dataclass(frozen=True)
class ColorDescriptor:
    rgb: RGB
    name: str
    hex: str
    contrast: float                        # WCAG ratio against white
    rating: ContrastRating
    description: str = ""


@dataclass(frozen=True)
class Segment:
    id: int
    bbox: BoundingBox                      # original image coordinates
    color: ColorDescriptor
    area: int
    contour: tuple[tuple[int, int], ...] = ()
    confidence: float = 1.0

    def contains_point(self, x: float, y: float) -> bool:
        return self.bbox.contains_point(x, y)


@dataclass(frozen=True)
class SegmentationResult:
    success: bool
    segments: tuple[Segment, ...] = ()
    error: str | None = None
    elapsed_ms: float = 0.0
    mode: Mode | None = None

    @classmethod
    def ok(cls, segments: list[Segment] | tuple[Segment, ...], elapsed_ms: float = 0.0,
           mode: Mode | None = None) -> SegmentationResult:
        return cls(success=True, segments=tuple(segments), elapsed_ms=elapsed_ms, mode=mode)

    @classmethod
    def failure(cls, message: str, elapsed_ms: float = 0.0, mode: Mode | None = None) -> SegmentationResult:
        return cls(success=False, error=message, elapsed_ms=elapsed_ms, mode=mode)

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def find_segment_at(self, x: float, y: float) -> Segment | None:
        """Topmost (last added) segment whose box contains the point."""
        for segment in reversed(self.segments):
            if segment.contains_point(x, y):
                return segment
        return None


@dataclass(frozen=True)
class ColorAnalysis:
    """Mean color around a point, with the distance metric the mode uses."""
    x: int
    y: int
    rgb: RGB
    oklab: OklabColor
    metric: str
    descriptor: ColorDescriptor
    sample_count: int = field(default=0, compare=False)
