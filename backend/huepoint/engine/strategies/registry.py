"""Strategy registry: one entry per segmentation mode.

Each strategy module registers itself on import:

    register_strategy(StrategySpec(
        mode=Mode.STREAMING,
        extract_regions=extract_regions,
        extract_seeded_region=extract_seeded_region,
        processing_resolution=480,
    ))

The set is closed: registering a mode twice is an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from numpy.typing import NDArray

from huepoint.engine.models import Mode, Region

if TYPE_CHECKING:
    from huepoint.engine.buffer_pool import BufferPool
    from huepoint.engine.config import SegmentationConfig

logger = logging.getLogger(__name__)


@dataclass
class ExtractionContext:
    """What a strategy gets besides the pixels."""
    config: SegmentationConfig
    pool: BufferPool


RegionsFn = Callable[[NDArray, ExtractionContext], list[Region]]
SeededFn = Callable[[NDArray, int, int, int, "tuple[int, int, int] | None", ExtractionContext], "Region | None"]


@dataclass
class StrategySpec:
    mode: Mode
    extract_regions: RegionsFn
    extract_seeded_region: SeededFn
    processing_resolution: int
    uses_contours: bool = False
    description: str = ""


class StrategyRegistry:
    def __init__(self) -> None:
        self._strategies: dict[Mode, StrategySpec] = {}

    def register(self, spec: StrategySpec) -> None:
        if spec.mode in self._strategies:
            raise ValueError(f"Duplicate strategy for mode: {spec.mode.value}")
        self._strategies[spec.mode] = spec
        logger.debug("Registered strategy %s (%dpx)", spec.mode.value, spec.processing_resolution)

    def get(self, mode: Mode) -> StrategySpec:
        try:
            return self._strategies[mode]
        except KeyError:
            raise ValueError(f"No strategy registered for mode: {mode}") from None

    def modes(self) -> list[Mode]:
        return list(self._strategies)

    def __len__(self) -> int:
        return len(self._strategies)


_registry = StrategyRegistry()


def get_registry() -> StrategyRegistry:
    return _registry


def register_strategy(spec: StrategySpec) -> StrategySpec:
    _registry.register(spec)
    return spec
