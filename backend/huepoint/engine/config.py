"""Segmentation configuration: strategy constants, caching, frame pacing."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class StreamingConfig:
    """Fast quantized-Lab labeling for live preview."""

    quant_levels: int = 4              # per Lab channel, 4^3 = 64 labels
    min_area: int = 100                # at half resolution
    min_side: int = 10                 # at half resolution
    max_regions: int = 40

    # Seeded flood fill: tolerance = base + per_sensitivity * sensitivity
    seed_tolerance_base: int = 20
    seed_tolerance_per_sensitivity: int = 2
    seed_min_area: int = 50


@dataclass
class PrecisionConfig:
    """Multi-threshold contour extraction on a smoothed image."""

    smooth_spatial: int = 15
    smooth_color: float = 30.0
    thresholds: tuple[int, ...] = (20, 60, 100, 140, 180, 220)
    open_kernel: int = 3
    min_area: int = 50
    max_regions: int = 20
    contour_epsilon: float = 1.0       # RDP tolerance in processing pixels

    # Seeded HSV window, scaled by sensitivity / 50
    seed_hue_range: float = 20.0
    seed_sat_range: float = 80.0
    seed_val_range: float = 80.0
    seed_kernel: int = 5


@dataclass
class HybridConfig:
    """Color-family masks split by distance-transform watershed."""

    smooth_spatial: int = 8
    smooth_color: float = 16.0
    canny_low: float = 40.0
    canny_high: float = 120.0
    edge_dilate_kernel: int = 1        # 1 = use edges as detected

    # Adaptive V/S thresholds from image means
    v_factor: float = 0.32
    v_min: float = 20.0
    v_max: float = 55.0
    s_factor: float = 0.42
    s_min: float = 20.0
    s_max: float = 65.0
    hue_bins: int = 24

    min_area_fraction: float = 0.0015  # 0.15% of the processing image
    mask_kernel: int = 3
    peak_threshold: float = 0.4        # of the normalized distance
    max_watershed_labels: int = 60     # including background
    min_aspect: float = 0.15
    max_aspect: float = 7.0
    max_regions: int = 35

    seed_hue_range: float = 20.0
    seed_sat_range: float = 70.0
    seed_val_range: float = 70.0
    seed_kernel: int = 5
    seed_peak_threshold: float = 0.3


@dataclass
class PostprocessConfig:
    duplicate_iou: float = 0.9         # hierarchy: skip near-duplicates
    inside_tolerance: int = 1
    inside_area_ratio: float = 0.7
    merge_iou: float = 0.25
    merge_color_dist: float = 45.0     # Euclidean RGB
    merge_area_ratio_min: float = 0.33
    merge_area_ratio_max: float = 3.0
    merge_iterations: int = 3
    drop_max_aspect: float = 7.0
    drop_min_area: int = 200
    nms_iou: float = 0.5


@dataclass
class SegmentationConfig:
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    precision: PrecisionConfig = field(default_factory=PrecisionConfig)
    hybrid: HybridConfig = field(default_factory=HybridConfig)
    postprocess: PostprocessConfig = field(default_factory=PostprocessConfig)

    # Whole-image result reuse for the same raster and mode
    whole_image_cache_ms: float = 2000.0

    # Generic LRU result cache
    result_cache_ttl_ms: float = 60_000.0
    result_cache_max_bytes: int | None = None  # None = min(10 MiB, RAM / 8)

    buffer_pool_size: int = 5
    target_fps: float = 15.0
