"""
Typed configuration sections for the sensor level dashboard.

This module provides strongly-typed configuration sections to replace
scattered getattr(Config, ...) calls with proper type hints and defaults.

Benefits:
- Type safety: IDE autocomplete and type checking
- Discoverability: All config options visible in one place
- Default values: Centralized and documented
- Better testing: Can build entire config sections by hand
"""

from dataclasses import dataclass, field


@dataclass
class SmoothingConfig:
    """Configuration for the per-axis exponential smoothing."""

    factor: float = 0.15  # Weight of the newest raw sample


@dataclass
class RenderConfig:
    """Configuration for snapshot publishing."""

    refresh_hz: float = 60.0  # Frame clock rate for the threaded clock
    orientation_decimals: int = 0  # Orientation axes rounded to whole degrees
    motion_decimals: int = 1  # Acceleration / rotation rate rounded to tenths

    def __post_init__(self) -> None:
        if self.refresh_hz <= 0:
            raise ValueError(f"refresh_hz must be positive, got {self.refresh_hz}")


@dataclass
class LevelConfig:
    """Configuration for the bubble level reading."""

    threshold_deg: float = 2.0  # |tilt| strictly below this on both axes = level
    bubble_gain: float = 2.0
    bubble_limit: float = 100.0
    gauge_max_tilt_deg: float = 90.0
    detail_gauge_gain: float = 10.0


@dataclass
class PipelineConfig:
    """Aggregate configuration for SensorPipeline."""

    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    level: LevelConfig = field(default_factory=LevelConfig)


def load_smoothing_config() -> SmoothingConfig:
    """
    Load smoothing configuration from Config with fallback defaults.

    Returns:
        SmoothingConfig with values from Config or defaults
    """
    from utils.config import Config

    return SmoothingConfig(
        factor=getattr(Config, "SMOOTHING_FACTOR", 0.15),
    )


def load_render_config() -> RenderConfig:
    """
    Load render configuration from Config with fallback defaults.

    Returns:
        RenderConfig with values from Config or defaults
    """
    from utils.config import Config

    return RenderConfig(
        refresh_hz=getattr(Config, "RENDER_REFRESH_HZ", 60.0),
        orientation_decimals=getattr(Config, "ORIENTATION_DECIMALS", 0),
        motion_decimals=getattr(Config, "MOTION_DECIMALS", 1),
    )


def load_level_config() -> LevelConfig:
    """
    Load bubble level configuration from Config with fallback defaults.

    Returns:
        LevelConfig with values from Config or defaults
    """
    from utils.config import Config

    return LevelConfig(
        threshold_deg=getattr(Config, "LEVEL_THRESHOLD_DEG", 2.0),
        bubble_gain=getattr(Config, "BUBBLE_GAIN", 2.0),
        bubble_limit=getattr(Config, "BUBBLE_LIMIT", 100.0),
        gauge_max_tilt_deg=getattr(Config, "GAUGE_MAX_TILT_DEG", 90.0),
        detail_gauge_gain=getattr(Config, "DETAIL_GAUGE_GAIN", 10.0),
    )


def load_pipeline_config() -> PipelineConfig:
    """
    Load the full pipeline configuration from Config.

    Returns:
        PipelineConfig with every section populated
    """
    return PipelineConfig(
        smoothing=load_smoothing_config(),
        render=load_render_config(),
        level=load_level_config(),
    )
