"""Tests for Config overrides and the typed config sections."""

from __future__ import annotations

import pytest

from utils.config import Config, _env_float
from utils.config_sections import (
    LevelConfig,
    PipelineConfig,
    RenderConfig,
    load_level_config,
    load_pipeline_config,
    load_render_config,
    load_smoothing_config,
)


def test_defaults_match_dashboard_behaviour():
    config = PipelineConfig()
    assert config.smoothing.factor == 0.15
    assert config.render.orientation_decimals == 0
    assert config.render.motion_decimals == 1
    assert config.level.threshold_deg == 2.0


def test_loaders_read_config_class(monkeypatch):
    monkeypatch.setattr(Config, "SMOOTHING_FACTOR", 0.4)
    monkeypatch.setattr(Config, "RENDER_REFRESH_HZ", 30.0)
    monkeypatch.setattr(Config, "LEVEL_THRESHOLD_DEG", 1.0)

    assert load_smoothing_config().factor == 0.4
    assert load_render_config().refresh_hz == 30.0
    assert load_level_config().threshold_deg == 1.0

    pipeline = load_pipeline_config()
    assert pipeline.smoothing.factor == 0.4
    assert pipeline.render.refresh_hz == 30.0


def test_loaders_fall_back_when_attribute_missing(monkeypatch):
    monkeypatch.delattr(Config, "BUBBLE_GAIN")
    assert load_level_config().bubble_gain == LevelConfig().bubble_gain


@pytest.mark.parametrize("hz", [0, -60.0])
def test_render_config_rejects_non_positive_rate(hz):
    with pytest.raises(ValueError):
        RenderConfig(refresh_hz=hz)


def test_env_float_override(monkeypatch):
    monkeypatch.setenv("SENSOR_TEST_VALUE", "0.25")
    assert _env_float("SENSOR_TEST_VALUE", 0.15) == 0.25


@pytest.mark.parametrize("raw", ["", "   ", "fast"])
def test_env_float_ignores_blank_and_invalid(monkeypatch, raw):
    monkeypatch.setenv("SENSOR_TEST_VALUE", raw)
    assert _env_float("SENSOR_TEST_VALUE", 0.15) == 0.15


def test_env_float_unset(monkeypatch):
    monkeypatch.delenv("SENSOR_TEST_VALUE", raising=False)
    assert _env_float("SENSOR_TEST_VALUE", 2.0) == 2.0
