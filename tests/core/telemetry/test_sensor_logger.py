"""Tests for the per-session sensor logger."""

from __future__ import annotations

import logging

import pytest

from core.telemetry.loggers.sensor_logger import CHANNELS, SensorLogger, get_sensor_logger


@pytest.fixture()
def sensor_logger(tmp_path):
    instance = get_sensor_logger(session_dir=tmp_path / "session")
    yield instance
    instance.close()


def _flush(instance):
    for name in CHANNELS:
        for handler in getattr(instance, name).handlers:
            handler.flush()


def test_creates_one_file_per_channel(sensor_logger, tmp_path):
    session = tmp_path / "session"
    for filename in CHANNELS.values():
        assert (session / filename).exists()


def test_singleton_within_session(sensor_logger, tmp_path):
    assert SensorLogger(session_dir=tmp_path / "other") is sensor_logger
    assert get_sensor_logger() is sensor_logger
    assert sensor_logger.log_dir == tmp_path / "session"


def test_channel_writes_to_its_file(sensor_logger, tmp_path):
    sensor_logger.permission.info("Consent granted")
    _flush(sensor_logger)

    content = (tmp_path / "session" / "permission.log").read_text()
    assert "Consent granted" in content
    assert "[INFO]" in content
    assert (tmp_path / "session" / "render.log").read_text() == ""


def test_attach_routes_module_logger(sensor_logger, tmp_path):
    sensor_logger.attach("core.sensors.scheduler", "render")
    logging.getLogger("core.sensors.scheduler").debug("Render scheduler closed after 3 publishes")
    _flush(sensor_logger)

    assert "after 3 publishes" in (tmp_path / "session" / "render.log").read_text()


def test_close_detaches_and_resets(tmp_path):
    instance = get_sensor_logger(session_dir=tmp_path / "first")
    instance.attach("core.sensors.permission", "permission")
    source = logging.getLogger("core.sensors.permission")
    assert source.handlers

    instance.close()

    assert source.handlers == []
    assert source.propagate
    fresh = get_sensor_logger(session_dir=tmp_path / "second")
    try:
        assert fresh is not instance
        assert fresh.log_dir == tmp_path / "second"
    finally:
        fresh.close()
