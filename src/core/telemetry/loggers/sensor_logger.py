"""
Dedicated session logger for the sensor pipeline.

This module provides a singleton logger that separates pipeline debugging logs
into dedicated files for easier analysis of sensor behaviour on a device.

Features:
- Singleton pattern (one instance per session)
- Separate log files for pipeline wiring, permission gate and rendering
- DEBUG level logging to files
- WARNING level console output for critical messages

Log Files:
- pipeline.log: Listener registration, teardown, ingestion problems
- permission.log: Capability check, consent requests and their outcome
- render.log: Frame scheduling and snapshot publishing

The channels are plain stdlib loggers named "sensor.<channel>". Modules log
through logging.getLogger(__name__); the demo entry point routes those module
loggers into the channels with attach().

Usage:
    from core.telemetry.loggers.sensor_logger import get_sensor_logger

    sensor_logger = get_sensor_logger(session_dir=Path("logs/session_2024-01-15_10-30-00"))
    sensor_logger.permission.info("Consent granted")
"""

import logging
from pathlib import Path
from datetime import datetime
from typing import Optional

CHANNELS = {
    "pipeline": "pipeline.log",
    "permission": "permission.log",
    "render": "render.log",
}


class SensorLogger:
    """Singleton logger for sensor pipeline debugging."""

    _instance = None
    _initialized = False

    def __new__(cls, session_dir: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, session_dir: Optional[Path] = None):
        if self._initialized:
            return

        if session_dir is None:
            from utils.config import Config

            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            self.log_dir = Path(Config.LOG_DIR) / f"session_{timestamp}"
        else:
            self.log_dir = Path(session_dir)

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._attached = []

        for name, filename in CHANNELS.items():
            self._setup_logger(name, filename)

        self._initialized = True

    def _setup_logger(self, name: str, filename: str):
        """Setup individual logger with file handler."""
        logger = logging.getLogger(f"sensor.{name}")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        logger.handlers.clear()

        fh = logging.FileHandler(self.log_dir / filename, mode='w')
        fh.setLevel(logging.DEBUG)

        ch = logging.StreamHandler()
        ch.setLevel(logging.WARNING)

        formatter = logging.Formatter(
            '%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s',
            datefmt='%H:%M:%S'
        )
        fh.setFormatter(formatter)
        ch.setFormatter(formatter)

        logger.addHandler(fh)
        logger.addHandler(ch)

        setattr(self, name, logger)

    def attach(self, module_logger: str, channel: str) -> None:
        """Route a module logger (e.g. "core.sensors.permission") into a channel."""
        target = getattr(self, channel)
        source = logging.getLogger(module_logger)
        source.setLevel(logging.DEBUG)
        source.propagate = False
        for handler in target.handlers:
            if handler not in source.handlers:
                source.addHandler(handler)
                self._attached.append((source, handler))

    def close(self):
        """Close all handlers and forget the instance."""
        for source, handler in self._attached:
            source.removeHandler(handler)
            source.propagate = True
        self._attached = []
        for name in CHANNELS:
            logger = getattr(self, name, None)
            if logger:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)
        SensorLogger._instance = None
        SensorLogger._initialized = False


# Global instance
_sensor_logger = None


def get_sensor_logger(session_dir: Optional[Path] = None) -> SensorLogger:
    """Get or create sensor logger instance."""
    global _sensor_logger
    if _sensor_logger is None or not SensorLogger._initialized:
        _sensor_logger = SensorLogger(session_dir=session_dir)
    return _sensor_logger
