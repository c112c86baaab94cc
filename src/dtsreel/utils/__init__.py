"""Utility helpers shared across the dtsreel codebase."""

from .config import AppConfig, load_config
from .hashing import copy_with_sha1, stream_sha1
from .logging import configure_logging, get_logger
from .parallel import map_ordered
from .paths import is_drive_designator, normalise_path, raw_device_path

__all__ = [
    "AppConfig",
    "load_config",
    "copy_with_sha1",
    "stream_sha1",
    "configure_logging",
    "get_logger",
    "map_ordered",
    "is_drive_designator",
    "normalise_path",
    "raw_device_path",
]
