"""Uniform read-only access to disc images, raw devices and directory mirrors."""
from __future__ import annotations

import stat
from pathlib import Path
from typing import Union

from ..errors import SourceIOError, SourceNotFound, UnsupportedSource
from ..utils.logging import get_logger
from ..utils.paths import is_drive_designator, raw_device_path
from .base import Entry, SliceEntry, Source
from .directory import DirectorySource
from .iso import DeviceSource, IsoImageSource, IsoSource

LOGGER = get_logger(__name__)

__all__ = [
    "Entry",
    "SliceEntry",
    "Source",
    "DirectorySource",
    "IsoSource",
    "IsoImageSource",
    "DeviceSource",
    "open_source",
]


def open_source(path: Union[str, Path]) -> Source:
    """Open ``path`` as a directory, ISO image or raw device source."""

    raw = str(path)
    if is_drive_designator(raw):
        LOGGER.info("Opening drive %s as raw device", raw)
        return DeviceSource.from_device(Path(raw), raw_device_path(raw))

    path = Path(path)
    try:
        mode = path.stat().st_mode
    except FileNotFoundError as exc:
        raise SourceNotFound(path) from exc
    except OSError as exc:
        raise SourceIOError(path, exc) from exc

    if stat.S_ISDIR(mode):
        LOGGER.debug("Opening %s as directory", path)
        return DirectorySource(path)
    if stat.S_ISBLK(mode) or stat.S_ISCHR(mode):
        LOGGER.info("Opening %s as raw device", path)
        return DeviceSource.from_device(path)
    if stat.S_ISREG(mode):
        source = IsoImageSource.probe(path)
        if source is None:
            raise UnsupportedSource(path)
        LOGGER.debug("Opening %s as ISO image", path)
        return source
    raise UnsupportedSource(path, "not a regular file, device or directory")
