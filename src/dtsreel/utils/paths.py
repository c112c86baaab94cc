"""Path utility helpers."""
from __future__ import annotations

import re
from pathlib import Path

_DRIVE_DESIGNATOR = re.compile(r"^(?:\\\\\.\\)?[A-Za-z]:\\?$")


def normalise_path(path: Path) -> Path:
    """Return a normalised path handling Windows drive casing."""

    return Path(str(path).replace("\\", "/")).expanduser().resolve()


def is_drive_designator(value: str) -> bool:
    """Return ``True`` for ``D:``, ``D:\\`` and ``\\\\.\\D:`` style drive names."""

    return bool(_DRIVE_DESIGNATOR.match(value))


def raw_device_path(value: str) -> str:
    """Return the raw device path for a Windows drive designator."""

    if value.startswith("\\\\.\\"):
        return value.rstrip("\\")
    return "\\\\.\\" + value.rstrip("\\")
