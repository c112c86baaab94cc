"""Sources reading an ISO 9660 hierarchy from an image file or a raw CD device."""
from __future__ import annotations

import io
import threading
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple

import pycdlib
from pycdlib.pycdlibexception import PyCdlibException

from ..errors import SourceIOError, UnsupportedSource
from ..utils.logging import get_logger
from .base import Entry, Source

LOGGER = get_logger(__name__)

ISO_SECTOR_LEN = 2048
ISO_MAGIC = b"CD001"
ISO_MAGIC_OFFSET = 16 * ISO_SECTOR_LEN + 1


def has_iso_signature(handle: BinaryIO) -> bool:
    """Return ``True`` if the primary volume descriptor signature is present."""

    try:
        handle.seek(ISO_MAGIC_OFFSET)
        return handle.read(len(ISO_MAGIC)) == ISO_MAGIC
    except OSError:
        return False


def _clean_identifier(identifier: bytes) -> str:
    name = identifier.decode("ascii", errors="replace")
    if ";" in name:
        name = name[: name.rfind(";")]
    if name.endswith("."):
        name = name[:-1]
    return name


class _ExtentReader(io.RawIOBase):
    """Sequential reader over one file extent of a shared image handle."""

    def __init__(self, handle: BinaryIO, lock: threading.Lock, start: int, length: int) -> None:
        self._handle = handle
        self._lock = lock
        self._start = start
        self._length = length
        self._position = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._position + offset
        else:
            target = self._length + offset
        if target < 0 or target > self._length:
            raise ValueError("trying to seek outside of file")
        self._position = target
        return self._position

    def tell(self) -> int:
        return self._position

    def readinto(self, buffer) -> int:  # type: ignore[override]
        remaining = self._length - self._position
        if remaining <= 0:
            return 0
        view = memoryview(buffer).cast("B")[:remaining]
        with self._lock:
            self._handle.seek(self._start + self._position)
            data = self._handle.read(len(view))
        view[: len(data)] = data
        self._position += len(data)
        return len(data)


class IsoSource(Source):
    """Expose an ISO 9660 stream as a virtual read-only hierarchy."""

    kind = "iso"

    def __init__(self, path: Path, handle: BinaryIO) -> None:
        super().__init__(path)
        self._handle = handle
        self._lock = threading.Lock()
        self._extents: Dict[str, Tuple[int, int]] = {}
        self._iso = pycdlib.PyCdlib()
        try:
            with self._lock:
                self._iso.open_fp(handle)
        except PyCdlibException as exc:
            handle.close()
            raise UnsupportedSource(path, f"unreadable ISO 9660 structure ({exc})") from exc
        except OSError as exc:
            handle.close()
            raise SourceIOError(path, exc) from exc

    def list(self, dir_path: str = "/") -> List[Entry]:
        entries: List[Entry] = []
        try:
            with self._lock:
                children = list(self._iso.list_children(iso_path=dir_path))
        except PyCdlibException as exc:
            raise SourceIOError(f"{self.path}:{dir_path}", exc) from exc
        except OSError as exc:
            raise SourceIOError(self.path, exc) from exc
        for record in children:
            if record is None or record.is_dot() or record.is_dotdot():
                continue
            name = _clean_identifier(record.file_identifier())
            path = dir_path.rstrip("/") + "/" + name
            is_dir = record.is_dir()
            size = 0 if is_dir else record.get_data_length()
            if not is_dir:
                self._extents[path] = (record.extent_location() * ISO_SECTOR_LEN, size)
            entries.append(Entry(path=path, size=size, is_dir=is_dir, source=self))
        return sorted(entries, key=lambda entry: entry.name.upper())

    def _extent(self, entry: Entry) -> Tuple[int, int]:
        extent = self._extents.get(entry.path)
        if extent is not None:
            return extent
        try:
            with self._lock:
                record = self._iso.get_record(iso_path=entry.path + ";1")
        except PyCdlibException as exc:
            raise SourceIOError(f"{self.path}:{entry.path}", exc) from exc
        return record.extent_location() * ISO_SECTOR_LEN, record.get_data_length()

    def open_entry(self, entry: Entry) -> BinaryIO:
        start, length = self._extent(entry)
        return io.BufferedReader(_ExtentReader(self._handle, self._lock, start, length))

    def close(self) -> None:
        try:
            self._iso.close()
        except PyCdlibException as exc:
            LOGGER.debug("Ignoring error while closing %s: %s", self.path, exc)
        self._handle.close()


class IsoImageSource(IsoSource):
    """ISO image stored as a regular file."""

    kind = "iso-image"

    @classmethod
    def probe(cls, path: Path) -> Optional["IsoImageSource"]:
        try:
            handle = path.open("rb")
        except OSError as exc:
            raise SourceIOError(path, exc) from exc
        if not has_iso_signature(handle):
            handle.close()
            return None
        handle.seek(0)
        return cls(path, handle)


class DeviceSource(IsoSource):
    """Raw block/character device or drive read as an ISO-structured stream."""

    kind = "device"

    @classmethod
    def from_device(cls, path: Path, device: Optional[str] = None) -> "DeviceSource":
        try:
            handle = open(device or str(path), "rb", buffering=0)
        except OSError as exc:
            raise SourceIOError(path, exc) from exc
        if not has_iso_signature(handle):
            handle.close()
            raise UnsupportedSource(path, "device does not carry an ISO 9660 volume")
        handle.seek(0)
        return cls(path, handle)
