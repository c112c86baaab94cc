"""Abstract read-only view over a disc hierarchy."""
from __future__ import annotations

import io
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, List, Tuple

from ..errors import SourceIOError


class Entry:
    """A named node of a source hierarchy.

    Entries are transient views: they stay valid only while the owning
    :class:`Source` is open.
    """

    __slots__ = ("path", "size", "is_dir", "source")

    def __init__(self, path: str, size: int, is_dir: bool, source: "Source") -> None:
        self.path = path
        self.size = size
        self.is_dir = is_dir
        self.source = source

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r}, size={self.size})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def _key(self) -> Tuple[str, int, int]:
        return (self.path, 0, self.size)

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def parent(self) -> str:
        return posixpath.dirname(self.path) or "/"

    def open(self) -> BinaryIO:
        return self.source.open_entry(self)


class SliceEntry(Entry):
    """A byte range ``[offset, offset + size)`` of another entry."""

    __slots__ = ("base", "offset")

    def __init__(self, base: Entry, offset: int, size: int) -> None:
        super().__init__(base.path, size, False, base.source)
        self.base = base
        self.offset = offset

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r}, offset={self.offset}, size={self.size})"

    def _key(self) -> Tuple[str, int, int]:
        return (self.path, self.offset, self.size)

    def open(self) -> BinaryIO:
        return io.BufferedReader(_SliceReader(self.base.open(), self.offset, self.size))


class _SliceReader(io.RawIOBase):
    def __init__(self, inner: BinaryIO, offset: int, length: int) -> None:
        self._inner = inner
        self._remaining = length
        inner.seek(offset)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        if self._remaining <= 0:
            return 0
        view = memoryview(buffer).cast("B")[: self._remaining]
        data = self._inner.read(len(view))
        view[: len(data)] = data
        self._remaining -= len(data)
        return len(data)

    def close(self) -> None:
        if not self.closed:
            self._inner.close()
        super().close()


class Source(ABC):
    """Read-only hierarchy shared by the directory, ISO and device variants."""

    kind: str = "abstract"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __enter__(self) -> "Source":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"

    @abstractmethod
    def list(self, dir_path: str = "/") -> List[Entry]:
        """Return the entries of ``dir_path`` sorted by name."""

    @abstractmethod
    def open_entry(self, entry: Entry) -> BinaryIO:
        """Return a binary reader positioned at offset 0 of ``entry``."""

    def close(self) -> None:
        """Release the underlying read handle."""

    def read_head(self, entry: Entry, length: int) -> bytes:
        """Read up to ``length`` bytes from the start of ``entry``."""

        try:
            with entry.open() as handle:
                return handle.read(length)
        except OSError as exc:
            raise SourceIOError(f"{self.path}:{entry.path}", exc) from exc
