"""Exception hierarchy for scanning and reconstruction."""
from __future__ import annotations

from pathlib import PurePath
from typing import Optional, Union

PathLike = Union[str, PurePath]


class DtsReelError(Exception):
    """Base class for all dtsreel errors."""

    def __init__(self, message: str, path: Optional[PathLike] = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class SourceError(DtsReelError):
    """Fatal for the affected source: the pipeline stops for that path."""


class SourceNotFound(SourceError):
    def __init__(self, path: PathLike) -> None:
        super().__init__(f"Source {path} does not exist", path)


class UnsupportedSource(SourceError):
    def __init__(self, path: PathLike, reason: str = "not an ISO 9660 image or directory") -> None:
        super().__init__(f"Unsupported source {path}: {reason}", path)


class SourceIOError(SourceError):
    def __init__(self, path: PathLike, exc: BaseException) -> None:
        super().__init__(f"I/O error reading {path}: {exc}", path)
        self.__cause__ = exc


class EmptyDisc(SourceError):
    def __init__(self, path: PathLike) -> None:
        super().__init__(f"No reel files found anywhere in {path}", path)


class CorruptHeader(DtsReelError):
    """Header validation failed; the reel stays in the catalog flagged invalid."""

    def __init__(self, path: PathLike, reason: str, header: Optional[object] = None) -> None:
        super().__init__(f"Corrupt header in {path}: {reason}", path)
        self.reason = reason
        self.header = header


class SidecarParseError(DtsReelError):
    def __init__(self, path: PathLike, line_number: int, line: str) -> None:
        super().__init__(f"Could not parse {path}, error at line {line_number}: {line!r}", path)
        self.line_number = line_number
        self.line = line
