"""Source backed by a plain directory tree."""
from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, List

from ..errors import SourceIOError
from .base import Entry, Source


class DirectorySource(Source):
    """Read a mirrored disc through the host's native directory listing."""

    kind = "directory"

    def _host_path(self, source_path: str) -> Path:
        parts = [part for part in source_path.split("/") if part]
        return self.path.joinpath(*parts)

    def list(self, dir_path: str = "/") -> List[Entry]:
        host = self._host_path(dir_path)
        entries: List[Entry] = []
        try:
            with os.scandir(host) as iterator:
                for item in iterator:
                    is_dir = item.is_dir()
                    size = 0 if is_dir else item.stat().st_size
                    path = dir_path.rstrip("/") + "/" + item.name
                    entries.append(Entry(path=path, size=size, is_dir=is_dir, source=self))
        except OSError as exc:
            raise SourceIOError(host, exc) from exc
        return sorted(entries, key=lambda entry: entry.name.upper())

    def open_entry(self, entry: Entry) -> BinaryIO:
        host = self._host_path(entry.path)
        try:
            return host.open("rb")
        except OSError as exc:
            raise SourceIOError(host, exc) from exc
