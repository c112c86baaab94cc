"""Atomic creation of output files."""
from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from ..utils.hashing import copy_with_sha1, stream_sha1
from ..utils.logging import get_logger
from .results import OutputFile

LOGGER = get_logger(__name__)


def partial_path(path: Path) -> Path:
    return path.with_name(f".{path.name}.part")


@contextmanager
def atomic_output(path: Path) -> Iterator[BinaryIO]:
    """Yield a handle whose content replaces ``path`` only if the block succeeds.

    On any error the partial file is removed and the exception propagates.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    temporary = partial_path(path)
    try:
        with temporary.open("wb") as handle:
            yield handle
        os.replace(temporary, path)
    except BaseException:
        LOGGER.debug("Removing partial output %s", temporary)
        temporary.unlink(missing_ok=True)
        raise


def write_stream(source: BinaryIO, path: Path, chunk_size: int = 2**20) -> OutputFile:
    """Copy ``source`` verbatim to ``path`` atomically."""

    with atomic_output(path) as handle:
        size, checksum = copy_with_sha1(source, handle, chunk_size)
    return OutputFile(path=path, size_bytes=size, checksum_sha1=checksum)


def describe_output(path: Path, chunk_size: int = 2**20) -> OutputFile:
    with path.open("rb") as handle:
        checksum = stream_sha1(handle, chunk_size)
    return OutputFile(path=path, size_bytes=path.stat().st_size, checksum_sha1=checksum)
