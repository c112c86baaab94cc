"""Hashing helpers for streamed reel copies."""
from __future__ import annotations

import hashlib
from typing import BinaryIO, Tuple


def copy_with_sha1(source: BinaryIO, target: BinaryIO, chunk_size: int = 2**20) -> Tuple[int, str]:
    """Copy ``source`` into ``target`` and return the byte count and SHA1 of the data."""

    digest = hashlib.sha1()
    written = 0
    for chunk in iter(lambda: source.read(chunk_size), b""):
        target.write(chunk)
        digest.update(chunk)
        written += len(chunk)
    return written, digest.hexdigest()


def stream_sha1(source: BinaryIO, chunk_size: int = 2**20) -> str:
    """Compute a streaming SHA1 checksum for an open binary stream."""

    digest = hashlib.sha1()
    for chunk in iter(lambda: source.read(chunk_size), b""):
        digest.update(chunk)
    return digest.hexdigest()
