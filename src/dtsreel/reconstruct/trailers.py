"""Rebuild trailer reels in the packed reel-14 layout expected by players."""
from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, List, Sequence

from ..catalog.handlers.aud import SND_HEADER_LEN, generic_trailers_header
from ..catalog.handlers.sidecar import encode_trailer_sidecar
from ..catalog.schema import Asset, TrailerSidecarEntry
from ..source import SliceEntry
from ..utils.logging import get_logger
from .results import OutputFile
from .writer import atomic_output, describe_output

LOGGER = get_logger(__name__)


def _open_payload(asset: Asset) -> BinaryIO:
    """Open the audio payload of a trailer without its reel header."""

    record = asset.ordered_reels()[0]
    handle = record.entry.open()
    if not isinstance(record.entry, SliceEntry):
        skipped = handle.read(SND_HEADER_LEN)
        if len(skipped) < SND_HEADER_LEN:
            handle.close()
            raise ValueError(f"{record.path} is shorter than its {SND_HEADER_LEN} byte header")
    return handle


def pack_trailers(
    assets: Sequence[Asset],
    target_dir: Path,
    *,
    trailer_reel: int = 14,
    frame_size: int = 3675,
    chunk_size: int = 2**20,
) -> List[OutputFile]:
    """Write ``assets`` back to back into one trailer reel plus its trailer list.

    Returns the audio reel and the sidecar, in that order. Neither file is
    left behind if any payload fails to copy.
    """

    if not assets:
        raise ValueError("no trailers to pack")
    track = assets[0].ordered_reels()[0].reel_name.track or 5
    audio_path = target_dir / f"R{trailer_reel}T{track}.AUD"
    sidecar_path = target_dir / f"R{trailer_reel}TRLR.TXT"

    rows: List[TrailerSidecarEntry] = []
    with atomic_output(audio_path) as out:
        header = generic_trailers_header(trailer_reel, tracks=track)
        out.write(header)
        offset = len(header)
        for asset in assets:
            record = asset.ordered_reels()[0]
            length = 0
            with _open_payload(asset) as payload:
                for chunk in iter(lambda: payload.read(chunk_size), b""):
                    out.write(chunk)
                    length += len(chunk)
            source_row = record.sidecar_entry
            rows.append(
                TrailerSidecarEntry(
                    name=asset.name or f"TRAILER{asset.identifier}",
                    identifier=asset.identifier,
                    start=source_row.start if source_row else 0,
                    end=source_row.end if source_row else length // frame_size,
                    offset=offset,
                )
            )
            LOGGER.debug("Packed trailer %d (%d bytes) at offset %d", asset.identifier, length, offset)
            offset += length

    try:
        with atomic_output(sidecar_path) as out:
            out.write(encode_trailer_sidecar(rows).encode("latin-1", errors="replace"))
    except BaseException:
        audio_path.unlink(missing_ok=True)
        raise

    LOGGER.info("Created %s and %s", audio_path, sidecar_path)
    return [describe_output(audio_path, chunk_size), describe_output(sidecar_path, chunk_size)]
