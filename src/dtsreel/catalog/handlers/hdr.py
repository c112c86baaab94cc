"""Decoder for XD10 ingest ``.HDR`` header files."""
from __future__ import annotations

from typing import List, TYPE_CHECKING

from ...errors import CorruptHeader
from ...source import Entry
from ..layout import ReelFileName
from ..schema import AssetHeader
from .aud import TRAILER_REEL, decode_text
from .base import ReelHandler

if TYPE_CHECKING:  # pragma: no cover
    from ..extractor import ScanContext

HDR_LEN = 0xCA
HDR_MAGIC = bytes([HDR_LEN, 0x00, 0x01, 0x00, 0x04, 0x00, 0x44, 0x54, 0x53])

TITLE = slice(9, 27)
STUDIO = slice(69, 79)
IDENTIFIER = slice(79, 81)
REEL_OFFSET = 91


def decode_hdr(data: bytes, path: str = "<memory>", trailer_reel: int = TRAILER_REEL) -> AssetHeader:
    problems: List[str] = []
    if len(data) != HDR_LEN:
        problems.append(f"expected {HDR_LEN} bytes, got {len(data)}")
    if not data.startswith(HDR_MAGIC):
        problems.append(f"unexpected header {data[:10]!r}")

    identifier = int.from_bytes(data[IDENTIFIER], "little") if len(data) >= IDENTIFIER.stop else None
    reel = data[REEL_OFFSET] if len(data) > REEL_OFFSET else None
    kind = None
    position = None
    if reel == trailer_reel:
        kind, position = "trailer", 1
    elif reel:
        kind, position = "feature", reel

    header = AssetHeader(
        origin="hdr",
        valid=not problems,
        kind=kind,
        identifier=identifier,
        name=decode_text(data[TITLE]),
        reel=reel or None,
        position=position,
        total_reels=1 if kind == "trailer" else None,
        studio=decode_text(data[STUDIO]),
    )
    if problems:
        raise CorruptHeader(path, "; ".join(problems), header=header)
    return header


class HdrHeaderHandler(ReelHandler):
    extensions = ("HDR",)

    def extract(self, entry: Entry, reel_name: ReelFileName, *, context: "ScanContext") -> AssetHeader:  # type: ignore[override]
        data = entry.source.read_head(entry, HDR_LEN + 1)
        return decode_hdr(data, entry.path, trailer_reel=context.trailer_reel)
