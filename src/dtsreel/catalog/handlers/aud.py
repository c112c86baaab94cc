"""Decoder and encoder for the 92-byte header of AUD/AUE/SND reel files."""
from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

from ...errors import CorruptHeader
from ...source import Entry
from ..layout import ReelFileName
from ..schema import AssetHeader, BackupSoundtrackFormat
from .base import ReelHandler

if TYPE_CHECKING:  # pragma: no cover
    from ..extractor import ScanContext

SND_HEADER_LEN = 92
SND_HEADER_LEN_WITH_ENCRYPTION = SND_HEADER_LEN + 2
TRAILER_REEL = 14
GENERIC_TRAILERS_ID = 1045

TITLE = slice(0, 18)
MARKER_OFFSET = 60
MARKER = ord("*")
LANGUAGE = slice(61, 65)
STUDIO = slice(68, 72)
OPTICAL_BACKUP_OFFSET = 75
REEL_OFFSET = 78
TOTAL_REELS_OFFSET = 79
IDENTIFIER = slice(80, 82)
TRACKS_OFFSET = 82
ENCRYPTED_OFFSET = 92


def decode_text(raw: bytes) -> Optional[str]:
    """Decode a NUL padded text field; unreadable or empty fields are absent."""

    try:
        value = raw.decode("utf-8")
    except UnicodeDecodeError:
        return None
    value = value.strip("\x00").strip()
    return value or None


def _byte(data: bytes, offset: int) -> Optional[int]:
    return data[offset] if len(data) > offset else None


def decode_aud_header(data: bytes, path: str = "<memory>", trailer_reel: int = TRAILER_REEL) -> AssetHeader:
    """Decode ``data`` (the start of a reel file) into an :class:`AssetHeader`.

    Raises :class:`CorruptHeader` carrying the advisory decode when the size,
    the ``*`` marker, the backup format or the reel numbering do not check out.
    """

    problems: List[str] = []
    if len(data) < SND_HEADER_LEN_WITH_ENCRYPTION:
        problems.append(f"expected at least {SND_HEADER_LEN_WITH_ENCRYPTION} bytes, got {len(data)}")
    if _byte(data, MARKER_OFFSET) != MARKER:
        problems.append("missing '*' marker")

    optical_backup: Optional[BackupSoundtrackFormat] = None
    raw_backup = _byte(data, OPTICAL_BACKUP_OFFSET)
    if raw_backup is not None:
        try:
            optical_backup = BackupSoundtrackFormat(raw_backup)
        except ValueError:
            problems.append(f"unknown optical backup soundtrack format {raw_backup:#04x}")

    reel = _byte(data, REEL_OFFSET)
    total = _byte(data, TOTAL_REELS_OFFSET) or None
    identifier = int.from_bytes(data[IDENTIFIER], "little") if len(data) >= IDENTIFIER.stop else None
    encrypted_flag = _byte(data, ENCRYPTED_OFFSET)

    kind = None
    position = None
    if reel == trailer_reel:
        kind, position, total = "trailer", 1, 1
    elif reel:
        kind, position = "feature", reel
        if total is not None and reel > total:
            problems.append(f"reel {reel} exceeds declared total {total}")
            total = None
    elif reel is not None:
        problems.append("reel number 0")

    header = AssetHeader(
        origin="aud",
        valid=not problems,
        kind=kind,
        identifier=identifier,
        name=decode_text(data[TITLE]),
        reel=reel or None,
        position=position,
        total_reels=total,
        language=decode_text(data[LANGUAGE]),
        studio=decode_text(data[STUDIO]),
        optical_backup=optical_backup,
        tracks=_byte(data, TRACKS_OFFSET),
        encrypted=None if encrypted_flag is None else encrypted_flag == 1,
    )
    if problems:
        raise CorruptHeader(path, "; ".join(problems), header=header)
    return header


def _field(value: Optional[str], width: int) -> bytes:
    return (value or "").encode("utf-8")[:width]


def encode_aud_header(
    *,
    name: str,
    identifier: int,
    reel: int,
    total_reels: int = 0,
    language: str = "ENG",
    studio: Optional[str] = None,
    optical_backup: BackupSoundtrackFormat = BackupSoundtrackFormat.DOLBY_SR,
    tracks: int = 5,
) -> bytes:
    """Build a 92-byte reel header; the encryption flag byte is not included."""

    buffer = bytearray(SND_HEADER_LEN)
    title = _field(name, TITLE.stop)
    buffer[: len(title)] = title
    buffer[MARKER_OFFSET] = MARKER
    lang = _field(language, LANGUAGE.stop - LANGUAGE.start)
    buffer[LANGUAGE.start : LANGUAGE.start + len(lang)] = lang
    studio_bytes = _field(studio, STUDIO.stop - STUDIO.start)
    buffer[STUDIO.start : STUDIO.start + len(studio_bytes)] = studio_bytes
    buffer[OPTICAL_BACKUP_OFFSET] = int(optical_backup)
    buffer[REEL_OFFSET] = reel
    buffer[TOTAL_REELS_OFFSET] = total_reels
    buffer[IDENTIFIER] = identifier.to_bytes(2, "little")
    buffer[TRACKS_OFFSET] = tracks
    # Constant bytes observed in generated trailer reels.
    buffer[85] = 6
    buffer[89] = 0x26
    buffer[90] = 0xA8
    buffer[91] = 1
    return bytes(buffer)


def generic_trailers_header(trailer_reel: int = TRAILER_REEL, tracks: int = 5) -> bytes:
    """Header of a packed trailer reel listing its trailers in a sidecar."""

    return encode_aud_header(
        name=f"Trailers Reel {trailer_reel}",
        identifier=GENERIC_TRAILERS_ID,
        reel=trailer_reel,
        language="ENG",
        studio="none",
        optical_backup=BackupSoundtrackFormat.DOLBY_SR,
        tracks=tracks,
    )


class AudHeaderHandler(ReelHandler):
    """Decode the embedded header of AUD, AUE and SND reel files."""

    extensions = ("AUD", "AUE", "SND")

    def extract(self, entry: Entry, reel_name: ReelFileName, *, context: "ScanContext") -> AssetHeader:  # type: ignore[override]
        data = entry.source.read_head(entry, SND_HEADER_LEN_WITH_ENCRYPTION)
        return decode_aud_header(data, entry.path, trailer_reel=context.trailer_reel)
