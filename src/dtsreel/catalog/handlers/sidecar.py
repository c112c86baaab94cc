"""Reader and writer for ``R14TRLR.TXT`` trailer lists."""
from __future__ import annotations

from typing import Iterable, List, TYPE_CHECKING

from ...errors import SidecarParseError
from ...source import Entry
from ..layout import ReelFileName
from ..schema import TrailerSidecar, TrailerSidecarEntry
from .base import ReelHandler

if TYPE_CHECKING:  # pragma: no cover
    from ..extractor import ScanContext

SIDECAR_HEADER = (
    ";NAME           SERIAL  START   END     OFFSET\r\n"
    ";----           ------  -----   ---     ------\r\n"
)


def decode_trailer_sidecar(text: str, path: str = "<memory>") -> TrailerSidecar:
    """Parse ``NAME SERIAL START END OFFSET`` rows; ``;`` starts a comment line."""

    entries: List[TrailerSidecarEntry] = []
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(";"):
            continue
        tokens = stripped.split()
        if len(tokens) == 5:
            name, serial, start, end, offset = tokens
            try:
                entries.append(
                    TrailerSidecarEntry(
                        name=name,
                        identifier=int(serial),
                        start=int(start),
                        end=int(end),
                        offset=int(offset),
                        line_number=number,
                    )
                )
            except ValueError as exc:
                raise SidecarParseError(path, number, line) from exc
        elif not stripped.isalnum():
            continue
        else:
            raise SidecarParseError(path, number, line)
    return TrailerSidecar(entries=entries)


def sidecar_name(name: str) -> str:
    """Return ``name`` as a single whitespace free token."""

    return "_".join(name.split()) or "TRAILER"


def encode_trailer_sidecar(entries: Iterable[TrailerSidecarEntry]) -> str:
    lines = [SIDECAR_HEADER]
    for entry in entries:
        lines.append(
            f"{sidecar_name(entry.name)}\t{entry.identifier}\t{entry.start}\t{entry.end}\t{entry.offset}\r\n"
        )
    return "".join(lines)


class TrailerSidecarHandler(ReelHandler):
    extensions = ("TXT",)

    def extract(self, entry: Entry, reel_name: ReelFileName, *, context: "ScanContext") -> TrailerSidecar:  # type: ignore[override]
        data = entry.source.read_head(entry, context.sidecar_limit)
        return decode_trailer_sidecar(data.decode("latin-1"), entry.path)
