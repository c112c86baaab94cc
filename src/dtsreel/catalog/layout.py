"""Recognize the DTS CD / XD10 on-disc layout and the reel file name grammar."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from ..errors import EmptyDisc
from ..source import Entry, Source
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

AUDIO_EXTENSIONS = ("AUD", "AUE", "SND")
HEADER_EXTENSION = "HDR"
SIDECAR_EXTENSION = "TXT"

_REEL_PATTERN = re.compile(
    r"^R(?P<reel>[1-9][0-9]*)"
    r"(?:T(?P<track>[1-9][0-9]*)\.(?P<ext>AUD|AUE|SND|HDR)"
    r"|(?P<trlr>TRLR)?\.(?P<txt>TXT))$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ReelFileName:
    """Identity parsed from an ``R<reel>T<track>.AUD`` style name."""

    reel: int
    track: Optional[int]
    extension: str
    trailer_marker: bool = False

    @classmethod
    def parse(cls, name: str) -> Optional["ReelFileName"]:
        match = _REEL_PATTERN.match(name)
        if match is None:
            return None
        reel = int(match.group("reel"))
        if match.group("txt"):
            return cls(reel=reel, track=None, extension=SIDECAR_EXTENSION, trailer_marker=bool(match.group("trlr")))
        return cls(reel=reel, track=int(match.group("track")), extension=match.group("ext").upper())

    def render(self) -> str:
        if self.track is None:
            return f"R{self.reel}{'TRLR' if self.trailer_marker else ''}.{self.extension}"
        return f"R{self.reel}T{self.track}.{self.extension}"

    def with_extension(self, extension: str) -> "ReelFileName":
        return ReelFileName(self.reel, self.track, extension.upper(), self.trailer_marker)

    @property
    def stem(self) -> str:
        return self.render().rsplit(".", 1)[0]

    @property
    def is_audio(self) -> bool:
        return self.extension in AUDIO_EXTENSIONS

    @property
    def is_header(self) -> bool:
        return self.extension == HEADER_EXTENSION

    @property
    def is_sidecar(self) -> bool:
        return self.extension == SIDECAR_EXTENSION

    def __str__(self) -> str:
        return self.render()


@dataclass
class Layout:
    """Result of walking a source: every file, classified or not."""

    source: Source
    entries: List[Tuple[Entry, Optional[ReelFileName]]] = field(default_factory=list)
    marker: Optional[Entry] = None
    reel_directories: List[str] = field(default_factory=list)

    def classified(self) -> List[Tuple[Entry, ReelFileName]]:
        return [(entry, name) for entry, name in self.entries if name is not None]

    def by_directory(self) -> List[Tuple[str, List[Tuple[Entry, ReelFileName]]]]:
        grouped: List[Tuple[str, List[Tuple[Entry, ReelFileName]]]] = []
        for directory in self.reel_directories:
            members = [(entry, name) for entry, name in self.classified() if entry.parent == directory]
            grouped.append((directory, members))
        return grouped


class LayoutRecognizer:
    """Walk a source depth first and classify reel files by name."""

    def __init__(self, marker_names: Sequence[str] = ("DTS.EXE",)) -> None:
        self.marker_names = {name.upper() for name in marker_names}

    def _walk(self, source: Source, dir_path: str) -> Iterable[Entry]:
        for entry in source.list(dir_path):
            if entry.is_dir:
                yield from self._walk(source, entry.path)
            else:
                yield entry

    def recognize(self, source: Source) -> Layout:
        layout = Layout(source=source)
        for entry in source.list("/"):
            if not entry.is_dir and entry.name.upper() in self.marker_names:
                layout.marker = entry
        if layout.marker is None:
            LOGGER.info("No marker executable at the top of %s, assuming bare XD10 content", source.path)

        for entry in self._walk(source, "/"):
            reel_name = ReelFileName.parse(entry.name)
            if reel_name is None:
                LOGGER.debug("Ignoring %s: not a reel file name", entry.path)
            elif entry.parent not in layout.reel_directories:
                layout.reel_directories.append(entry.parent)
            layout.entries.append((entry, reel_name))

        if not layout.reel_directories:
            raise EmptyDisc(source.path)
        LOGGER.debug(
            "Found %d reel files in %s",
            len(layout.classified()),
            ", ".join(layout.reel_directories),
        )
        return layout


def recognize(source: Source, marker_names: Sequence[str] = ("DTS.EXE",)) -> Layout:
    """Classify every file of ``source``; raise :class:`EmptyDisc` without reel files."""

    return LayoutRecognizer(marker_names).recognize(source)
