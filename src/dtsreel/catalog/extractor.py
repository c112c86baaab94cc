"""Turn a recognized layout into one merged record per reel."""
from __future__ import annotations

from dataclasses import dataclass
from importlib import metadata
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import CorruptHeader, SidecarParseError
from ..source import Entry, SliceEntry
from ..utils.logging import get_logger
from .handlers.aud import GENERIC_TRAILERS_ID, TRAILER_REEL, AudHeaderHandler
from .handlers.base import HandlerResult, ReelHandler
from .handlers.hdr import HdrHeaderHandler
from .handlers.sidecar import TrailerSidecarHandler
from .layout import Layout, ReelFileName
from .metadata import merge_fields, precedence_layers
from .schema import AssetHeader, ReelRecord, TrailerSidecar, TrailerSidecarEntry

LOGGER = get_logger(__name__)
HANDLER_ENTRYPOINT_GROUP = "dtsreel.handlers"


@dataclass(slots=True)
class ScanContext:
    """Context shared with reel handlers during extraction."""

    trailer_reel: int = TRAILER_REEL
    sidecar_limit: int = 64 * 1024


@dataclass(slots=True)
class _Decoded:
    header: AssetHeader
    issue: Optional[str] = None


class MetadataExtractor:
    """Dispatch reel files to registered handlers and merge what they decode."""

    handlers: List[ReelHandler]

    def __init__(self, handlers: Optional[List[ReelHandler]] = None, context: Optional[ScanContext] = None) -> None:
        self.handlers = list(handlers or self._load_handlers())
        self.context = context or ScanContext()

    def _load_handlers(self) -> List[ReelHandler]:
        handler_instances: List[ReelHandler] = []
        for ep in metadata.entry_points().select(group=HANDLER_ENTRYPOINT_GROUP):
            try:
                loaded = ep.load()
                handler = loaded() if isinstance(loaded, type) else loaded
                if isinstance(handler, ReelHandler):
                    handler_instances.append(handler)
                else:
                    LOGGER.warning("Entry point %s did not yield a ReelHandler", ep.name)
            except Exception as exc:  # pragma: no cover - plugin safety
                LOGGER.warning("Failed to load handler plugin %s: %s", ep.name, exc)
        handler_instances.extend([AudHeaderHandler(), HdrHeaderHandler(), TrailerSidecarHandler()])
        return handler_instances

    def _select_handler(self, reel_name: ReelFileName) -> Optional[ReelHandler]:
        for handler in self.handlers:
            if handler.sniff(reel_name):
                return handler
        return None

    def extract(self, entry: Entry, reel_name: ReelFileName) -> HandlerResult:
        """Decode one reel, header or sidecar file.

        Raises :class:`CorruptHeader` or :class:`SidecarParseError`; both are
        recoverable and handled by :meth:`records`.
        """

        handler = self._select_handler(reel_name)
        if handler is None:
            raise ValueError(f"No handler registered for {reel_name}")
        return handler.extract(entry, reel_name, context=self.context)

    def _decode_header(self, entry: Entry, reel_name: ReelFileName) -> Optional[_Decoded]:
        try:
            result = self.extract(entry, reel_name)
        except CorruptHeader as exc:
            LOGGER.warning("%s", exc)
            if isinstance(exc.header, AssetHeader):
                return _Decoded(exc.header, f"corrupt {exc.header.origin} header: {exc.reason}")
            return _Decoded(AssetHeader(origin="aud", valid=False), f"corrupt header: {exc.reason}")
        if not isinstance(result, AssetHeader):
            return None
        return _Decoded(result)

    def _decode_sidecar(self, entry: Entry, reel_name: ReelFileName) -> Tuple[Optional[TrailerSidecar], Optional[str]]:
        try:
            result = self.extract(entry, reel_name)
        except SidecarParseError as exc:
            LOGGER.warning("%s", exc)
            return None, str(exc)
        if isinstance(result, TrailerSidecar):
            return result, None
        return None, None

    def records(self, layout: Layout) -> List[ReelRecord]:
        """Return merged records for every audio reel of ``layout`` in walk order."""

        records: List[ReelRecord] = []
        for directory, members in layout.by_directory():
            records.extend(self._directory_records(directory, members))
        return records

    def _directory_records(self, directory: str, members: Sequence[Tuple[Entry, ReelFileName]]) -> List[ReelRecord]:
        audio = [(entry, name) for entry, name in members if name.is_audio]
        headers: Dict[str, Entry] = {name.stem: entry for entry, name in members if name.is_header}
        sidecars: Dict[int, Tuple[Entry, ReelFileName]] = {}
        for entry, name in members:
            if name.is_sidecar:
                if name.reel in sidecars:
                    LOGGER.warning("Several trailer lists for reel %d in %s, using %s", name.reel, directory, sidecars[name.reel][0].name)
                    continue
                sidecars[name.reel] = (entry, name)

        audio_stems = {name.stem for _, name in audio}
        for stem, entry in headers.items():
            if stem not in audio_stems:
                LOGGER.debug("Header %s has no matching audio reel", entry.path)

        records: List[ReelRecord] = []
        used_sidecars = set()
        for entry, reel_name in sorted(audio, key=lambda item: (item[1].reel, item[1].track or 0, item[1].extension)):
            decoded: List[_Decoded] = []
            aud = self._decode_header(entry, reel_name)
            if aud is not None:
                decoded.append(aud)
            header_entry = headers.get(reel_name.stem)
            if header_entry is not None:
                hdr = self._decode_header(header_entry, reel_name.with_extension("HDR"))
                if hdr is not None:
                    decoded.append(hdr)

            sidecar_issues: List[str] = []
            sidecar_pair = sidecars.get(reel_name.reel)
            if sidecar_pair is not None and reel_name.reel not in used_sidecars:
                used_sidecars.add(reel_name.reel)
                sidecar, issue = self._decode_sidecar(*sidecar_pair)
                if sidecar is not None and self._is_container(decoded, sidecar):
                    records.extend(self._packed_trailer_records(entry, reel_name, decoded, sidecar))
                    continue
                if sidecar is not None and sidecar.entries:
                    [row] = sidecar.entries
                    records.append(self._merge(entry, reel_name, decoded, sidecar_row=row))
                    continue
                if issue is not None:
                    sidecar_issues.append(issue)
            records.append(self._merge(entry, reel_name, decoded, extra_issues=sidecar_issues))

        for reel, (entry, _) in sidecars.items():
            if reel not in used_sidecars:
                LOGGER.warning("Trailer list %s has no matching audio reel", entry.path)
        return records

    def _is_container(self, decoded: Sequence[_Decoded], sidecar: TrailerSidecar) -> bool:
        """Whether a reel listed by ``sidecar`` packs several trailers back to back.

        A single row next to a reel carrying its own validated identity
        describes that one trailer, and the reel header keeps precedence.
        """

        if len(sidecar.entries) != 1:
            return bool(sidecar.entries)
        own = [item.header for item in decoded if item.header.valid and item.header.identifier is not None]
        if not own:
            return True
        return all(
            header.identifier == GENERIC_TRAILERS_ID or (header.name or "").startswith("Trailers Reel")
            for header in own
        )

    def _merge(
        self,
        entry: Entry,
        reel_name: ReelFileName,
        decoded: Sequence[_Decoded],
        sidecar_row: Optional[TrailerSidecarEntry] = None,
        extra_issues: Sequence[str] = (),
        valid: Optional[bool] = None,
    ) -> ReelRecord:
        headers = [item.header for item in decoded]
        layers = precedence_layers(
            reel_name,
            trailer_reel=self.context.trailer_reel,
            headers=headers,
            sidecar_row=sidecar_row,
        )
        merged, provenance = merge_fields(layers)
        issues = [item.issue for item in decoded if item.issue] + list(extra_issues)
        if valid is None:
            valid = all(header.valid for header in headers)
        primary = next((header for header in headers if header.origin == "aud"), None)
        return ReelRecord(
            entry=entry,
            reel_name=reel_name,
            kind=merged["kind"],
            identifier=merged.get("identifier"),
            name=merged.get("name"),
            position=merged["position"],
            total_reels=merged.get("total_reels"),
            valid=valid,
            encrypted=bool(merged.get("encrypted")),
            header=primary,
            sidecar_entry=sidecar_row,
            provenance=provenance,
            issues=issues,
        )

    def _packed_trailer_records(
        self,
        entry: Entry,
        reel_name: ReelFileName,
        decoded: Sequence[_Decoded],
        sidecar: TrailerSidecar,
    ) -> List[ReelRecord]:
        """Split a trailer reel into one slice per sidecar row.

        The container header decides validity; its identity fields describe
        the container and are not applied to the slices.
        """

        container_valid = all(item.header.valid for item in decoded)
        container_issues = [item.issue for item in decoded if item.issue]
        encrypted = any(item.header.encrypted for item in decoded if item.header.origin == "aud")
        offsets = sorted({row.offset for row in sidecar.entries})
        records: List[ReelRecord] = []
        for row in sidecar.entries:
            later = [offset for offset in offsets if offset > row.offset]
            end = min(later[0] if later else entry.size, entry.size)
            issues = list(container_issues)
            valid = container_valid
            if row.offset >= entry.size:
                issues.append(f"trailer offset {row.offset} beyond end of {entry.name} ({entry.size} bytes)")
                valid = False
                end = row.offset
            trailer_slice = SliceEntry(entry, row.offset, max(end - row.offset, 0))
            record = self._merge(trailer_slice, reel_name, [], sidecar_row=row, extra_issues=issues, valid=valid)
            if encrypted:
                record = record.model_copy(update={"encrypted": True})
            records.append(record)
        LOGGER.debug("Split %s into %d trailers", entry.path, len(records))
        return records

