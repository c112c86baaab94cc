"""Resolve a selection against a catalog and write the selected soundtracks."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..catalog.scanner import CatalogScanner
from ..catalog.schema import Asset, Catalog, ReelRecord
from ..errors import DtsReelError
from ..source import open_source
from ..utils.config import AppConfig
from ..utils.logging import get_logger
from ..utils.parallel import map_ordered
from .results import ExtractionResult, OutputFile, Selection, SelectionTerm, TermResult, TermStatus
from .trailers import pack_trailers
from .writer import write_stream

LOGGER = get_logger(__name__)

Resolution = Tuple[Optional[Asset], TermStatus, Optional[str]]


def asset_directory(asset: Asset) -> str:
    return f"{asset.kind}-{asset.identifier}"


def output_name(record: ReelRecord) -> str:
    """Original reel/track name; SND reels are named after their encryption flag."""

    reel_name = record.reel_name
    if reel_name.extension == "SND":
        reel_name = reel_name.with_extension("AUE" if record.encrypted else "AUD")
    return reel_name.render()


class ReconstructionEngine:
    """Copy the reels of selected assets to an output directory."""

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self.config = config or AppConfig()

    def resolve(self, catalog: Catalog, term: SelectionTerm) -> Resolution:
        """Match by exact identifier first, then by case-insensitive name."""

        value = term.value.strip()
        if value.isdigit():
            asset = catalog.find_by_id(term.kind, int(value))
            if asset is not None:
                return asset, "ok", None
        matches = catalog.find_by_name(term.kind, value)
        if len(matches) == 1:
            return matches[0], "ok", None
        if matches:
            identifiers = ", ".join(str(asset.identifier) for asset in matches)
            return None, "ambiguous", f"name matches several {term.kind}s ({identifiers})"
        return None, "not_found", f"no {term.kind} with identifier or name {value!r}"

    def _refusal(self, asset: Asset) -> Resolution:
        if not asset.valid:
            corrupt = [record.path for record in asset.ordered_reels() if not record.valid]
            return asset, "corrupt", f"corrupt header in {', '.join(corrupt)}"
        if not asset.complete:
            missing = ", ".join(str(position) for position in asset.missing_positions)
            return asset, "incomplete", f"missing reels {missing} of {asset.total_reels}"
        if asset.kind == "trailer" and any(record.encrypted for record in asset.reels.values()):
            return asset, "failed", "encrypted trailers cannot be repacked"
        return asset, "ok", None

    def _result(self, term: SelectionTerm, asset: Optional[Asset], status: TermStatus, message: Optional[str], files: Optional[List[OutputFile]] = None) -> TermResult:
        result = TermResult(
            term=term,
            status=status,
            kind=asset.kind if asset else None,
            identifier=asset.identifier if asset else None,
            name=asset.name if asset else None,
            files=files or [],
            message=message,
        )
        if result.ok:
            LOGGER.info("%s: wrote %d files", term, len(result.files))
        else:
            LOGGER.error("%s: %s (%s)", term, status, message)
        return result

    def _copy_feature(self, asset: Asset, output_root: Path) -> List[OutputFile]:
        target_dir = output_root / asset_directory(asset)
        target_dir.mkdir(parents=True, exist_ok=True)

        def copy_reel(record: ReelRecord) -> OutputFile:
            target = target_dir / output_name(record)
            with record.entry.open() as handle:
                output = write_stream(handle, target, self.config.chunk_size)
            LOGGER.debug("Copied %s to %s (%d bytes)", record.path, target, output.size_bytes)
            return output

        try:
            return map_ordered(copy_reel, asset.ordered_reels(), self.config.workers)
        except BaseException:
            for record in asset.ordered_reels():
                (target_dir / output_name(record)).unlink(missing_ok=True)
            raise

    def _pack(self, assets: List[Asset], target_dir: Path) -> List[OutputFile]:
        return pack_trailers(
            assets,
            target_dir,
            trailer_reel=self.config.trailer_reel,
            frame_size=self.config.frame_size,
            chunk_size=self.config.chunk_size,
        )

    def extract(
        self,
        catalog: Catalog,
        selection: Selection,
        output_root: Union[str, Path],
        *,
        pack_trailers: bool = False,
    ) -> ExtractionResult:
        """Extract every term of ``selection``; failures are reported per term.

        Features are copied reel by reel under ``<output_root>/feature-<id>``.
        Trailers are rebuilt as a reel-14 file plus trailer list, one
        directory per trailer or, with ``pack_trailers``, all together under
        ``<output_root>/trailers``.
        """

        output_root = Path(output_root)
        results: List[Optional[TermResult]] = []
        packed: List[Tuple[int, SelectionTerm, Asset]] = []

        for term in selection.terms():
            asset, status, message = self.resolve(catalog, term)
            if asset is not None:
                asset, status, message = self._refusal(asset)
            if status != "ok" or asset is None:
                results.append(self._result(term, asset, status, message))
                continue
            if asset.kind == "trailer" and pack_trailers:
                packed.append((len(results), term, asset))
                results.append(None)
                continue
            try:
                if asset.kind == "feature":
                    files = self._copy_feature(asset, output_root)
                else:
                    files = self._pack([asset], output_root / asset_directory(asset))
            except (OSError, ValueError, DtsReelError) as exc:
                results.append(self._result(term, asset, "failed", str(exc)))
                continue
            results.append(self._result(term, asset, "ok", None, files))

        if packed:
            unique: List[Asset] = []
            for _, _, asset in packed:
                if all(asset is not other for other in unique):
                    unique.append(asset)
            try:
                files = self._pack(unique, output_root / "trailers")
                outcome: Tuple[TermStatus, Optional[str], List[OutputFile]] = ("ok", None, files)
            except (OSError, ValueError, DtsReelError) as exc:
                outcome = ("failed", str(exc), [])
            for index, term, asset in packed:
                results[index] = self._result(term, asset, outcome[0], outcome[1], outcome[2])

        return ExtractionResult(output_root=output_root, results=[result for result in results if result is not None])


def extract_from_source(
    path: Union[str, Path],
    output_root: Union[str, Path],
    selection: Selection,
    *,
    config: Optional[AppConfig] = None,
    pack_trailers: bool = False,
) -> ExtractionResult:
    """Scan ``path`` and extract ``selection`` while the source is still open.

    Source level errors (missing path, unsupported source, empty disc)
    propagate to the caller.
    """

    config = config or AppConfig()
    with open_source(path) as source:
        catalog = CatalogScanner(config).scan_source(source)
        return ReconstructionEngine(config).extract(catalog, selection, output_root, pack_trailers=pack_trailers)
