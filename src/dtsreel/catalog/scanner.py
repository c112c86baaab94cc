"""Scan pipeline: source, layout, metadata and catalog."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from ..errors import DtsReelError
from ..source import Source, open_source
from ..utils.config import AppConfig
from ..utils.logging import get_logger
from .builder import CatalogBuilder
from .extractor import MetadataExtractor, ScanContext
from .handlers.base import ReelHandler
from .layout import LayoutRecognizer
from .schema import Catalog

LOGGER = get_logger(__name__)


class InspectReport(BaseModel):
    """Outcome of scanning one source for the inspect operation."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: str
    catalog: Optional[Catalog] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CatalogScanner:
    """Run the recognizer, extractor and builder over a source."""

    def __init__(self, config: Optional[AppConfig] = None, handlers: Optional[List[ReelHandler]] = None) -> None:
        self.config = config or AppConfig()
        self.recognizer = LayoutRecognizer(self.config.marker_names)
        self.extractor = MetadataExtractor(handlers, ScanContext(trailer_reel=self.config.trailer_reel))
        self.builder = CatalogBuilder()

    def scan_source(self, source: Source) -> Catalog:
        layout = self.recognizer.recognize(source)
        records = self.extractor.records(layout)
        catalog = self.builder.build(
            records,
            source=str(source.path),
            source_kind=source.kind,
            marker_found=layout.marker is not None,
        )
        LOGGER.info(
            "Scanned %s: %d features, %d trailers",
            source.path,
            len(catalog.features),
            len(catalog.trailers),
        )
        return catalog

    def scan(self, path: Union[str, Path]) -> Catalog:
        """Open ``path``, build its catalog and release the source."""

        with open_source(path) as source:
            return self.scan_source(source)

    def inspect(self, paths: Iterable[Union[str, Path]]) -> List[InspectReport]:
        """Scan every path independently; a failing source does not stop the others."""

        reports: List[InspectReport] = []
        for path in paths:
            try:
                catalog = self.scan(path)
            except DtsReelError as exc:
                LOGGER.error("%s", exc)
                reports.append(InspectReport(path=str(path), error=str(exc)))
                continue
            reports.append(InspectReport(path=str(path), catalog=catalog))
        return reports


def inspect_sources(paths: Iterable[Union[str, Path]], config: Optional[AppConfig] = None) -> List[InspectReport]:
    return CatalogScanner(config).inspect(paths)
