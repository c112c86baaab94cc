"""Catalog and recover DTS cinema soundtrack reels from discs, images and XD10 ingest folders."""

from .catalog import Catalog, CatalogScanner, inspect_sources
from .reconstruct import ExtractionResult, ReconstructionEngine, Selection, extract_from_source
from .source import open_source

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "CatalogScanner",
    "ExtractionResult",
    "ReconstructionEngine",
    "Selection",
    "extract_from_source",
    "inspect_sources",
    "open_source",
]
