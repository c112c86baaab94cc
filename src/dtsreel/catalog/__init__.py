"""Catalog package: layout recognition, metadata extraction and catalog building."""

from .builder import CatalogBuilder, build
from .extractor import MetadataExtractor, ScanContext
from .layout import Layout, LayoutRecognizer, ReelFileName, recognize
from .scanner import CatalogScanner, InspectReport, inspect_sources
from .schema import Asset, AssetHeader, Catalog, ReelRecord

__all__ = [
    "Asset",
    "AssetHeader",
    "Catalog",
    "CatalogBuilder",
    "CatalogScanner",
    "InspectReport",
    "Layout",
    "LayoutRecognizer",
    "MetadataExtractor",
    "ReelFileName",
    "ReelRecord",
    "ScanContext",
    "build",
    "inspect_sources",
    "recognize",
]
