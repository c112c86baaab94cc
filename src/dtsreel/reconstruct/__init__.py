"""Reconstruction of selected features and trailers from a catalog."""

from .engine import ReconstructionEngine, extract_from_source
from .results import ExtractionResult, OutputFile, Selection, SelectionTerm, TermResult
from .trailers import pack_trailers

__all__ = [
    "ExtractionResult",
    "OutputFile",
    "ReconstructionEngine",
    "Selection",
    "SelectionTerm",
    "TermResult",
    "extract_from_source",
    "pack_trailers",
]
