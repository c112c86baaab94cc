"""Base protocol for reel file handlers used by the metadata extractor."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, TYPE_CHECKING, Union

from ...source import Entry
from ..layout import ReelFileName
from ..schema import AssetHeader, TrailerSidecar

if TYPE_CHECKING:  # pragma: no cover
    from ..extractor import ScanContext

HandlerResult = Union[AssetHeader, TrailerSidecar]


class ReelHandler(ABC):
    """Abstract base class for reel, header and sidecar decoders."""

    extensions: Iterable[str] = ()

    def sniff(self, reel_name: ReelFileName) -> bool:
        """Return ``True`` if the handler can decode the given reel file."""

        return reel_name.extension in {ext.upper() for ext in self.extensions}

    @abstractmethod
    def extract(self, entry: Entry, reel_name: ReelFileName, *, context: "ScanContext") -> HandlerResult:
        """Decode ``entry``; raise :class:`~dtsreel.errors.CorruptHeader` on validation failure."""
