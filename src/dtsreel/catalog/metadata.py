"""Ordered merge of reel metadata coming from headers, sidecars and file names.

Precedence, highest first:

1. a validated binary header (AUD/AUE/SND, then XD10 HDR)
2. a trailer sidecar row
3. an invalid binary header (advisory only)
4. the reel file name
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .layout import ReelFileName
from .schema import AssetHeader, TrailerSidecarEntry

MERGED_FIELDS = ("kind", "identifier", "name", "position", "total_reels", "encrypted")


@dataclass(frozen=True)
class FieldLayer:
    """Optional field values contributed by one metadata origin."""

    origin: str
    values: Mapping[str, object] = field(default_factory=dict)


def merge_fields(layers: Sequence[FieldLayer]) -> Tuple[Dict[str, object], Dict[str, str]]:
    """Return the first non-``None`` value per field and the origin it came from."""

    merged: Dict[str, object] = {}
    provenance: Dict[str, str] = {}
    for layer in layers:
        for key, value in layer.values.items():
            if value is None or key in merged:
                continue
            merged[key] = value
            provenance[key] = layer.origin
    return merged, provenance


def header_layer(header: AssetHeader) -> FieldLayer:
    origin = header.origin if header.valid else f"{header.origin} (invalid)"
    return FieldLayer(origin, header.model_dump(include=set(MERGED_FIELDS)))


def sidecar_layer(row: TrailerSidecarEntry) -> FieldLayer:
    return FieldLayer(
        "sidecar",
        {
            "kind": "trailer",
            "identifier": row.identifier,
            "name": row.name,
            "position": 1,
            "total_reels": 1,
        },
    )


def filename_layer(reel_name: ReelFileName, trailer_reel: int) -> FieldLayer:
    if reel_name.reel == trailer_reel:
        values: Dict[str, object] = {"kind": "trailer", "position": 1, "total_reels": 1}
    else:
        values = {"kind": "feature", "position": reel_name.reel}
    values["encrypted"] = reel_name.extension == "AUE"
    return FieldLayer("filename", values)


def precedence_layers(
    reel_name: ReelFileName,
    *,
    trailer_reel: int,
    headers: Sequence[AssetHeader] = (),
    sidecar_row: Optional[TrailerSidecarEntry] = None,
) -> List[FieldLayer]:
    """Arrange every available origin in precedence order."""

    layers: List[FieldLayer] = [header_layer(header) for header in headers if header.valid]
    if sidecar_row is not None:
        layers.append(sidecar_layer(sidecar_row))
    layers.extend(header_layer(header) for header in headers if not header.valid)
    layers.append(filename_layer(reel_name, trailer_reel))
    return layers
