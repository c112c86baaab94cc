"""Group reel records into assets and assemble the catalog."""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from ..utils.logging import get_logger
from .schema import Asset, AssetKind, Catalog, ReelRecord, normalize_name

LOGGER = get_logger(__name__)

GroupKey = Tuple[AssetKind, int]


class CatalogBuilder:
    """Build an immutable :class:`Catalog` from merged reel records.

    The identifier is the authoritative key. Each identifier maps to a small
    list of candidate name groups; the largest group names the asset and the
    others are carried along as conflicting names.
    """

    def build(
        self,
        records: Iterable[ReelRecord],
        *,
        source: str = "",
        source_kind: str = "directory",
        marker_found: bool = False,
    ) -> Catalog:
        members: Dict[GroupKey, List[ReelRecord]] = {}
        candidates: Dict[GroupKey, Dict[Optional[str], List[ReelRecord]]] = {}
        unidentified: List[ReelRecord] = []

        for record in records:
            if record.identifier is None:
                LOGGER.warning("Reel %s has no identifier", record.path)
                unidentified.append(record)
                continue
            key: GroupKey = (record.kind, record.identifier)
            members.setdefault(key, []).append(record)
            name_key = normalize_name(record.name) if record.name else None
            candidates.setdefault(key, {}).setdefault(name_key, []).append(record)

        assets = [self._build_asset(key, members[key], candidates[key]) for key in members]
        features = tuple(sorted((a for a in assets if a.kind == "feature"), key=lambda a: a.identifier))
        trailers = tuple(sorted((a for a in assets if a.kind == "trailer"), key=lambda a: a.identifier))
        return Catalog(
            source=source,
            source_kind=source_kind,
            marker_found=marker_found,
            features=features,
            trailers=trailers,
            unidentified=tuple(unidentified),
        )

    def _build_asset(
        self,
        key: GroupKey,
        records: List[ReelRecord],
        name_groups: Dict[Optional[str], List[ReelRecord]],
    ) -> Asset:
        kind, identifier = key
        named = [(name_key, group) for name_key, group in name_groups.items() if name_key is not None]
        name: Optional[str] = None
        conflicting: List[str] = []
        if named:
            canonical_key, canonical_group = max(named, key=lambda item: len(item[1]))
            name = canonical_group[0].name
            conflicting = [group[0].name for name_key, group in named if name_key != canonical_key and group[0].name]
            if conflicting:
                LOGGER.warning(
                    "%s %d is named %r but also %s",
                    kind,
                    identifier,
                    name,
                    ", ".join(repr(other) for other in conflicting),
                )

        reels: Dict[int, ReelRecord] = {}
        duplicates: Dict[int, List[ReelRecord]] = {}
        for record in records:
            if record.position in reels:
                duplicates.setdefault(record.position, []).append(record)
                LOGGER.warning(
                    "Duplicate reel %d for %s %d: keeping %s, ignoring %s",
                    record.position,
                    kind,
                    identifier,
                    reels[record.position].path,
                    record.path,
                )
            else:
                reels[record.position] = record

        declared = [record.total_reels for record in records if record.total_reels]
        total = max(declared) if declared else max(reels)
        if len(set(declared)) > 1:
            counts = Counter(declared)
            LOGGER.warning(
                "Reels of %s %d disagree on the reel count (%s), using %d",
                kind,
                identifier,
                ", ".join(f"{value} x{count}" for value, count in sorted(counts.items())),
                total,
            )

        return Asset(
            kind=kind,
            identifier=identifier,
            name=name,
            total_reels=total,
            reels=dict(sorted(reels.items())),
            duplicates=dict(sorted(duplicates.items())),
            conflicting_names=conflicting,
            declared_totals=declared,
        )


def build(records: Iterable[ReelRecord], **kwargs: object) -> Catalog:
    """Build a catalog; see :meth:`CatalogBuilder.build` for keyword arguments."""

    return CatalogBuilder().build(records, **kwargs)  # type: ignore[arg-type]
