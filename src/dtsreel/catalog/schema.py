"""Pydantic models describing decoded headers, reels, assets and the catalog."""
from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..source import Entry
from .layout import ReelFileName

AssetKind = Literal["feature", "trailer"]


class BackupSoundtrackFormat(IntEnum):
    """Optical backup soundtrack declared in a reel header."""

    DOLBY_A = 0x00
    DOLBY_SR = 0x01
    ACADEMY = 0x02
    NON_SYNC = 0x80
    LAST_REEL_DOLBY_SR = 0x81

    @property
    def label(self) -> str:
        return {
            BackupSoundtrackFormat.DOLBY_A: "Dolby A",
            BackupSoundtrackFormat.DOLBY_SR: "Dolby SR",
            BackupSoundtrackFormat.ACADEMY: "Academy",
            BackupSoundtrackFormat.NON_SYNC: "Non-Sync",
            BackupSoundtrackFormat.LAST_REEL_DOLBY_SR: "Last reel - Dolby SR",
        }[self]


class AssetHeader(BaseModel):
    """Fields decoded from a binary reel or XD10 header.

    When ``valid`` is false every other field is advisory only.
    """

    origin: Literal["aud", "hdr"]
    valid: bool = True
    kind: Optional[AssetKind] = None
    identifier: Optional[int] = Field(default=None, ge=0, le=0xFFFF)
    name: Optional[str] = None
    reel: Optional[int] = None
    position: Optional[int] = Field(default=None, ge=1)
    total_reels: Optional[int] = Field(default=None, ge=1)
    language: Optional[str] = None
    studio: Optional[str] = None
    optical_backup: Optional[BackupSoundtrackFormat] = None
    tracks: Optional[int] = None
    encrypted: Optional[bool] = None


class TrailerSidecarEntry(BaseModel):
    """One row of a ``R14TRLR.TXT`` trailer list."""

    name: str
    identifier: int = Field(ge=0, le=0xFFFF)
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    offset: int = Field(ge=0)
    line_number: int = 0


class TrailerSidecar(BaseModel):
    entries: List[TrailerSidecarEntry] = Field(default_factory=list)


class ReelRecord(BaseModel):
    """One reel after merging header, sidecar and file name information."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    entry: Entry
    reel_name: ReelFileName
    kind: AssetKind
    identifier: Optional[int] = None
    name: Optional[str] = None
    position: int = Field(ge=1)
    total_reels: Optional[int] = None
    valid: bool = True
    encrypted: bool = False
    header: Optional[AssetHeader] = None
    sidecar_entry: Optional[TrailerSidecarEntry] = None
    provenance: Dict[str, str] = Field(default_factory=dict)
    issues: List[str] = Field(default_factory=list)

    @property
    def path(self) -> str:
        return self.entry.path


class Asset(BaseModel):
    """All reels sharing one ``(kind, identifier)`` pair."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: AssetKind
    identifier: int
    name: Optional[str] = None
    total_reels: int = Field(ge=1)
    reels: Mapping[int, ReelRecord] = Field(default_factory=dict, validate_default=True)
    duplicates: Mapping[int, Tuple[ReelRecord, ...]] = Field(default_factory=dict, validate_default=True)
    conflicting_names: Tuple[str, ...] = ()
    declared_totals: Tuple[int, ...] = ()

    @field_validator("reels", "duplicates")
    @classmethod
    def read_only_mapping(cls, value: Mapping[int, object]) -> Mapping[int, object]:
        return MappingProxyType(dict(value))

    @property
    def positions(self) -> List[int]:
        return sorted(self.reels)

    @property
    def missing_positions(self) -> List[int]:
        return [position for position in range(1, self.total_reels + 1) if position not in self.reels]

    @property
    def complete(self) -> bool:
        return set(self.reels) == set(range(1, self.total_reels + 1))

    @property
    def valid(self) -> bool:
        return all(record.valid for record in self.reels.values())

    @property
    def name_conflict(self) -> bool:
        return bool(self.conflicting_names)

    @property
    def total_mismatch(self) -> bool:
        return len(set(self.declared_totals)) > 1

    @property
    def normalized_name(self) -> Optional[str]:
        return normalize_name(self.name) if self.name else None

    def ordered_reels(self) -> List[ReelRecord]:
        return [self.reels[position] for position in self.positions]

    def flags(self) -> List[str]:
        flags: List[str] = []
        if not self.complete:
            flags.append("incomplete")
        if not self.valid:
            flags.append("corrupt")
        if self.duplicates:
            flags.append("duplicates")
        if self.name_conflict:
            flags.append("name-conflict")
        if self.total_mismatch:
            flags.append("total-mismatch")
        return flags


class Catalog(BaseModel):
    """Every asset discovered in one scan, partitioned by kind."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    source: str
    source_kind: str = "directory"
    marker_found: bool = False
    features: Tuple[Asset, ...] = ()
    trailers: Tuple[Asset, ...] = ()
    unidentified: Tuple[ReelRecord, ...] = ()

    def partition(self, kind: AssetKind) -> Tuple[Asset, ...]:
        return self.features if kind == "feature" else self.trailers

    def assets(self) -> List[Asset]:
        return [*self.features, *self.trailers]

    def find_by_id(self, kind: AssetKind, identifier: int) -> Optional[Asset]:
        for asset in self.partition(kind):
            if asset.identifier == identifier:
                return asset
        return None

    def find_by_name(self, kind: AssetKind, name: str) -> List[Asset]:
        wanted = normalize_name(name)
        return [asset for asset in self.partition(kind) if asset.normalized_name == wanted]


def normalize_name(name: str) -> str:
    return name.strip().casefold()
