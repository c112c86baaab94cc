"""Selection input and per-term extraction outcomes."""
from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..catalog.schema import AssetKind

TermStatus = Literal["ok", "not_found", "ambiguous", "incomplete", "corrupt", "failed"]


class SelectionTerm(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: AssetKind
    value: str

    def __str__(self) -> str:
        return f"{self.kind} {self.value!r}"


class Selection(BaseModel):
    """Features and trailers to extract, each given by identifier or name."""

    features: List[str] = Field(default_factory=list)
    trailers: List[str] = Field(default_factory=list)

    @field_validator("features", "trailers", mode="before")
    @classmethod
    def coerce_terms(cls, value: Sequence[Union[str, int]]) -> List[str]:
        return [str(item).strip() for item in value if str(item).strip()]

    def terms(self) -> List[SelectionTerm]:
        return [SelectionTerm(kind="feature", value=value) for value in self.features] + [
            SelectionTerm(kind="trailer", value=value) for value in self.trailers
        ]

    @property
    def empty(self) -> bool:
        return not self.features and not self.trailers


class OutputFile(BaseModel):
    path: Path
    size_bytes: int = Field(ge=0)
    checksum_sha1: str


class TermResult(BaseModel):
    term: SelectionTerm
    status: TermStatus
    kind: Optional[AssetKind] = None
    identifier: Optional[int] = None
    name: Optional[str] = None
    files: List[OutputFile] = Field(default_factory=list)
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class ExtractionResult(BaseModel):
    """Outcome of one extract job, in selection order."""

    output_root: Path
    results: List[TermResult] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    @property
    def files(self) -> List[OutputFile]:
        seen = set()
        files: List[OutputFile] = []
        for result in self.results:
            for output in result.files:
                if output.path not in seen:
                    seen.add(output.path)
                    files.append(output)
        return files
