"""Configuration helpers for dtsreel."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("dtsreel.yml")


class AppConfig(BaseModel):
    """Application level configuration."""

    workers: int = Field(default=4, ge=1)
    chunk_size: int = Field(default=2**20, gt=0)
    marker_names: Tuple[str, ...] = ("DTS.EXE",)
    trailer_reel: int = Field(default=14, ge=1)
    frame_size: int = Field(default=3675, gt=0)
    log_level: str = "INFO"

    @field_validator("marker_names")
    @classmethod
    def upper_marker_names(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(name.upper() for name in value)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        allowed = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        level = value.upper()
        if level not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}; got {value!r}")
        return level


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load configuration from a YAML file."""

    data: Dict[str, Any] = {}
    if path.exists():
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return AppConfig(**data)
