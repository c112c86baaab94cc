from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Dict

import pycdlib
import pytest

from dtsreel.catalog.handlers.aud import encode_aud_header, generic_trailers_header

FEATURE_ID = 12345
FEATURE_NAME = "MYFEATURE"
TRAILER_PAYLOADS: Dict[int, bytes] = {
    123: b"\x00" + b"A" * 200,
    124: b"\x00" + b"B" * 100,
}


def reel_bytes(
    *,
    name: str,
    identifier: int,
    reel: int,
    total: int = 0,
    payload: bytes = b"\x00" + b"\x55" * 64,
) -> bytes:
    """A reel file: 92-byte header followed by a payload starting with the encryption flag."""

    return encode_aud_header(name=name, identifier=identifier, reel=reel, total_reels=total) + payload


def feature_payload(reel: int) -> bytes:
    return b"\x00" + f"reel {reel} audio ".encode("ascii") * 50


def trailer_sidecar_text() -> str:
    return (
        ";NAME           SERIAL  START   END     OFFSET\r\n"
        ";----           ------  -----   ---     ------\r\n"
        "MYTRAILER\t123\t0\t10\t92\r\n"
        f"OTHER\t124\t0\t5\t{92 + len(TRAILER_PAYLOADS[123])}\r\n"
    )


@pytest.fixture()
def make_reel() -> Callable[..., Path]:
    def _make(path: Path, **kwargs: object) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(reel_bytes(**kwargs))  # type: ignore[arg-type]
        return path

    return _make


@pytest.fixture()
def disc(tmp_path: Path, make_reel: Callable[..., Path]) -> Path:
    """Mirror of a DTS CD: a three reel feature plus a packed trailer reel."""

    root = tmp_path / "disc"
    root.mkdir()
    (root / "DTS.EXE").write_bytes(b"MZ")
    reels = root / "DTS"
    for reel in (1, 2, 3):
        make_reel(
            reels / f"R{reel}T5.AUD",
            name=FEATURE_NAME,
            identifier=FEATURE_ID,
            reel=reel,
            total=3,
            payload=feature_payload(reel),
        )
    packed = generic_trailers_header() + TRAILER_PAYLOADS[123] + TRAILER_PAYLOADS[124]
    (reels / "R14T5.AUD").write_bytes(packed)
    (reels / "R14TRLR.TXT").write_bytes(trailer_sidecar_text().encode("latin-1"))
    return root


@pytest.fixture()
def build_iso(tmp_path: Path) -> Callable[[Path], Path]:
    """Write an ISO 9660 image holding the files of a directory tree."""

    def _build(root: Path) -> Path:
        iso = pycdlib.PyCdlib()
        iso.new(interchange_level=1)
        for path in sorted(root.rglob("*")):
            iso_path = "/" + path.relative_to(root).as_posix().upper()
            if path.is_dir():
                iso.add_directory(iso_path)
            else:
                data = path.read_bytes()
                iso.add_fp(io.BytesIO(data), len(data), iso_path + ";1")
        image = tmp_path / f"{root.name}.iso"
        iso.write(str(image))
        iso.close()
        return image

    return _build
