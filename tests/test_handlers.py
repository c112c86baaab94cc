from __future__ import annotations

import pytest

from dtsreel.catalog.handlers import (
    decode_aud_header,
    decode_hdr,
    decode_trailer_sidecar,
    encode_aud_header,
    encode_trailer_sidecar,
    generic_trailers_header,
)
from dtsreel.catalog.handlers.hdr import HDR_LEN, HDR_MAGIC
from dtsreel.catalog.schema import BackupSoundtrackFormat, TrailerSidecarEntry
from dtsreel.errors import CorruptHeader, SidecarParseError


def _aud(**kwargs: object) -> bytearray:
    defaults = {"name": "MYFEATURE", "identifier": 12345, "reel": 2, "total_reels": 3}
    defaults.update(kwargs)
    return bytearray(encode_aud_header(**defaults) + b"\x00\x00")  # type: ignore[arg-type]


def _hdr(title: bytes = b"MYFEATURE", identifier: int = 12345, reel: int = 1, studio: bytes = b"UNIVERSAL") -> bytearray:
    data = bytearray(HDR_LEN)
    data[: len(HDR_MAGIC)] = HDR_MAGIC
    data[9 : 9 + len(title)] = title
    data[69 : 69 + len(studio)] = studio
    data[79:81] = identifier.to_bytes(2, "little")
    data[91] = reel
    return data


def test_decode_feature_header() -> None:
    header = decode_aud_header(bytes(_aud(studio="WB")))
    assert header.valid
    assert header.kind == "feature"
    assert header.identifier == 12345
    assert header.name == "MYFEATURE"
    assert (header.position, header.total_reels) == (2, 3)
    assert header.language == "ENG"
    assert header.studio == "WB"
    assert header.optical_backup is BackupSoundtrackFormat.DOLBY_SR
    assert header.tracks == 5
    assert header.encrypted is False


def test_reel_fourteen_is_a_trailer() -> None:
    header = decode_aud_header(bytes(_aud(reel=14, total_reels=0, identifier=123)))
    assert header.kind == "trailer"
    assert (header.position, header.total_reels) == (1, 1)


def test_undeclared_total_is_absent() -> None:
    assert decode_aud_header(bytes(_aud(total_reels=0))).total_reels is None


def test_encrypted_flag() -> None:
    data = _aud()
    data[92] = 1
    assert decode_aud_header(bytes(data)).encrypted is True


@pytest.mark.parametrize(
    ("mutate", "reason"),
    [
        (lambda data: data.__delitem__(slice(93, None)), "at least 94 bytes"),
        (lambda data: data.__setitem__(60, 0), "marker"),
        (lambda data: data.__setitem__(75, 0x05), "optical backup"),
        (lambda data: data.__setitem__(78, 4), "exceeds declared total"),
        (lambda data: data.__setitem__(78, 0), "reel number 0"),
    ],
)
def test_corrupt_headers_keep_advisory_fields(mutate, reason: str) -> None:
    data = _aud()
    mutate(data)
    with pytest.raises(CorruptHeader) as excinfo:
        decode_aud_header(bytes(data), "/DTS/R2T5.AUD")
    assert reason in excinfo.value.reason
    assert excinfo.value.path == "/DTS/R2T5.AUD"
    advisory = excinfo.value.header
    assert advisory is not None and not advisory.valid
    assert advisory.identifier == 12345
    assert advisory.name == "MYFEATURE"


def test_unreadable_title_is_absent_not_fatal() -> None:
    data = _aud()
    data[0:4] = b"\xff\xfe\xfd\xfc"
    header = decode_aud_header(bytes(data))
    assert header.valid
    assert header.name is None


def test_generic_trailers_header() -> None:
    header = decode_aud_header(generic_trailers_header() + b"\x00\x00")
    assert header.name == "Trailers Reel 14"
    assert header.identifier == 1045
    assert header.kind == "trailer"


def test_decode_hdr() -> None:
    header = decode_hdr(bytes(_hdr()))
    assert header.valid
    assert header.origin == "hdr"
    assert (header.kind, header.identifier, header.position) == ("feature", 12345, 1)
    assert header.name == "MYFEATURE"
    assert header.studio == "UNIVERSAL"


def test_decode_hdr_trailer() -> None:
    header = decode_hdr(bytes(_hdr(reel=14, identifier=123, title=b"MYTRAILER")))
    assert (header.kind, header.position, header.total_reels) == ("trailer", 1, 1)


@pytest.mark.parametrize("data", [bytes(_hdr())[:-1], bytes(_hdr()) + b"\x00", b"\x00" + bytes(_hdr())[1:]])
def test_hdr_size_and_magic_are_checked(data: bytes) -> None:
    with pytest.raises(CorruptHeader):
        decode_hdr(data)


def test_decode_trailer_sidecar() -> None:
    text = (
        ";NAME SERIAL START END OFFSET\r\n"
        ";---- ------ ----- --- ------\r\n"
        "\r\n"
        "MYTRAILER 123 0 10 92\r\n"
        "-----\r\n"
        "OTHER\t124\t3\t5\t293\r\n"
    )
    sidecar = decode_trailer_sidecar(text)
    assert [(row.name, row.identifier, row.start, row.end, row.offset) for row in sidecar.entries] == [
        ("MYTRAILER", 123, 0, 10, 92),
        ("OTHER", 124, 3, 5, 293),
    ]
    assert [row.line_number for row in sidecar.entries] == [4, 6]


@pytest.mark.parametrize(("line", "number"), [("GARBAGE", 2), ("MYTRAILER 123 0 10 x", 2), ("MYTRAILER 123 0 10 -4", 2)])
def test_sidecar_parse_errors_report_line(line: str, number: int) -> None:
    with pytest.raises(SidecarParseError) as excinfo:
        decode_trailer_sidecar(f";header\n{line}\n", "R14TRLR.TXT")
    assert excinfo.value.line_number == number
    assert excinfo.value.line == line


def test_encoded_sidecar_parses_back() -> None:
    rows = [
        TrailerSidecarEntry(name="MY TRAILER", identifier=123, start=0, end=10, offset=92),
        TrailerSidecarEntry(name="OTHER", identifier=124, start=0, end=5, offset=293),
    ]
    text = encode_trailer_sidecar(rows)
    assert text.startswith(";NAME")
    assert text.endswith("\r\n")
    parsed = decode_trailer_sidecar(text)
    assert [row.name for row in parsed.entries] == ["MY_TRAILER", "OTHER"]
    assert [row.offset for row in parsed.entries] == [92, 293]
