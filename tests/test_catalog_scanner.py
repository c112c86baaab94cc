from __future__ import annotations

from pathlib import Path
from typing import Callable

from dtsreel.catalog import CatalogScanner, inspect_sources
from dtsreel.catalog.extractor import MetadataExtractor
from dtsreel.catalog.handlers.hdr import HDR_LEN, HDR_MAGIC
from dtsreel.catalog.layout import recognize
from dtsreel.catalog.render import render_report
from dtsreel.source import DirectorySource, SliceEntry

from conftest import FEATURE_ID, FEATURE_NAME, TRAILER_PAYLOADS


def _hdr_bytes(title: bytes, identifier: int, reel: int) -> bytes:
    data = bytearray(HDR_LEN)
    data[: len(HDR_MAGIC)] = HDR_MAGIC
    data[9 : 9 + len(title)] = title
    data[79:81] = identifier.to_bytes(2, "little")
    data[91] = reel
    return bytes(data)


def test_scanner_catalogs_features_and_packed_trailers(disc: Path) -> None:
    catalog = CatalogScanner().scan(disc)
    assert catalog.marker_found
    assert catalog.source_kind == "directory"
    [feature] = catalog.features
    assert (feature.identifier, feature.name, feature.total_reels) == (FEATURE_ID, FEATURE_NAME, 3)
    assert feature.complete and feature.valid
    assert [asset.identifier for asset in catalog.trailers] == [123, 124]
    assert [asset.name for asset in catalog.trailers] == ["MYTRAILER", "OTHER"]


def test_packed_trailers_become_slices(disc: Path) -> None:
    with DirectorySource(disc) as source:
        records = MetadataExtractor().records(recognize(source))
        trailers = [record for record in records if record.kind == "trailer"]
        assert len(trailers) == 2
        for record in trailers:
            assert isinstance(record.entry, SliceEntry)
            assert record.provenance["identifier"] == "sidecar"
            assert record.sidecar_entry is not None
            with record.entry.open() as handle:
                assert handle.read() == TRAILER_PAYLOADS[record.identifier]


def test_unreadable_container_name_does_not_matter(disc: Path) -> None:
    path = disc / "DTS" / "R14T5.AUD"
    data = bytearray(path.read_bytes())
    data[0:18] = b"\xff" * 18
    path.write_bytes(bytes(data))
    catalog = CatalogScanner().scan(disc)
    assert catalog.find_by_name("trailer", "mytrailer")[0].identifier == 123


def test_corrupt_reel_is_cataloged_invalid(disc: Path) -> None:
    path = disc / "DTS" / "R2T5.AUD"
    data = bytearray(path.read_bytes())
    data[60] = 0
    path.write_bytes(bytes(data))
    [feature] = CatalogScanner().scan(disc).features
    assert feature.complete
    assert not feature.valid
    assert not feature.reels[2].valid
    assert feature.reels[2].provenance["identifier"] == "aud (invalid)"
    assert any("marker" in issue for issue in feature.reels[2].issues)
    assert "corrupt" in feature.flags()


def test_broken_sidecar_is_reported_on_the_container(disc: Path) -> None:
    (disc / "DTS" / "R14TRLR.TXT").write_text(";NAME SERIAL START END OFFSET\nGARBAGE\n")
    catalog = CatalogScanner().scan(disc)
    [trailer] = catalog.trailers
    assert trailer.identifier == 1045
    assert trailer.name == "Trailers Reel 14"
    assert any("line 2" in issue for issue in trailer.reels[1].issues)


def test_hdr_sidecar_supplies_identity(tmp_path: Path, make_reel: Callable[..., Path]) -> None:
    ingest = tmp_path / "xd10"
    make_reel(ingest / "R1T5.AUD", name="", identifier=0, reel=1)
    data = bytearray((ingest / "R1T5.AUD").read_bytes())
    data[60] = 0
    (ingest / "R1T5.AUD").write_bytes(bytes(data))
    (ingest / "R1T5.HDR").write_bytes(_hdr_bytes(b"INGESTED", 4242, 1))
    catalog = CatalogScanner().scan(tmp_path)
    [feature] = catalog.features
    assert (feature.identifier, feature.name) == (4242, "INGESTED")
    assert feature.reels[1].provenance["identifier"] == "hdr"
    assert not catalog.marker_found


def test_inspect_continues_after_failing_source(disc: Path, tmp_path: Path) -> None:
    reports = inspect_sources([tmp_path / "missing", disc])
    assert [report.ok for report in reports] == [False, True]
    assert "does not exist" in render_report(reports[0])
    text = render_report(reports[1], show_reels=True)
    assert "Features (1):" in text
    assert "Trailers (2):" in text
    assert "MYFEATURE" in text
    assert "reel 3: /DTS/R3T5.AUD" in text


def test_single_row_sidecar_does_not_override_reel_header(tmp_path: Path, make_reel: Callable[..., Path]) -> None:
    make_reel(tmp_path / "disc" / "R14T5.AUD", name="REALNAME", identifier=500, reel=14)
    (tmp_path / "disc" / "R14TRLR.TXT").write_text(";NAME SERIAL START END OFFSET\r\nMYTRAILER 123 0 1 92\r\n")
    with DirectorySource(tmp_path / "disc") as source:
        [record] = MetadataExtractor().records(recognize(source))
    assert (record.kind, record.identifier, record.name) == ("trailer", 500, "REALNAME")
    assert record.provenance["identifier"] == "aud"
    assert record.sidecar_entry is not None and record.sidecar_entry.identifier == 123
    assert not isinstance(record.entry, SliceEntry)


def test_single_row_sidecar_on_generic_reel_is_a_slice(disc: Path) -> None:
    (disc / "DTS" / "R14TRLR.TXT").write_text(";NAME SERIAL START END OFFSET\r\nMYTRAILER 123 0 10 92\r\n")
    catalog = CatalogScanner().scan(disc)
    [trailer] = catalog.trailers
    assert (trailer.identifier, trailer.name) == (123, "MYTRAILER")
    assert isinstance(trailer.reels[1].entry, SliceEntry)
    assert trailer.reels[1].entry.size == len(TRAILER_PAYLOADS[123]) + len(TRAILER_PAYLOADS[124])
