from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from dtsreel.cli import app

runner = CliRunner()


def test_info_lists_features_and_trailers(disc: Path) -> None:
    result = runner.invoke(app, ["info", str(disc)])
    assert result.exit_code == 0, result.output
    assert "Features (1):" in result.output
    assert "12345  MYFEATURE  reels 3/3  complete" in result.output
    assert "MYTRAILER" in result.output


def test_info_reports_failure_exit_status(disc: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["info", str(disc), str(tmp_path / "missing")])
    assert result.exit_code == 1
    assert "MYFEATURE" in result.output
    assert "does not exist" in result.output


def test_extract_feature(disc: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    result = runner.invoke(app, ["extract", str(disc), str(out), "--feature-id", "12345"])
    assert result.exit_code == 0, result.output
    for reel in (1, 2, 3):
        assert (out / "feature-12345" / f"R{reel}T5.AUD").read_bytes() == (disc / "DTS" / f"R{reel}T5.AUD").read_bytes()


def test_extract_trailer_names(disc: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    result = runner.invoke(app, ["extract", str(disc), str(out), "--trailer-names=MYTRAILER,OTHER", "--pack-trailers"])
    assert result.exit_code == 0, result.output
    assert (out / "trailers" / "R14TRLR.TXT").exists()


def test_extract_unknown_term_fails(disc: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["extract", str(disc), str(tmp_path / "out"), "--trailer-ids", "123,999"])
    assert result.exit_code == 1
    assert "not_found" in result.output


def test_extract_missing_source(tmp_path: Path) -> None:
    result = runner.invoke(app, ["extract", str(tmp_path / "missing"), str(tmp_path / "out"), "--feature-id", "1"])
    assert result.exit_code == 1
    assert "does not exist" in result.output


@pytest.mark.parametrize("options", [[], ["--trailer-ids", "abc"]])
def test_extract_rejects_bad_selection(disc: Path, tmp_path: Path, options: list[str]) -> None:
    result = runner.invoke(app, ["extract", str(disc), str(tmp_path / "out"), *options])
    assert result.exit_code == 2


def test_config_file_is_applied(disc: Path, tmp_path: Path) -> None:
    config = tmp_path / "dtsreel.yml"
    config.write_text("workers: 2\nlog_level: warning\n")
    result = runner.invoke(app, ["--config", str(config), "--verbose", "extract", str(disc), str(tmp_path / "out"), "--feature-name", "myfeature"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "feature-12345" / "R3T5.AUD").exists()


@pytest.mark.parametrize("content", ["workers: 0\n", "log_level: chatty\n", "workers: [unclosed\n"])
def test_invalid_config_is_a_usage_error(disc: Path, tmp_path: Path, content: str) -> None:
    config = tmp_path / "dtsreel.yml"
    config.write_text(content)
    result = runner.invoke(app, ["--config", str(config), "info", str(disc)])
    assert result.exit_code == 2


def test_trace_log_level_from_config(disc: Path, tmp_path: Path) -> None:
    config = tmp_path / "dtsreel.yml"
    config.write_text("log_level: trace\n")
    result = runner.invoke(app, ["--config", str(config), "info", str(disc)])
    assert result.exit_code == 0, result.output
