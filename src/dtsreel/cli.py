"""Typer-based command line interface for dtsreel."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
import yaml
from pydantic import ValidationError

from .catalog.render import render_report
from .catalog.scanner import CatalogScanner
from .errors import DtsReelError
from .reconstruct import Selection, extract_from_source
from .utils.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from .utils.logging import configure_logging
from .utils.paths import normalise_path

app = typer.Typer(add_completion=False, help="Catalog and extract DTS soundtrack reels.")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="YAML configuration file."),
) -> None:
    try:
        app_config = load_config(config)
    except (ValidationError, yaml.YAMLError, TypeError) as exc:
        raise typer.BadParameter(f"Invalid configuration {config}: {exc}", param_hint="--config") from exc
    configure_logging("DEBUG" if verbose else app_config.log_level)
    ctx.obj = app_config


def _config(ctx: typer.Context) -> AppConfig:
    return ctx.obj if isinstance(ctx.obj, AppConfig) else AppConfig()


def _parse_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@app.command()
def info(
    ctx: typer.Context,
    paths: List[Path] = typer.Argument(..., help="ISO images, CD devices or directories to inspect."),
    reels: bool = typer.Option(False, "--reels", help="List every reel file of each asset."),
) -> None:
    reports = CatalogScanner(_config(ctx)).inspect(paths)
    for report in reports:
        typer.echo(render_report(report, show_reels=reels))
        typer.echo()
    if not all(report.ok for report in reports):
        raise typer.Exit(code=1)


@app.command()
def extract(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., metavar="INPUT", help="ISO image, CD device or directory."),
    output: Path = typer.Argument(..., help="Output directory."),
    feature_id: Optional[int] = typer.Option(None, "--feature-id", min=0, max=0xFFFF, help="Feature identifier."),
    feature_name: Optional[str] = typer.Option(None, "--feature-name", help="Feature display name."),
    trailer_ids: str = typer.Option("", "--trailer-ids", help="Comma separated trailer identifiers."),
    trailer_names: str = typer.Option("", "--trailer-names", help="Comma separated trailer names."),
    pack: bool = typer.Option(False, "--pack-trailers", help="Pack all selected trailers into one reel."),
) -> None:
    features = [str(feature_id)] if feature_id is not None else []
    if feature_name:
        features.append(feature_name)
    ids = _parse_list(trailer_ids)
    for value in ids:
        if not value.isdigit():
            raise typer.BadParameter(f"Trailer id {value!r} is not a number", param_hint="--trailer-ids")
    selection = Selection(features=features, trailers=ids + _parse_list(trailer_names))
    if selection.empty:
        raise typer.BadParameter("Select at least one feature or trailer")

    try:
        result = extract_from_source(
            input_path,
            normalise_path(output),
            selection,
            config=_config(ctx),
            pack_trailers=pack,
        )
    except DtsReelError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    for term_result in result.results:
        label = term_result.name or term_result.term.value
        if term_result.ok:
            typer.echo(f"{term_result.term}: {label} ({term_result.identifier}) -> {len(term_result.files)} files")
            for output_file in term_result.files:
                typer.echo(f"  {output_file.path} ({output_file.size_bytes} bytes, sha1 {output_file.checksum_sha1})")
        else:
            typer.echo(f"{term_result.term}: {term_result.status}: {term_result.message}")
    raise typer.Exit(code=result.exit_code)


if __name__ == "__main__":
    app()
