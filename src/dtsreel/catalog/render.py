"""Plain text rendering of catalogs for the inspect operation."""
from __future__ import annotations

from typing import List

from .scanner import InspectReport
from .schema import Asset, Catalog, ReelRecord


def _reel_line(record: ReelRecord, suffix: str = "") -> str:
    flags = [] if record.valid else ["corrupt"]
    if record.encrypted:
        flags.append("encrypted")
    text = f"    reel {record.position}: {record.path} ({record.entry.size} bytes)"
    if flags:
        text += f" [{', '.join(flags)}]"
    for issue in record.issues:
        text += f"\n      ! {issue}"
    return text + suffix


def render_asset(asset: Asset, show_reels: bool = False) -> List[str]:
    status = "complete" if asset.complete else "incomplete"
    lines = [
        f"  {asset.identifier:>5}  {asset.name or '<unnamed>'}  "
        f"reels {len(asset.reels)}/{asset.total_reels}  {status}"
    ]
    extra = [flag for flag in asset.flags() if flag != "incomplete"]
    if extra:
        lines[0] += f"  [{', '.join(extra)}]"
    if asset.missing_positions:
        lines.append(f"    missing reels: {', '.join(str(p) for p in asset.missing_positions)}")
    if asset.conflicting_names:
        lines.append(f"    also named: {', '.join(asset.conflicting_names)}")
    if asset.total_mismatch:
        lines.append(f"    declared reel counts: {', '.join(str(t) for t in sorted(set(asset.declared_totals)))}")
    if show_reels:
        lines.extend(_reel_line(record) for record in asset.ordered_reels())
        for position, records in asset.duplicates.items():
            lines.extend(_reel_line(record, " (duplicate)") for record in records)
    return lines


def render_catalog(catalog: Catalog, show_reels: bool = False) -> str:
    marker = "marker found" if catalog.marker_found else "no marker"
    lines = [f"{catalog.source} ({catalog.source_kind}, {marker})"]
    for title, assets in (("Features", catalog.features), ("Trailers", catalog.trailers)):
        lines.append(f"{title} ({len(assets)}):")
        for asset in assets:
            lines.extend(render_asset(asset, show_reels))
    if catalog.unidentified:
        lines.append(f"Unidentified reels ({len(catalog.unidentified)}):")
        lines.extend(_reel_line(record) for record in catalog.unidentified)
    return "\n".join(lines)


def render_report(report: InspectReport, show_reels: bool = False) -> str:
    if report.catalog is None:
        return f"{report.path}: error: {report.error}"
    return render_catalog(report.catalog, show_reels)
