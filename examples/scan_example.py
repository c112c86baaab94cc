"""Example script showing how to inspect a disc and extract a feature programmatically."""
from __future__ import annotations

import sys
from pathlib import Path

from dtsreel import Selection, extract_from_source, inspect_sources
from dtsreel.catalog.render import render_report
from dtsreel.utils.logging import configure_logging


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print("usage: scan_example.py SOURCE [OUTPUT FEATURE_ID]")
        return 2
    configure_logging("INFO")
    source = Path(argv[1])
    for report in inspect_sources([source]):
        print(render_report(report, show_reels=True))
    if len(argv) < 4:
        return 0
    result = extract_from_source(source, Path(argv[2]), Selection(features=[argv[3]]))
    for output in result.files:
        print(f"{output.path}\t{output.size_bytes}\t{output.checksum_sha1}")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main(sys.argv))
