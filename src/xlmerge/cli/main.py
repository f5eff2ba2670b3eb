from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from xlmerge import MergeEngine, MergeOptions, OutputOptions
from xlmerge.errors import XlmergeError
from xlmerge.io import load_merge_plan


def _ensure_utf8_stdout() -> None:
    """Reconfigure stdout to UTF-8 when supported.

    Windows consoles default to cp932 and can raise encoding errors when piping
    non-ASCII sheet names. Reconfiguring prevents failures without affecting
    environments that already default to UTF-8.
    """

    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="strict")
    except (AttributeError, ValueError):
        return


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        description="Apply a merge plan (JSON/YAML) to an Excel worksheet."
    )
    parser.add_argument("plan", type=Path, help="Merge plan (.json/.yaml/.yml)")
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        help="Excel file (.xlsx/.xlsm). Optional with --dry-run.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output workbook path. If omitted, the input workbook is overwritten.",
    )
    parser.add_argument(
        "--sheet",
        help="Target sheet name (overrides the plan; default is the active sheet).",
    )
    parser.add_argument(
        "--skip-out-of-range",
        action="store_true",
        help="Skip up/left merges on the first row/column instead of failing.",
    )
    parser.add_argument(
        "--keep-overlapping",
        action="store_true",
        help="Do not unmerge existing sheet ranges that overlap new regions; skip the new region instead.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the resolved regions without touching a workbook.",
    )
    parser.add_argument(
        "-r",
        "--report",
        type=Path,
        help="Optional path to write the merged regions report.",
    )
    parser.add_argument(
        "-f",
        "--format",
        default="json",
        choices=["json", "yaml", "yml"],
        help="Regions report format",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print JSON output (indent=2). Default is compact JSON.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint.

    Args:
        argv: Optional argument list for testing.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    _ensure_utf8_stdout()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    engine = MergeEngine(
        options=MergeOptions(
            sheet=args.sheet,
            skip_out_of_range=args.skip_out_of_range,
            replace_overlapping=not args.keep_overlapping,
        ),
        output=OutputOptions(
            fmt=args.format, pretty=args.pretty, report_path=args.report
        ),
    )
    try:
        if args.dry_run:
            plan = load_merge_plan(args.plan)
            regions = engine.plan_regions(plan)
            print(engine.serialize(regions, sheet=args.sheet or plan.sheet), flush=True)
            return 0
        if args.input is None:
            parser.error("input workbook is required unless --dry-run is given")
        engine.process(args.input, args.plan, args.output)
        return 0
    except XlmergeError as e:
        print(f"Error: {e}", flush=True)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
