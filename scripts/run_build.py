"""
Demo script: build Datasources from source files or configs via the public API.

Usage:
    python scripts/run_build.py inputs/master.xlsx
    python scripts/run_build.py "inputs/users(Users).csv" --charset cp932
    python scripts/run_build.py configs/master.yaml --export outputs/master --format parquet
    python scripts/run_build.py inputs/master.xml --workbook outputs/master.xlsx

Each argument is built separately.  Tables and diagnostics are logged;
``--export`` writes one CSV/Parquet file per table, ``--workbook``
writes the Datasource back out as a spreadsheet.  With several inputs
each gets its own output: ``DIR/<input stem>/`` for ``--export`` and
``<workbook stem>_<input stem>.xlsx`` for ``--workbook``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_build")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("inputs", nargs="+", help="Source files or .yaml build configs")
    parser.add_argument("--charset", help="Encoding of CSV inputs")
    parser.add_argument("--export", metavar="DIR", help="Write one file per table into DIR")
    parser.add_argument("--format", choices=["csv", "parquet"], default="csv")
    parser.add_argument("--workbook", metavar="PATH", help="Write the Datasource as .xlsx")
    return parser.parse_args(argv)


def _workbook_path(workbook: str, input_path: str, several: bool) -> Path:
    """One workbook per input: ``out.xlsx`` becomes ``out_<input stem>.xlsx``."""
    path = Path(workbook)
    if not several:
        return path
    return path.with_name(f"{path.stem}_{Path(input_path).stem}{path.suffix or '.xlsx'}")


def main(argv: list[str] | None = None) -> int:
    import datasource_ingest

    args = _parse_args(sys.argv[1:] if argv is None else argv)
    failures = 0

    for input_path in args.inputs:
        if not Path(input_path).exists():
            log.warning("SKIP  %s  (file not found)", input_path)
            continue

        log.info("=" * 70)
        log.info("Processing: %s", input_path)
        log.info("=" * 70)

        options = {}
        if args.charset and Path(input_path).suffix.lower() == ".csv":
            options["charset"] = args.charset

        try:
            result = datasource_ingest.open(input_path, **options)
        except datasource_ingest.DatasourceIngestError as exc:
            log.error("FAILED  %s: %s", input_path, exc)
            failures += 1
            continue

        for table in result.datasource.tables:
            log.info(
                "  Table '%s' (%s): %s records x %d fields",
                table.name,
                table.label,
                f"{len(table):,}",
                len(table.fields),
            )
        if result.diagnostics:
            log.info("  %d rows/units skipped", len(result.diagnostics))

        several = len(args.inputs) > 1
        try:
            if args.export:
                export_dir = Path(args.export)
                if several:
                    export_dir = export_dir / Path(input_path).stem
                datasource_ingest.export_tables(result.datasource, export_dir, args.format)
            if args.workbook:
                datasource_ingest.write_spreadsheet(
                    result.datasource, _workbook_path(args.workbook, input_path, several)
                )
        except datasource_ingest.DatasourceIngestError as exc:
            log.error("FAILED  %s: %s", input_path, exc)
            failures += 1
            continue

        log.info("Done: %s\n", input_path)

    log.info("All inputs processed (%d failed).", failures)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
