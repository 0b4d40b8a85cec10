"""
Compute visit metrics for one spreadsheet from the CLI.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from datetime import date
from pathlib import Path

from app.config import get_log_level
from app.logging_utils import configure_logging
from app.services.metrics_service import EmptyVisitSheetError, get_visit_metrics_service
from app.services.spreadsheet_service import SpreadsheetDecodeError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Derive visit dashboard metrics from an Excel sheet.")
    parser.add_argument("path", type=Path, help="Visit record workbook (.xlsx / .xls).")
    parser.add_argument(
        "--date",
        dest="target_date",
        type=date.fromisoformat,
        default=None,
        help="Report the ISO week containing this date (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--attitudes",
        action="store_true",
        help="Print support / not-support attitude counts instead of the summary.",
    )
    args = parser.parse_args(argv)

    configure_logging(get_log_level())
    service = get_visit_metrics_service()

    try:
        rows = service.load_rows(args.path.read_bytes(), filename=args.path.name)
    except OSError as exc:
        print(f"Cannot read {args.path}: {exc}", file=sys.stderr)
        return 1
    except (SpreadsheetDecodeError, EmptyVisitSheetError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    if args.attitudes:
        result = service.attitudes(rows)
    else:
        result = service.summarize(rows, target_date=args.target_date)

    print(json.dumps(dataclasses.asdict(result), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
