"""Command-line entry point for the prescription income report.

Reads prescription events from a file or standard input, applies them in
order, and prints one report line per patient with a created prescription.

**Error Handling Philosophy:**

- **Malformed lines** (non-blank lines without exactly three tokens) halt the
  run immediately; no partial report is printed
- **Discarded events** (fill before creation, over-return, unknown event
  names) are absorbed; they are expected in real event feeds
- **Infrastructure errors** (missing input, invalid config) fail fast with
  a one-line message on stderr and no traceback

**Exit Codes:**
- 0: Report printed
- 1: Missing or unreadable input, invalid configuration, or malformed line
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from . import read_input
from .config_loader import DEFAULT_CONFIG_PATH, load_config
from .enums import ReportOrder
from .processor import EventProcessor, MalformedLineError

LOG = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="rxreport",
        description="Summarize prescription fill income per patient",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s events.txt
  %(prog)s events.xlsx --order name
  cat events.txt | %(prog)s
        """,
    )

    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="Event file (.txt, .csv, .xlsx). Reads standard input if omitted.",
    )
    parser.add_argument(
        "--order",
        choices=sorted(ReportOrder.all_values()),
        default=None,
        help="Report ordering (default: report.order from config, else activity)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        dest="config_path",
        help=f"Configuration file (default: {DEFAULT_CONFIG_PATH})",
    )

    return parser.parse_args(argv)


def configure_logging(
    level: str = "WARNING", log_dir: Optional[Path] = None, run_id: str = ""
) -> Optional[Path]:
    """Send log records to stderr and, optionally, a per-run log file.

    Parameters
    ----------
    level : str
        Logging level name.
    log_dir : Path, optional
        Directory for the log file. No file is written when None.
    run_id : str
        Unique run identifier used in the log filename.

    Returns
    -------
    Path | None
        Path to the log file, if one was created.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level.upper())

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"rxreport_{run_id}.log"
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
    return log_path


def load_lines(input_file: Optional[str]) -> Iterable[str]:
    """Return raw event lines from ``input_file``, or stdin when None."""
    if input_file is None:
        return read_input.iter_text_lines(sys.stdin)
    return read_input.read_input(Path(input_file))


def run(lines: Iterable[str], order: ReportOrder) -> List[str]:
    """Apply every line with a fresh processor and build the report."""
    processor = EventProcessor()
    processor.process_lines(lines)
    return processor.generate_report(order)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the report and return the process exit code."""
    args = parse_args(argv)

    try:
        config = load_config(args.config_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging_config = config.get("logging") or {}
    log_dir = logging_config.get("log_dir")
    run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    try:
        configure_logging(
            logging_config.get("level", "WARNING"),
            Path(log_dir) if log_dir else None,
            run_id,
        )
    except OSError as exc:
        print(f"Error: Could not set up logging in '{log_dir}': {exc}", file=sys.stderr)
        return 1

    order_name = args.order or (config.get("report") or {}).get("order")
    order = ReportOrder.from_string(order_name)

    try:
        lines = load_lines(args.input_file)
        report = run(lines, order)
    except FileNotFoundError:
        print(f"Error: File '{args.input_file}' not found", file=sys.stderr)
        return 1
    except MalformedLineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for line in report:
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
