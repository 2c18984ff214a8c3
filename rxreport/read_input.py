"""Input readers for prescription event files.

Turns event files into raw ``PatientName DrugName EventName`` lines for
``EventProcessor.process_lines``. Every format is flattened to the same line
shape, so the strict three-token rule applies regardless of where events
came from.

**Input Contract:**
- Plain text (.txt, .log, or no suffix): one event per line, read verbatim
- CSV (.csv): one event per row, no header row; tries common encodings
- Excel (.xlsx): first sheet, one event per row, no header row

**Error Handling:**
- Missing files raise FileNotFoundError
- Unsupported suffixes, undecodable CSV and unreadable workbooks raise ValueError
- Row contents are not validated here; the processor owns line validation
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Iterator, List, TextIO

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .enums import InputFormat

LOG = logging.getLogger(__name__)

CSV_ENCODINGS = ["utf-8-sig", "latin-1", "cp1252"]


def detect_input_format(file_path: Path) -> InputFormat:
    """Detect the input format of an event file by extension.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the extension is not a supported input type.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")
    return InputFormat.from_suffix(file_path.suffix)


def iter_text_lines(stream: TextIO) -> Iterator[str]:
    """Yield raw lines from a text stream such as stdin, without newlines."""
    for line in stream:
        yield line.rstrip("\r\n")


def rows_to_lines(df: pd.DataFrame) -> List[str]:
    """Join each row's non-empty cells with a single space.

    Parameters
    ----------
    df : pd.DataFrame
        Raw rows read without a header; cells may be NaN or empty strings.

    Returns
    -------
    List[str]
        One raw event line per row. Fully empty rows become empty lines,
        which the processor skips.
    """
    lines = []
    for row in df.itertuples(index=False):
        cells = [str(cell).strip() for cell in row if not pd.isna(cell)]
        lines.append(" ".join(cell for cell in cells if cell))
    return lines


def _read_csv(file_path: Path) -> pd.DataFrame:
    for enc in CSV_ENCODINGS:
        try:
            return pd.read_csv(
                file_path,
                header=None,
                dtype=str,
                encoding=enc,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except UnicodeDecodeError:
            continue
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except pd.errors.ParserError as exc:
            raise ValueError(f"Could not parse CSV {file_path}: {exc}") from exc
    raise ValueError(f"Could not decode CSV {file_path} with common encodings")


def _read_excel(file_path: Path) -> pd.DataFrame:
    try:
        return pd.read_excel(file_path, header=None, dtype=str, engine="openpyxl")
    except (zipfile.BadZipFile, InvalidFileException, KeyError, ValueError) as exc:
        raise ValueError(f"Could not read Excel file {file_path}: {exc}") from exc


def read_input(file_path: Path) -> List[str]:
    """Read an event file into raw event lines.

    Parameters
    ----------
    file_path : Path
        Path to a text, CSV or Excel event file.

    Returns
    -------
    List[str]
        Raw event lines in file order.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file type is unsupported, the CSV cannot be decoded, or the
        workbook is corrupt.
    """
    file_path = Path(file_path)
    input_format = detect_input_format(file_path)

    try:
        if input_format is InputFormat.TEXT:
            lines = file_path.read_text(encoding="utf-8").splitlines()
        elif input_format is InputFormat.CSV:
            lines = rows_to_lines(_read_csv(file_path))
        else:
            lines = rows_to_lines(_read_excel(file_path))
    except Exception as exc:
        LOG.error("Failed to read %s: %s", file_path, exc)
        raise

    LOG.info("Loaded %d lines from %s", len(lines), file_path)
    return lines
