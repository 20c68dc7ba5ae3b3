"""Read spreadsheet uploads (CSV or Excel) into row dicts."""

import io
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pandas as pd

from .normalize import normalize_header

EXCEL_SUFFIXES = {".xlsx"}
TEXT_SUFFIXES = {".csv", ".txt"}


class TabularError(ValueError):
    """Raised when an upload cannot be read as a table."""
    pass


def _read_frame(source: Union[str, Path]) -> pd.DataFrame:
    options = {"dtype": str, "keep_default_na": False}

    if isinstance(source, Path):
        suffix = source.suffix.lower()
        if not source.exists():
            raise TabularError(f"Input file not found: {source}")
        if suffix in EXCEL_SUFFIXES:
            return pd.read_excel(source, **options)
        if suffix in TEXT_SUFFIXES:
            return pd.read_csv(source, skip_blank_lines=True, encoding="utf-8-sig", **options)
        raise TabularError(f"Unsupported file type: {suffix or '(none)'}")

    if not source.strip():
        raise TabularError("Input is empty")
    return pd.read_csv(io.StringIO(source), skip_blank_lines=True, **options)


def _load(source: Union[str, Path]) -> pd.DataFrame:
    try:
        frame = _read_frame(source)
    except TabularError:
        raise
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, ValueError) as e:
        raise TabularError(f"Could not parse input: {e}") from e
    frame.columns = [normalize_header(str(c)) for c in frame.columns]
    return frame


def read_table(source: Union[str, Path]) -> Tuple[List[str], List[Dict[str, str]]]:
    """
    Parse a CSV/Excel upload.

    Args:
        source: Path to a .csv/.txt/.xlsx file, or raw CSV text

    Returns:
        (headers, rows): normalized headers, and one dict per data row keyed
        by header with values trimmed. Row i corresponds to spreadsheet line i + 2.

    Raises:
        TabularError: Missing file, unsupported type, or unparseable content
    """
    frame = _load(source)
    rows = []
    for record in frame.to_dict(orient="records"):
        row = {k: str(v).strip() for k, v in record.items()}
        # Rows of empty cells (e.g. trailing ",,,") count as blank lines
        if not any(row.values()):
            continue
        rows.append(row)
    return list(frame.columns), rows


def read_rows(source: Union[str, Path]) -> List[Dict[str, str]]:
    return read_table(source)[1]


def read_headers(source: Union[str, Path]) -> List[str]:
    """Normalized column headers of an upload."""
    return list(_load(source).columns)
