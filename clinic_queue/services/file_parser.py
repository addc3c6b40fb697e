import logging
import os
import zipfile
from typing import Any, Dict, Iterator, List, Optional

import numpy as np
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException
from xlrd import XLRDError

from clinic_queue.core.exceptions import ReadError, UnsupportedFormat

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = (".csv",)
EXCEL_EXTENSIONS = (".xlsx", ".xls")
CSV_CHUNK_SIZE = 500


def resolve_extension(path: str, extension: Optional[str] = None) -> str:
    ext = (extension or os.path.splitext(path)[1]).lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    if ext not in CSV_EXTENSIONS + EXCEL_EXTENSIONS:
        raise UnsupportedFormat(
            f"Unsupported file format '{ext or path}'. Use CSV or Excel (.csv, .xlsx, .xls)."
        )
    return ext


def iter_rows(path: str, extension: Optional[str] = None) -> Iterator[Dict[str, Any]]:
    """
    Yield raw rows (header -> value) from a CSV or spreadsheet file.

    The extension is validated eagerly, so an unsupported format fails at call
    time; I/O problems surface while iterating, as ReadError.
    """
    ext = resolve_extension(path, extension)
    if ext in CSV_EXTENSIONS:
        return _iter_csv_rows(path)
    return _iter_excel_rows(path, ext)


def _read_csv_header(path: str) -> List[str]:
    header = pd.read_csv(path, nrows=0, dtype=str, encoding="utf-8-sig")
    return [str(col).strip() for col in header.columns]


def _iter_csv_rows(path: str) -> Iterator[Dict[str, Any]]:
    try:
        headers = _read_csv_header(path)
    except pd.errors.EmptyDataError:
        logger.warning("CSV file %s has no header line", os.path.basename(path))
        return
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise ReadError(f"Failed to read CSV file: {e}") from e

    try:
        reader = pd.read_csv(
            path,
            dtype=object,
            keep_default_na=False,
            # no implicit index: extra trailing fields are dropped, missing ones padded
            index_col=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
            engine="python",
            chunksize=CSV_CHUNK_SIZE,
        )
        with reader:
            for chunk in reader:
                chunk.columns = headers
                chunk = chunk.fillna("")
                for record in chunk.to_dict(orient="records"):
                    yield record
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise ReadError(f"Failed to read CSV file: {e}") from e


def _iter_excel_rows(path: str, ext: str) -> Iterator[Dict[str, Any]]:
    engine = "openpyxl" if ext == ".xlsx" else "xlrd"
    try:
        # only empty cells are missing; text such as "N/A" is kept
        df = pd.read_excel(
            path,
            sheet_name=0,
            dtype=str,
            engine=engine,
            keep_default_na=False,
            na_values=[""],
        )
    except (OSError, ValueError, ImportError, zipfile.BadZipFile, XLRDError, InvalidFileException) as e:
        raise ReadError(f"Failed to read Excel file: {e}") from e

    if df.empty:
        logger.warning("Excel file %s has no data rows", os.path.basename(path))

    df.columns = [str(col).strip() for col in df.columns]
    df = df.replace({np.nan: None})
    for record in df.to_dict(orient="records"):
        yield record
