"""
Spreadsheet upload parsing.

Turns an uploaded CSV or Excel file into the same {"headers", "sampleData"}
payload the JSON endpoint accepts, so uploads run through the identical
validation and analysis path.
"""
import logging
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any, List, Optional

import numpy as np
import pandas as pd
from openpyxl import load_workbook

from analyst.core.config import get_settings
from analyst.core.errors import ErrorCodes, InputValidationError
from analyst.core.performance import track_performance
from analyst.core.sanitization import sanitize_filename, sanitize_for_logging, validate_column_name
from analyst.core.schemas import AnalysisRequest

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.csv', '.xlsx', '.xls'}

MIME_TYPE_MAP = {
    'text/csv': '.csv',
    'application/vnd.ms-excel': '.xls',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet': '.xlsx',
}

DANGEROUS_MIME_TYPES = {
    'application/x-executable',
    'application/x-sharedlib',
    'application/x-msdownload',
    'text/html',
    'application/javascript',
}


def _parse_error(detail: str) -> InputValidationError:
    return InputValidationError(
        detail,
        ErrorCodes.PARSE_ERROR,
        ["Save the file again as CSV or Excel with the headers in the first row"],
    )


def read_excel_with_openpyxl(contents: bytes) -> Optional[pd.DataFrame]:
    """
    Read the largest sheet of an .xlsx workbook, filling merged ranges with
    their top-left value. Returns None when openpyxl cannot read the file.
    """
    try:
        wb = load_workbook(BytesIO(contents), data_only=True)
    except Exception as e:
        logger.warning(f"openpyxl parsing failed, falling back to pandas: {e}")
        return None

    ws = max((wb[name] for name in wb.sheetnames), key=lambda sheet: sheet.max_row, default=wb.active)

    merged_ranges = list(ws.merged_cells.ranges)
    for merged_range in merged_ranges:
        top_left_value = ws.cell(merged_range.min_row, merged_range.min_col).value
        ws.unmerge_cells(str(merged_range))
        for row in range(merged_range.min_row, merged_range.max_row + 1):
            for col in range(merged_range.min_col, merged_range.max_col + 1):
                ws.cell(row, col, top_left_value)

    if merged_ranges:
        logger.info(f"Unmerged {len(merged_ranges)} cell ranges in sheet '{ws.title}'")

    return pd.DataFrame(list(ws.values))


def find_header_row(df: pd.DataFrame, max_scan_rows: int = 10) -> int:
    """
    Index of the row that looks most like a header row.

    Header rows score high on text share and uniqueness and low on numeric
    share; the first row gets a small bonus so well-formed files keep it.
    """
    if len(df) < 2:
        return 0

    best_header_row = 0
    best_score = 0.0

    for row_idx in range(min(max_scan_rows, len(df))):
        row = df.iloc[row_idx]
        non_null_count = int(row.notna().sum())
        if non_null_count == 0:
            continue

        string_count = sum(1 for v in row if isinstance(v, str) and v.strip())
        unique_count = len({str(v).strip().lower() for v in row if pd.notna(v)})
        numeric_count = sum(
            1 for v in row if isinstance(v, (int, float, np.number)) and not isinstance(v, bool) and pd.notna(v)
        )

        score = (
            (string_count / non_null_count) * 0.4
            + (unique_count / non_null_count) * 0.4
            + (1 - numeric_count / non_null_count) * 0.2
        )
        if row_idx == 0:
            score += 0.1

        if score > best_score:
            best_score = score
            best_header_row = row_idx

    return best_header_row


def validate_file_extension(filename: str) -> str:
    """Lower-cased extension of a supported file; raises otherwise."""
    if not filename:
        raise InputValidationError("Filename is required", ErrorCodes.INVALID_FILE_TYPE)

    file_ext = Path(filename).suffix.lower()
    if not file_ext:
        raise InputValidationError(
            "File must have an extension. Supported formats: CSV, XLSX, XLS",
            ErrorCodes.INVALID_FILE_TYPE,
        )
    if file_ext not in ALLOWED_EXTENSIONS:
        raise InputValidationError(
            f"Unsupported file format: {file_ext}. Allowed formats: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
            ErrorCodes.INVALID_FILE_TYPE,
        )
    return file_ext


def validate_mime_type(content_type: Optional[str], file_ext: str) -> None:
    """Reject MIME types that can never be a spreadsheet."""
    if not content_type:
        return

    expected_ext = MIME_TYPE_MAP.get(content_type.lower())
    if expected_ext and expected_ext != file_ext:
        # Some clients send the wrong type for valid files
        logger.warning(f"MIME type {content_type} doesn't match extension {file_ext}")

    if content_type.lower() in DANGEROUS_MIME_TYPES:
        raise InputValidationError(
            f"File type '{content_type}' is not allowed. Only CSV and Excel files are supported.",
            ErrorCodes.INVALID_FILE_TYPE,
        )


def _read_csv(contents: bytes) -> pd.DataFrame:
    try:
        raw = pd.read_csv(BytesIO(contents), header=None)
        encoding = None
    except UnicodeDecodeError:
        raw = pd.read_csv(BytesIO(contents), header=None, encoding='latin1')
        encoding = 'latin1'

    header_row = find_header_row(raw)
    if header_row > 0:
        logger.info(f"Auto-detected header at row {header_row}, skipping {header_row} metadata rows")

    return pd.read_csv(BytesIO(contents), skiprows=range(header_row), header=0, encoding=encoding)


def _read_excel(contents: bytes, file_ext: str) -> pd.DataFrame:
    df = read_excel_with_openpyxl(contents) if file_ext == '.xlsx' else None
    if df is not None:
        if df.empty:
            return df
        header_row = find_header_row(df)
        df.columns = list(df.iloc[header_row])
        return df.iloc[header_row + 1:].reset_index(drop=True)

    excel_file = pd.ExcelFile(BytesIO(contents))
    frames = [pd.read_excel(excel_file, sheet_name=name) for name in excel_file.sheet_names]
    return max(frames, key=len)


def clean_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """Drop empty rows and columns and normalize header text."""
    df = df.dropna(how='all', axis=0)
    df = df.dropna(how='all', axis=1)

    headers: List[str] = []
    for position, col in enumerate(df.columns, start=1):
        name = ' '.join(str(col).split()) if col is not None and not pd.isna(col) else ''
        if not name or name.lower().startswith('unnamed:'):
            name = f"Column {position}"
        # Keep headers unique, e.g. "Amount", "Amount (2)"
        candidate, suffix = name, 2
        while candidate in headers:
            candidate = f"{name} ({suffix})"
            suffix += 1
        headers.append(candidate)

    df = df.copy()
    df.columns = headers
    return df.reset_index(drop=True)


def to_cell(value: Any) -> Any:
    """Plain JSON-friendly Python value for one DataFrame cell."""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return None if pd.isna(value) else value.isoformat()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    if value is pd.NaT or value is pd.NA:
        return None
    return value


def dataframe_to_request(df: pd.DataFrame, max_rows: int) -> AnalysisRequest:
    headers = [str(col) for col in df.columns]
    for header in headers:
        if not validate_column_name(header):
            raise InputValidationError(
                f"Invalid column name: '{sanitize_for_logging(header, 100)}'",
                ErrorCodes.INVALID_INPUT,
                ["Rename the column using letters, digits and spaces"],
            )

    sample = df.head(max_rows)
    if len(df) > max_rows:
        logger.info(f"Sampled first {max_rows} of {len(df)} rows for analysis")

    rows = [[to_cell(value) for value in record] for record in sample.itertuples(index=False, name=None)]
    return AnalysisRequest(headers=headers, sample_data=rows)


@track_performance("parse_upload")
def parse_upload(filename: str, contents: bytes, content_type: Optional[str] = None) -> AnalysisRequest:
    """
    Parse an uploaded CSV/Excel file into an analysis request.

    Raises:
        InputValidationError: unsupported type, empty or oversized file,
            or contents that cannot be parsed
    """
    settings = get_settings()
    file_ext = validate_file_extension(filename)
    validate_mime_type(content_type, file_ext)

    if not contents:
        raise InputValidationError("File is empty", ErrorCodes.PARSE_ERROR, ["Upload a file that contains data"])
    if len(contents) > settings.max_upload_size_bytes:
        raise InputValidationError(
            f"Maximum size is {settings.max_upload_size_mb}MB. Your file is {len(contents) / 1024 / 1024:.2f}MB",
            ErrorCodes.FILE_TOO_LARGE,
        )

    try:
        df = _read_csv(contents) if file_ext == '.csv' else _read_excel(contents, file_ext)
    except pd.errors.EmptyDataError as e:
        raise _parse_error("File appears to be empty or contains no data") from e
    except Exception as e:
        logger.error(f"Error parsing {file_ext} file: {e}")
        raise _parse_error(
            "Unable to parse the file. Please ensure it is a properly formatted CSV or Excel file."
        ) from e

    df = clean_dataframe(df)
    if df.empty:
        raise _parse_error("File appears to be empty or contains no valid data after cleaning")

    logger.info(f"Parsed upload {sanitize_filename(filename)}: {len(df)} rows x {len(df.columns)} columns")
    return dataframe_to_request(df, settings.max_upload_rows)
