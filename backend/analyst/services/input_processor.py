"""
Input validation and processing.

Checks the structure of an analysis payload ({"headers": [...],
"sampleData": [[...], ...]}), rejects datasets that are too small, too
large or too sparse to analyze, and returns the classified columns with
their data-quality metrics.
"""
import logging
from typing import Any, List, Mapping

from analyst.core.config import get_settings
from analyst.core.errors import (
    AnalysisError,
    DataQualityError,
    InputValidationError,
    InsufficientDataError,
    ResourceExhaustionError,
    to_analysis_error,
)
from analyst.core.schemas import AnalysisRequest, DataQualityMetrics, ProcessedInput
from analyst.services.classifier import classify_columns, is_missing
from analyst.services.statistics import calculate_data_quality

logger = logging.getLogger(__name__)

MIN_COMPLETENESS = 0.05
MIN_CONSISTENCY = 0.1
MIN_DATA_DENSITY = 0.1
MAX_QUALITY_ISSUES = 10


def validate_input_structure(payload: Any) -> None:
    if not isinstance(payload, Mapping):
        raise InputValidationError(
            "Input must be a valid object",
            "INVALID_INPUT_TYPE",
            ["Provide input as a JSON object with headers and sampleData properties"],
        )
    if "headers" not in payload:
        raise InputValidationError(
            'Input must contain a "headers" property',
            "MISSING_HEADERS",
            ['Add a "headers" property containing an array of column names'],
        )
    if "sampleData" not in payload:
        raise InputValidationError(
            'Input must contain a "sampleData" property',
            "MISSING_SAMPLE_DATA",
            ['Add a "sampleData" property containing an array of data rows'],
        )


def validate_headers(headers: Any) -> None:
    if not isinstance(headers, list):
        raise InputValidationError(
            "Headers must be an array",
            "INVALID_HEADERS_TYPE",
            ['Provide headers as an array of strings, e.g. ["Name", "Age", "Salary"]'],
        )
    if not headers:
        raise InputValidationError("Headers array cannot be empty", "EMPTY_HEADERS",
                                   ["Provide at least one column header"])
    if any(not isinstance(header, str) for header in headers):
        raise InputValidationError(
            "All headers must be strings",
            "INVALID_HEADER_TYPE",
            ["Ensure all header values are strings, not numbers or other types"],
        )
    if any(header.strip() == "" for header in headers):
        raise InputValidationError("Headers cannot be empty strings", "EMPTY_HEADER_VALUES",
                                   ["Provide meaningful names for all columns"])
    if len(set(headers)) != len(headers):
        raise InputValidationError("Headers must be unique", "DUPLICATE_HEADERS",
                                   ["Ensure all column headers have unique names"])


def validate_sample_data(sample_data: Any, headers: List[str], min_rows: int) -> None:
    if not isinstance(sample_data, list):
        raise InputValidationError(
            "Sample data must be an array",
            "INVALID_SAMPLE_DATA_TYPE",
            ['Provide sampleData as an array of arrays, e.g. [["John", 30], ["Jane", 25]]'],
        )
    if not sample_data:
        raise InputValidationError("Sample data cannot be empty", "EMPTY_SAMPLE_DATA",
                                   ["Provide at least one row of sample data for analysis"])

    for row_number, row in enumerate(sample_data, start=1):
        if not isinstance(row, list):
            raise InputValidationError(
                f"Row {row_number} must be an array",
                "INVALID_ROW_TYPE",
                [f"Ensure row {row_number} is an array of values matching the headers"],
            )
        if len(row) != len(headers):
            raise InputValidationError(
                f"Row {row_number} has {len(row)} values but {len(headers)} headers provided",
                "ROW_HEADER_MISMATCH",
                [
                    f"Ensure row {row_number} has exactly {len(headers)} values",
                    "Check that all rows have the same number of columns as headers",
                ],
            )

    if len(sample_data) < min_rows:
        raise InputValidationError(
            f"At least {min_rows} rows of sample data are required for meaningful analysis",
            "INSUFFICIENT_DATA",
            [f"Provide at least {min_rows} rows of sample data to enable pattern detection"],
        )


def validate_data_sufficiency(sample_data: List[List[Any]], headers: List[str]) -> None:
    """Reject datasets without values or with almost no values."""
    total_cells = len(sample_data) * len(headers)
    filled_cells = sum(1 for row in sample_data for cell in row if not is_missing(cell))

    if filled_cells == 0:
        raise InsufficientDataError(
            "Dataset contains no valid data values",
            suggestions=["Provide a dataset with actual data values, not just empty cells"],
        )

    density = filled_cells / total_cells
    if density < MIN_DATA_DENSITY:
        raise DataQualityError(
            f"Dataset has very low data density ({round(density * 100)}%)",
            quality_issues=[f"Only {filled_cells} of {total_cells} cells contain data"],
        )


def validate_system_resources(cell_count: int, max_cells: int) -> None:
    if cell_count > max_cells:
        raise ResourceExhaustionError("dataset cells", max_cells, cell_count)


def validate_minimum_data_quality(quality: DataQualityMetrics) -> None:
    if quality.completeness < MIN_COMPLETENESS:
        raise DataQualityError(
            f"Data completeness is critically low ({round(quality.completeness * 100)}%)",
            quality_issues=quality.issues,
        )
    if quality.consistency < MIN_CONSISTENCY:
        raise DataQualityError(
            f"Data consistency is critically low ({round(quality.consistency * 100)}%)",
            quality_issues=quality.issues,
        )
    if len(quality.issues) > MAX_QUALITY_ISSUES:
        raise DataQualityError(
            f"Dataset has too many quality issues ({len(quality.issues)}) for reliable analysis",
            quality_issues=quality.issues[:MAX_QUALITY_ISSUES],
        )


def process_input(payload: Any) -> ProcessedInput:
    """
    Validate a raw payload and classify its columns.

    Raises:
        InputValidationError: malformed headers or rows
        InsufficientDataError: no usable values
        DataQualityError: too sparse or inconsistent to analyze
        ResourceExhaustionError: more cells than the configured maximum
    """
    if isinstance(payload, AnalysisRequest):
        payload = payload.model_dump(by_alias=True)

    settings = get_settings()
    try:
        validate_input_structure(payload)
        headers = payload["headers"]
        sample_data = payload["sampleData"]

        validate_headers(headers)
        validate_sample_data(sample_data, headers, settings.min_sample_rows)
        validate_data_sufficiency(sample_data, headers)
        validate_system_resources(len(sample_data) * len(headers), settings.max_dataset_cells)

        columns = classify_columns(headers, sample_data)
        quality = calculate_data_quality(sample_data, headers)
        validate_minimum_data_quality(quality)
    except AnalysisError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error while processing input: {e}", exc_info=True)
        raise to_analysis_error(e) from e

    logger.info(
        f"Processed input: {len(sample_data)} rows x {len(headers)} columns, "
        f"completeness {quality.completeness:.2f}, consistency {quality.consistency:.2f}"
    )
    return ProcessedInput(columns=columns, data_quality=quality)
