"""
Analysis exceptions plus error message constants for user-friendly error handling.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# Error codes
class ErrorCodes:
    INVALID_INPUT = "INVALID_INPUT"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    DATA_QUALITY_ERROR = "DATA_QUALITY_ERROR"
    CHART_GENERATION_ERROR = "CHART_GENERATION_ERROR"
    BUSINESS_ANALYSIS_ERROR = "BUSINESS_ANALYSIS_ERROR"
    REPORT_GENERATION_ERROR = "REPORT_GENERATION_ERROR"
    OUTPUT_FORMATTING_ERROR = "OUTPUT_FORMATTING_ERROR"
    RESOURCE_EXHAUSTION = "RESOURCE_EXHAUSTION"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    PARSE_ERROR = "PARSE_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "ANALYSIS_TIMEOUT"
    UNKNOWN_ERROR = "UNEXPECTED_ERROR"


# User-friendly error messages
ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.INVALID_INPUT: {
        "message": "We couldn't understand the data you sent",
        "detail": "The request needs a list of column headers and a list of sample rows with one value per header.",
        "suggestion": "Send 'headers' as a list of unique, non-empty names and 'sampleData' as a list of rows of the same length."
    },
    ErrorCodes.INSUFFICIENT_DATA: {
        "message": "There isn't enough data to analyze yet",
        "detail": "We need at least a couple of rows and one column with real values to recommend anything.",
        "suggestion": "Add more rows, or include a column with numbers, categories or dates."
    },
    ErrorCodes.DATA_QUALITY_ERROR: {
        "message": "Your data has too many gaps",
        "detail": "Most of the cells are empty or inconsistent, so the analysis would not be meaningful.",
        "suggestion": "Fill in missing values, remove empty rows and keep one kind of value per column."
    },
    ErrorCodes.CHART_GENERATION_ERROR: {
        "message": "We couldn't build chart recommendations",
        "detail": "Something in the column types prevented us from pairing columns into charts.",
        "suggestion": "Check that at least one column holds numbers and one holds categories or dates."
    },
    ErrorCodes.BUSINESS_ANALYSIS_ERROR: {
        "message": "We couldn't derive business insights",
        "detail": "The column names and types did not give us enough context.",
        "suggestion": "Use descriptive column names such as 'Revenue' or 'Region'."
    },
    ErrorCodes.REPORT_GENERATION_ERROR: {
        "message": "We couldn't write the analysis report",
        "detail": "The report could not be assembled from the analysis results.",
        "suggestion": "Try again in a moment. If the problem persists, try a smaller sample."
    },
    ErrorCodes.OUTPUT_FORMATTING_ERROR: {
        "message": "We couldn't package the results",
        "detail": "The analysis finished but its output did not pass validation.",
        "suggestion": "Try again in a moment. If the problem persists, try a different dataset."
    },
    ErrorCodes.RESOURCE_EXHAUSTION: {
        "message": "Your dataset is a bit too large",
        "detail": "The number of cells exceeds what we can analyze in one request.",
        "suggestion": "Send a sample of your rows (the first 1000 usually work great) or fewer columns."
    },
    ErrorCodes.FILE_TOO_LARGE: {
        "message": "Oops! Your file is a bit too large",
        "detail": "Your file exceeds our size limit to keep things fast for everyone.",
        "suggestion": "Try splitting your file into smaller parts, or export just the columns you need."
    },
    ErrorCodes.INVALID_FILE_TYPE: {
        "message": "We need a CSV or Excel file",
        "detail": "We can read .csv and .xlsx files.",
        "suggestion": "Export your sheet as CSV or Excel. Most tools have a 'Download as CSV' option in the File menu."
    },
    ErrorCodes.PARSE_ERROR: {
        "message": "We're having trouble reading your file",
        "detail": "Something's not quite right with the file format. It might be corrupted or in an unexpected format.",
        "suggestion": "Try saving your file again as a fresh CSV or Excel file with headers in the first row."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Whoa there! Slow down a bit",
        "detail": "You're sending requests faster than we can keep up.",
        "suggestion": "Take a quick break and try again in about a minute."
    },
    ErrorCodes.TIMEOUT: {
        "message": "This is taking longer than expected",
        "detail": "The analysis did not finish within its time budget.",
        "suggestion": "Try a smaller sample of your data, or fewer columns."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Hmm, something unexpected happened",
        "detail": "We encountered an issue we weren't expecting.",
        "suggestion": "Give it another try in a moment. If the problem keeps happening, try a different dataset."
    }
}

# HTTP status used when an AnalysisError reaches the API
ERROR_STATUS_CODES: Dict[str, int] = {
    ErrorCodes.RESOURCE_EXHAUSTION: 413,
    ErrorCodes.FILE_TOO_LARGE: 413,
    ErrorCodes.TIMEOUT: 504,
    ErrorCodes.RATE_LIMIT_EXCEEDED: 429,
    ErrorCodes.CHART_GENERATION_ERROR: 500,
    ErrorCodes.BUSINESS_ANALYSIS_ERROR: 500,
    ErrorCodes.REPORT_GENERATION_ERROR: 500,
    ErrorCodes.OUTPUT_FORMATTING_ERROR: 500,
    ErrorCodes.UNKNOWN_ERROR: 500,
}


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Get user-friendly error response for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional additional detail to append

    Returns:
        Dictionary with message, detail, and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response


def get_status_code(error_code: str) -> int:
    """HTTP status for an error code; anything unlisted is a client error."""
    return ERROR_STATUS_CODES.get(error_code, 400)


class AnalysisError(Exception):
    """
    Base class for every failure raised by the analysis pipeline.

    Carries a machine-readable code, a list of suggestions for the user and
    an optional context dict that ends up in logs and API responses.
    """

    default_code = ErrorCodes.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.suggestions = suggestions or []
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses and structured logs."""
        return {
            "name": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "suggestions": list(self.suggestions),
            "context": dict(self.context),
            "timestamp": self.timestamp.isoformat(),
        }


class InputValidationError(AnalysisError):
    """The request payload is structurally invalid (headers, rows)."""

    default_code = ErrorCodes.INVALID_INPUT

    def __init__(self, message: str, code: str, suggestions: Optional[List[str]] = None):
        super().__init__(message, code=code, suggestions=suggestions)


class InsufficientDataError(AnalysisError):
    default_code = ErrorCodes.INSUFFICIENT_DATA

    def __init__(self, message: str, suggestions: Optional[List[str]] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            suggestions=suggestions or [
                "Provide more sample rows",
                "Include at least one column with non-empty values",
                "Add numeric, categorical or date columns",
            ],
            context=context,
        )


class DataQualityError(AnalysisError):
    default_code = ErrorCodes.DATA_QUALITY_ERROR

    def __init__(self, message: str, quality_issues: Optional[List[str]] = None,
                 context: Optional[Dict[str, Any]] = None):
        self.quality_issues = quality_issues or []
        super().__init__(
            message,
            suggestions=[
                "Fill in or remove rows with missing values",
                "Keep one kind of value per column",
                "Review the reported quality issues",
            ],
            context={**(context or {}), "quality_issues": self.quality_issues},
        )


class AnalysisTimeoutError(AnalysisError):
    """An operation exceeded its time budget."""

    default_code = ErrorCodes.TIMEOUT

    def __init__(self, operation: str, timeout_seconds: float,
                 context: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"{operation} timed out after {timeout_seconds:g}s",
            suggestions=[
                "Reduce the number of rows or columns",
                "Retry the request",
            ],
            context={**(context or {}), "operation": operation, "timeout_seconds": timeout_seconds},
        )


class ChartGenerationError(AnalysisError):
    default_code = ErrorCodes.CHART_GENERATION_ERROR

    def __init__(self, message: str, chart_type: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        self.chart_type = chart_type
        super().__init__(
            message,
            suggestions=["Check the column types", "Provide more varied data"],
            context={**(context or {}), "chart_type": chart_type},
        )


class BusinessAnalysisError(AnalysisError):
    default_code = ErrorCodes.BUSINESS_ANALYSIS_ERROR


class ReportGenerationError(AnalysisError):
    default_code = ErrorCodes.REPORT_GENERATION_ERROR

    def __init__(self, message: str, section: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        self.section = section
        super().__init__(message, context={**(context or {}), "section": section})


class OutputFormattingError(AnalysisError):
    default_code = ErrorCodes.OUTPUT_FORMATTING_ERROR


class ResourceExhaustionError(AnalysisError):
    default_code = ErrorCodes.RESOURCE_EXHAUSTION

    def __init__(self, resource: str, limit: int, actual: int,
                 context: Optional[Dict[str, Any]] = None):
        self.resource = resource
        self.limit = limit
        self.actual = actual
        super().__init__(
            f"{resource} limit exceeded: {actual:,} > {limit:,}",
            suggestions=["Send a smaller sample of rows", "Drop columns you do not need"],
            context={**(context or {}), "resource": resource, "limit": limit, "actual": actual},
        )


def to_analysis_error(exc: BaseException) -> AnalysisError:
    """Wrap any exception as an AnalysisError, leaving AnalysisErrors untouched."""
    if isinstance(exc, AnalysisError):
        return exc
    return AnalysisError(
        f"Unexpected error: {exc}",
        suggestions=["Retry the request", "Check the input format"],
        context={"original_error": type(exc).__name__},
    )


def build_error_payload(exc: AnalysisError, correlation_id: Optional[str] = None) -> Dict[str, Any]:
    """Combine the friendly message catalogue with an AnalysisError's specifics."""
    catalogue_code = exc.code if exc.code in ERROR_MESSAGES else exc.default_code
    payload: Dict[str, Any] = get_error_response(catalogue_code, exc.message)
    payload["code"] = exc.code
    payload["suggestions"] = list(exc.suggestions)
    if correlation_id:
        payload["correlation_id"] = correlation_id
    return payload
