import logging
import time
from typing import Any, Optional, Tuple

from fastapi import APIRouter, Body, File, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from analyst.core.config import API_VERSION, get_settings
from analyst.core.errors import (
    AnalysisError,
    ErrorCodes,
    InputValidationError,
    build_error_payload,
    get_status_code,
)
from analyst.core.sanitization import sanitize_filename, sanitize_for_logging
from analyst.core.schemas import (
    AnalysisMetadata,
    AnalysisOutput,
    AnalysisResponse,
    ChartsRequest,
    ChartsResponse,
)
from analyst.core.timeouts import run_with_timeout
from analyst.services.analysis import analyze_dataset, require_charts
from analyst.services.diversity import AnalyticalAspect
from analyst.services.engine import get_engine
from analyst.services.parser import ALLOWED_EXTENSIONS, parse_upload

logger = logging.getLogger(__name__)

router = APIRouter()

limiter = Limiter(key_func=get_remote_address)

UPLOAD_CHUNK_SIZE = 1024 * 1024


def analysis_rate_limit() -> str:
    return f"{get_settings().rate_limit_per_minute}/minute"


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "unknown")


def _http_error(exc: AnalysisError, request: Request) -> HTTPException:
    correlation_id = _correlation_id(request)
    status_code = get_status_code(exc.code)
    log = logger.error if status_code >= 500 else logger.warning
    log(f"Analysis request failed with {exc.code}: {sanitize_for_logging(exc.message)}")
    return HTTPException(
        status_code=status_code,
        detail=build_error_payload(exc, correlation_id),
        headers={"X-Correlation-ID": correlation_id},
    )


def _build_response(output: AnalysisOutput, started: float, row_count: int,
                    column_count: int, request: Request) -> AnalysisResponse:
    return AnalysisResponse(
        data=output,
        metadata=AnalysisMetadata(
            processing_time_ms=round((time.perf_counter() - started) * 1000, 2),
            chart_count=len(output.charts_to_generate),
            report_length=len(output.full_analysis_report_markdown),
            row_count=row_count,
            column_count=column_count,
            correlation_id=_correlation_id(request),
        ),
    )


def _payload_shape(payload: Any) -> Tuple[int, int]:
    if isinstance(payload, dict):
        rows = payload.get("sampleData") or []
        headers = payload.get("headers") or []
        return len(rows), len(headers)
    return 0, 0


@router.get("/health")
async def health_check():
    return {"status": "ok", "version": API_VERSION}


@router.get("/capabilities")
async def capabilities():
    """What the analyzer accepts and produces, plus the active limits."""
    settings = get_settings()
    return {
        "version": API_VERSION,
        "chartTypes": ["bar", "line", "scatter"],
        "columnTypes": ["numerical", "categorical", "datetime", "text"],
        "analyticalAspects": [aspect.value for aspect in AnalyticalAspect],
        "uploadFormats": sorted(ALLOWED_EXTENSIONS),
        "limits": {
            "maxDatasetCells": settings.max_dataset_cells,
            "minSampleRows": settings.min_sample_rows,
            "maxUploadSizeMb": settings.max_upload_size_mb,
            "maxUploadRows": settings.max_upload_rows,
            "analysisTimeoutSeconds": settings.analysis_timeout_seconds,
            "rateLimitPerMinute": settings.rate_limit_per_minute,
        },
    }


@router.post("/analyze", response_model=AnalysisResponse)
@limiter.limit(analysis_rate_limit)
async def analyze(request: Request, payload: Any = Body(...)):
    """
    Analyze {"headers": [...], "sampleData": [[...], ...]} and return chart
    recommendations with a Markdown report.

    The body is taken as raw JSON so structural problems are reported with
    specific error codes (MISSING_HEADERS, ROW_HEADER_MISMATCH, ...).
    """
    started = time.perf_counter()
    try:
        output = await analyze_dataset(payload)
    except AnalysisError as e:
        raise _http_error(e, request) from e

    row_count, column_count = _payload_shape(payload)
    return _build_response(output, started, row_count, column_count, request)


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read the upload in chunks, stopping as soon as it exceeds the limit."""
    chunks = []
    size = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise InputValidationError(
                f"Maximum size is {max_bytes // (1024 * 1024)}MB",
                ErrorCodes.FILE_TOO_LARGE,
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/analyze/upload", response_model=AnalysisResponse)
@limiter.limit(analysis_rate_limit)
async def analyze_upload(request: Request, file: UploadFile = File(...)):
    """Analyze an uploaded CSV or Excel file."""
    settings = get_settings()
    started = time.perf_counter()
    filename: Optional[str] = file.filename
    logger.info(f"Processing upload: {sanitize_for_logging(sanitize_filename(filename))}")

    try:
        contents = await _read_upload(file, settings.max_upload_size_bytes)
        analysis_request = await run_with_timeout(
            parse_upload, settings.analysis_timeout_seconds, "File parsing",
            filename, contents, file.content_type,
        )
        output = await analyze_dataset(analysis_request)
    except AnalysisError as e:
        raise _http_error(e, request) from e

    return _build_response(
        output, started, len(analysis_request.sample_data), len(analysis_request.headers), request
    )


@router.post("/charts", response_model=ChartsResponse)
async def recommend_charts(request: Request, body: ChartsRequest):
    """Chart recommendations for already classified columns."""
    settings = get_settings()
    try:
        charts, statistics = await run_with_timeout(
            get_engine().generate, settings.chart_generation_timeout_seconds, "Chart generation", body.columns
        )
        require_charts(charts)
    except AnalysisError as e:
        raise _http_error(e, request) from e
    return ChartsResponse(charts=charts, statistics=statistics)
