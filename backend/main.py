import sys
import logging
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from analyst.api.routes import router, limiter
from analyst.api.metrics import router as metrics_router
from analyst.core.config import API_VERSION, get_settings
from analyst.core.errors import AnalysisError, ErrorCodes, build_error_payload, get_error_response, get_status_code
from analyst.core.logging import configure_logging
from analyst.core.middleware import CorrelationIDMiddleware, TimeoutMiddleware

# Load environment variables
load_dotenv()

# Load and validate configuration
try:
    settings = get_settings()
except Exception as e:
    # Basic logger for startup errors
    logging.basicConfig(level=logging.ERROR)
    logging.getLogger(__name__).error(f"Failed to load configuration: {e}")
    sys.exit(1)

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Dataset Analyst API",
    description="Chart recommendations and analysis reports for tabular datasets",
    version=API_VERSION
)

# Store limiter and settings in app state for use in routes
app.state.limiter = limiter
app.state.settings = settings


def _correlation_id(request: Request) -> str:
    return getattr(request.state, 'correlation_id', 'unknown')


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded with structured error response."""
    correlation_id = _correlation_id(request)
    error_info = get_error_response(ErrorCodes.RATE_LIMIT_EXCEEDED)
    error_info['correlation_id'] = correlation_id
    return JSONResponse(
        status_code=429,
        content={"detail": error_info},
        headers={
            "Retry-After": str(getattr(exc, 'retry_after', None) or 60),
            "X-Correlation-ID": correlation_id
        }
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as INVALID_INPUT client errors."""
    correlation_id = _correlation_id(request)
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    logger.warning(f"Request validation failed: {request.method} {request.url.path}")
    error_info = get_error_response(ErrorCodes.INVALID_INPUT, problems)
    error_info['correlation_id'] = correlation_id
    return JSONResponse(status_code=400, content={"detail": error_info},
                        headers={"X-Correlation-ID": correlation_id})


async def analysis_error_handler(request: Request, exc: AnalysisError):
    """AnalysisErrors that escape a route get the same body as handled ones."""
    correlation_id = _correlation_id(request)
    return JSONResponse(
        status_code=get_status_code(exc.code),
        content={"detail": build_error_payload(exc, correlation_id)},
        headers={"X-Correlation-ID": correlation_id}
    )


app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(AnalysisError, analysis_error_handler)

# Middleware order: last added runs first
# 1. Request timeout backstop
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

# 2. Compression
app.add_middleware(GZipMiddleware, minimum_size=1000)

# 3. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID", "X-Response-Time"]
)

# 4. Correlation IDs (outermost, so every log line and response carries one)
app.add_middleware(CorrelationIDMiddleware)

logger.info(f"CORS allowed origins: {settings.allowed_origins_list}")

app.include_router(router, prefix="/api")
app.include_router(metrics_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Dataset Analyst API is running", "version": API_VERSION}

logger.info("Application started successfully")
