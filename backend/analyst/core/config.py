"""
Analyzer settings.

Every limit and time budget the analysis pipeline and the API enforce is
read from the environment once and validated here.
"""
import os
import logging
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Environment variable for each settings field
ENV_VARS: Dict[str, str] = {
    "analysis_timeout_seconds": "ANALYSIS_TIMEOUT_SECONDS",
    "column_analysis_timeout_seconds": "COLUMN_ANALYSIS_TIMEOUT_SECONDS",
    "chart_generation_timeout_seconds": "CHART_GENERATION_TIMEOUT_SECONDS",
    "request_timeout_seconds": "REQUEST_TIMEOUT_SECONDS",
    "max_dataset_cells": "MAX_DATASET_CELLS",
    "min_sample_rows": "MIN_SAMPLE_ROWS",
    "max_upload_size_mb": "MAX_UPLOAD_SIZE_MB",
    "max_upload_rows": "MAX_UPLOAD_ROWS",
    "rate_limit_per_minute": "RATE_LIMIT_PER_MINUTE",
    "allowed_origins": "ALLOWED_ORIGINS",
    "log_level": "LOG_LEVEL",
}


class Settings(BaseModel):
    """Analysis budgets, input limits and API settings."""

    # Time budgets (seconds)
    analysis_timeout_seconds: float = Field(default=60, gt=0, le=3600, description="Whole dataset analysis")
    column_analysis_timeout_seconds: float = Field(default=15, gt=0, le=600, description="Input processing and column classification")
    chart_generation_timeout_seconds: float = Field(default=15, gt=0, le=600, description="Chart recommendation")
    request_timeout_seconds: float = Field(default=90, gt=0, le=3600, description="Any HTTP request, enforced by middleware")

    # Dataset limits
    max_dataset_cells: int = Field(default=1000000, ge=100, description="Maximum headers x rows per analysis")
    min_sample_rows: int = Field(default=2, ge=1, le=100, description="Rows required before analysis starts")
    max_upload_size_mb: int = Field(default=10, ge=1, le=1000, description="Largest accepted upload")
    max_upload_rows: int = Field(default=1000, ge=10, le=100000, description="Rows sampled from an uploaded file")

    # API
    rate_limit_per_minute: int = Field(default=30, ge=1, le=1000, description="Analysis requests per minute per client")
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Comma-separated CORS origins"
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got '{value}'")
        return level

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment; unset variables keep their defaults."""
        values = {field: os.environ[env] for field, env in ENV_VARS.items() if os.environ.get(env)}
        return cls(**values)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info(
            f"Settings loaded: analysis budget {_settings.analysis_timeout_seconds:g}s, "
            f"max {_settings.max_dataset_cells:,} cells"
        )
    return _settings


def reload_settings() -> Settings:
    """Drop the cached settings and read the environment again."""
    global _settings
    _settings = None
    return get_settings()
