"""
Tests for centralized configuration.
"""
import pytest

from analyst.core.config import Settings, get_settings


@pytest.mark.unit
def test_settings_defaults(monkeypatch):
    """Test that settings have sensible defaults."""
    for key in ("ANALYSIS_TIMEOUT_SECONDS", "MAX_DATASET_CELLS", "MIN_SAMPLE_ROWS",
                "RATE_LIMIT_PER_MINUTE", "LOG_LEVEL", "MAX_UPLOAD_SIZE_MB"):
        monkeypatch.delenv(key, raising=False)

    settings = Settings.from_env()

    assert settings.analysis_timeout_seconds == 60
    assert settings.column_analysis_timeout_seconds == 15
    assert settings.chart_generation_timeout_seconds == 15
    assert settings.max_dataset_cells == 1000000
    assert settings.min_sample_rows == 2
    assert settings.rate_limit_per_minute == 30
    assert settings.log_level == "INFO"


@pytest.mark.unit
def test_settings_from_env(fresh_settings):
    """Test loading settings from environment variables."""
    settings = fresh_settings(ANALYSIS_TIMEOUT_SECONDS="5", MAX_DATASET_CELLS="5000", RATE_LIMIT_PER_MINUTE="20")

    assert settings.analysis_timeout_seconds == 5.0
    assert settings.max_dataset_cells == 5000
    assert settings.rate_limit_per_minute == 20
    assert get_settings() is settings


@pytest.mark.unit
def test_settings_validation():
    """Test that settings validate input ranges."""
    with pytest.raises(ValueError):
        Settings(max_upload_size_mb=0)

    with pytest.raises(ValueError):
        Settings(analysis_timeout_seconds=0)

    with pytest.raises(ValueError):
        Settings(max_dataset_cells=10)

    with pytest.raises(ValueError):
        Settings(log_level="INVALID")


@pytest.mark.unit
def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"


@pytest.mark.unit
def test_settings_properties():
    """Test computed properties."""
    settings = Settings(max_upload_size_mb=5, allowed_origins="http://a.test, ,http://b.test")

    assert settings.max_upload_size_bytes == 5 * 1024 * 1024
    assert settings.allowed_origins_list == ["http://a.test", "http://b.test"]


@pytest.mark.unit
def test_settings_singleton():
    """Test that get_settings returns singleton."""
    assert get_settings() is get_settings()
