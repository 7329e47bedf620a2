"""
Shared fixtures for the analyst test suite.
"""
import pytest
from fastapi.testclient import TestClient

from analyst.core.config import reload_settings
from analyst.core.schemas import ColumnInfo


def make_column(name, col_type, unique=3, has_nulls=False, samples=None):
    """ColumnInfo shorthand used across the unit tests."""
    return ColumnInfo(
        name=name,
        type=col_type,
        unique_values=unique,
        has_nulls=has_nulls,
        sample_values=samples or [],
    )


@pytest.fixture
def column():
    return make_column


@pytest.fixture
def sales_columns():
    """Category / Sales / Date, the classic time-series-by-segment dataset."""
    return [
        make_column("Category", "categorical", 3),
        make_column("Sales", "numerical", 3),
        make_column("Date", "datetime", 3),
    ]


@pytest.fixture
def body_columns():
    """Three numerical measurements with no natural x-axis."""
    return [
        make_column("Height", "numerical", 5),
        make_column("Weight", "numerical", 5),
        make_column("Age", "numerical", 5),
    ]


@pytest.fixture
def sales_payload():
    return {
        "headers": ["Date", "Region", "Revenue", "Units"],
        "sampleData": [
            ["2024-01-01", "North", 1200.5, 10],
            ["2024-01-02", "South", 950.0, 8],
            ["2024-01-03", "East", 1100.25, 9],
            ["2024-01-04", "North", 1300.0, 12],
            ["2024-01-05", "South", 875.75, 7],
            ["2024-01-06", "East", 1025.0, 11],
        ],
    }


@pytest.fixture
def client():
    """Test client with a clean rate limiter."""
    from main import app
    app.state.limiter.reset()
    return TestClient(app)


@pytest.fixture
def fresh_settings(monkeypatch):
    """Reload settings after the test has patched the environment."""
    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, str(value))
        return reload_settings()
    yield _reload
    for key in ("ANALYSIS_TIMEOUT_SECONDS", "COLUMN_ANALYSIS_TIMEOUT_SECONDS",
                "CHART_GENERATION_TIMEOUT_SECONDS", "MAX_DATASET_CELLS", "MIN_SAMPLE_ROWS",
                "MAX_UPLOAD_SIZE_MB", "MAX_UPLOAD_ROWS", "RATE_LIMIT_PER_MINUTE"):
        monkeypatch.delenv(key, raising=False)
    reload_settings()


@pytest.fixture
def free_text_payload():
    """Unique long notes next to a single numeric column; nothing chartable."""
    return {
        "headers": ["Notes", "Amount"],
        "sampleData": [
            [f"Customer note {i:02d}: follow up about the delayed shipment today", 10.5 + i]
            for i in range(50)
        ],
    }
