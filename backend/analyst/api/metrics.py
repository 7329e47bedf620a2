"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter
from analyst.core.performance import PerformanceMonitor
from analyst.services.engine import get_run_statistics

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """
    Timing statistics for every tracked operation plus the statistics of
    the last chart generation run served by /charts.
    """
    return {
        'performance': PerformanceMonitor.get_all_metrics(),
        'last_chart_run': get_run_statistics().model_dump(by_alias=True),
    }
