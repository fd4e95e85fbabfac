"""Analytics package: pipeline forecast, open-indent matrix and season summary."""

from .pipeline import forecast_pipeline_arrivals, LEAD_TIME_DAYS
from .open_indents import build_open_indent_matrix, matrix_headers
from .season import compute_season_progress

__all__ = [
    "forecast_pipeline_arrivals",
    "LEAD_TIME_DAYS",
    "build_open_indent_matrix",
    "matrix_headers",
    "compute_season_progress",
]
