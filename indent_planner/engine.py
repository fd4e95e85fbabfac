"""
Forecasting & allocation engine: one pure call from raw datasets and
planning parameters to a CalculationResults object.

Flow:
    normalize → maturity weights → pipeline forecast → constraints
        → allocation cascade → open-indent matrix (display only)

No I/O, no shared state: identical inputs give identical results and the
function is safe to call concurrently.
"""
import logging

from .analytics.open_indents import build_open_indent_matrix
from .analytics.pipeline import forecast_pipeline_arrivals
from .analytics.season import compute_season_progress
from .domain.contracts import CalculationInputs, CalculationResults
from .domain.dates import parse_date
from .domain.validation import require_inputs
from .maturity import estimate_maturity_weights
from .normalizer import normalize_constraints, normalize_dataset
from .workflows.allocation import (
    StockPosition,
    compute_overrun_percentage,
    recommended_by_center,
    run_allocation_cascade,
    to_result_rows,
)
from .workflows.risk import apply_constraints

logger = logging.getLogger(__name__)


def calculate_recommended_indents(inputs: CalculationInputs) -> CalculationResults:
    """
    Recommend the T+3 indent for every bonded center.

    Args:
        inputs: CalculationInputs with the three raw datasets and parameters

    Returns:
        CalculationResults (recommendation table, full audit trail, risk ledger)

    Raises:
        MissingInputError: a dataset or the planning date is missing
    """
    require_inputs(inputs)
    planning_date = parse_date(inputs.planning_date)

    plant_start_date = parse_date(inputs.plant_start_date)
    if plant_start_date is None:
        logger.warning(
            f"Invalid plant start date {inputs.plant_start_date!r}, using planning date {planning_date}"
        )
        plant_start_date = planning_date

    dataset = normalize_dataset(
        inputs.bonding_rows,
        inputs.indent_rows,
        inputs.purchase_rows,
        inputs.center_code_remap,
    )
    constraints = normalize_constraints(inputs.constraints)

    maturity = estimate_maturity_weights(
        dataset.indents,
        dataset.purchases,
        dataset.bonding,
        planning_date,
        plant_start_date,
    )

    forecast_breakdown, total_forecast_t3 = forecast_pipeline_arrivals(
        dataset.indents,
        maturity.center_weights,
        planning_date,
        dataset.bonding,
    )

    outcome = apply_constraints(
        constraints,
        planning_date,
        inputs.target_daily_requirement,
        inputs.plant_capacity_percent,
        total_forecast_t3,
    )

    overrun_percentage = compute_overrun_percentage(dataset.indents, dataset.purchases)
    breakdown = run_allocation_cascade(
        dataset.bonding,
        outcome.effective_requirement,
        {row.center_id: row.total_forecast for row in forecast_breakdown},
        maturity.center_weights,
        overrun_percentage,
        StockPosition(
            standard_stock_centre=inputs.standard_stock_centre,
            standard_stock_gate=inputs.standard_stock_gate,
            available_stock_centre=inputs.available_stock_centre,
            available_stock_gate=inputs.available_stock_gate,
        ),
    )

    matrix, headers = build_open_indent_matrix(
        dataset.indents,
        dataset.purchases,
        maturity.center_weights,
        dataset.bonding,
        planning_date,
        recommended_by_center(breakdown),
    )

    season_progress = compute_season_progress(
        dataset.purchases,
        planning_date,
        plant_start_date,
        inputs.season_total_days,
        inputs.seasonal_crushing_capacity,
    )

    results = CalculationResults(
        d_weights=maturity.global_weights,
        overrun_percentage=overrun_percentage,
        effective_requirement=outcome.effective_requirement,
        total_forecast_t3=total_forecast_t3,
        table_data=to_result_rows(breakdown),
        closed_indent_analysis=maturity.closed_indent_analysis,
        center_weights=maturity.center_profiles,
        forecast_breakdown=forecast_breakdown,
        maturity_analysis_purchases=maturity.maturity_analysis_purchases,
        open_indent_matrix=matrix,
        open_indent_matrix_headers=headers,
        indent_calculation_breakdown=breakdown,
        full_season_analysis=maturity.full_season_analysis,
        season_weights=maturity.season_profiles,
        risk_analysis=outcome.risk_items,
        season_progress=season_progress,
        applied_constraints=outcome.applied,
    )

    logger.info(
        f"Indent plan for {planning_date}: {len(results.table_data)} centers, "
        f"total indent {results.total_indent_to_raise:.2f}, forecast T+3 {total_forecast_t3:.2f}"
    )
    return results
