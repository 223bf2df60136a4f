"""
Scenario Comparison

Side-by-side differences between two sets of return metrics.
"""

from typing import Dict

from app.calculations.models import ReturnMetrics

COMPARED_METRICS = ("irr", "average_annual_cash_flow", "total_profit_at_sale")


def compare_metric(baseline: float, scenario: float) -> Dict[str, float]:
    """Difference and percent change of one metric; percent change is 0 off a zero baseline."""
    difference = scenario - baseline
    percent_change = difference / abs(baseline) * 100 if baseline != 0 else 0.0
    return {
        "baseline": baseline,
        "scenario": scenario,
        "difference": difference,
        "percent_change": percent_change,
    }


def compare_scenarios(
    baseline: ReturnMetrics, scenario: ReturnMetrics
) -> Dict[str, Dict[str, float]]:
    """
    Compare a scenario's return metrics against a baseline.

    Returns:
        Mapping of metric name to baseline, scenario, difference and
        percent change
    """
    return {
        name: compare_metric(getattr(baseline, name), getattr(scenario, name))
        for name in COMPARED_METRICS
    }
