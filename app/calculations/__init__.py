"""
Property Analytics Engine

Core calculation modules for mortgage amortization and property investment
returns. Canadian semi-annual compounding is used for payment schedules.
"""

from app.calculations import (
    amortization,
    forecast,
    irr,
    metrics,
    prepayment,
    rates,
    refinance,
    rollup,
    scenarios,
)

__all__ = [
    "amortization",
    "forecast",
    "irr",
    "metrics",
    "prepayment",
    "rates",
    "refinance",
    "rollup",
    "scenarios",
]
