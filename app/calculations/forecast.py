"""
Ten-Year Property Forecast

Projects rent, expenses, debt paydown, value and equity year by year under
an assumption set, and derives IRR-based return metrics from the projection.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from app.calculations.amortization import (
    get_current_mortgage_balance,
    get_monthly_mortgage_payment,
)
from app.calculations.irr import solve_irr
from app.calculations.metrics import (
    calculate_annual_operating_expenses,
    resolve_monthly_mortgage_payment,
)
from app.calculations.models import (
    BASELINE_ASSUMPTIONS,
    AssumptionSet,
    ForecastResult,
    ForecastYear,
    PropertySnapshot,
    ReturnMetrics,
)
from app.calculations.rates import simple_annual_interest

FORECAST_YEARS = 10

logger = logging.getLogger(__name__)


def generate_forecast(
    property: PropertySnapshot,
    assumptions: AssumptionSet = BASELINE_ASSUMPTIONS,
    as_of: Optional[date] = None,
) -> ForecastResult:
    """
    Generate a ten-year forecast for a property.

    Mortgage interest is approximated as balance x nominal annual rate each
    year; this is a projection shortcut, not the payment schedule.
    Property value appreciates off today's market value for years 1-9. Year
    10 is valued at NOI / exit cap rate when an exit cap rate is set.

    Args:
        property: Property snapshot, optionally carrying its mortgage
        assumptions: Forecast assumptions (percentages)
        as_of: Date the mortgage balance is taken at (defaults to today)

    Returns:
        ForecastResult with one entry per year
    """
    mortgage = property.mortgage
    if mortgage is not None:
        mortgage_balance = get_current_mortgage_balance(mortgage, as_of)
        annual_mortgage_payment = get_monthly_mortgage_payment(mortgage) * 12
        annual_rate = mortgage.interest_rate
    else:
        mortgage_balance = 0.0
        annual_mortgage_payment = 0.0
        annual_rate = 0.0

    current_rent = property.monthly_rent
    base_operating_expenses = calculate_annual_operating_expenses(property)
    vacancy = assumptions.vacancy_rate / 100
    rent_growth = assumptions.annual_rent_increase / 100
    expense_growth = assumptions.annual_expense_inflation / 100
    appreciation = assumptions.annual_property_appreciation / 100

    cumulative_cash_flow = 0.0
    years = []

    for year in range(1, FORECAST_YEARS + 1):
        # === OPERATIONS ===
        rental_income = current_rent * (1 - vacancy) * 12
        operating_expenses = base_operating_expenses * (1 + expense_growth) ** (year - 1)
        noi = rental_income - operating_expenses

        # === DEBT ===
        interest = simple_annual_interest(mortgage_balance, annual_rate)
        principal = min(annual_mortgage_payment - interest, mortgage_balance)
        mortgage_balance = max(0.0, mortgage_balance - principal)

        net_cash_flow = rental_income - operating_expenses - annual_mortgage_payment
        cumulative_cash_flow += net_cash_flow

        # === VALUE ===
        if year == FORECAST_YEARS and assumptions.exit_cap_rate > 0:
            property_value = noi / (assumptions.exit_cap_rate / 100)
        else:
            property_value = property.current_market_value * (1 + appreciation) ** year

        equity = property_value - mortgage_balance

        years.append(
            ForecastYear(
                year=year,
                rental_income=rental_income,
                operating_expenses=operating_expenses,
                noi=noi,
                interest=interest,
                principal=principal,
                debt_service=annual_mortgage_payment,
                net_cash_flow=net_cash_flow,
                mortgage_balance=mortgage_balance,
                property_value=property_value,
                equity=equity,
                cumulative_cash_flow=cumulative_cash_flow,
                total_profit=equity + cumulative_cash_flow - property.total_investment,
            )
        )

        current_rent *= 1 + rent_growth

    logger.debug(
        f"Forecast {property.name or 'property'}: year {FORECAST_YEARS} equity "
        f"{years[-1].equity:.2f}"
    )
    return ForecastResult(years=years, assumptions=assumptions)


def build_irr_cash_flows(
    property: PropertySnapshot, forecast: ForecastResult
) -> List[float]:
    """
    Build the IRR cash flow vector.

    Year 0 is the initial investment, years 1-9 the net cash flow, and year
    10 the net cash flow plus equity released by a sale.
    """
    net_cash_flows = forecast.series("net_cash_flow")
    return (
        [-property.total_investment]
        + net_cash_flows[:-1]
        + [net_cash_flows[-1] + forecast.years[-1].equity]
    )


def calculate_return_metrics(
    property: PropertySnapshot,
    assumptions: AssumptionSet = BASELINE_ASSUMPTIONS,
    as_of: Optional[date] = None,
) -> ReturnMetrics:
    """
    Calculate IRR, average annual cash flow and total profit at a year-10 sale.
    """
    forecast = generate_forecast(property, assumptions, as_of)
    irr_result = solve_irr(build_irr_cash_flows(property, forecast))

    return ReturnMetrics(
        irr=irr_result.percent,
        average_annual_cash_flow=sum(forecast.series("net_cash_flow")) / FORECAST_YEARS,
        total_profit_at_sale=forecast.years[-1].total_profit,
        irr_converged=irr_result.converged,
        forecast=forecast,
    )


def calculate_forecast_yoy_growth(forecast: ForecastResult) -> List[Dict]:
    """
    Year-over-year growth of cash flow and equity for years 2 onward.

    Growth is 0 when the prior year's value is 0.
    """
    growth = []
    for previous, current in zip(forecast.years, forecast.years[1:]):
        cash_flow_growth = 0.0
        if previous.net_cash_flow != 0:
            cash_flow_growth = (
                (current.net_cash_flow - previous.net_cash_flow)
                / abs(previous.net_cash_flow)
                * 100
            )

        equity_growth = 0.0
        if previous.equity != 0:
            equity_growth = (current.equity - previous.equity) / previous.equity * 100

        growth.append(
            {
                "year": current.year,
                "cash_flow_growth": cash_flow_growth,
                "equity_growth": equity_growth,
                "net_cash_flow": current.net_cash_flow,
                "equity": current.equity,
            }
        )
    return growth


def _percent_change(current: float, projected: float) -> float:
    if current == 0:
        return 0.0
    return (projected - current) / abs(current) * 100


def _project_next_year(
    rent: float, expenses: float, debt_service: float, assumptions: AssumptionSet
) -> Dict[str, Dict[str, float]]:
    projected_rent = rent * (1 + assumptions.annual_rent_increase / 100)
    projected_expenses = expenses * (1 + assumptions.annual_expense_inflation / 100)
    projected_cash_flow = projected_rent - projected_expenses - debt_service
    cash_flow = rent - expenses - debt_service

    return {
        "values": {
            "rent": projected_rent,
            "expenses": projected_expenses,
            "cash_flow": projected_cash_flow,
        },
        "yoy": {
            "revenue": _percent_change(rent, projected_rent),
            "expenses": _percent_change(expenses, projected_expenses),
            "cash_flow": _percent_change(cash_flow, projected_cash_flow),
        },
    }


def calculate_yoy_metrics(
    property: PropertySnapshot,
    assumptions: AssumptionSet = BASELINE_ASSUMPTIONS,
    baseline: AssumptionSet = BASELINE_ASSUMPTIONS,
    monthly_mortgage_payment: Optional[float] = None,
) -> Dict[str, Dict[str, float]]:
    """
    Project next year's revenue, expenses and cash flow from today's figures.

    Rent grows by the rent increase and expenses by expense inflation; debt
    service is held flat and vacancy is not applied. Changes are reported
    in percent for the chosen assumptions and for the baseline, and are 0
    when today's figure is 0.

    Args:
        property: Property snapshot
        assumptions: Assumptions to project with
        baseline: Assumptions to compare against
        monthly_mortgage_payment: Monthly debt service; derived from the
            property's mortgage when omitted

    Returns:
        Dict with current, projected, projected_yoy and baseline_yoy figures
    """
    rent = property.monthly_rent * 12
    expenses = calculate_annual_operating_expenses(property)
    debt_service = (
        resolve_monthly_mortgage_payment(property, monthly_mortgage_payment) * 12
    )

    projected = _project_next_year(rent, expenses, debt_service, assumptions)
    baseline_projected = _project_next_year(rent, expenses, debt_service, baseline)

    return {
        "current": {
            "rent": rent,
            "expenses": expenses,
            "cash_flow": rent - expenses - debt_service,
        },
        "projected": projected["values"],
        "projected_yoy": projected["yoy"],
        "baseline_yoy": baseline_projected["yoy"],
    }
