"""
Income and Expense Metrics

Standard real estate performance ratios for a property snapshot.

Operating expenses never include mortgage principal or interest. Debt
service only enters through cash flow, after NOI.
"""

import math
from datetime import date
from typing import Dict, List, Optional

from app.calculations.amortization import (
    get_current_mortgage_balance,
    get_monthly_mortgage_payment,
)
from app.calculations.errors import InvalidPropertyInput
from app.calculations.models import PropertySnapshot


def calculate_annual_operating_expenses(property: PropertySnapshot) -> float:
    """Annual operating expenses: tax, condo fees, insurance, maintenance, fees, utilities."""
    return property.monthly_expenses.total * 12


def calculate_noi(property: PropertySnapshot) -> float:
    """
    Calculate Net Operating Income.

    NOI = annual rental income - annual operating expenses
    """
    return property.monthly_rent * 12 - calculate_annual_operating_expenses(property)


def calculate_cap_rate(property: PropertySnapshot) -> float:
    """
    Calculate cap rate as a percentage (5.5 = 5.5%).

    Returns 0 when the property has no market value yet.
    """
    if property.current_market_value <= 0:
        return 0.0
    return calculate_noi(property) / property.current_market_value * 100


def resolve_monthly_mortgage_payment(
    property: PropertySnapshot, monthly_mortgage_payment: Optional[float] = None
) -> float:
    """Supplied monthly debt service, or the property mortgage's payment."""
    if monthly_mortgage_payment is not None:
        if not math.isfinite(monthly_mortgage_payment):
            raise InvalidPropertyInput(
                "monthly_mortgage_payment", "must be a finite number"
            )
        return monthly_mortgage_payment
    if property.mortgage is None:
        return 0.0
    return get_monthly_mortgage_payment(property.mortgage)


def calculate_monthly_cash_flow(
    property: PropertySnapshot, monthly_mortgage_payment: Optional[float] = None
) -> float:
    """
    Calculate monthly cash flow after debt service.

    Args:
        property: Property snapshot
        monthly_mortgage_payment: Monthly debt service; derived from the
            property's mortgage when omitted

    Returns:
        Monthly rent - monthly operating expenses - monthly mortgage payment
    """
    monthly_mortgage_payment = resolve_monthly_mortgage_payment(
        property, monthly_mortgage_payment
    )

    monthly_operating_expenses = calculate_annual_operating_expenses(property) / 12
    return property.monthly_rent - monthly_operating_expenses - monthly_mortgage_payment


def calculate_annual_cash_flow(
    property: PropertySnapshot, monthly_mortgage_payment: Optional[float] = None
) -> float:
    """Calculate annual cash flow after debt service."""
    return calculate_monthly_cash_flow(property, monthly_mortgage_payment) * 12


def calculate_cash_on_cash_return(
    property: PropertySnapshot, monthly_mortgage_payment: Optional[float] = None
) -> float:
    """
    Calculate cash-on-cash return as a percentage.

    Returns 0 when nothing has been invested.
    """
    if property.total_investment <= 0:
        return 0.0
    annual_cash_flow = calculate_annual_cash_flow(property, monthly_mortgage_payment)
    return annual_cash_flow / property.total_investment * 100


def calculate_dscr(noi: float, debt_service: float) -> float:
    """
    Calculate Debt Service Coverage Ratio (DSCR).

    Args:
        noi: Net Operating Income for the period
        debt_service: Debt service for the period

    Returns:
        DSCR ratio
    """
    if debt_service == 0:
        return float("inf")
    return noi / debt_service


def calculate_property_metrics(
    property: PropertySnapshot, monthly_mortgage_payment: Optional[float] = None
) -> Dict[str, float]:
    """Calculate every single-property metric at once."""
    monthly_mortgage_payment = resolve_monthly_mortgage_payment(
        property, monthly_mortgage_payment
    )

    noi = calculate_noi(property)
    monthly_cash_flow = calculate_monthly_cash_flow(property, monthly_mortgage_payment)

    return {
        "annual_operating_expenses": calculate_annual_operating_expenses(property),
        "net_operating_income": noi,
        "cap_rate": calculate_cap_rate(property),
        "monthly_mortgage_payment": monthly_mortgage_payment,
        "monthly_cash_flow": monthly_cash_flow,
        "annual_cash_flow": monthly_cash_flow * 12,
        "cash_on_cash_return": calculate_cash_on_cash_return(
            property, monthly_mortgage_payment
        ),
        "dscr": calculate_dscr(noi, monthly_mortgage_payment * 12),
    }


def calculate_portfolio_metrics(
    properties: List[PropertySnapshot], as_of: Optional[date] = None
) -> Dict[str, float]:
    """
    Aggregate metrics across a portfolio.

    Mortgage balances are evaluated as of the given date from each
    property's amortization schedule.
    """
    if not properties:
        return {
            "total_value": 0.0,
            "total_investment": 0.0,
            "total_equity": 0.0,
            "total_mortgage_balance": 0.0,
            "total_monthly_rent": 0.0,
            "total_annual_operating_expenses": 0.0,
            "net_operating_income": 0.0,
            "total_monthly_cash_flow": 0.0,
            "total_annual_cash_flow": 0.0,
            "average_cap_rate": 0.0,
            "average_cash_on_cash_return": 0.0,
            "total_properties": 0,
        }

    total_value = sum(p.current_market_value for p in properties)
    total_mortgage_balance = sum(
        get_current_mortgage_balance(p.mortgage, as_of)
        for p in properties
        if p.mortgage is not None
    )
    total_monthly_rent = sum(p.monthly_rent for p in properties)
    total_annual_operating_expenses = sum(
        calculate_annual_operating_expenses(p) for p in properties
    )
    total_monthly_cash_flow = sum(calculate_monthly_cash_flow(p) for p in properties)

    return {
        "total_value": total_value,
        "total_investment": sum(p.total_investment for p in properties),
        "total_equity": total_value - total_mortgage_balance,
        "total_mortgage_balance": total_mortgage_balance,
        "total_monthly_rent": total_monthly_rent,
        "total_annual_operating_expenses": total_annual_operating_expenses,
        "net_operating_income": total_monthly_rent * 12 - total_annual_operating_expenses,
        "total_monthly_cash_flow": total_monthly_cash_flow,
        "total_annual_cash_flow": total_monthly_cash_flow * 12,
        "average_cap_rate": sum(calculate_cap_rate(p) for p in properties)
        / len(properties),
        "average_cash_on_cash_return": sum(
            calculate_cash_on_cash_return(p) for p in properties
        )
        / len(properties),
        "total_properties": len(properties),
    }
