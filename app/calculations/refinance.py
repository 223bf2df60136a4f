"""
Refinance and Renewal Analysis

Prices a replacement loan for a mortgage's outstanding balance and
measures it against carrying on with the existing payment.
"""

import logging
import math
from datetime import date
from typing import Optional

from app.calculations.amortization import (
    calculate_scheduled_payment,
    generate_amortization_schedule,
    past_payment_count,
    to_monthly_equivalent,
)
from app.calculations.errors import InvalidMortgageInput
from app.calculations.models import (
    BASELINE_ASSUMPTIONS,
    AssumptionSet,
    MortgageTerms,
    RefinanceAnalysis,
)
from app.calculations.rates import payments_per_year

DEFAULT_TERM_YEARS = 5
DEFAULT_PENALTY_RATE = 0.01  # Share of the balance charged for breaking the mortgage

logger = logging.getLogger(__name__)


def _require_non_negative(value: float, field_name: str) -> None:
    if value is None or not math.isfinite(value):
        raise InvalidMortgageInput(field_name, "must be a finite number")
    if value < 0:
        raise InvalidMortgageInput(field_name, "must be 0 or greater")


def calculate_refinance(
    terms: MortgageTerms,
    new_interest_rate: Optional[float],
    new_amortization_years: Optional[float] = None,
    new_payment_frequency=None,
    term_years: float = DEFAULT_TERM_YEARS,
    refinance_costs: float = 0.0,
    penalty_rate: float = DEFAULT_PENALTY_RATE,
    as_of: Optional[date] = None,
) -> RefinanceAnalysis:
    """
    Analyze replacing a mortgage with a new loan for its current balance.

    Payments are compared as monthly equivalents so a change of frequency
    is priced fairly. Break-even is the number of months of savings needed
    to recover the costs plus the penalty.

    Args:
        terms: Existing mortgage
        new_interest_rate: Annual rate of the new loan as decimal
        new_amortization_years: Amortization of the new loan (defaults to
            what remains on the existing one)
        new_payment_frequency: Frequency of the new loan (defaults to the
            existing frequency)
        term_years: Years the savings are counted over
        refinance_costs: Legal, appraisal and lender fees
        penalty_rate: Prepayment penalty as a share of the balance
        as_of: Date the refinance takes effect (defaults to today)

    Returns:
        RefinanceAnalysis

    Raises:
        InvalidMortgageInput: If either loan or the costs are unusable, or
            the existing mortgage is already paid off
    """
    if as_of is None:
        as_of = date.today()

    _require_non_negative(refinance_costs, "refinance_costs")
    _require_non_negative(penalty_rate, "penalty_rate")
    if term_years is None or not math.isfinite(term_years) or term_years <= 0:
        raise InvalidMortgageInput("term_years", "must be greater than 0")

    schedule = generate_amortization_schedule(terms)
    paid = past_payment_count(schedule, as_of)
    current_balance = (
        schedule.payments[paid - 1].remaining_balance if paid else terms.principal
    )
    if current_balance <= 0:
        raise InvalidMortgageInput("principal", "mortgage is already paid off")

    remaining = schedule.payments[paid:]
    if new_amortization_years is None:
        new_amortization_years = len(remaining) / payments_per_year(
            terms.payment_frequency
        )

    new_terms = MortgageTerms(
        principal=current_balance,
        interest_rate=new_interest_rate,
        amortization_years=new_amortization_years,
        payment_frequency=new_payment_frequency or terms.payment_frequency,
        start_date=as_of,
        rate_type=terms.rate_type,
        lender=terms.lender,
    )
    new_schedule = generate_amortization_schedule(new_terms)

    current_payment = calculate_scheduled_payment(terms)
    new_payment = calculate_scheduled_payment(new_terms)
    current_monthly = to_monthly_equivalent(current_payment, terms.payment_frequency)
    new_monthly = to_monthly_equivalent(new_payment, new_terms.payment_frequency)
    monthly_savings = current_monthly - new_monthly

    penalty = current_balance * penalty_rate
    total_cost = refinance_costs + penalty
    if total_cost <= 0:
        break_even_months = 0
    elif monthly_savings > 0:
        break_even_months = math.ceil(total_cost / monthly_savings)
    else:
        break_even_months = None

    remaining_interest = sum(row.interest for row in remaining)

    logger.debug(
        f"Refinance {current_balance:.2f} at {new_terms.interest_rate:.4f}: "
        f"monthly savings {monthly_savings:.2f}, break-even {break_even_months}"
    )

    return RefinanceAnalysis(
        current_balance=current_balance,
        remaining_payments=len(remaining),
        current_payment=current_payment,
        current_monthly_payment=current_monthly,
        new_mortgage=new_terms,
        new_payment=new_payment,
        new_monthly_payment=new_monthly,
        monthly_savings=monthly_savings,
        total_savings=monthly_savings * term_years * 12,
        refinance_costs=refinance_costs,
        prepayment_penalty=penalty,
        total_refinance_cost=total_cost,
        break_even_months=break_even_months,
        remaining_interest=remaining_interest,
        new_total_interest=new_schedule.total_interest,
        interest_saved=remaining_interest - new_schedule.total_interest,
    )


def calculate_renewal(
    terms: MortgageTerms,
    assumptions: AssumptionSet = BASELINE_ASSUMPTIONS,
    term_years: float = DEFAULT_TERM_YEARS,
    as_of: Optional[date] = None,
) -> RefinanceAnalysis:
    """
    Renew the remaining balance at the assumed future interest rate.

    A renewal keeps the remaining amortization and frequency and carries no
    prepayment penalty.
    """
    return calculate_refinance(
        terms,
        assumptions.future_interest_rate / 100,
        term_years=term_years,
        penalty_rate=0.0,
        as_of=as_of,
    )
