"""
Mortgage Amortization Calculations

Builds payment-by-payment mortgage schedules using Canadian semi-annual
compounding, and answers "where is this mortgage today" questions
(current payment, balance, monthly-equivalent amounts) from them.
"""

import logging
from datetime import date, timedelta
from typing import Callable, List, Optional

from app.calculations.models import (
    AmortizationSchedule,
    MortgageTerms,
    PaymentFrequency,
    PaymentRecord,
    validate_mortgage_terms,
)
from app.calculations.rates import (
    ACCELERATED_SPLIT,
    frequency_profile,
    periodic_rate,
)

logger = logging.getLogger(__name__)


def calculate_payment(principal: float, rate: float, total_payments: int) -> float:
    """
    Calculate the level payment that retires a loan.

    Args:
        principal: Loan principal amount
        rate: Interest rate per payment period as decimal
        total_payments: Number of payment periods

    Returns:
        Payment per period (positive number)
    """
    if principal <= 0:
        return 0.0
    if total_payments <= 0:
        return 0.0

    if rate == 0:
        return principal / total_payments

    growth = (1 + rate) ** total_payments
    return principal * rate * growth / (growth - 1)


def total_payment_count(terms: MortgageTerms) -> int:
    """Number of periods in the full amortization (at least one)."""
    profile = frequency_profile(terms.payment_frequency)
    return max(1, round(terms.amortization_years * profile.payments_per_year))


def calculate_scheduled_payment(terms: MortgageTerms) -> float:
    """
    Calculate the payment due each period for a mortgage.

    Accelerated schedules pay a fraction of the monthly payment (half for
    bi-weekly, a quarter for weekly) at the faster cadence.
    """
    split = ACCELERATED_SPLIT.get(terms.payment_frequency)
    if split:
        monthly_rate = periodic_rate(terms.interest_rate, PaymentFrequency.MONTHLY)
        monthly_count = max(1, round(terms.amortization_years * 12))
        return calculate_payment(terms.principal, monthly_rate, monthly_count) / split

    rate = periodic_rate(terms.interest_rate, terms.payment_frequency)
    return calculate_payment(terms.principal, rate, total_payment_count(terms))


def generate_amortization_schedule(
    terms: MortgageTerms, extra_principal: Optional[Callable[[int], float]] = None
) -> AmortizationSchedule:
    """
    Generate the full amortization schedule for a mortgage.

    Payment dates step a fixed number of days per frequency from the start
    date (30/15/14/7), not calendar months.

    Args:
        terms: Mortgage terms
        extra_principal: Optional prepayment applied with each payment,
            given the payment number

    Returns:
        AmortizationSchedule whose last payment leaves a balance of exactly 0

    Raises:
        InvalidMortgageInput: If principal, rate or amortization are unusable
    """
    validate_mortgage_terms(terms)

    profile = frequency_profile(terms.payment_frequency)
    rate = periodic_rate(terms.interest_rate, terms.payment_frequency)
    payment = calculate_scheduled_payment(terms)
    total_periods = total_payment_count(terms)

    payments: List[PaymentRecord] = []
    balance = terms.principal
    total_interest = 0.0

    for number in range(1, total_periods + 1):
        payment_date = terms.start_date + timedelta(
            days=(number - 1) * profile.interval_days
        )

        interest = balance * rate
        principal_pmt = min(payment - interest, balance)
        if extra_principal is not None:
            principal_pmt = min(principal_pmt + extra_principal(number), balance)

        if number == total_periods or principal_pmt >= balance:
            # Final payment retires whatever is left, drift included
            principal_pmt = balance
            interest = balance * rate
            balance = 0.0
        else:
            balance -= principal_pmt

        total_interest += interest
        payments.append(
            PaymentRecord(
                payment_number=number,
                payment_date=payment_date,
                payment=principal_pmt + interest,
                principal=principal_pmt,
                interest=interest,
                remaining_balance=balance,
            )
        )

        if balance == 0:
            break

    logger.debug(
        f"Amortized {terms.principal:.2f} over {len(payments)} "
        f"{terms.payment_frequency.value} payments"
    )

    return AmortizationSchedule(
        payments=payments,
        total_interest=total_interest,
        total_payments=len(payments),
        final_payment_date=payments[-1].payment_date if payments else None,
    )


def to_monthly_equivalent(amount: float, frequency) -> float:
    """Convert a per-period amount to its monthly equivalent."""
    return amount * frequency_profile(frequency).payments_per_year / 12


def past_payment_count(schedule: AmortizationSchedule, as_of: date) -> int:
    """Number of payments dated on or before as_of."""
    count = 0
    for row in schedule.payments:
        if row.payment_date > as_of:
            break
        count += 1
    return count


def get_current_payment(
    terms: MortgageTerms, as_of: Optional[date] = None
) -> PaymentRecord:
    """
    Find the payment for the current period.

    Returns the latest payment dated on or before as_of, or the first
    payment when none has fallen due yet.
    """
    if as_of is None:
        as_of = date.today()

    return _current_row(generate_amortization_schedule(terms), as_of)


def _current_row(schedule: AmortizationSchedule, as_of: date) -> PaymentRecord:
    paid = past_payment_count(schedule, as_of)
    return schedule.payments[paid - 1] if paid > 0 else schedule.payments[0]


def get_monthly_mortgage_payment(terms: MortgageTerms) -> float:
    """Scheduled payment expressed as a monthly equivalent."""
    validate_mortgage_terms(terms)
    return to_monthly_equivalent(
        calculate_scheduled_payment(terms), terms.payment_frequency
    )


def get_monthly_mortgage_interest(
    terms: MortgageTerms, as_of: Optional[date] = None
) -> float:
    """Interest portion of the current payment as a monthly equivalent."""
    current = get_current_payment(terms, as_of)
    return to_monthly_equivalent(current.interest, terms.payment_frequency)


def get_monthly_mortgage_principal(
    terms: MortgageTerms, as_of: Optional[date] = None
) -> float:
    """Principal portion of the current payment as a monthly equivalent."""
    current = get_current_payment(terms, as_of)
    return to_monthly_equivalent(current.principal, terms.payment_frequency)


def get_current_mortgage_balance(
    terms: MortgageTerms, as_of: Optional[date] = None
) -> float:
    """
    Calculate the outstanding balance after all payments made to date.

    Args:
        terms: Mortgage terms
        as_of: Valuation date (defaults to today)

    Returns:
        Remaining balance after the latest past payment, or the original
        principal if no payment has been made
    """
    if as_of is None:
        as_of = date.today()

    schedule = generate_amortization_schedule(terms)
    paid = past_payment_count(schedule, as_of)
    if paid == 0:
        return terms.principal
    return schedule.payments[paid - 1].remaining_balance


def get_mortgage_balance_at_year(terms: MortgageTerms, years: int) -> float:
    """Remaining balance after the given number of years from the start date."""
    if years <= 0:
        validate_mortgage_terms(terms)
        return terms.principal

    schedule = generate_amortization_schedule(terms)
    per_year = frequency_profile(terms.payment_frequency).payments_per_year
    index = min(len(schedule.payments), per_year * years) - 1
    return schedule.payments[index].remaining_balance


def get_annual_mortgage_interest(
    terms: MortgageTerms, as_of: Optional[date] = None
) -> float:
    """
    Interest due over the next year of unpaid payments.

    Returns 0 once the mortgage is paid off.
    """
    if as_of is None:
        as_of = date.today()

    schedule = generate_amortization_schedule(terms)
    per_year = frequency_profile(terms.payment_frequency).payments_per_year
    start = past_payment_count(schedule, as_of)
    return sum(row.interest for row in schedule.payments[start : start + per_year])


def get_mortgage_position(terms: MortgageTerms, as_of: Optional[date] = None) -> dict:
    """
    Summarize where a mortgage stands on a date from a single schedule.

    Returns:
        Dict with monthly-equivalent payment, interest and principal, the
        current balance, next-year interest and the current payment row
    """
    if as_of is None:
        as_of = date.today()

    schedule = generate_amortization_schedule(terms)
    per_year = frequency_profile(terms.payment_frequency).payments_per_year
    paid = past_payment_count(schedule, as_of)
    current = _current_row(schedule, as_of)

    return {
        "monthly_payment": to_monthly_equivalent(
            calculate_scheduled_payment(terms), terms.payment_frequency
        ),
        "monthly_interest": to_monthly_equivalent(
            current.interest, terms.payment_frequency
        ),
        "monthly_principal": to_monthly_equivalent(
            current.principal, terms.payment_frequency
        ),
        "current_balance": (
            schedule.payments[paid - 1].remaining_balance if paid else terms.principal
        ),
        "annual_interest": sum(
            row.interest for row in schedule.payments[paid : paid + per_year]
        ),
        "current_payment": current,
    }
