"""
Mortgage Prepayment Analysis

Compares the regular schedule against one where extra principal is paid,
either as a single lump sum or as a standing increase to every payment.
"""

import logging
import math

from app.calculations.amortization import (
    calculate_payment,
    calculate_scheduled_payment,
    generate_amortization_schedule,
)
from app.calculations.errors import InvalidMortgageInput
from app.calculations.models import (
    AmortizationSchedule,
    MortgageTerms,
    PrepaymentAnalysis,
)
from app.calculations.rates import periodic_rate

LUMP_SUM = "lump_sum"
INCREASED_PAYMENT = "increased_payment"

logger = logging.getLogger(__name__)


def _validate_prepayment(
    schedule: AmortizationSchedule,
    amount: float,
    amount_field: str,
    payment_number: int,
    number_field: str,
) -> None:
    if amount is None or not math.isfinite(amount):
        raise InvalidMortgageInput(amount_field, "must be a finite number")
    if amount <= 0:
        raise InvalidMortgageInput(amount_field, "must be greater than 0")
    if not 1 <= payment_number <= schedule.total_payments:
        raise InvalidMortgageInput(
            number_field, f"must be between 1 and {schedule.total_payments}"
        )


def _compare(
    strategy: str,
    amount: float,
    start_payment_number: int,
    original_payment: float,
    new_payment: float,
    original: AmortizationSchedule,
    prepaid: AmortizationSchedule,
) -> PrepaymentAnalysis:
    index = start_payment_number - 1
    balance_with = (
        prepaid.payments[index].remaining_balance
        if index < len(prepaid.payments)
        else 0.0
    )
    analysis = PrepaymentAnalysis(
        strategy=strategy,
        amount=amount,
        start_payment_number=start_payment_number,
        original_payment=original_payment,
        new_payment=new_payment,
        balance_without_prepayment=original.payments[index].remaining_balance,
        balance_with_prepayment=balance_with,
        original_total_interest=original.total_interest,
        new_total_interest=prepaid.total_interest,
        interest_saved=original.total_interest - prepaid.total_interest,
        original_payment_count=original.total_payments,
        new_payment_count=prepaid.total_payments,
        payments_saved=original.total_payments - prepaid.total_payments,
        original_payoff_date=original.final_payment_date,
        new_payoff_date=prepaid.final_payment_date,
        schedule=prepaid,
    )
    logger.debug(
        f"{strategy} prepayment of {amount:.2f}: saves "
        f"{analysis.interest_saved:.2f} interest, {analysis.payments_saved} payments"
    )
    return analysis


def calculate_lump_sum_prepayment(
    terms: MortgageTerms, amount: float, payment_number: int = 1
) -> PrepaymentAnalysis:
    """
    Analyze a one-time lump sum paid with a scheduled payment.

    The lump sum goes entirely to principal and the regular payment is kept,
    so the loan retires early. new_payment reports the alternative: the
    smaller payment that would retire the reduced balance by the original
    payoff date.

    Args:
        terms: Mortgage terms
        amount: Lump sum paid toward principal
        payment_number: Scheduled payment the lump sum accompanies (1-based)

    Returns:
        PrepaymentAnalysis against the regular schedule

    Raises:
        InvalidMortgageInput: If the amount or payment number is unusable
    """
    original = generate_amortization_schedule(terms)
    _validate_prepayment(
        original, amount, "lump_sum_amount", payment_number, "payment_number"
    )

    prepaid = generate_amortization_schedule(
        terms, lambda number: amount if number == payment_number else 0.0
    )

    index = payment_number - 1
    reduced_balance = (
        prepaid.payments[index].remaining_balance
        if index < len(prepaid.payments)
        else 0.0
    )
    reamortized_payment = calculate_payment(
        reduced_balance,
        periodic_rate(terms.interest_rate, terms.payment_frequency),
        original.total_payments - payment_number,
    )

    return _compare(
        LUMP_SUM,
        amount,
        payment_number,
        calculate_scheduled_payment(terms),
        reamortized_payment,
        original,
        prepaid,
    )


def calculate_increased_payment_prepayment(
    terms: MortgageTerms, additional_payment: float, start_payment_number: int = 1
) -> PrepaymentAnalysis:
    """
    Analyze adding a fixed amount to every payment from a given payment on.

    Args:
        terms: Mortgage terms
        additional_payment: Extra principal paid with each payment
        start_payment_number: First payment carrying the increase (1-based)

    Returns:
        PrepaymentAnalysis against the regular schedule

    Raises:
        InvalidMortgageInput: If the amount or payment number is unusable
    """
    original = generate_amortization_schedule(terms)
    _validate_prepayment(
        original,
        additional_payment,
        "additional_payment",
        start_payment_number,
        "start_payment_number",
    )

    prepaid = generate_amortization_schedule(
        terms,
        lambda number: additional_payment if number >= start_payment_number else 0.0,
    )

    scheduled_payment = calculate_scheduled_payment(terms)
    return _compare(
        INCREASED_PAYMENT,
        additional_payment,
        start_payment_number,
        scheduled_payment,
        scheduled_payment + additional_payment,
        original,
        prepaid,
    )
