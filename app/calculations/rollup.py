"""
Yearly Mortgage Rollups

Rolls the unpaid remainder of an amortization schedule into forward-looking
yearly summaries, counted from the valuation date.
"""

import logging
from datetime import date
from typing import List, Optional

from app.calculations.amortization import (
    generate_amortization_schedule,
    past_payment_count,
)
from app.calculations.models import MortgageTerms, YearlySummary
from app.calculations.rates import payments_per_year

logger = logging.getLogger(__name__)


def get_mortgage_yearly_summary(
    terms: MortgageTerms,
    years_ahead: int,
    as_of: Optional[date] = None,
) -> List[YearlySummary]:
    """
    Summarize upcoming mortgage payments year by year.

    Year 1 starts at the first payment dated after as_of. Each year holds one
    year's worth of payments for the mortgage's frequency (12 monthly, 26
    bi-weekly, ...). Summaries stop after the year in which the balance
    reaches zero, even if more years were requested.

    Args:
        terms: Mortgage terms
        years_ahead: Maximum number of yearly summaries
        as_of: Valuation date (defaults to today)

    Returns:
        List of YearlySummary, empty if no payments remain
    """
    if as_of is None:
        as_of = date.today()

    schedule = generate_amortization_schedule(terms)
    if years_ahead <= 0:
        return []

    paid = past_payment_count(schedule, as_of)
    future = schedule.payments[paid:]
    if not future:
        return []

    opening_balance = (
        schedule.payments[paid - 1].remaining_balance if paid > 0 else terms.principal
    )
    per_year = payments_per_year(terms.payment_frequency)

    summaries = []
    for year in range(1, years_ahead + 1):
        bucket = future[(year - 1) * per_year : year * per_year]
        if not bucket:
            break

        ending_balance = bucket[-1].remaining_balance
        summaries.append(
            YearlySummary(
                year=year,
                start_date=bucket[0].payment_date,
                end_date=bucket[-1].payment_date,
                opening_balance=opening_balance,
                total_payment=sum(row.payment for row in bucket),
                total_principal=sum(row.principal for row in bucket),
                total_interest=sum(row.interest for row in bucket),
                ending_balance=ending_balance,
                payments=len(bucket),
            )
        )
        opening_balance = ending_balance

        if ending_balance == 0:
            break

    logger.debug(f"Rolled {len(future)} future payments into {len(summaries)} years")
    return summaries
