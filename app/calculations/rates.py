"""
Interest Rate Conversions

Canadian mortgages quote a nominal annual rate compounded semi-annually.
Payment schedules need the equivalent rate per payment period; long-range
forecasts use a simpler balance x annual rate shortcut. Both live here as
separate functions so neither silently changes the other's results.
"""

from typing import NamedTuple

from app.calculations.models import PaymentFrequency


class FrequencyProfile(NamedTuple):
    """Cadence constants for one payment frequency."""

    payments_per_year: int
    compounding_divisor: int  # Periods per semi-annual compounding interval
    interval_days: int  # Fixed day step between payment dates


FREQUENCY_TABLE = {
    PaymentFrequency.MONTHLY: FrequencyProfile(12, 6, 30),
    PaymentFrequency.SEMI_MONTHLY: FrequencyProfile(24, 6, 15),
    PaymentFrequency.BI_WEEKLY: FrequencyProfile(26, 13, 14),
    PaymentFrequency.ACCELERATED_BI_WEEKLY: FrequencyProfile(26, 13, 14),
    PaymentFrequency.WEEKLY: FrequencyProfile(52, 26, 7),
    PaymentFrequency.ACCELERATED_WEEKLY: FrequencyProfile(52, 26, 7),
}

# Accelerated schedules pay the monthly payment split this many ways
ACCELERATED_SPLIT = {
    PaymentFrequency.ACCELERATED_BI_WEEKLY: 2,
    PaymentFrequency.ACCELERATED_WEEKLY: 4,
}


def frequency_profile(frequency) -> FrequencyProfile:
    """Look up cadence constants; unknown labels raise InvalidMortgageInput."""
    return FREQUENCY_TABLE[PaymentFrequency.parse(frequency)]


def payments_per_year(frequency) -> int:
    """Number of payments made in one year at the given frequency."""
    return frequency_profile(frequency).payments_per_year


def periodic_rate(annual_rate: float, frequency) -> float:
    """
    Convert a nominal annual rate to the rate charged per payment period.

    Uses semi-annual compounding:
        periodic = (1 + annual_rate / 2) ** (1 / k) - 1
    where k is 6 for monthly and semi-monthly, 13 for bi-weekly and 26 for
    weekly schedules (accelerated variants share their base cadence).

    Args:
        annual_rate: Nominal annual rate as decimal (e.g., 0.0525 for 5.25%)
        frequency: PaymentFrequency or frequency label

    Returns:
        Periodic rate as decimal

    Raises:
        InvalidMortgageInput: If the frequency is not supported
    """
    divisor = frequency_profile(frequency).compounding_divisor
    semi_annual_rate = annual_rate / 2
    return (1 + semi_annual_rate) ** (1 / divisor) - 1


def simple_annual_interest(balance: float, annual_rate: float) -> float:
    """
    Approximate one year of interest as balance x nominal annual rate.

    Used by multi-year forecasts only; payment schedules use periodic_rate().
    """
    return balance * annual_rate
