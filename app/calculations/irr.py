"""
IRR and NPV Calculations

Implements IRR using Newton-Raphson method for annual cash flow vectors.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

MAX_ITERATIONS = 1000
TOLERANCE = 1e-6
DEFAULT_GUESS = 0.1

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IRRResult:
    """Outcome of an IRR solve."""

    rate: float  # Decimal (0.15 = 15%)
    iterations: int
    converged: bool

    @property
    def percent(self) -> float:
        return self.rate * 100


def calculate_npv(cash_flows: List[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Args:
        cash_flows: Array of cash flows (negative = outflow, positive = inflow)
        discount_rate: Annual discount rate (e.g., 0.10 for 10%)

    Returns:
        NPV value
    """
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(flows / (1 + discount_rate) ** periods))


def _npv_derivative(cash_flows: List[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(-periods * flows / (1 + rate) ** (periods + 1)))


def solve_irr(cash_flows: List[float], guess: float = DEFAULT_GUESS) -> IRRResult:
    """
    Solve for IRR using Newton-Raphson.

    Never raises when the iteration fails to settle: the best estimate is
    returned with converged=False and a warning is logged.

    Args:
        cash_flows: Array of periodic cash flows, index 0 at time zero
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        IRRResult with the rate as decimal
    """
    if len(cash_flows) < 2:
        return IRRResult(rate=0.0, iterations=0, converged=False)

    rate = guess

    for iteration in range(1, MAX_ITERATIONS + 1):
        npv = calculate_npv(cash_flows, rate)
        dnpv = _npv_derivative(cash_flows, rate)

        if dnpv == 0 or not np.isfinite(dnpv):
            logger.warning(f"IRR derivative vanished at rate {rate:.6f}")
            return IRRResult(rate=rate, iterations=iteration, converged=False)

        new_rate = rate - npv / dnpv

        if not np.isfinite(new_rate):
            logger.warning(f"IRR step diverged from rate {rate:.6f}")
            return IRRResult(rate=rate, iterations=iteration, converged=False)

        if abs(new_rate - rate) < TOLERANCE:
            return IRRResult(rate=new_rate, iterations=iteration, converged=True)

        rate = new_rate

    logger.warning(
        f"IRR did not converge after {MAX_ITERATIONS} iterations, "
        f"returning {rate:.6f}"
    )
    return IRRResult(rate=rate, iterations=MAX_ITERATIONS, converged=False)


def calculate_irr(cash_flows: List[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR (Internal Rate of Return) as a percentage.

    Args:
        cash_flows: Array of periodic cash flows
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        IRR as percentage (e.g., 15.0 for 15%), or 0 for fewer than two flows
    """
    return solve_irr(cash_flows, guess).percent


def calculate_profit(cash_flows: List[float]) -> float:
    """Calculate profit (total inflows minus total outflows)."""
    return sum(cash_flows)
