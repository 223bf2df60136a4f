"""
Domain Records

Immutable inputs and outputs of the calculation engine. Inputs validate
themselves on construction so that incomplete property data fails before
any calculation runs.
"""

import enum
import math
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from typing import List, Optional, Union

from dateutil import parser as date_parser

from app.calculations.errors import InvalidMortgageInput, InvalidPropertyInput


class PaymentFrequency(str, enum.Enum):
    """Supported mortgage payment cadences."""

    MONTHLY = "monthly"
    SEMI_MONTHLY = "semi-monthly"
    BI_WEEKLY = "bi-weekly"
    ACCELERATED_BI_WEEKLY = "accelerated bi-weekly"
    WEEKLY = "weekly"
    ACCELERATED_WEEKLY = "accelerated weekly"

    @classmethod
    def parse(cls, value: Union[str, "PaymentFrequency"]) -> "PaymentFrequency":
        """
        Parse a frequency label.

        Accepts enum members and free-form labels such as "Monthly",
        "ACCELERATED_BI_WEEKLY" or "Accelerated Bi-weekly".

        Raises:
            InvalidMortgageInput: If the label is not a supported frequency
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidMortgageInput(
                "payment_frequency", f"unsupported payment frequency {value!r}"
            )

        words = value.strip().lower().replace("_", " ").replace("-", " ").split()
        key = " ".join(words)
        for member in cls:
            if member.value.replace("-", " ") == key:
                return member

        raise InvalidMortgageInput(
            "payment_frequency", f"unsupported payment frequency {value!r}"
        )


class RateType(str, enum.Enum):
    """Mortgage rate type."""

    FIXED = "FIXED"
    VARIABLE = "VARIABLE"


def _require_finite(value: float, field_name: str, error_cls) -> None:
    if not math.isfinite(value):
        raise error_cls(field_name, "must be a finite number")


def _parse_date(value: Union[date, str], field_name: str, error_cls) -> date:
    """Coerce a date or date string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date_parser.parse(value).date()
        except (ValueError, OverflowError):
            pass
    raise error_cls(field_name, f"invalid date {value!r}")


@dataclass(frozen=True)
class MortgageTerms:
    """Nominal terms of one mortgage."""

    principal: float
    interest_rate: Optional[float]  # Annual rate as decimal (e.g., 0.0525)
    amortization_years: float
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    start_date: date = field(default_factory=date.today)
    rate_type: RateType = RateType.FIXED
    lender: str = ""

    def __post_init__(self):
        object.__setattr__(
            self, "payment_frequency", PaymentFrequency.parse(self.payment_frequency)
        )
        object.__setattr__(
            self,
            "start_date",
            _parse_date(self.start_date, "start_date", InvalidMortgageInput),
        )
        if not isinstance(self.rate_type, RateType):
            try:
                object.__setattr__(
                    self, "rate_type", RateType(str(self.rate_type).strip().upper())
                )
            except ValueError:
                raise InvalidMortgageInput(
                    "rate_type", f"unsupported rate type {self.rate_type!r}"
                ) from None
        validate_mortgage_terms(self)


def validate_mortgage_terms(terms: MortgageTerms) -> None:
    """
    Check that mortgage terms can be amortized.

    Raises:
        InvalidMortgageInput: Naming the first offending field
    """
    if terms.principal is None or not terms.principal > 0:
        raise InvalidMortgageInput("principal", "must be greater than 0")
    _require_finite(terms.principal, "principal", InvalidMortgageInput)
    if terms.interest_rate is None:
        raise InvalidMortgageInput("interest_rate", "is required")
    _require_finite(terms.interest_rate, "interest_rate", InvalidMortgageInput)
    if terms.interest_rate < 0:
        raise InvalidMortgageInput("interest_rate", "must be 0 or greater")
    if terms.amortization_years is None or not terms.amortization_years > 0:
        raise InvalidMortgageInput("amortization_years", "must be greater than 0")
    _require_finite(
        terms.amortization_years, "amortization_years", InvalidMortgageInput
    )


@dataclass(frozen=True)
class MonthlyExpenses:
    """
    Monthly operating expenses of a property.

    Debt service is deliberately absent: mortgage principal and interest are
    financing costs, not operating expenses.
    """

    property_tax: float = 0.0
    condo_fees: float = 0.0
    insurance: float = 0.0
    maintenance: float = 0.0
    professional_fees: float = 0.0
    utilities: float = 0.0

    def __post_init__(self):
        for name in (
            "property_tax",
            "condo_fees",
            "insurance",
            "maintenance",
            "professional_fees",
            "utilities",
        ):
            value = getattr(self, name)
            if value is None:
                object.__setattr__(self, name, 0.0)
            else:
                _require_finite(value, name, InvalidPropertyInput)
                if value < 0:
                    raise InvalidPropertyInput(name, "must be 0 or greater")

    @property
    def total(self) -> float:
        return (
            self.property_tax
            + self.condo_fees
            + self.insurance
            + self.maintenance
            + self.professional_fees
            + self.utilities
        )


@dataclass(frozen=True)
class PropertySnapshot:
    """Current operating picture of one property."""

    monthly_rent: float
    monthly_expenses: MonthlyExpenses = field(default_factory=MonthlyExpenses)
    current_market_value: float = 0.0
    total_investment: float = 0.0
    mortgage: Optional[MortgageTerms] = None
    name: str = ""

    def __post_init__(self):
        for name in ("monthly_rent", "current_market_value", "total_investment"):
            value = getattr(self, name)
            if value is None:
                object.__setattr__(self, name, 0.0)
            else:
                _require_finite(value, name, InvalidPropertyInput)
                if value < 0:
                    raise InvalidPropertyInput(name, "must be 0 or greater")


@dataclass(frozen=True)
class AssumptionSet:
    """Forecast assumptions, all expressed as percentages (2.5 = 2.5%)."""

    annual_rent_increase: float = 2.0
    annual_expense_inflation: float = 2.5
    annual_property_appreciation: float = 3.0
    vacancy_rate: float = 5.0
    future_interest_rate: float = 5.0
    exit_cap_rate: float = 5.0

    def __post_init__(self):
        for item in fields(self):
            _require_finite(getattr(self, item.name), item.name, InvalidPropertyInput)
        if not 0 <= self.vacancy_rate <= 100:
            raise InvalidPropertyInput("vacancy_rate", "must be between 0 and 100")
        if self.exit_cap_rate < 0:
            raise InvalidPropertyInput("exit_cap_rate", "must be 0 or greater")
        if self.future_interest_rate < 0:
            raise InvalidPropertyInput("future_interest_rate", "must be 0 or greater")

    def with_changes(self, **changes) -> "AssumptionSet":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


BASELINE_ASSUMPTIONS = AssumptionSet()


@dataclass(frozen=True)
class PaymentRecord:
    """One scheduled mortgage payment."""

    payment_number: int
    payment_date: date
    payment: float
    principal: float
    interest: float
    remaining_balance: float


@dataclass(frozen=True)
class AmortizationSchedule:
    """Complete payment schedule for one mortgage."""

    payments: List[PaymentRecord]
    total_interest: float
    total_payments: int
    final_payment_date: Optional[date]


@dataclass(frozen=True)
class YearlySummary:
    """Twelve months' worth of future payments rolled together."""

    year: int
    start_date: date
    end_date: date
    opening_balance: float
    total_payment: float
    total_principal: float
    total_interest: float
    ending_balance: float
    payments: int


@dataclass(frozen=True)
class ForecastYear:
    """One projected year of operations."""

    year: int
    rental_income: float
    operating_expenses: float
    noi: float
    interest: float
    principal: float
    debt_service: float
    net_cash_flow: float
    mortgage_balance: float
    property_value: float
    equity: float
    cumulative_cash_flow: float
    total_profit: float


@dataclass(frozen=True)
class ForecastResult:
    """Ten-year projection for one property under one assumption set."""

    years: List[ForecastYear]
    assumptions: AssumptionSet = BASELINE_ASSUMPTIONS

    def series(self, name: str) -> List[float]:
        """Return one field across all projected years."""
        return [getattr(year, name) for year in self.years]


@dataclass(frozen=True)
class ReturnMetrics:
    """Headline return figures derived from a forecast."""

    irr: float  # Percentage
    average_annual_cash_flow: float
    total_profit_at_sale: float
    irr_converged: bool = True
    forecast: Optional[ForecastResult] = None


@dataclass(frozen=True)
class PrepaymentAnalysis:
    """Effect of paying a mortgage down faster than scheduled."""

    strategy: str  # "lump_sum" or "increased_payment"
    amount: float
    start_payment_number: int
    original_payment: float
    new_payment: float
    balance_without_prepayment: float
    balance_with_prepayment: float
    original_total_interest: float
    new_total_interest: float
    interest_saved: float
    original_payment_count: int
    new_payment_count: int
    payments_saved: int
    original_payoff_date: Optional[date]
    new_payoff_date: Optional[date]
    schedule: AmortizationSchedule


@dataclass(frozen=True)
class RefinanceAnalysis:
    """Current mortgage against a replacement loan for the remaining balance."""

    current_balance: float
    remaining_payments: int
    current_payment: float
    current_monthly_payment: float
    new_mortgage: MortgageTerms
    new_payment: float
    new_monthly_payment: float
    monthly_savings: float
    total_savings: float  # Over the new term
    refinance_costs: float
    prepayment_penalty: float
    total_refinance_cost: float
    break_even_months: Optional[int]  # None when the new loan never pays back
    remaining_interest: float
    new_total_interest: float
    interest_saved: float
