"""
Financial calculation API endpoints.

These endpoints accept property and mortgage inputs and return calculated
results for the dashboard.
"""

import math
from dataclasses import asdict
from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from app.calculations import (
    amortization,
    forecast,
    irr,
    metrics,
    prepayment,
    refinance,
    rollup,
    scenarios,
)
from app.calculations.errors import CalculationError
from app.calculations.models import (
    BASELINE_ASSUMPTIONS,
    AssumptionSet,
    MonthlyExpenses,
    MortgageTerms,
    PropertySnapshot,
    ReturnMetrics,
)

router = APIRouter()


class MortgageInput(BaseModel):
    """Mortgage terms as entered on a property."""

    principal: float
    interest_rate: Optional[float] = None  # Decimal (0.0525 for 5.25%)
    rate_type: str = "FIXED"
    amortization_years: float
    payment_frequency: str = "monthly"
    start_date: Optional[date] = None
    lender: str = ""

    def to_terms(self) -> MortgageTerms:
        return MortgageTerms(
            principal=self.principal,
            interest_rate=self.interest_rate,
            amortization_years=self.amortization_years,
            payment_frequency=self.payment_frequency,
            start_date=self.start_date or date.today(),
            rate_type=self.rate_type,
            lender=self.lender,
        )


class ExpensesInput(BaseModel):
    """Monthly operating expenses (no mortgage payment)."""

    property_tax: float = 0.0
    condo_fees: float = 0.0
    insurance: float = 0.0
    maintenance: float = 0.0
    professional_fees: float = 0.0
    utilities: float = 0.0


class PropertyInput(BaseModel):
    """Property snapshot input."""

    name: str = ""
    monthly_rent: float
    monthly_expenses: ExpensesInput = ExpensesInput()
    current_market_value: float = 0.0
    total_investment: float = 0.0
    mortgage: Optional[MortgageInput] = None

    def to_snapshot(self) -> PropertySnapshot:
        return PropertySnapshot(
            name=self.name,
            monthly_rent=self.monthly_rent,
            monthly_expenses=MonthlyExpenses(**self.monthly_expenses.model_dump()),
            current_market_value=self.current_market_value,
            total_investment=self.total_investment,
            mortgage=self.mortgage.to_terms() if self.mortgage else None,
        )


class AssumptionsInput(BaseModel):
    """Forecast assumptions in percent; defaults are the baseline set."""

    annual_rent_increase: float = BASELINE_ASSUMPTIONS.annual_rent_increase
    annual_expense_inflation: float = BASELINE_ASSUMPTIONS.annual_expense_inflation
    annual_property_appreciation: float = (
        BASELINE_ASSUMPTIONS.annual_property_appreciation
    )
    vacancy_rate: float = BASELINE_ASSUMPTIONS.vacancy_rate
    future_interest_rate: float = BASELINE_ASSUMPTIONS.future_interest_rate
    exit_cap_rate: float = BASELINE_ASSUMPTIONS.exit_cap_rate

    def to_assumptions(self) -> AssumptionSet:
        return AssumptionSet(**self.model_dump())


class MortgageRequest(BaseModel):
    """Mortgage plus an optional valuation date."""

    mortgage: MortgageInput
    as_of: Optional[date] = None


class YearlySummaryRequest(MortgageRequest):
    """Input for yearly mortgage summaries."""

    years_ahead: int = 5


class PortfolioRequest(BaseModel):
    """Input for portfolio metrics."""

    properties: List[PropertyInput]
    as_of: Optional[date] = None


class MetricsRequest(BaseModel):
    """Input for single-property metrics."""

    property: PropertyInput
    monthly_mortgage_payment: Optional[float] = None


class ForecastRequest(BaseModel):
    """Input for forecasts and return metrics."""

    property: PropertyInput
    assumptions: AssumptionsInput = AssumptionsInput()
    as_of: Optional[date] = None
    include_forecast: bool = False


class CompareRequest(BaseModel):
    """Input for comparing two assumption sets on one property."""

    property: PropertyInput
    baseline: AssumptionsInput = AssumptionsInput()
    scenario: AssumptionsInput
    as_of: Optional[date] = None


class PrepaymentRequest(BaseModel):
    """Input for prepayment analysis."""

    mortgage: MortgageInput
    strategy: Literal["lump_sum", "increased_payment"]
    amount: float
    payment_number: int = 1


class RefinanceRequest(MortgageRequest):
    """Input for refinance analysis."""

    new_interest_rate: Optional[float] = None  # Decimal
    new_amortization_years: Optional[float] = None
    new_payment_frequency: Optional[str] = None
    term_years: float = refinance.DEFAULT_TERM_YEARS
    refinance_costs: float = 0.0
    penalty_rate: float = refinance.DEFAULT_PENALTY_RATE


class RenewalRequest(MortgageRequest):
    """Input for renewal at the assumed future interest rate."""

    assumptions: AssumptionsInput = AssumptionsInput()
    term_years: float = refinance.DEFAULT_TERM_YEARS


class YoYRequest(BaseModel):
    """Input for projected year-over-year metrics."""

    property: PropertyInput
    assumptions: AssumptionsInput = AssumptionsInput()
    baseline: AssumptionsInput = AssumptionsInput()
    monthly_mortgage_payment: Optional[float] = None


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    discount_rate: float = 0.10


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    converged: bool
    iterations: int
    profit: float
    npv: float


def _finite(value: float) -> Optional[float]:
    """JSON has no infinity; report unbounded ratios as null."""
    return value if math.isfinite(value) else None


def _return_metrics_payload(result: ReturnMetrics, include_forecast: bool) -> dict:
    payload = {
        "irr": result.irr,
        "irr_converged": result.irr_converged,
        "average_annual_cash_flow": result.average_annual_cash_flow,
        "total_profit_at_sale": result.total_profit_at_sale,
    }
    if include_forecast and result.forecast is not None:
        payload["forecast"] = [asdict(year) for year in result.forecast.years]
    return payload


@router.post("/amortization")
async def calculate_amortization(inputs: MortgageInput):
    """Generate the full mortgage amortization schedule."""
    try:
        schedule = amortization.generate_amortization_schedule(inputs.to_terms())
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return asdict(schedule)


@router.post("/mortgage/summary")
async def calculate_mortgage_summary(inputs: MortgageRequest):
    """Current monthly-equivalent payment breakdown and balance."""
    try:
        position = amortization.get_mortgage_position(
            inputs.mortgage.to_terms(), inputs.as_of
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    position["current_payment"] = asdict(position["current_payment"])
    return position


@router.post("/mortgage/yearly-summary")
async def calculate_yearly_summary(inputs: YearlySummaryRequest):
    """Forward-looking yearly rollup of the mortgage schedule."""
    try:
        summaries = rollup.get_mortgage_yearly_summary(
            inputs.mortgage.to_terms(), inputs.years_ahead, inputs.as_of
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"years": [asdict(summary) for summary in summaries]}


@router.post("/mortgage/prepayment")
async def calculate_prepayment(inputs: PrepaymentRequest):
    """Interest and time saved by a lump sum or increased payments."""
    try:
        terms = inputs.mortgage.to_terms()
        if inputs.strategy == prepayment.LUMP_SUM:
            analysis = prepayment.calculate_lump_sum_prepayment(
                terms, inputs.amount, inputs.payment_number
            )
        else:
            analysis = prepayment.calculate_increased_payment_prepayment(
                terms, inputs.amount, inputs.payment_number
            )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return asdict(analysis)


@router.post("/mortgage/refinance")
async def calculate_refinance(inputs: RefinanceRequest):
    """Savings, costs and break-even of refinancing the remaining balance."""
    try:
        analysis = refinance.calculate_refinance(
            inputs.mortgage.to_terms(),
            inputs.new_interest_rate,
            new_amortization_years=inputs.new_amortization_years,
            new_payment_frequency=inputs.new_payment_frequency,
            term_years=inputs.term_years,
            refinance_costs=inputs.refinance_costs,
            penalty_rate=inputs.penalty_rate,
            as_of=inputs.as_of,
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return asdict(analysis)


@router.post("/mortgage/renewal")
async def calculate_renewal(inputs: RenewalRequest):
    """Renewal of the remaining balance at the assumed future rate."""
    try:
        analysis = refinance.calculate_renewal(
            inputs.mortgage.to_terms(),
            inputs.assumptions.to_assumptions(),
            term_years=inputs.term_years,
            as_of=inputs.as_of,
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return asdict(analysis)


@router.post("/metrics")
async def calculate_property_metrics(inputs: MetricsRequest):
    """NOI, cap rate, cash flow and cash-on-cash return for one property."""
    try:
        result = metrics.calculate_property_metrics(
            inputs.property.to_snapshot(), inputs.monthly_mortgage_payment
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result["dscr"] = _finite(result["dscr"])
    return result


@router.post("/portfolio")
async def calculate_portfolio(inputs: PortfolioRequest):
    """Aggregate metrics across several properties."""
    try:
        snapshots = [p.to_snapshot() for p in inputs.properties]
        return metrics.calculate_portfolio_metrics(snapshots, inputs.as_of)
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/forecast")
async def calculate_forecast(inputs: ForecastRequest):
    """Ten-year forecast with year-over-year growth."""
    try:
        result = forecast.generate_forecast(
            inputs.property.to_snapshot(),
            inputs.assumptions.to_assumptions(),
            inputs.as_of,
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "assumptions": asdict(result.assumptions),
        "years": [asdict(year) for year in result.years],
        "yoy_growth": forecast.calculate_forecast_yoy_growth(result),
    }


@router.post("/yoy")
async def calculate_yoy(inputs: YoYRequest):
    """Projected next-year revenue, expense and cash flow changes."""
    try:
        return forecast.calculate_yoy_metrics(
            inputs.property.to_snapshot(),
            inputs.assumptions.to_assumptions(),
            inputs.baseline.to_assumptions(),
            inputs.monthly_mortgage_payment,
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/returns")
async def calculate_returns(inputs: ForecastRequest):
    """IRR, average annual cash flow and profit at a year-10 sale."""
    try:
        result = forecast.calculate_return_metrics(
            inputs.property.to_snapshot(),
            inputs.assumptions.to_assumptions(),
            inputs.as_of,
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _return_metrics_payload(result, inputs.include_forecast)


@router.post("/compare")
async def compare_assumptions(inputs: CompareRequest):
    """Compare return metrics of a scenario against a baseline."""
    try:
        snapshot = inputs.property.to_snapshot()
        baseline = forecast.calculate_return_metrics(
            snapshot, inputs.baseline.to_assumptions(), inputs.as_of
        )
        scenario = forecast.calculate_return_metrics(
            snapshot, inputs.scenario.to_assumptions(), inputs.as_of
        )
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "baseline": _return_metrics_payload(baseline, False),
        "scenario": _return_metrics_payload(scenario, False),
        "comparison": scenarios.compare_scenarios(baseline, scenario),
    }


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for given cash flows."""
    if len(inputs.cash_flows) < 2:
        raise HTTPException(status_code=400, detail="At least 2 cash flows required")
    if not all(math.isfinite(flow) for flow in inputs.cash_flows):
        raise HTTPException(status_code=400, detail="Cash flows must be finite numbers")
    if not math.isfinite(inputs.discount_rate) or inputs.discount_rate <= -1:
        raise HTTPException(
            status_code=400, detail="discount_rate must be a finite number above -1"
        )

    result = irr.solve_irr(inputs.cash_flows)
    return IRRResponse(
        irr=result.percent,
        converged=result.converged,
        iterations=result.iterations,
        profit=irr.calculate_profit(inputs.cash_flows),
        npv=irr.calculate_npv(inputs.cash_flows, inputs.discount_rate),
    )
