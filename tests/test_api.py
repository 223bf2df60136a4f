"""
Tests for calculation API endpoints.
"""

import json

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def mortgage_payload():
    return {
        "principal": 500000,
        "interest_rate": 0.0525,
        "rate_type": "FIXED",
        "amortization_years": 25,
        "payment_frequency": "MONTHLY",
        "start_date": "2024-01-01",
        "lender": "Test Lender",
    }


@pytest.fixture
def property_payload(mortgage_payload):
    return {
        "name": "Richmond St",
        "monthly_rent": 5000,
        "monthly_expenses": {
            "property_tax": 400,
            "condo_fees": 600,
            "insurance": 150,
            "maintenance": 200,
            "professional_fees": 100,
            "utilities": 0,
        },
        "current_market_value": 800000,
        "total_investment": 300000,
        "mortgage": mortgage_payload,
    }


class TestHealth:
    """Test service endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestMortgageEndpoints:
    """Test mortgage calculation endpoints."""

    def test_amortization_schedule(self, client, mortgage_payload):
        response = client.post("/api/calculate/amortization", json=mortgage_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["total_payments"] == 300
        assert len(data["payments"]) == 300
        assert data["payments"][0]["payment_date"] == "2024-01-01"
        assert data["payments"][-1]["remaining_balance"] == 0
        assert data["final_payment_date"] == data["payments"][-1]["payment_date"]

    def test_invalid_principal_is_bad_request(self, client, mortgage_payload):
        mortgage_payload["principal"] = 0
        response = client.post("/api/calculate/amortization", json=mortgage_payload)

        assert response.status_code == 400
        assert "principal" in response.json()["detail"]

    def test_missing_rate_is_bad_request(self, client, mortgage_payload):
        del mortgage_payload["interest_rate"]
        response = client.post("/api/calculate/amortization", json=mortgage_payload)

        assert response.status_code == 400
        assert "interest_rate" in response.json()["detail"]

    def test_unknown_frequency_is_bad_request(self, client, mortgage_payload):
        mortgage_payload["payment_frequency"] = "QUARTERLY"
        response = client.post("/api/calculate/amortization", json=mortgage_payload)

        assert response.status_code == 400
        assert "payment_frequency" in response.json()["detail"]

    def test_non_finite_rate_is_bad_request(self, client, mortgage_payload):
        mortgage_payload["interest_rate"] = float("nan")
        response = client.post(
            "/api/calculate/amortization",
            content=json.dumps(mortgage_payload),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "interest_rate" in response.json()["detail"]

    def test_infinite_principal_is_bad_request(self, client, mortgage_payload):
        mortgage_payload["principal"] = float("inf")
        response = client.post(
            "/api/calculate/amortization",
            content=json.dumps(mortgage_payload),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "principal" in response.json()["detail"]

    def test_missing_principal_fails_schema(self, client, mortgage_payload):
        del mortgage_payload["principal"]
        response = client.post("/api/calculate/amortization", json=mortgage_payload)
        assert response.status_code == 422

    def test_mortgage_summary(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/summary",
            json={"mortgage": mortgage_payload, "as_of": "2023-12-01"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["current_balance"] == 500000
        assert data["monthly_payment"] == pytest.approx(2979.59, abs=0.01)
        assert data["monthly_interest"] + data["monthly_principal"] == pytest.approx(
            data["monthly_payment"]
        )
        assert data["current_payment"]["payment_number"] == 1

    def test_yearly_summary(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/yearly-summary",
            json={
                "mortgage": mortgage_payload,
                "years_ahead": 40,
                "as_of": "2023-12-01",
            },
        )

        assert response.status_code == 200
        years = response.json()["years"]
        assert len(years) == 25
        assert years[0]["payments"] == 12
        assert years[-1]["ending_balance"] == 0


class TestPropertyEndpoints:
    """Test property metric and forecast endpoints."""

    def test_metrics_with_supplied_payment(self, client, property_payload):
        property_payload["monthly_rent"] = 3450
        response = client.post(
            "/api/calculate/metrics",
            json={"property": property_payload, "monthly_mortgage_payment": 1000},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["annual_operating_expenses"] == 17400
        assert data["net_operating_income"] == 24000
        assert data["cap_rate"] == pytest.approx(3.0)
        assert data["monthly_cash_flow"] == 1000

    def test_metrics_without_debt_has_null_dscr(self, client, property_payload):
        del property_payload["mortgage"]
        response = client.post(
            "/api/calculate/metrics", json={"property": property_payload}
        )

        assert response.status_code == 200
        assert response.json()["dscr"] is None

    def test_negative_rent_is_bad_request(self, client, property_payload):
        property_payload["monthly_rent"] = -100
        response = client.post(
            "/api/calculate/metrics", json={"property": property_payload}
        )
        assert response.status_code == 400

    def test_non_finite_values_are_bad_request(self, client, property_payload):
        property_payload["current_market_value"] = float("inf")
        response = client.post(
            "/api/calculate/metrics",
            content=json.dumps({"property": property_payload}),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "current_market_value" in response.json()["detail"]

        property_payload["current_market_value"] = 800000
        response = client.post(
            "/api/calculate/metrics",
            content=json.dumps(
                {"property": property_payload, "monthly_mortgage_payment": float("nan")}
            ),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "monthly_mortgage_payment" in response.json()["detail"]

    def test_portfolio(self, client, property_payload):
        response = client.post(
            "/api/calculate/portfolio",
            json={"properties": [property_payload], "as_of": "2023-12-01"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_properties"] == 1
        assert data["total_mortgage_balance"] == 500000
        assert data["total_equity"] == 300000

    def test_forecast(self, client, property_payload):
        response = client.post(
            "/api/calculate/forecast",
            json={"property": property_payload, "as_of": "2024-06-01"},
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["years"]) == 10
        assert len(data["yoy_growth"]) == 9
        assert data["assumptions"]["exit_cap_rate"] == 5.0

    def test_returns(self, client, property_payload):
        response = client.post(
            "/api/calculate/returns",
            json={
                "property": property_payload,
                "as_of": "2024-06-01",
                "include_forecast": True,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["irr_converged"] is True
        assert len(data["forecast"]) == 10
        assert data["total_profit_at_sale"] == data["forecast"][-1]["total_profit"]

    def test_compare_identical_assumptions(self, client, property_payload):
        response = client.post(
            "/api/calculate/compare",
            json={"property": property_payload, "scenario": {}, "as_of": "2024-06-01"},
        )

        assert response.status_code == 200
        for row in response.json()["comparison"].values():
            assert row["difference"] == 0
            assert row["percent_change"] == 0

    def test_compare_rent_scenario(self, client, property_payload):
        response = client.post(
            "/api/calculate/compare",
            json={
                "property": property_payload,
                "scenario": {"annual_rent_increase": 5.0},
                "as_of": "2024-06-01",
            },
        )

        assert response.status_code == 200
        irr = response.json()["comparison"]["irr"]
        assert irr["scenario"] > irr["baseline"]
        assert irr["difference"] > 0


class TestIRREndpoint:
    """Test the IRR endpoint."""

    def test_irr(self, client):
        response = client.post(
            "/api/calculate/irr", json={"cash_flows": [-100, 110]}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["irr"] == pytest.approx(10.0, abs=0.001)
        assert data["converged"] is True
        assert data["profit"] == 10
        assert data["npv"] == pytest.approx(0)

    def test_irr_requires_two_flows(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [-100]})
        assert response.status_code == 400

    def test_irr_rejects_non_finite_flows(self, client):
        response = client.post(
            "/api/calculate/irr",
            content=json.dumps({"cash_flows": [-100, float("nan")]}),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400


class TestMortgageAnalysisEndpoints:
    """Test prepayment, refinance and renewal endpoints."""

    def test_lump_sum_prepayment(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/prepayment",
            json={
                "mortgage": mortgage_payload,
                "strategy": "lump_sum",
                "amount": 50000,
                "payment_number": 12,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["strategy"] == "lump_sum"
        assert data["interest_saved"] > 0
        assert data["payments_saved"] > 0
        assert data["schedule"]["payments"][-1]["remaining_balance"] == 0

    def test_increased_payment(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/prepayment",
            json={
                "mortgage": mortgage_payload,
                "strategy": "increased_payment",
                "amount": 500,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["new_payment"] == pytest.approx(data["original_payment"] + 500)

    def test_prepayment_amount_must_be_positive(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/prepayment",
            json={"mortgage": mortgage_payload, "strategy": "lump_sum", "amount": 0},
        )

        assert response.status_code == 400
        assert "lump_sum_amount" in response.json()["detail"]

    def test_unknown_prepayment_strategy(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/prepayment",
            json={"mortgage": mortgage_payload, "strategy": "monthly", "amount": 10},
        )
        assert response.status_code == 422

    def test_refinance(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/refinance",
            json={
                "mortgage": mortgage_payload,
                "new_interest_rate": 0.04,
                "refinance_costs": 3000,
                "as_of": "2026-01-01",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["remaining_payments"] == 275
        assert data["monthly_savings"] > 0
        assert data["break_even_months"] > 0
        assert data["new_mortgage"]["payment_frequency"] == "monthly"
        assert data["new_mortgage"]["start_date"] == "2026-01-01"

    def test_refinance_requires_new_rate(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/refinance",
            json={"mortgage": mortgage_payload, "as_of": "2026-01-01"},
        )

        assert response.status_code == 400
        assert "interest_rate" in response.json()["detail"]

    def test_renewal(self, client, mortgage_payload):
        response = client.post(
            "/api/calculate/mortgage/renewal",
            json={
                "mortgage": mortgage_payload,
                "assumptions": {"future_interest_rate": 4.5},
                "as_of": "2029-01-01",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["new_mortgage"]["interest_rate"] == pytest.approx(0.045)
        assert data["prepayment_penalty"] == 0
        assert data["monthly_savings"] > 0


class TestYoYEndpoint:
    """Test the projected year-over-year endpoint."""

    def test_yoy(self, client, property_payload):
        del property_payload["mortgage"]
        property_payload["monthly_rent"] = 3450
        response = client.post(
            "/api/calculate/yoy",
            json={
                "property": property_payload,
                "assumptions": {"annual_rent_increase": 4.0},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["current"]["cash_flow"] == 24000
        assert data["projected_yoy"]["revenue"] == pytest.approx(4.0)
        assert data["baseline_yoy"]["revenue"] == pytest.approx(2.0)
