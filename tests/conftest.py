"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
from datetime import date

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.calculations.models import MonthlyExpenses, MortgageTerms, PropertySnapshot


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


@pytest.fixture
def sample_mortgage():
    """$500K, 5.25%, 25-year monthly mortgage starting 2024-01-01."""
    return MortgageTerms(
        principal=500000,
        interest_rate=0.0525,
        amortization_years=25,
        payment_frequency="monthly",
        start_date=date(2024, 1, 1),
        lender="Test Lender",
    )


@pytest.fixture
def sample_expenses():
    """Monthly operating expenses totalling $1,450."""
    return MonthlyExpenses(
        property_tax=400,
        condo_fees=600,
        insurance=150,
        maintenance=200,
        professional_fees=100,
        utilities=0,
    )


@pytest.fixture
def sample_property(sample_expenses):
    """Unleveraged property renting for $3,450/month, worth $800K."""
    return PropertySnapshot(
        name="Richmond St",
        monthly_rent=3450,
        monthly_expenses=sample_expenses,
        current_market_value=800000,
        total_investment=200000,
    )


@pytest.fixture
def leveraged_property(sample_expenses, sample_mortgage):
    """Same property carrying the sample mortgage."""
    return PropertySnapshot(
        name="Richmond St",
        monthly_rent=3450,
        monthly_expenses=sample_expenses,
        current_market_value=800000,
        total_investment=300000,
        mortgage=sample_mortgage,
    )
