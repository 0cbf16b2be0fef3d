"""
Pytest configuration and shared fixtures.
"""

import copy

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from dealcalc.main import app
from dealcalc.calculations.flip_model import FlipScenario
from dealcalc.calculations.multi import MultiProperty
from dealcalc.samples.flip import SAMPLE_FLIP


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def sample_flip_data():
    """Raw sample FLIP inputs (a fresh copy per test)."""
    return copy.deepcopy(SAMPLE_FLIP)


@pytest.fixture
def sample_flip(sample_flip_data):
    """Sample FLIP scenario."""
    return FlipScenario.model_validate(sample_flip_data)


@pytest.fixture
def sample_multi_data():
    """Raw inputs of a six-plex financed by one conventional mortgage."""
    return {
        "name": "Six-plex Rosemont",
        "purchase_price": 900000,
        "closing_costs": 15000,
        "renovation_budget": 20000,
        "unit_count": 6,
        "revenues": {
            "base_rents": 90000,
            "parking": 2400,
            "laundry": 1200,
        },
        "expenses": {
            "municipal_tax": 7500,
            "school_tax": 800,
            "insurance": 3000,
            "energy": 1500,
            "maintenance": 3000,
            "reserve_fund": 1200,
            "vacancy_rate": 3,
            "bad_debt_rate": 1,
        },
        "financing_sources": [
            {
                "type": "first_mortgage",
                "amount": 675000,
                "interest_rate": 5.0,
                "term": 5,
                "amortization": 25,
            }
        ],
    }


@pytest.fixture
def sample_multi(sample_multi_data):
    """Sample MULTI property."""
    return MultiProperty.model_validate(sample_multi_data)
