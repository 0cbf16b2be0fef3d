"""
Tests for the calculator API endpoints.
"""

import pytest

from dealcalc.calculations.flip_model import FlipScenario
from dealcalc.samples.flip import OPTIMISTIC_UPDATE, PESSIMISTIC_UPDATE
from dealcalc.calculations.scenarios import merge_scenario


@pytest.fixture
def flip_payload(sample_flip):
    """Sample FLIP scenario as JSON."""
    return sample_flip.model_dump(mode="json")


def _variant(scenario: FlipScenario, updates: dict) -> dict:
    return merge_scenario(scenario, updates).model_dump(mode="json")


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestFlipAPI:
    """Test FLIP calculator endpoints."""

    def test_calculate(self, client, flip_payload):
        response = client.post("/api/flip/calculate", json=flip_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["renovation_costs"]["total_renovation_costs"] == 130000
        assert data["profitability_analysis"]["net_profit"] == pytest.approx(-16332.223663284352)
        assert data["profitability_analysis"]["annualized_roi"] == pytest.approx(-33.00072505683504)

    def test_calculate_ignores_stale_results(self, client, flip_payload):
        """Derived values sent by the client are recomputed."""
        flip_payload["renovation_costs"]["total_renovation_costs"] = 1
        response = client.post("/api/flip/calculate", json=flip_payload)
        assert response.json()["renovation_costs"]["total_renovation_costs"] == 130000

    def test_calculate_rejects_negative(self, client, flip_payload):
        flip_payload["acquisition_costs"]["purchase_price"] = -1
        response = client.post("/api/flip/calculate", json=flip_payload)
        assert response.status_code == 422

    def test_calculate_rejects_unknown_field(self, client, flip_payload):
        flip_payload["revenues"]["rebate"] = 1000
        response = client.post("/api/flip/calculate", json=flip_payload)
        assert response.status_code == 422

    def test_compare(self, client, sample_flip, flip_payload):
        response = client.post(
            "/api/flip/compare",
            json={
                "scenario1": flip_payload,
                "scenario2": _variant(sample_flip, OPTIMISTIC_UPDATE),
                "scenario3": _variant(sample_flip, PESSIMISTIC_UPDATE),
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["best_scenario"] == 2
        net_profit = data["comparison"]["profitability"]["net_profit"]
        assert net_profit["scenario2"] == pytest.approx(21667.776336715648)

    def test_compare_requires_three(self, client, flip_payload):
        response = client.post(
            "/api/flip/compare", json={"scenario1": flip_payload, "scenario2": flip_payload}
        )
        assert response.status_code == 422

    def test_sensitivity(self, client, flip_payload):
        response = client.post(
            "/api/flip/sensitivity",
            json={"scenario": flip_payload, "variables": ["expected_sale_price"], "steps": 1},
        )
        assert response.status_code == 200
        points = response.json()["points"]["expected_sale_price"]
        assert [p["change_percent"] for p in points] == [-10, 10]

    def test_sensitivity_unknown_variable(self, client, flip_payload):
        response = client.post(
            "/api/flip/sensitivity", json={"scenario": flip_payload, "variables": ["taxes"]}
        )
        assert response.status_code == 400


class TestMultiAPI:
    """Test MULTI calculator endpoints."""

    def test_analyze(self, client, sample_multi_data):
        response = client.post("/api/multi/analyze", json={"property": sample_multi_data})
        assert response.status_code == 200
        data = response.json()
        assert data["cashflow_per_unit"] == pytest.approx(354.22509219241124)
        assert data["meets_cashflow_target"] is True
        assert data["financing"]["debt_service_coverage_ratio"] == pytest.approx(
            1.5386112082978043
        )

    def test_analyze_custom_target(self, client, sample_multi_data):
        response = client.post(
            "/api/multi/analyze",
            json={"property": sample_multi_data, "target_cashflow_per_door": 500},
        )
        assert response.json()["meets_cashflow_target"] is False

    def test_analyze_without_debt(self, client, sample_multi_data):
        """Infinite coverage is returned as null."""
        sample_multi_data["financing_sources"] = []
        response = client.post("/api/multi/analyze", json={"property": sample_multi_data})
        assert response.status_code == 200
        assert response.json()["financing"]["debt_service_coverage_ratio"] is None

    def test_analyze_rejects_zero_units(self, client, sample_multi_data):
        sample_multi_data["unit_count"] = 0
        response = client.post("/api/multi/analyze", json={"property": sample_multi_data})
        assert response.status_code == 422

    def test_compare(self, client, sample_multi_data):
        cheaper = dict(sample_multi_data, name="Cheaper", purchase_price=850000)
        response = client.post(
            "/api/multi/compare",
            json={"properties": [sample_multi_data, cheaper], "criterion": "cap_rate"},
        )
        assert response.status_code == 200
        assert response.json()["best_index"] == 1

    def test_compare_unknown_criterion(self, client, sample_multi_data):
        response = client.post(
            "/api/multi/compare",
            json={"properties": [sample_multi_data], "criterion": "irr"},
        )
        assert response.status_code == 400

    def test_max_price(self, client, sample_multi_data):
        response = client.post(
            "/api/multi/max-price",
            json={
                "unit_count": 6,
                "revenues": sample_multi_data["revenues"],
                "expenses": sample_multi_data["expenses"],
                "interest_rate": 5,
                "amortization_years": 25,
                "down_payment_percent": 25,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["target_cashflow_per_door"] == 75
        assert data["max_purchase_price"] == pytest.approx(1282114.0592434804)
        assert data["method"] == "amortization"

    def test_max_price_rejects_full_down_payment(self, client, sample_multi_data):
        response = client.post(
            "/api/multi/max-price",
            json={
                "unit_count": 6,
                "revenues": sample_multi_data["revenues"],
                "down_payment_percent": 100,
            },
        )
        assert response.status_code == 422

    def test_sensitivity(self, client, sample_multi_data):
        response = client.post("/api/multi/sensitivity", json={"property": sample_multi_data})
        assert response.status_code == 200
        data = response.json()
        assert len(data["interest_rate"]) == 4
        assert data["combined_stress"]["cashflow"] == pytest.approx(8410.586479673322)


class TestNapkinAPI:
    """Test napkin endpoints."""

    def test_multi(self, client):
        response = client.post(
            "/api/napkin/multi",
            json={"purchase_price": 1010000, "units": 6, "gross_revenue": 120000},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["result"]["cashflow_per_door"] == 75
        assert data["result"]["is_good_deal"] is True
        assert len(data["sensitivity"]) == 4

    def test_multi_invalid_units(self, client):
        response = client.post(
            "/api/napkin/multi",
            json={"purchase_price": 500000, "units": 0, "gross_revenue": 120000},
        )
        assert response.status_code == 400

    def test_multi_max_price_default_target(self, client):
        response = client.post(
            "/api/napkin/multi/max-price", json={"units": 6, "gross_revenue": 120000}
        )
        assert response.status_code == 200
        assert response.json()["max_purchase_price"] == pytest.approx(1010000)

    def test_doors_needed(self, client):
        response = client.post(
            "/api/napkin/multi/doors-needed", json={"target_monthly_income": 1000}
        )
        assert response.json()["doors_needed"] == 14

    def test_multi_max_price_zero_target(self, client):
        """A break-even target of 0 is kept, not replaced by the default."""
        response = client.post(
            "/api/napkin/multi/max-price",
            json={"units": 6, "gross_revenue": 120000, "target_cashflow_per_door": 0},
        )
        data = response.json()
        assert data["target_cashflow_per_door"] == 0
        assert data["max_purchase_price"] == pytest.approx(1100000)

    def test_doors_needed_zero_cashflow(self, client):
        """Zero cashflow per door is rejected rather than defaulted."""
        response = client.post(
            "/api/napkin/multi/doors-needed",
            json={"target_monthly_income": 1000, "cashflow_per_door": 0},
        )
        assert response.status_code == 400

    def test_flip(self, client):
        response = client.post(
            "/api/napkin/flip",
            json={"final_price": 400000, "initial_price": 280000, "renovation_cost": 50000},
        )
        assert response.status_code == 200
        assert response.json()["result"]["profit"] == pytest.approx(30000)

    def test_flip_max_offer(self, client):
        response = client.post(
            "/api/napkin/flip/max-offer", json={"final_price": 400000, "renovation_cost": 50000}
        )
        assert response.json()["max_purchase_price"] == pytest.approx(285000)

    def test_flip_max_offer_zero_target(self, client):
        response = client.post(
            "/api/napkin/flip/max-offer",
            json={"final_price": 400000, "renovation_cost": 50000, "target_profit": 0},
        )
        data = response.json()
        assert data["target_profit"] == 0
        assert data["max_purchase_price"] == pytest.approx(310000)

    def test_flip_max_renovation_zero_target(self, client):
        response = client.post(
            "/api/napkin/flip/max-renovation",
            json={"final_price": 400000, "initial_price": 280000, "target_profit": 0},
        )
        data = response.json()
        assert data["target_profit"] == 0
        assert data["max_renovation_cost"] == pytest.approx(80000)

    def test_flip_max_renovation(self, client):
        response = client.post(
            "/api/napkin/flip/max-renovation",
            json={"final_price": 400000, "initial_price": 280000, "target_profit": 40000},
        )
        assert response.json()["max_renovation_cost"] == pytest.approx(40000)


class TestCalculationsAPI:
    """Test loan and tax endpoints."""

    def test_payment(self, client):
        response = client.post(
            "/api/calculate/payment",
            json={"principal": 240000, "annual_rate": 4.5, "term_years": 25, "holding_period_months": 6},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["monthly_payment"] == pytest.approx(1333.997947108789)
        assert data["interest_over_holding_period"] == pytest.approx(5375.465209738079)
        assert data["balance_after_holding_period"] < 240000

    def test_payment_rejects_negative(self, client):
        response = client.post(
            "/api/calculate/payment",
            json={"principal": -1, "annual_rate": 4.5, "term_years": 25},
        )
        assert response.status_code == 422

    def test_amortization(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 100000,
                "annual_rate": 6,
                "amortization_years": 5,
                "start_date": "2025-01-01",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["schedule"]) == 60
        assert data["schedule"][0]["date"] == "2025-01-01"
        assert data["total_principal"] == pytest.approx(100000, abs=1)
        assert data["debt_service"] == pytest.approx(115996.81, abs=1)

    def test_amortization_debt_service_range(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 100000,
                "annual_rate": 6,
                "amortization_years": 5,
                "debt_service_from": 1,
                "debt_service_to": 12,
            },
        )
        assert response.status_code == 200
        assert response.json()["debt_service"] == pytest.approx(23199.36, abs=0.1)

    def test_transfer_tax(self, client):
        response = client.post(
            "/api/calculate/transfer-tax",
            json={"property_value": 500000, "municipality": "Sherbrooke"},
        )
        assert response.status_code == 200
        assert response.json()["transfer_tax"] == pytest.approx(5885.5)

    def test_transfer_tax_invalid_value(self, client):
        response = client.post("/api/calculate/transfer-tax", json={"property_value": 0})
        assert response.status_code == 400
