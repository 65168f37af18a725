from decimal import Decimal

import pytest

from finance import calculators

D = Decimal


class TestFormulas:
    def test_savings_with_interest(self):
        res = calculators.savings(D("100"), D("1"), D("12"))
        assert res["future_value"] == D("1268.25")
        assert res["total_contributions"] == D("1200.00")
        assert res["interest_earned"] == D("68.25")

    def test_savings_zero_rate_is_linear(self):
        res = calculators.savings(D("100"), D("2"), D("0"))
        assert res["future_value"] == D("2400.00")
        assert res["interest_earned"] == D("0.00")

    def test_loan_thirty_years(self):
        res = calculators.loan(D("100000"), D("30"), D("6"))
        assert res["monthly_payment"] == D("599.55")
        assert res["total_interest"] == res["total_payment"] - D("100000.00")

    def test_loan_zero_rate(self):
        res = calculators.loan(D("12000"), D("1"), D("0"))
        assert res == {
            "monthly_payment": D("1000.00"),
            "total_payment": D("12000.00"),
            "total_interest": D("0.00"),
        }

    def test_tax(self):
        res = calculators.tax(D("50000"), D("20"), D("10000"))
        assert res == {
            "taxable_income": D("40000.00"),
            "tax_amount": D("8000.00"),
            "net_income": D("42000.00"),
        }

    def test_tax_deductions_above_income(self):
        res = calculators.tax(D("5000"), D("10"), D("10000"))
        assert res["taxable_income"] == D("0.00")
        assert res["net_income"] == D("5000.00")

    def test_investment_initial_only(self):
        res = calculators.investment(D("1000"), D("0"), D("1"), D("12"))
        assert res["future_value"] == D("1126.83")
        assert res["total_returns"] == D("126.83")

    def test_retirement_compounds_yearly(self):
        res = calculators.retirement(30, 31, D("1000"), D("100"), D("10"))
        assert res["estimated_savings"] == D("2300.00")
        assert res["total_contributions"] == D("2200.00")
        assert res["investment_returns"] == D("100.00")
        assert res["years_to_retirement"] == 1

    def test_retirement_age_must_be_in_future(self):
        with pytest.raises(ValueError):
            calculators.retirement(40, 40, D("0"), D("0"), D("5"))

    def test_mortgage(self):
        res = calculators.mortgage(D("250000"), D("50000"), D("30"), D("0"))
        assert res["loan_amount"] == D("200000.00")
        assert res["monthly_payment"] == D("555.56")
        assert res["loan_to_value"] == D("80.0")

    def test_mortgage_down_payment_covers_price(self):
        with pytest.raises(ValueError):
            calculators.mortgage(D("100"), D("100"), D("30"), D("5"))


@pytest.mark.django_db
class TestCalculatorEndpoint:
    def test_loan(self, auth_client):
        res = auth_client.post(
            "/api/calculators/loan/", {"principal": "100000", "years": 30, "annual_rate": "6"}, format="json",
        )
        assert res.status_code == 200
        assert res.data["calculator"] == "loan"
        assert res.data["result"]["monthly_payment"] == D("599.55")

    def test_unknown_calculator(self, auth_client):
        res = auth_client.post("/api/calculators/crypto/", {}, format="json")
        assert res.status_code == 404

    @pytest.mark.parametrize("kind,payload", [
        ("savings", {"monthly_savings": "-1", "years": 1, "annual_rate": 5}),
        ("loan", {"principal": "1000", "years": 0, "annual_rate": 5}),
        ("retirement", {"current_age": 65, "retirement_age": 60, "initial": 0,
                        "monthly_contribution": 0, "annual_return": 5}),
        ("mortgage", {"home_price": 100, "down_payment": 150, "years": 30, "annual_rate": 5}),
        ("tax", {"annual_income": 1000}),
    ])
    def test_invalid_inputs(self, auth_client, kind, payload):
        res = auth_client.post(f"/api/calculators/{kind}/", payload, format="json")
        assert res.status_code == 400
        assert "error" in res.data

    @pytest.mark.parametrize("kind,payload", [
        ("savings", {"monthly_savings": "1000", "years": 100, "annual_rate": 100}),
        ("investment", {"initial": "1000", "monthly_contribution": "1000", "years": 100, "annual_return": 100}),
        ("retirement", {"current_age": 20, "retirement_age": 90, "initial": "100000",
                        "monthly_contribution": "5000", "annual_return": 300}),
        ("loan", {"principal": "1000", "years": 500, "annual_rate": 5}),
    ])
    def test_extreme_inputs_are_rejected(self, auth_client, kind, payload):
        res = auth_client.post(f"/api/calculators/{kind}/", payload, format="json")
        assert res.status_code == 400
        assert "error" in res.data

    def test_requires_auth(self, api_client):
        assert api_client.post("/api/calculators/tax/", {}, format="json").status_code == 401
