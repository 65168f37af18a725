from datetime import datetime
from decimal import Decimal

import pytest
from django.utils import timezone

from finance import services
from finance.models import Category, Transaction, TransactionType


def backdate(qs, year, month):
    qs.update(created_at=timezone.make_aware(datetime(year, month, 15, 12)))


@pytest.fixture
def activity(user, checking, savings):
    rent = Category.objects.create(name="Rent", type=TransactionType.WITHDRAWAL)
    food = Category.objects.create(name="Groceries", type=TransactionType.WITHDRAWAL)
    services.record_expense(user, checking.pk, Decimal("400"), "Rent", rent.pk)
    services.record_expense(user, checking.pk, Decimal("60"), "Food", food.pk)
    services.record_expense(user, checking.pk, Decimal("40"), "Food", food.pk)
    services.transfer(user, checking.pk, savings.pk, Decimal("100"))
    return {"rent": rent, "food": food}


@pytest.mark.django_db
class TestSummary:
    def test_totals_and_balances(self, auth_client, activity):
        res = auth_client.get("/api/analytics/summary/")
        assert res.status_code == 200

        totals = res.data["totals"]
        assert totals["deposits"] == Decimal("1500.00")
        assert totals["withdrawals"] == Decimal("500.00")
        assert totals["transfers"] == Decimal("100.00")
        assert totals["net"] == Decimal("1000.00")

        balances = res.data["balances"]
        assert balances["total_balance"] == Decimal("1000.00")
        by_name = {b["account"]: b["balance"] for b in balances["by_account"]}
        assert by_name == {"Main Checking": Decimal("400.00"), "Savings Account": Decimal("600.00")}
        assert res.data["period"]["start"].endswith("-01")

    def test_account_filter(self, auth_client, activity, savings):
        res = auth_client.get("/api/analytics/summary/", {"account": savings.pk})
        assert res.data["totals"]["withdrawals"] == Decimal("0.00")
        assert res.data["totals"]["transfers"] == Decimal("0.00")
        assert res.data["period"]["account"] == savings.pk

    def test_period_outside_activity(self, auth_client, activity):
        res = auth_client.get("/api/analytics/summary/", {"start": "2001-01", "end": "2001-12"})
        assert res.data["totals"]["deposits"] == Decimal("0.00")

    @pytest.mark.parametrize("params", [
        {"start": "2024-13-01"},
        {"start": "nope"},
        {"start": "2024-05-01", "end": "2024-04-01"},
        {"account": "one"},
    ])
    def test_bad_filters(self, auth_client, params):
        res = auth_client.get("/api/analytics/summary/", params)
        assert res.status_code == 400
        assert "error" in res.data


@pytest.mark.django_db
class TestMonthlyAndCategories:
    def test_monthly_single_month(self, auth_client, activity):
        res = auth_client.get("/api/analytics/monthly/")
        assert res.status_code == 200
        assert len(res.data) == 1
        row = res.data[0]
        assert row["deposits"] == Decimal("1500.00")
        assert row["withdrawals"] == Decimal("500.00")
        assert row["transfers"] == Decimal("100.00")

    def test_monthly_rows_are_ascending(self, auth_client, user, activity):
        backdate(Transaction.objects.filter(user=user, type=TransactionType.DEPOSIT), 2024, 1)
        backdate(Transaction.objects.filter(user=user, type=TransactionType.TRANSFER), 2024, 2)

        res = auth_client.get("/api/analytics/monthly/")
        assert res.status_code == 200
        months = [str(row["month"]) for row in res.data]
        assert months[:2] == ["2024-01-01", "2024-02-01"]
        assert months == sorted(months)
        assert len(months) == 3

        january, february, current = res.data
        assert january["deposits"] == Decimal("1500.00")
        assert january["withdrawals"] == Decimal("0.00")
        # both legs moved to February, only the outgoing one counts
        assert february["transfers"] == Decimal("100.00")
        assert february["net"] == Decimal("0.00")
        assert current["withdrawals"] == Decimal("500.00")
        assert current["transfers"] == Decimal("0.00")

    def test_categories_sorted_by_total(self, auth_client, activity):
        res = auth_client.get("/api/analytics/categories/")
        assert res.status_code == 200
        assert [(c["category"], c["total"]) for c in res.data] == [
            ("Rent", Decimal("400.00")),
            ("Groceries", Decimal("100.00")),
        ]

    def test_categories_for_deposits(self, auth_client, activity):
        res = auth_client.get("/api/analytics/categories/", {"type": "DEPOSIT"})
        assert [(c["category"], c["total"]) for c in res.data] == [("Deposit", Decimal("1500.00"))]

    def test_unknown_type(self, auth_client):
        assert auth_client.get("/api/analytics/categories/", {"type": "REFUND"}).status_code == 400

    def test_requires_auth(self, api_client):
        assert api_client.get("/api/analytics/monthly/").status_code == 401
