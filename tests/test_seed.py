from decimal import Decimal

import pytest
from django.core.management import call_command

from finance.models import Account, Category, Transaction, User


@pytest.mark.django_db
def test_seed_creates_demo_data():
    call_command("seed")

    user = User.objects.get(email="test@example.com")
    assert user.check_password("password123")
    # defaults plus the "Deposit" category used by the opening deposits
    assert Category.objects.count() == 14

    balances = dict(Account.objects.filter(user=user).values_list("account_type", "balance"))
    assert balances == {
        "CHECKING": Decimal("2600.00"),
        "SAVINGS": Decimal("1000.00"),
        "INVESTMENT": Decimal("1000.00"),
    }
    assert Transaction.objects.filter(user=user, description="Monthly rent").get().amount == Decimal("-800.00")


@pytest.mark.django_db
def test_seed_is_idempotent():
    call_command("seed")
    call_command("seed")
    assert User.objects.filter(email="test@example.com").count() == 1
    assert Account.objects.count() == 3
    assert Transaction.objects.count() == 6
