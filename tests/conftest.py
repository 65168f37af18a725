from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from finance import services
from finance.models import AccountType, User


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    return User.objects.create_user(username="alice", email="alice@example.com", password="s3cret-pass")


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username="bob", email="bob@example.com", password="s3cret-pass")


@pytest.fixture
def auth_client(api_client, user):
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def checking(user):
    return services.open_account(user, AccountType.CHECKING, "Main Checking", opening_deposit=Decimal("1000.00"))


@pytest.fixture
def savings(user):
    return services.open_account(user, AccountType.SAVINGS, "Savings Account", opening_deposit=Decimal("500.00"))


@pytest.fixture
def foreign_account(other_user):
    return services.open_account(other_user, AccountType.CHECKING, "Bob Checking", opening_deposit=Decimal("300.00"))
