"""Balance-mutating operations.

Every function here runs inside a single ``transaction.atomic()`` block and
locks the account rows it touches, so a debit/credit pair either lands
completely or not at all and two concurrent debits cannot both pass the
funds check.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from .exceptions import (
    AccountNotFound, InsufficientFunds, InvalidAccount, InvalidAmount, InvalidCategory,
    SameAccountTransfer,
)
from .models import Account, Category, Transaction, TransactionType
from .utils import get_system_category, to_money

logger = logging.getLogger(__name__)


def _clean_amount(amount) -> Decimal:
    try:
        value = to_money(amount)
    except ValueError:
        raise InvalidAmount()
    if value <= 0:
        raise InvalidAmount()
    return value


def _clean_id(value) -> int:
    # "5" and 5 name the same account
    if isinstance(value, bool):
        raise InvalidAccount()
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidAccount()


def _lock_accounts(user, *account_ids):
    # Lock in pk order so two opposite transfers cannot deadlock
    ids = sorted(set(account_ids))
    locked = {
        acc.pk: acc
        for acc in Account.objects.select_for_update().filter(user=user, pk__in=ids).order_by("pk")
    }
    if len(locked) != len(ids):
        raise AccountNotFound()
    return locked


def _credit(user, account, amount, type_, category, description):
    Account.objects.filter(pk=account.pk).update(balance=F("balance") + amount)
    return Transaction.objects.create(
        user=user, account=account, category=category, type=type_,
        amount=amount, description=description or "",
    )


def _debit(user, account, amount, type_, category, description):
    if account.balance < amount:
        logger.warning(
            "Rejected %s of %s from account %s (balance %s) for user %s",
            type_, amount, account.pk, account.balance, user.pk,
        )
        raise InsufficientFunds()
    Account.objects.filter(pk=account.pk).update(balance=F("balance") - amount)
    return Transaction.objects.create(
        user=user, account=account, category=category, type=type_,
        amount=-amount, description=description or "",
    )


def deposit(user, account_id, amount, description="", category=None):
    account_id = _clean_id(account_id)
    amount = _clean_amount(amount)
    with transaction.atomic():
        account = _lock_accounts(user, account_id)[account_id]
        category = category or get_system_category(TransactionType.DEPOSIT)
        txn = _credit(user, account, amount, TransactionType.DEPOSIT, category, description)
    logger.info("Deposit of %s to account %s for user %s", amount, account_id, user.pk)
    return txn


def withdraw(user, account_id, amount, description="", category=None):
    account_id = _clean_id(account_id)
    amount = _clean_amount(amount)
    with transaction.atomic():
        account = _lock_accounts(user, account_id)[account_id]
        category = category or get_system_category(TransactionType.WITHDRAWAL)
        txn = _debit(user, account, amount, TransactionType.WITHDRAWAL, category, description)
    logger.info("Withdrawal of %s from account %s for user %s", amount, account_id, user.pk)
    return txn


def record_expense(user, account_id, amount, description="", category_id=None):
    """Withdrawal tagged with a spending category picked by the user."""
    account_id = _clean_id(account_id)
    category = None
    if category_id is not None:
        try:
            category = Category.objects.get(pk=category_id, type=TransactionType.WITHDRAWAL)
        except Category.DoesNotExist:
            raise InvalidCategory()
    return withdraw(user, account_id, amount, description, category=category)


def transfer(user, from_account_id, to_account_id, amount, description=""):
    from_account_id = _clean_id(from_account_id)
    to_account_id = _clean_id(to_account_id)
    if from_account_id == to_account_id:
        raise SameAccountTransfer()
    amount = _clean_amount(amount)

    with transaction.atomic():
        locked = _lock_accounts(user, from_account_id, to_account_id)
        category = get_system_category(TransactionType.TRANSFER)
        debit = _debit(
            user, locked[from_account_id], amount, TransactionType.TRANSFER, category, description
        )
        credit = _credit(
            user, locked[to_account_id], amount, TransactionType.TRANSFER, category, description
        )
        debit.counterpart = credit
        credit.counterpart = debit
        Transaction.objects.filter(pk=debit.pk).update(counterpart=credit)
        Transaction.objects.filter(pk=credit.pk).update(counterpart=debit)

    logger.info(
        "Transfer of %s from account %s to %s for user %s",
        amount, from_account_id, to_account_id, user.pk,
    )
    return debit


def open_account(user, account_type, name, opening_deposit=None, description="Initial deposit"):
    if opening_deposit is not None:
        try:
            opening_deposit = to_money(opening_deposit)
        except ValueError:
            raise InvalidAmount()
    with transaction.atomic():
        account = Account.objects.create(user=user, account_type=account_type, name=name)
        if opening_deposit is not None and opening_deposit > 0:
            deposit(user, account.pk, opening_deposit, description)
            account.refresh_from_db(fields=["balance"])
    logger.info("Opened %s account %s for user %s", account_type, account.pk, user.pk)
    return account
