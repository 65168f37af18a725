from decimal import Decimal

from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Abs, Coalesce, TruncMonth

from .models import Account, Transaction, TransactionType
from .utils import day_end, day_start, parse_end, parse_start

ZERO = Decimal("0.00")


class AnalyticsFilterError(ValueError):
    pass


def _sum(expr, **filter_kwargs):
    return Coalesce(
        Sum(expr, filter=Q(**filter_kwargs) if filter_kwargs else None),
        Value(ZERO, output_field=DecimalField(max_digits=18, decimal_places=2)),
    )


def filtered_transactions(user, start=None, end=None, account=None):
    """User-scoped transactions narrowed by the usual ``start/end/account`` params."""
    qs = Transaction.objects.filter(user=user)
    try:
        s = day_start(parse_start(start)) if start else None
        e = day_end(parse_end(end)) if end else None
    except (ValueError, IndexError):
        raise AnalyticsFilterError("Invalid 'start'/'end'. Use YYYY-MM or YYYY-MM-DD.")
    if s and e and s > e:
        raise AnalyticsFilterError("'start' cannot be after 'end'.")
    if s:
        qs = qs.filter(created_at__gte=s)
    if e:
        qs = qs.filter(created_at__lte=e)
    if account is not None and account != "":
        try:
            account_id = int(account)
        except (TypeError, ValueError):
            raise AnalyticsFilterError("'account' must be an integer.")
        qs = qs.filter(account_id=account_id)
    return qs


def totals(qs):
    # Transfers count the outgoing leg only
    row = qs.aggregate(
        deposits=_sum("amount", type=TransactionType.DEPOSIT),
        withdrawals=_sum(Abs("amount"), type=TransactionType.WITHDRAWAL),
        transfers=_sum(Abs("amount"), type=TransactionType.TRANSFER, amount__lt=0),
    )
    row["net"] = row["deposits"] - row["withdrawals"]
    return row


def balances(user):
    by_account = [
        {"account_id": a["id"], "account": a["name"], "account_type": a["account_type"],
         "balance": a["balance"]}
        for a in Account.objects.filter(user=user).values("id", "name", "account_type", "balance").order_by("name")
    ]
    total = sum((a["balance"] for a in by_account), ZERO)
    return {"total_balance": total, "by_account": by_account}


def monthly(qs):
    rows = (
        qs.annotate(month=TruncMonth("created_at"))
          .values("month")
          .annotate(
              deposits=_sum("amount", type=TransactionType.DEPOSIT),
              withdrawals=_sum(Abs("amount"), type=TransactionType.WITHDRAWAL),
              transfers=_sum(Abs("amount"), type=TransactionType.TRANSFER, amount__lt=0),
          )
          .order_by("month")
    )
    payload = []
    for r in rows:
        m = r["month"]
        payload.append({
            "month": m.date() if hasattr(m, "date") else m,
            "deposits": r["deposits"],
            "withdrawals": r["withdrawals"],
            "transfers": r["transfers"],
            "net": r["deposits"] - r["withdrawals"],
        })
    return payload


def by_category(qs, type_=TransactionType.WITHDRAWAL):
    rows = (
        qs.filter(type=type_)
          .values("category_id", "category__name", "category__icon")
          .annotate(total=Sum(Abs("amount")))
          .order_by("-total", "category__name")
    )
    return [
        {
            "category_id": r["category_id"],
            "category": r["category__name"] or "Uncategorized",
            "icon": r["category__icon"],
            "total": r["total"] or ZERO,
        }
        for r in rows
    ]
