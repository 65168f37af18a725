from calendar import monthrange
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.utils import timezone

from .models import Category, TransactionType

CENT = Decimal("0.01")
# Transaction.amount holds 12 digits, 2 of them after the point
MAX_AMOUNT = Decimal("1e10")

SYSTEM_CATEGORIES = {
  TransactionType.DEPOSIT: ("Deposit", "↓"),
  TransactionType.WITHDRAWAL: ("Withdrawal", "↑"),
  TransactionType.TRANSFER: ("Transfer", "⇄"),
}


def get_system_category(type_):
  # One shared default category per transaction type
  name, icon = SYSTEM_CATEGORIES[type_]
  cat, _ = Category.objects.get_or_create(name=name, type=type_, defaults={"icon": icon})
  return cat


def to_money(value):
  """Parse ``value`` into a cent-quantized Decimal, or raise ValueError."""
  if value is None or isinstance(value, bool):
    raise ValueError("amount is required")
  try:
    amount = Decimal(str(value).strip())
    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
      raise ValueError(f"invalid amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
  except InvalidOperation:
    raise ValueError(f"invalid amount: {value!r}")


# ---------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------

def parse_start(s: str) -> date:
  parts = s.split("-")
  y, m = int(parts[0]), int(parts[1])
  d = int(parts[2]) if len(parts) > 2 else 1
  return date(y, m, d)


def parse_end(s: str) -> date:
  parts = s.split("-")
  y, m = int(parts[0]), int(parts[1])
  if len(parts) > 2:
    d = int(parts[2])
  else:
    d = monthrange(y, m)[1]
  return date(y, m, d)


def day_start(dt_date: date):
  dt = datetime.combine(dt_date, time.min)
  if timezone.is_naive(dt):
    return timezone.make_aware(dt, timezone.get_current_timezone())
  return dt


def day_end(dt_date: date):
  dt = datetime.combine(dt_date, time.max)
  if timezone.is_naive(dt):
    return timezone.make_aware(dt, timezone.get_current_timezone())
  return dt


def current_month_bounds(today=None):
  today = today or timezone.localdate()
  last_day = monthrange(today.year, today.month)[1]
  return (
    f"{today.year:04d}-{today.month:02d}-01",
    f"{today.year:04d}-{today.month:02d}-{last_day:02d}",
  )
