from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from decimal import Decimal


class User(AbstractUser):
  email = models.EmailField(unique=True)

  USERNAME_FIELD = 'email'
  REQUIRED_FIELDS = ['username']


class TransactionType(models.TextChoices):
  DEPOSIT = 'DEPOSIT', 'Deposit'
  WITHDRAWAL = 'WITHDRAWAL', 'Withdrawal'
  TRANSFER = 'TRANSFER', 'Transfer'


class AccountType(models.TextChoices):
  CHECKING = 'CHECKING', 'Checking'
  SAVINGS = 'SAVINGS', 'Savings'
  INVESTMENT = 'INVESTMENT', 'Investment'


class Category(models.Model):
  name = models.CharField(max_length=64)
  type = models.CharField(max_length=16, choices=TransactionType.choices)
  icon = models.CharField(max_length=16, blank=True, default='')

  class Meta:
    verbose_name_plural = 'categories'
    ordering = ['type', 'name']
    constraints = [
      models.UniqueConstraint(fields=['name', 'type'], name='unique_category_name_per_type')
    ]

  def __str__(self):
    return f"{self.name} ({self.type})"


class Account(models.Model):
  user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='accounts')
  account_type = models.CharField(max_length=16, choices=AccountType.choices, default=AccountType.CHECKING)
  name = models.CharField(max_length=64)
  balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
  created_at = models.DateTimeField(auto_now_add=True)
  updated_at = models.DateTimeField(auto_now=True)

  class Meta:
    ordering = ['id']
    constraints = [
      models.UniqueConstraint(fields=['user', 'name'], name='unique_account_name_per_user')
    ]

  def __str__(self):
    return f"{self.name} [{self.account_type}]"


class Transaction(models.Model):
  """One ledger leg. Credits are positive, debits negative.

  Rows are written only by ``finance.services`` so the balance of an account
  always equals the sum of its legs plus whatever it was opened with.
  """
  user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='transactions')
  account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name='transactions')
  category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='transactions')
  type = models.CharField(max_length=16, choices=TransactionType.choices)
  amount = models.DecimalField(max_digits=12, decimal_places=2)
  description = models.TextField(blank=True, default='')
  counterpart = models.ForeignKey(
    'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
  )
  created_at = models.DateTimeField(auto_now_add=True, db_index=True)
  updated_at = models.DateTimeField(auto_now=True)

  class Meta:
    ordering = ['-created_at', '-id']
    constraints = [
      models.CheckConstraint(condition=~Q(amount=0), name='transaction_amount_not_zero'),
    ]

  def __str__(self):
    return f"{self.type} {self.amount} - {self.description}"

  @property
  def is_credit(self):
    return self.amount > 0
