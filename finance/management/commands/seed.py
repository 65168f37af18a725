from decimal import Decimal

from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.db import transaction

from finance import services
from finance.models import Account, AccountType, Category, TransactionType

User = get_user_model()

DEFAULT_CATEGORIES = [
    # Income
    ("Salary", TransactionType.DEPOSIT, "💰"),
    ("Freelance", TransactionType.DEPOSIT, "💻"),
    ("Investments", TransactionType.DEPOSIT, "📈"),
    ("Gifts", TransactionType.DEPOSIT, "🎁"),
    # Expenses
    ("Groceries", TransactionType.WITHDRAWAL, "🛒"),
    ("Rent", TransactionType.WITHDRAWAL, "🏠"),
    ("Utilities", TransactionType.WITHDRAWAL, "💡"),
    ("Transportation", TransactionType.WITHDRAWAL, "🚗"),
    ("Entertainment", TransactionType.WITHDRAWAL, "🎬"),
    ("Healthcare", TransactionType.WITHDRAWAL, "🏥"),
    ("Shopping", TransactionType.WITHDRAWAL, "🛍️"),
    ("Dining", TransactionType.WITHDRAWAL, "🍽️"),
    # Transfers
    ("Account Transfer", TransactionType.TRANSFER, "🔄"),
]


class Command(BaseCommand):
    help = "Seed the database with default categories and a demo user"

    def add_arguments(self, parser):
        parser.add_argument("--email", default="test@example.com")
        parser.add_argument("--username", default="testuser")
        parser.add_argument("--password", default="password123")

    @transaction.atomic
    def handle(self, *args, **options):
        categories = {}
        for name, type_, icon in DEFAULT_CATEGORIES:
            cat, _ = Category.objects.get_or_create(name=name, type=type_, defaults={"icon": icon})
            categories[name] = cat
        self.stdout.write(f"{len(categories)} categories ready")

        user, created = User.objects.get_or_create(
            email=options["email"],
            defaults={"username": options["username"], "first_name": "Test", "last_name": "User"},
        )
        if created:
            user.set_password(options["password"])
            user.save(update_fields=["password"])

        if Account.objects.filter(user=user).exists():
            self.stdout.write(self.style.WARNING(f"{user.email} already has accounts, skipping sample data"))
            return

        accounts = {
            type_: services.open_account(
                user, type_, f"My {type_.lower()} account", opening_deposit=Decimal("1000.00"),
            )
            for type_ in (AccountType.CHECKING, AccountType.SAVINGS, AccountType.INVESTMENT)
        }

        checking = accounts[AccountType.CHECKING]
        services.deposit(user, checking.pk, Decimal("2500.00"), "Monthly salary", category=categories["Salary"])
        services.withdraw(user, checking.pk, Decimal("800.00"), "Monthly rent", category=categories["Rent"])
        services.withdraw(user, checking.pk, Decimal("100.00"), "Weekly groceries", category=categories["Groceries"])

        self.stdout.write(self.style.SUCCESS(f"Database seeded for {user.email} ✅"))
