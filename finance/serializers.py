from decimal import Decimal

from rest_framework import serializers
from .models import User, Category, Account, Transaction, TransactionType
from .utils import to_money


class AliasedKeysMixin:
    """Accepts camelCase request keys listed in ``aliases`` next to snake_case ones."""

    aliases = {}

    def to_internal_value(self, data):
        if hasattr(data, "items"):
            data = {self.aliases.get(k, k): v for k, v in data.items()}
        return super().to_internal_value(data)


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'username', 'first_name', 'last_name', 'date_joined']


class RegisterSerializer(AliasedKeysMixin, serializers.ModelSerializer):
    aliases = {"firstName": "first_name", "lastName": "last_name"}

    # declared explicitly so uniqueness is reported once, in validate()
    email = serializers.EmailField()
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ["id", "email", "username", "password", "first_name", "last_name"]

    def validate(self, attrs):
        email = attrs.get("email")
        username = attrs.get("username")
        if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username=username).exists():
            raise serializers.ValidationError("User already exists")
        return attrs

    def create(self, validated_data):
        # Use create_user so the password is hashed
        return User.objects.create_user(
            username=validated_data["username"],
            email=validated_data["email"],
            password=validated_data["password"],
            first_name=validated_data.get("first_name", ""),
            last_name=validated_data.get("last_name", ""),
        )


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'type', 'icon']


class AccountSerializer(serializers.ModelSerializer):
    opening_deposit = serializers.DecimalField(
        max_digits=None, decimal_places=None, min_value=Decimal("0.00"),
        write_only=True, required=False,
    )

    class Meta:
        model = Account
        fields = ['id', 'account_type', 'name', 'balance', 'opening_deposit', 'created_at', 'updated_at']
        read_only_fields = ['balance', 'created_at', 'updated_at']

    def validate_name(self, value):
        user = self.context['request'].user
        qs = Account.objects.filter(user=user, name=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("You already have an account with this name.")
        return value

    def validate_opening_deposit(self, value):
        try:
            return to_money(value)
        except ValueError:
            raise serializers.ValidationError("Invalid amount")

    def update(self, instance, validated_data):
        validated_data.pop('opening_deposit', None)
        return super().update(instance, validated_data)


class AccountSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Account
        fields = ['id', 'account_type', 'name', 'balance']


class TransactionSerializer(serializers.ModelSerializer):
    account = AccountSummarySerializer(read_only=True)
    category = CategorySerializer(read_only=True)

    class Meta:
        model = Transaction
        fields = ['id', 'type', 'amount', 'description', 'account', 'category',
                  'counterpart', 'created_at', 'updated_at']
        read_only_fields = ['id', 'type', 'amount', 'description', 'counterpart', 'created_at', 'updated_at']


class ProfileSerializer(UserSerializer):
    accounts = serializers.SerializerMethodField()
    transactions = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['accounts', 'transactions']

    def get_accounts(self, user):
        return AccountSummarySerializer(user.accounts.all(), many=True).data

    def get_transactions(self, user):
        limit = self.context.get('limit', 10)
        qs = user.transactions.select_related('account', 'category')[:limit]
        return TransactionSerializer(qs, many=True).data


# ---------------------------------------------------------------------
# Ledger request bodies
# ---------------------------------------------------------------------

class LedgerRequestSerializer(AliasedKeysMixin, serializers.Serializer):
    """Accepts both ``accountId`` and ``account_id`` style keys."""

    aliases = {
        'accountId': 'account_id',
        'toAccountId': 'to_account_id',
        'categoryId': 'category_id',
    }

    account_id = serializers.IntegerField()
    # extra decimal places are rounded to cents, not rejected
    amount = serializers.DecimalField(max_digits=None, decimal_places=None)
    description = serializers.CharField(allow_blank=True, required=False, default='')

    def validate_amount(self, value):
        try:
            value = to_money(value)
        except ValueError:
            raise serializers.ValidationError("Invalid amount")
        if value <= 0:
            raise serializers.ValidationError("Invalid amount")
        return value


class ExpenseRequestSerializer(LedgerRequestSerializer):
    category_id = serializers.IntegerField(required=False, allow_null=True)


class TransferRequestSerializer(LedgerRequestSerializer):
    to_account_id = serializers.IntegerField()

    def validate(self, attrs):
        if attrs['account_id'] == attrs['to_account_id']:
            raise serializers.ValidationError("Cannot transfer to the same account")
        return attrs


# ---------------------------------------------------------------------
# Calculator inputs
# ---------------------------------------------------------------------

def _money_field(**kwargs):
    kwargs.setdefault('min_value', Decimal("0"))
    return serializers.DecimalField(max_digits=16, decimal_places=2, **kwargs)


# Percentages and terms are capped so results stay within Decimal precision
def _rate_field(**kwargs):
    kwargs.setdefault('max_value', Decimal("100"))
    return serializers.DecimalField(max_digits=7, decimal_places=4, min_value=Decimal("0"), **kwargs)


def _years_field():
    return serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0.01"), max_value=Decimal("100"),
    )


class SavingsInputSerializer(serializers.Serializer):
    monthly_savings = _money_field()
    years = _years_field()
    annual_rate = _rate_field()


class LoanInputSerializer(serializers.Serializer):
    principal = _money_field(min_value=Decimal("0.01"))
    years = _years_field()
    annual_rate = _rate_field()


class TaxInputSerializer(serializers.Serializer):
    annual_income = _money_field()
    tax_rate = _rate_field()
    deductions = _money_field(required=False, default=Decimal("0"))


class InvestmentInputSerializer(serializers.Serializer):
    initial = _money_field()
    monthly_contribution = _money_field()
    years = _years_field()
    annual_return = _rate_field()


class RetirementInputSerializer(serializers.Serializer):
    current_age = serializers.IntegerField(min_value=0, max_value=120)
    retirement_age = serializers.IntegerField(min_value=1, max_value=120)
    initial = _money_field()
    monthly_contribution = _money_field()
    annual_return = _rate_field()

    def validate(self, attrs):
        if attrs['retirement_age'] <= attrs['current_age']:
            raise serializers.ValidationError(
                {'retirement_age': 'Retirement age must be greater than current age.'}
            )
        return attrs


class MortgageInputSerializer(serializers.Serializer):
    home_price = _money_field(min_value=Decimal("0.01"))
    down_payment = _money_field()
    years = _years_field()
    annual_rate = _rate_field()

    def validate(self, attrs):
        if attrs['down_payment'] >= attrs['home_price']:
            raise serializers.ValidationError(
                {'down_payment': 'Down payment must be less than the home price.'}
            )
        return attrs


CALCULATOR_INPUTS = {
    'savings': SavingsInputSerializer,
    'loan': LoanInputSerializer,
    'tax': TaxInputSerializer,
    'investment': InvestmentInputSerializer,
    'retirement': RetirementInputSerializer,
    'mortgage': MortgageInputSerializer,
}

TRANSACTION_TYPES = [choice for choice, _ in TransactionType.choices]
