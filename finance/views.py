import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from rest_framework import viewsets, permissions, status, generics
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError

from . import analytics, calculators, services
from .models import Account, AccountType, Category, Transaction
from .serializers import (
    AccountSerializer,
    AccountSummarySerializer,
    CategorySerializer,
    ExpenseRequestSerializer,
    LedgerRequestSerializer,
    ProfileSerializer,
    RegisterSerializer,
    TransactionSerializer,
    TransferRequestSerializer,
    UserSerializer,
    CALCULATOR_INPUTS,
    TRANSACTION_TYPES,
)
from .utils import current_month_bounds
from drf_spectacular.utils import (
    extend_schema, extend_schema_view,
    OpenApiParameter,
)

logger = logging.getLogger(__name__)

FILTER_PARAMS = [
    OpenApiParameter("start", str, OpenApiParameter.QUERY),
    OpenApiParameter("end", str, OpenApiParameter.QUERY),
    OpenApiParameter("account", int, OpenApiParameter.QUERY),
]


def _recent_limit():
    return getattr(settings, "RECENT_TRANSACTIONS_LIMIT", 10)


# ---------------------------------------------------------------------
# Auth views
# ---------------------------------------------------------------------

User = get_user_model()


class RegisterView(generics.CreateAPIView):
    queryset = User.objects.all()
    serializer_class = RegisterSerializer
    permission_classes = [permissions.AllowAny]

    @extend_schema(tags=["Auth"])
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # user, default accounts and opening deposits land together
        with transaction.atomic():
            user = serializer.save()
            accounts = [
                services.open_account(
                    user, AccountType.CHECKING, "Main Checking",
                    opening_deposit=settings.OPENING_CHECKING_DEPOSIT,
                    description="Initial deposit",
                ),
                services.open_account(
                    user, AccountType.SAVINGS, "Savings Account",
                    opening_deposit=settings.OPENING_SAVINGS_DEPOSIT,
                    description="Initial savings",
                ),
            ]
        logger.info("Registered user %s", user.pk)

        refresh = RefreshToken.for_user(user)
        data = {
            "user": UserSerializer(user).data,
            "accounts": AccountSummarySerializer(accounts, many=True).data,
            "tokens": {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            },
        }
        headers = self.get_success_headers(serializer.data)
        return Response(data, status=status.HTTP_201_CREATED, headers=headers)


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        request={"application/json": {"type": "object", "properties": {"refresh": {"type": "string"}}}},
        responses={205: None, 400: dict},
        tags=["Auth"],
    )
    def post(self, request):
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            return Response({"error": "Missing refresh token."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            token = RefreshToken(refresh_token)
            token.blacklist()
            return Response({"detail": "Logout successful"}, status=status.HTTP_205_RESET_CONTENT)
        except TokenError:
            return Response({"error": "Invalid token"}, status=status.HTTP_400_BAD_REQUEST)


class UserView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: ProfileSerializer}, tags=["User"])
    def get(self, request):
        serializer = ProfileSerializer(request.user, context={"limit": _recent_limit()})
        return Response(serializer.data)


# ---------------------------------------------------------------------
# Base mixin
# ---------------------------------------------------------------------

class OwnedQuerysetMixin:
    def get_queryset(self):
        qs = super().get_queryset()
        return qs.filter(user=self.request.user)


# ---------------------------------------------------------------------
# Category / Account viewsets
# ---------------------------------------------------------------------

@extend_schema_view(
    list=extend_schema(
        tags=["Categories"],
        parameters=[OpenApiParameter("type", str, OpenApiParameter.QUERY, enum=TRANSACTION_TYPES)],
    ),
    retrieve=extend_schema(tags=["Categories"]),
)
class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = super().get_queryset()
        type_ = self.request.query_params.get("type")
        if type_:
            qs = qs.filter(type=type_.upper())
        return qs


@extend_schema_view(
    list=extend_schema(tags=["Accounts"]),
    retrieve=extend_schema(tags=["Accounts"]),
    create=extend_schema(tags=["Accounts"]),
    update=extend_schema(tags=["Accounts"]),
    partial_update=extend_schema(tags=["Accounts"]),
    destroy=extend_schema(tags=["Accounts"]),
)
class AccountViewSet(OwnedQuerysetMixin, viewsets.ModelViewSet):
    queryset = Account.objects.all()
    serializer_class = AccountSerializer
    permission_classes = [permissions.IsAuthenticated]

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = services.open_account(
            self.request.user,
            data.get("account_type", AccountType.CHECKING),
            data["name"],
            opening_deposit=data.get("opening_deposit"),
        )

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        if instance.transactions.exists():
            return Response(
                {"error": "Account has transactions and cannot be deleted."},
                status=status.HTTP_409_CONFLICT,
            )
        instance.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------
# Transaction viewset
# ---------------------------------------------------------------------

@extend_schema_view(
    list=extend_schema(
        tags=["Transactions"],
        parameters=FILTER_PARAMS + [
            OpenApiParameter("type", str, OpenApiParameter.QUERY, enum=TRANSACTION_TYPES),
            OpenApiParameter("limit", int, OpenApiParameter.QUERY),
        ],
    ),
    retrieve=extend_schema(tags=["Transactions"]),
)
class TransactionViewSet(OwnedQuerysetMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Transaction.objects.select_related("account", "category")
    serializer_class = TransactionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def list(self, request, *args, **kwargs):
        params = request.query_params
        try:
            qs = analytics.filtered_transactions(
                request.user, params.get("start"), params.get("end"), params.get("account"),
            ).select_related("account", "category")
        except analytics.AnalyticsFilterError as exc:
            return Response({"error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        type_ = params.get("type")
        if type_:
            qs = qs.filter(type=type_.upper())

        limit = params.get("limit")
        try:
            limit = int(limit) if limit else _recent_limit()
        except ValueError:
            return Response({"error": "'limit' must be an integer."}, status=status.HTTP_400_BAD_REQUEST)
        limit = max(1, min(limit, 100))

        return Response(self.get_serializer(qs[:limit], many=True).data)

    def _created(self, txn):
        txn = self.get_queryset().get(pk=txn.pk)
        return Response(self.get_serializer(txn).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=LedgerRequestSerializer, responses={201: TransactionSerializer}, tags=["Transactions"])
    @action(detail=False, methods=["post"])
    def deposit(self, request):
        body = LedgerRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        d = body.validated_data
        txn = services.deposit(request.user, d["account_id"], d["amount"], d["description"])
        return self._created(txn)

    @extend_schema(request=LedgerRequestSerializer, responses={201: TransactionSerializer}, tags=["Transactions"])
    @action(detail=False, methods=["post"])
    def withdraw(self, request):
        body = LedgerRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        d = body.validated_data
        txn = services.withdraw(request.user, d["account_id"], d["amount"], d["description"])
        return self._created(txn)

    @extend_schema(request=ExpenseRequestSerializer, responses={201: TransactionSerializer}, tags=["Transactions"])
    @action(detail=False, methods=["post"])
    def expense(self, request):
        body = ExpenseRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        d = body.validated_data
        txn = services.record_expense(
            request.user, d["account_id"], d["amount"], d["description"], d.get("category_id"),
        )
        return self._created(txn)

    @extend_schema(request=TransferRequestSerializer, responses={201: TransactionSerializer}, tags=["Transactions"])
    @action(detail=False, methods=["post"])
    def transfer(self, request):
        body = TransferRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        d = body.validated_data
        txn = services.transfer(
            request.user, d["account_id"], d["to_account_id"], d["amount"], d["description"],
        )
        return self._created(txn)


# ---------------------------------------------------------------------
# Analytics (dashboard) endpoints
# ---------------------------------------------------------------------

class AnalyticsViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def _filtered(self, request, default_to_month=False):
        start = request.query_params.get("start")
        end = request.query_params.get("end")
        if default_to_month and not start and not end:
            start, end = current_month_bounds()
        qs = analytics.filtered_transactions(request.user, start, end, request.query_params.get("account"))
        return qs, start, end

    def _bad_request(self, exc):
        return Response({"error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    @extend_schema(parameters=FILTER_PARAMS, responses={200: dict}, tags=["Analytics"])
    @action(detail=False, methods=["get"])
    def summary(self, request):
        try:
            qs, start, end = self._filtered(request, default_to_month=True)
        except analytics.AnalyticsFilterError as exc:
            return self._bad_request(exc)

        account = request.query_params.get("account")
        payload = {
            "period": {
                "start": start or None,
                "end": end or None,
                "account": int(account) if account else None,
            },
            "totals": analytics.totals(qs),
            "balances": analytics.balances(request.user),
        }
        return Response(payload)

    @extend_schema(parameters=FILTER_PARAMS, responses={200: list[dict]}, tags=["Analytics"])
    @action(detail=False, methods=["get"])
    def monthly(self, request):
        try:
            qs, _, _ = self._filtered(request)
        except analytics.AnalyticsFilterError as exc:
            return self._bad_request(exc)
        return Response(analytics.monthly(qs))

    @extend_schema(
        parameters=FILTER_PARAMS + [
            OpenApiParameter("type", str, OpenApiParameter.QUERY, enum=TRANSACTION_TYPES),
        ],
        responses={200: list[dict]},
        tags=["Analytics"],
    )
    @action(detail=False, methods=["get"])
    def categories(self, request):
        try:
            qs, _, _ = self._filtered(request)
        except analytics.AnalyticsFilterError as exc:
            return self._bad_request(exc)
        type_ = (request.query_params.get("type") or "WITHDRAWAL").upper()
        if type_ not in TRANSACTION_TYPES:
            return self._bad_request(f"'type' must be one of {', '.join(TRANSACTION_TYPES)}.")
        return Response(analytics.by_category(qs, type_))


# ---------------------------------------------------------------------
# Calculators
# ---------------------------------------------------------------------

class CalculatorView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=dict, responses={200: dict}, tags=["Calculators"])
    def post(self, request, kind):
        input_serializer = CALCULATOR_INPUTS.get(kind)
        if input_serializer is None:
            raise NotFound(f"Unknown calculator '{kind}'.")
        serializer = input_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = calculators.CALCULATORS[kind](**serializer.validated_data)
        except ArithmeticError:
            logger.info("Calculator %s overflowed for inputs %s", kind, serializer.data)
            return Response(
                {"error": "Inputs produce a result too large to compute."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response({"calculator": kind, "inputs": serializer.data, "result": result})
