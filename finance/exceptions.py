import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class LedgerError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Ledger operation rejected."
    default_code = "ledger_error"


class InsufficientFunds(LedgerError):
    default_detail = "Insufficient funds"
    default_code = "insufficient_funds"


class SameAccountTransfer(LedgerError):
    default_detail = "Cannot transfer to the same account"
    default_code = "same_account"


class InvalidAmount(LedgerError):
    default_detail = "Invalid amount"
    default_code = "invalid_amount"


class InvalidCategory(LedgerError):
    default_detail = "Invalid expense category"
    default_code = "invalid_category"


class InvalidAccount(LedgerError):
    default_detail = "Invalid account ID"
    default_code = "invalid_account"


class AccountNotFound(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Account not found"
    default_code = "account_not_found"


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    """DRF handler that also understands Django errors and adds ``error``.

    Every error body carries a single top-level ``error`` string next to
    DRF's usual ``detail`` / field keys.
    """
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        exc = ValidationError(detail=detail)
    elif isinstance(exc, ProtectedError):
        return Response(
            {"error": "Resource is still referenced.", "detail": "Resource is still referenced."},
            status=status.HTTP_409_CONFLICT,
        )

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error("Unhandled error in %s", view.__class__.__name__ if view else "?", exc_info=exc)
        return None

    if isinstance(response.data, dict):
        if "error" not in response.data:
            response.data = {"error": _first_message(response.data), **response.data}
    else:
        response.data = {"error": _first_message(response.data), "detail": response.data}
    return response
