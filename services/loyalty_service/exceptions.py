"""Validation errors raised by the BBM Bucks ledger."""

from fastapi import status
from libs.common.errors import DomainValidationError


class InvalidAmountError(DomainValidationError):
    code = "invalid_amount"


class MinimumRedemptionError(DomainValidationError):
    code = "minimum_redemption"


class InsufficientBalanceError(DomainValidationError):
    code = "insufficient_balance"
    http_status = status.HTTP_402_PAYMENT_REQUIRED


class RedemptionNotAllowedError(DomainValidationError):
    code = "redemption_not_allowed"


class RedemptionConflictError(DomainValidationError):
    code = "redemption_conflict"
    http_status = status.HTTP_409_CONFLICT
