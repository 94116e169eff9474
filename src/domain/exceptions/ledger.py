"""Ledger and obligation domain exceptions."""

from .base import DomainException


class SavingsAccountNotFoundException(DomainException):
    """Raised when a member has no savings account."""

    def __init__(self, member_id: str):
        super().__init__(
            message=f"No savings account found for member {member_id}",
            code="SAVINGS_ACCOUNT_NOT_FOUND",
        )
        self.member_id = member_id


class InsufficientBalanceException(DomainException):
    """Raised when a debit would drive a savings balance below zero."""

    def __init__(self, member_id: str, required: int, available: int):
        super().__init__(
            message=(
                f"Insufficient balance for member {member_id}: "
                f"required {required}, available {available}"
            ),
            code="INSUFFICIENT_BALANCE",
        )
        self.member_id = member_id
        self.required = required
        self.available = available


class DeductionAbortedException(DomainException):
    """Raised when an atomic deduction lost a concurrent update and was rolled back."""

    def __init__(self, obligation_id: str, reason: str):
        super().__init__(
            message=f"Deduction for {obligation_id} aborted: {reason}",
            code="DEDUCTION_ABORTED",
        )
        self.obligation_id = obligation_id
        self.reason = reason


class InvalidObligationException(DomainException):
    """Raised when an obligation's stored values cannot produce a valid deduction."""

    def __init__(self, obligation_id: str, message: str):
        super().__init__(
            message=f"Invalid obligation {obligation_id}: {message}",
            code="INVALID_OBLIGATION",
        )
        self.obligation_id = obligation_id


class UnknownObligationStatusException(DomainException):
    """Raised when a stored status string is not part of the lifecycle."""

    def __init__(self, kind: str, status: str):
        super().__init__(
            message=f"Unknown {kind} status: {status!r}",
            code="UNKNOWN_OBLIGATION_STATUS",
        )
        self.kind = kind
        self.status = status
