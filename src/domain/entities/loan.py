"""Loan entity and its repayment lifecycle."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from src.domain.exceptions import InvalidObligationException


class LoanStatus(str, Enum):
    """Loan states visible to settlement. Earlier states live upstream."""

    APPROVED = "approved"
    FULLY_PAID = "fully_paid"

    def ensure_deductible(self, loan_id: str) -> None:
        """Raise unless an installment may be taken in this status."""
        if self is not LoanStatus.APPROVED:
            raise InvalidObligationException(loan_id, f"loan is {self.value}, not approved")

    def after_deduction(self, loan_id: str, completes: bool) -> "LoanStatus":
        """Status a loan moves to once an installment is committed."""
        if self is LoanStatus.APPROVED:
            return LoanStatus.FULLY_PAID if completes else LoanStatus.APPROVED
        if self is LoanStatus.FULLY_PAID:
            raise InvalidObligationException(loan_id, "loan is already fully paid")
        raise InvalidObligationException(loan_id, f"unhandled status {self.value}")


@dataclass(frozen=True)
class Loan:
    """
    An approved member loan repaid by monthly savings deductions.

    Attributes:
        total_amount: Principal plus interest to be repaid
        total_repaid: Amount repaid so far, never above total_amount
        monthly_payment: Agreed installment; derived from duration if absent
        duration: Number of monthly installments
        last_settled_period: "YYYY-MM" of the last run that deducted from it
    """

    id: str
    member_id: str
    status: LoanStatus
    total_amount: int
    total_repaid: int
    duration: int
    monthly_payment: Optional[int] = None
    loan_type: str = ""
    last_settled_period: Optional[str] = None
    last_deduction_at: Optional[datetime] = None

    @property
    def remaining(self) -> int:
        return max(self.total_amount - self.total_repaid, 0)

    @property
    def is_settled(self) -> bool:
        return self.total_repaid >= self.total_amount

    def settled_for(self, period: str) -> bool:
        return self.last_settled_period == period
