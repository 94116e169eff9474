"""Ledger entries, deduction requests and the deduction audit trail."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class ObligationKind(str, Enum):
    LOAN = "loan"
    COMMODITY = "commodity"


class LedgerEntryType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class LedgerSource(str, Enum):
    LOAN_DEDUCTION = "loan_deduction"
    COMMODITY_DEDUCTION = "commodity_deduction"

    @classmethod
    def for_kind(cls, kind: ObligationKind) -> "LedgerSource":
        if kind is ObligationKind.LOAN:
            return cls.LOAN_DEDUCTION
        return cls.COMMODITY_DEDUCTION


class DeductionOutcome(str, Enum):
    """Outcome stored on every DeductionLogRecord."""

    SUCCESS = "success"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    SYSTEM_ERROR = "system_error"


@dataclass(frozen=True)
class LedgerEntry:
    """
    Immutable record of one savings debit.

    amount is negative for debits so a member's entries sum to the
    net change of their balance.
    """

    member_id: str
    amount: int
    source: LedgerSource
    linked_id: str
    period: str
    description: str = ""
    type: LedgerEntryType = LedgerEntryType.DEBIT
    id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True)
class Deduction:
    """
    Everything the ledger store needs to commit one installment atomically.

    expected_counter is the obligation's total_repaid (loans) or
    deductions_remaining (orders) as read by the worker; the store only
    commits if the stored value still matches.
    """

    kind: ObligationKind
    obligation_id: str
    member_id: str
    amount: int
    completes: bool
    expected_counter: int
    period: str
    description: str = ""

    def to_ledger_entry(self) -> LedgerEntry:
        return LedgerEntry(
            member_id=self.member_id,
            amount=-self.amount,
            source=LedgerSource.for_kind(self.kind),
            linked_id=self.obligation_id,
            period=self.period,
            description=self.description,
        )


@dataclass(frozen=True)
class CommitResult:
    """Balances observed inside the committing transaction."""

    entry: LedgerEntry
    balance_before: int
    balance_after: int


@dataclass(frozen=True)
class DeductionLogRecord:
    """Append-only audit record written for every deduction attempt."""

    member_id: str
    linked_id: str
    kind: ObligationKind
    amount: int
    outcome: DeductionOutcome
    period: str
    balance_before: Optional[int] = None
    balance_after: Optional[int] = None
    fully_paid: bool = False
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)
