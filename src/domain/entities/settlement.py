"""Settlement run outcome and summary."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .ledger import ObligationKind


class ItemOutcome(str, Enum):
    """Terminal classification of one obligation in one run."""

    SUCCESS = "success"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    SYSTEM_ERROR = "system_error"
    SKIPPED = "skipped"
    DEFERRED = "deferred"


@dataclass(frozen=True)
class SettlementError:
    """A failed item as listed in the run summary."""

    kind: ObligationKind
    obligation_id: str
    member_id: str
    reason: ItemOutcome
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "obligation_id": self.obligation_id,
            "member_id": self.member_id,
            "reason": self.reason.value,
            "error": self.error,
        }


@dataclass
class RunSummary:
    """
    Running tally of one settlement run.

    Created when the run starts, filled in by the worker and handed to
    the run reporter at the end.
    """

    period: str
    loans_processed: int = 0
    loans_failed: int = 0
    loans_skipped: int = 0
    commodities_processed: int = 0
    commodities_failed: int = 0
    commodities_skipped: int = 0
    deferred: int = 0
    total_deducted: int = 0
    errors: List[SettlementError] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    def record(
        self,
        kind: ObligationKind,
        outcome: ItemOutcome,
        member_id: str,
        obligation_id: str,
        amount: int = 0,
        error: Optional[str] = None,
    ) -> None:
        """Fold one item outcome into the tally."""
        is_loan = kind is ObligationKind.LOAN

        if outcome is ItemOutcome.SUCCESS:
            if is_loan:
                self.loans_processed += 1
            else:
                self.commodities_processed += 1
            self.total_deducted += amount
        elif outcome is ItemOutcome.SKIPPED:
            if is_loan:
                self.loans_skipped += 1
            else:
                self.commodities_skipped += 1
        elif outcome is ItemOutcome.DEFERRED:
            self.deferred += 1
        else:
            if is_loan:
                self.loans_failed += 1
            else:
                self.commodities_failed += 1
            self.errors.append(
                SettlementError(
                    kind=kind,
                    obligation_id=obligation_id,
                    member_id=member_id,
                    reason=outcome,
                    error=error,
                )
            )

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "loans_processed": self.loans_processed,
            "loans_failed": self.loans_failed,
            "loans_skipped": self.loans_skipped,
            "commodities_processed": self.commodities_processed,
            "commodities_failed": self.commodities_failed,
            "commodities_skipped": self.commodities_skipped,
            "deferred": self.deferred,
            "total_deducted": self.total_deducted,
            "errors": [e.to_dict() for e in self.errors],
        }
