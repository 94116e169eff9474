"""Data transfer objects for settlement runs."""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class SettlementErrorDTO:
    """One failed obligation in a run."""

    kind: str
    obligation_id: str
    member_id: str
    reason: str
    error: Optional[str]


@dataclass(frozen=True)
class RunSummaryResponse:
    """Result of a settlement run."""

    period: str
    loans_processed: int
    loans_failed: int
    loans_skipped: int
    commodities_processed: int
    commodities_failed: int
    commodities_skipped: int
    deferred: int
    total_deducted: int
    errors: List[SettlementErrorDTO]

    @classmethod
    def from_entity(cls, summary) -> "RunSummaryResponse":
        return cls(
            period=summary.period,
            loans_processed=summary.loans_processed,
            loans_failed=summary.loans_failed,
            loans_skipped=summary.loans_skipped,
            commodities_processed=summary.commodities_processed,
            commodities_failed=summary.commodities_failed,
            commodities_skipped=summary.commodities_skipped,
            deferred=summary.deferred,
            total_deducted=summary.total_deducted,
            errors=[
                SettlementErrorDTO(
                    kind=e.kind.value,
                    obligation_id=e.obligation_id,
                    member_id=e.member_id,
                    reason=e.reason.value,
                    error=e.error,
                )
                for e in summary.errors
            ],
        )
