"""Application services (use cases)."""

from .outcome_notifier import OutcomeNotifier
from .run_reporter import RunReporter
from .settlement_service import SettlementService

__all__ = [
    "OutcomeNotifier",
    "RunReporter",
    "SettlementService",
]
