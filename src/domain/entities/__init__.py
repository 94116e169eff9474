"""Domain Entities - Core business objects."""

from .commodity_order import CommodityOrder, CommodityOrderStatus
from .ledger import (
    CommitResult,
    Deduction,
    DeductionLogRecord,
    DeductionOutcome,
    LedgerEntry,
    LedgerEntryType,
    LedgerSource,
    ObligationKind,
)
from .loan import Loan, LoanStatus
from .notification import AlertType, NotificationPriority, NotificationType
from .savings import SavingsAccount
from .settlement import ItemOutcome, RunSummary, SettlementError

__all__ = [
    "AlertType",
    "CommitResult",
    "CommodityOrder",
    "CommodityOrderStatus",
    "Deduction",
    "DeductionLogRecord",
    "DeductionOutcome",
    "ItemOutcome",
    "LedgerEntry",
    "LedgerEntryType",
    "LedgerSource",
    "Loan",
    "LoanStatus",
    "NotificationPriority",
    "NotificationType",
    "ObligationKind",
    "RunSummary",
    "SavingsAccount",
    "SettlementError",
]
