"""Database infrastructure."""

from .connection import DatabaseSessionManager, db_manager
from .models import (
    Base,
    CommodityOrderModel,
    DeductionLogModel,
    LedgerEntryModel,
    LoanModel,
    NotificationModel,
    SavingsAccountModel,
    UserModel,
)

__all__ = [
    "DatabaseSessionManager",
    "db_manager",
    "Base",
    "CommodityOrderModel",
    "DeductionLogModel",
    "LedgerEntryModel",
    "LoanModel",
    "NotificationModel",
    "SavingsAccountModel",
    "UserModel",
]
