"""Savings account entity."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SavingsAccount:
    """
    A member's savings balance in minor currency units.

    Snapshots only: the stored balance is changed exclusively through
    the ledger store's conditional debit, never from this value.
    """

    member_id: str
    balance: int
    updated_at: Optional[datetime] = None

    def can_cover(self, amount: int) -> bool:
        return self.balance >= amount
