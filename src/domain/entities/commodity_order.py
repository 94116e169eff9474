"""Commodity (marketplace credit) order entity."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from src.domain.exceptions import InvalidObligationException


class CommodityOrderStatus(str, Enum):
    """Order states visible to settlement. Pending/rejected orders never get here."""

    APPROVED = "approved"
    DELIVERED = "delivered"

    def ensure_deductible(self, order_id: str) -> None:
        """Raise unless an installment may be taken in this status."""
        if self is not CommodityOrderStatus.APPROVED:
            raise InvalidObligationException(order_id, f"order is {self.value}, not approved")

    def after_deduction(self, order_id: str, completes: bool) -> "CommodityOrderStatus":
        """Status an order moves to once an installment is committed."""
        if self is CommodityOrderStatus.APPROVED:
            return CommodityOrderStatus.DELIVERED if completes else CommodityOrderStatus.APPROVED
        if self is CommodityOrderStatus.DELIVERED:
            raise InvalidObligationException(order_id, "order is already delivered")
        raise InvalidObligationException(order_id, f"unhandled status {self.value}")


@dataclass(frozen=True)
class CommodityOrder:
    """A marketplace order paid off in a fixed number of monthly deductions."""

    id: str
    member_id: str
    status: CommodityOrderStatus
    monthly_payment: int
    deductions_paid: int
    deductions_remaining: int
    total_amount: int
    product_name: str = ""
    last_settled_period: Optional[str] = None
    last_deduction_at: Optional[datetime] = None

    @property
    def is_settled(self) -> bool:
        return self.deductions_remaining <= 0

    def settled_for(self, period: str) -> bool:
        return self.last_settled_period == period
