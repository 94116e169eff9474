"""
Deduction calculation for the monthly settlement.
"""

from .calculator import (
    DeductionQuote,
    base_installment,
    quote_loan,
    quote_order,
)
from .money import format_amount
from .period import current_period, settlement_period

__all__ = [
    "DeductionQuote",
    "base_installment",
    "quote_loan",
    "quote_order",
    "format_amount",
    "current_period",
    "settlement_period",
]
