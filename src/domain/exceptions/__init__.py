"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .ledger import (
    DeductionAbortedException,
    InsufficientBalanceException,
    InvalidObligationException,
    SavingsAccountNotFoundException,
    UnknownObligationStatusException,
)
from .settlement import SettlementEnumerationException

__all__ = [
    "DomainException",
    "DeductionAbortedException",
    "InsufficientBalanceException",
    "InvalidObligationException",
    "SavingsAccountNotFoundException",
    "UnknownObligationStatusException",
    "SettlementEnumerationException",
]
