"""Data Transfer Objects for application layer."""

from .settlement import RunSummaryResponse, SettlementErrorDTO

__all__ = [
    "RunSummaryResponse",
    "SettlementErrorDTO",
]
