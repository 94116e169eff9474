"""Pydantic schemas for API request/response validation."""

from .settlement import RunSummaryResponseSchema, SettlementErrorSchema
from .error import ErrorResponseSchema

__all__ = [
    "RunSummaryResponseSchema",
    "SettlementErrorSchema",
    "ErrorResponseSchema",
]
