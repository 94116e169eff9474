"""Settlement run exceptions."""

from .base import DomainException


class SettlementEnumerationException(DomainException):
    """Raised when eligible loans or orders cannot be listed. Fatal for the run."""

    def __init__(self, collection: str, cause: Exception):
        super().__init__(
            message=f"Failed to list eligible {collection}: {cause}",
            code="SETTLEMENT_ENUMERATION_FAILED",
        )
        self.collection = collection
        self.cause = cause
