"""Repository implementations."""

from .admin_directory import PostgresAdminDirectory
from .ledger_store import PostgresLedgerStore
from .notification_sink import PostgresNotificationSink

__all__ = [
    "PostgresAdminDirectory",
    "PostgresLedgerStore",
    "PostgresNotificationSink",
]
