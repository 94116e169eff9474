"""
Domain Interfaces (Ports)
"""

from .repositories import AdminDirectory, LedgerStore
from .clients import AdminAlertSink, NotificationSink

__all__ = [
    "AdminDirectory",
    "LedgerStore",
    "AdminAlertSink",
    "NotificationSink",
]
