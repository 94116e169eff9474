"""External API client implementations."""

from .admin_alert_client import HttpAdminAlertClient

__all__ = [
    "HttpAdminAlertClient",
]
