"""Outbound sink interfaces."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from src.domain.entities import AlertType, NotificationPriority, NotificationType


class NotificationSink(ABC):
    """
    Abstract sink for in-app notifications.

    Delivery mechanics (push, email) are handled downstream.
    """

    @abstractmethod
    async def send(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> None:
        """
        Record a notification for a user.

        Args:
            user_id: Recipient (member id or admin user id)
            type: Notification type
            title: Short title
            message: Body text
            priority: Display priority
        """
        ...


class AdminAlertSink(ABC):
    """
    Abstract sink for administrative alerts.

    Used for fatal settlement failures and large deductions.
    """

    @abstractmethod
    async def send(self, alert_type: AlertType, payload: Dict[str, Any]) -> bool:
        """
        Deliver an administrative alert.

        Args:
            alert_type: The alert type
            payload: JSON-serialisable alert details

        Returns:
            True if the alert was delivered successfully

        Note:
            Implementations should handle retries with backoff.
        """
        ...
