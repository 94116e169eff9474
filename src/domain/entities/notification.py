"""Notification types sent to members and administrators."""

from enum import Enum


class NotificationType(str, Enum):
    DEDUCTION_SUCCESS = "deduction_success"
    PAYMENT_COMPLETED = "payment_completed"
    DEDUCTION_FAILED = "deduction_failed"
    ADMIN_REPORT = "admin_report"
    SYSTEM_ALERT = "system_alert"


class NotificationPriority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class AlertType(str, Enum):
    """Alert types sent through the administrative alert sink."""

    SETTLEMENT_RUN_FAILED = "SETTLEMENT_RUN_FAILED"
    LARGE_DEDUCTION = "LARGE_DEDUCTION"
