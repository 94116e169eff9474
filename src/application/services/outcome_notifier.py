"""Outcome notifier - turns per-item settlement outcomes into notifications."""

import structlog

from src.core.config import settings
from src.domain.entities import (
    AlertType,
    NotificationPriority,
    NotificationType,
    ObligationKind,
)
from src.domain.interfaces import AdminAlertSink, NotificationSink
from src.service.deductions import format_amount

logger = structlog.get_logger(__name__)


def _label(kind: ObligationKind) -> str:
    return "loan" if kind is ObligationKind.LOAN else "commodity order"


class OutcomeNotifier:
    """
    Notifies members about their deductions.

    Every method swallows and logs sink failures so that a broken
    notification path never affects settlement.
    """

    def __init__(
        self,
        notification_sink: NotificationSink,
        alert_sink: AdminAlertSink | None = None,
        large_deduction_threshold: int | None = None,
    ):
        self._sink = notification_sink
        self._alert_sink = alert_sink
        self._large_threshold = (
            large_deduction_threshold
            if large_deduction_threshold is not None
            else settings.large_deduction_alert_threshold
        )

    async def deduction_succeeded(
        self,
        kind: ObligationKind,
        member_id: str,
        obligation_id: str,
        amount: int,
        completed: bool,
    ) -> None:
        """Send deduction_success, or payment_completed for the final installment."""
        amount_text = format_amount(amount)

        if completed:
            notification_type = NotificationType.PAYMENT_COMPLETED
            title = "Payment Completed"
            message = (
                f"Congratulations! You've completed all payments for your "
                f"{_label(kind)}. {amount_text} has been deducted from your savings."
            )
        else:
            notification_type = NotificationType.DEDUCTION_SUCCESS
            title = "Monthly Deduction Processed"
            message = (
                f"{amount_text} has been deducted from your savings for your "
                f"monthly {kind.value} payment."
            )

        await self._send(member_id, notification_type, title, message, NotificationPriority.NORMAL)

        if self._alert_sink is not None and amount >= self._large_threshold:
            try:
                await self._alert_sink.send(
                    AlertType.LARGE_DEDUCTION,
                    {
                        "member_id": member_id,
                        "obligation_id": obligation_id,
                        "kind": kind.value,
                        "amount": amount,
                    },
                )
            except Exception as e:
                logger.error(
                    "large_deduction_alert_failed",
                    member_id=member_id,
                    obligation_id=obligation_id,
                    error=str(e),
                )

    async def deduction_failed(
        self,
        kind: ObligationKind,
        member_id: str,
        required: int,
        available: int,
    ) -> None:
        """Send a high-priority deduction_failed with the shortfall."""
        message = (
            f"Your monthly {kind.value} payment of {format_amount(required)} could not "
            f"be processed. Your current balance is {format_amount(available)}. "
            f"Please top up your savings to avoid penalties."
        )
        await self._send(
            member_id,
            NotificationType.DEDUCTION_FAILED,
            "Insufficient Savings Balance",
            message,
            NotificationPriority.HIGH,
        )

    async def _send(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority,
    ) -> None:
        try:
            await self._sink.send(
                user_id=user_id,
                type=notification_type,
                title=title,
                message=message,
                priority=priority,
            )
        except Exception as e:
            logger.error(
                "notification_failed",
                user_id=user_id,
                notification_type=notification_type.value,
                error=str(e),
            )
