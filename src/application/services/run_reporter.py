"""Run reporter - administrative summary and fatal-run alerts."""

import structlog

from src.domain.entities import (
    AlertType,
    NotificationPriority,
    NotificationType,
    RunSummary,
)
from src.domain.interfaces import AdminAlertSink, AdminDirectory, NotificationSink
from src.service.deductions import format_amount

logger = structlog.get_logger(__name__)


def format_summary(summary: RunSummary) -> str:
    """Render the summary text sent to administrators."""
    return "\n".join(
        [
            f"Monthly Deductions Summary ({summary.period}):",
            f"- Loans Processed: {summary.loans_processed}",
            f"- Loans Failed: {summary.loans_failed}",
            f"- Loans Skipped: {summary.loans_skipped}",
            f"- Commodities Processed: {summary.commodities_processed}",
            f"- Commodities Failed: {summary.commodities_failed}",
            f"- Commodities Skipped: {summary.commodities_skipped}",
            f"- Deferred: {summary.deferred}",
            f"- Total Deducted: {format_amount(summary.total_deducted)}",
            f"- Errors: {len(summary.errors)}",
        ]
    )


class RunReporter:
    """
    Sends the end-of-run report to every administrator.

    Neither method raises: reporting problems are logged only.
    """

    def __init__(
        self,
        admin_directory: AdminDirectory,
        notification_sink: NotificationSink,
        alert_sink: AdminAlertSink,
    ):
        self._admins = admin_directory
        self._sink = notification_sink
        self._alert_sink = alert_sink

    async def report(self, summary: RunSummary) -> None:
        """Send one admin_report notification per administrator."""
        message = format_summary(summary)
        admin_ids = await self._admin_ids()

        for admin_id in admin_ids:
            await self._notify(
                admin_id,
                NotificationType.ADMIN_REPORT,
                "Monthly Deductions Report",
                message,
                NotificationPriority.NORMAL,
            )

        logger.info("admin_summary_sent", period=summary.period, admins=len(admin_ids))

    async def report_fatal(self, error: Exception, period: str) -> None:
        """Send the urgent run-failed alert to every administrator."""
        error_message = getattr(error, "message", None) or str(error)
        message = (
            f"The automated monthly deductions process for {period} encountered a "
            f"fatal error: {error_message}. Please review the logs immediately."
        )

        for admin_id in await self._admin_ids():
            await self._notify(
                admin_id,
                NotificationType.SYSTEM_ALERT,
                "Monthly Deductions Failed",
                message,
                NotificationPriority.URGENT,
            )

        try:
            await self._alert_sink.send(
                AlertType.SETTLEMENT_RUN_FAILED,
                {
                    "period": period,
                    "error": error_message,
                    "error_type": type(error).__name__,
                },
            )
        except Exception as e:
            logger.error("settlement_failure_alert_failed", period=period, error=str(e))

    async def _admin_ids(self) -> list[str]:
        try:
            return await self._admins.get_admin_user_ids()
        except Exception as e:
            logger.error("admin_lookup_failed", error=str(e))
            return []

    async def _notify(
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
                "admin_notification_failed",
                user_id=user_id,
                notification_type=notification_type.value,
                error=str(e),
            )
