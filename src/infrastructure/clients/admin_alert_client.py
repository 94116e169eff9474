"""HTTP implementation of AdminAlertSink."""

import asyncio
from datetime import datetime
from typing import Any, Dict

import httpx
import structlog

from src.core.config import settings
from src.core.metrics import (
    track_admin_alert_latency,
    record_admin_alert_retry,
    record_admin_alert_success,
    record_admin_alert_failure,
)
from src.domain.entities import AlertType
from src.domain.interfaces import AdminAlertSink

logger = structlog.get_logger(__name__)


class HttpAdminAlertClient(AdminAlertSink):
    """
    HTTP client for the admin alert webhook.

    Posts alerts with retry logic and exponential backoff.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ):
        self._url = url or settings.admin_alert_webhook_url
        self._timeout = timeout or settings.admin_alert_timeout
        self._max_retries = max_retries or settings.admin_alert_max_retries

    async def send(self, alert_type: AlertType, payload: Dict[str, Any]) -> bool:
        """
        Send an alert to the webhook.

        Uses exponential backoff: 0.1s, 0.2s, 0.4s, ...
        """
        body = {
            "alert_type": alert_type.value,
            "payload": payload,
            "sent_at": datetime.utcnow().isoformat() + "Z",
        }

        for attempt in range(self._max_retries):
            try:
                with track_admin_alert_latency():
                    async with httpx.AsyncClient(timeout=self._timeout) as client:
                        response = await client.post(
                            self._url,
                            json=body,
                            headers={"Content-Type": "application/json"},
                        )

                        if response.status_code < 400:
                            logger.info(
                                "admin_alert_sent",
                                alert_type=alert_type.value,
                                status_code=response.status_code,
                            )
                            record_admin_alert_success()
                            return True

                        logger.warning(
                            "admin_alert_failed",
                            alert_type=alert_type.value,
                            status_code=response.status_code,
                            attempt=attempt + 1,
                            response=response.text[:200],
                        )

            except httpx.TimeoutException:
                logger.warning(
                    "admin_alert_timeout",
                    alert_type=alert_type.value,
                    attempt=attempt + 1,
                )
            except Exception as e:
                logger.error(
                    "admin_alert_error",
                    alert_type=alert_type.value,
                    attempt=attempt + 1,
                    error=str(e),
                )

            if attempt < self._max_retries - 1:
                record_admin_alert_retry()
                await asyncio.sleep(2 ** attempt * 0.1)

        logger.error(
            "admin_alert_exhausted_retries",
            alert_type=alert_type.value,
            max_retries=self._max_retries,
        )
        record_admin_alert_failure()
        return False
