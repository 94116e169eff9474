"""
Monthly settlement job.

Run by cron on the 1st of each month (02:00 Africa/Lagos):

    python -m src.jobs.settlement

Exits non-zero when the run could not list its obligations, so the
scheduler records the failure.
"""

import asyncio
import sys

import structlog

from src.core.dependencies import build_settlement_service
from src.core.logging import setup_logging
from src.domain.exceptions import SettlementEnumerationException
from src.infrastructure.clients import HttpAdminAlertClient
from src.infrastructure.database import db_manager
from src.infrastructure.repositories import (
    PostgresAdminDirectory,
    PostgresLedgerStore,
    PostgresNotificationSink,
)

logger = structlog.get_logger(__name__)


async def run_once() -> int:
    """Run one settlement and return the process exit code."""
    db_manager.init()
    session_factory = db_manager.sessionmaker

    service = build_settlement_service(
        ledger_store=PostgresLedgerStore(session_factory),
        admin_directory=PostgresAdminDirectory(session_factory),
        notification_sink=PostgresNotificationSink(session_factory),
        alert_client=HttpAdminAlertClient(),
    )

    try:
        summary = await service.run()
    except SettlementEnumerationException as e:
        logger.error("settlement_job_failed", error=e.message)
        return 1
    finally:
        await db_manager.close()

    logger.info("settlement_job_completed", **summary.to_dict())
    return 0


def main() -> None:
    setup_logging()
    sys.exit(asyncio.run(run_once()))


if __name__ == "__main__":
    main()
