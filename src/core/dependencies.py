"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.infrastructure.database import db_manager
from src.infrastructure.repositories import (
    PostgresAdminDirectory,
    PostgresLedgerStore,
    PostgresNotificationSink,
)
from src.infrastructure.clients import HttpAdminAlertClient
from src.application.services import OutcomeNotifier, RunReporter, SettlementService


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory; settlement opens one session per unit of work."""
    return db_manager.sessionmaker


# Repository dependencies
def get_ledger_store(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> PostgresLedgerStore:
    """Get a LedgerStore instance."""
    return PostgresLedgerStore(session_factory)


def get_admin_directory(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> PostgresAdminDirectory:
    """Get an AdminDirectory instance."""
    return PostgresAdminDirectory(session_factory)


def get_notification_sink(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> PostgresNotificationSink:
    """Get a NotificationSink instance."""
    return PostgresNotificationSink(session_factory)


# External client dependencies
def get_admin_alert_client() -> HttpAdminAlertClient:
    """Get an AdminAlertSink instance."""
    return HttpAdminAlertClient()


# Service dependencies
def get_settlement_service(
    ledger_store: Annotated[PostgresLedgerStore, Depends(get_ledger_store)],
    admin_directory: Annotated[PostgresAdminDirectory, Depends(get_admin_directory)],
    notification_sink: Annotated[PostgresNotificationSink, Depends(get_notification_sink)],
    alert_client: Annotated[HttpAdminAlertClient, Depends(get_admin_alert_client)],
) -> SettlementService:
    """Get a SettlementService instance with all dependencies."""
    return build_settlement_service(
        ledger_store=ledger_store,
        admin_directory=admin_directory,
        notification_sink=notification_sink,
        alert_client=alert_client,
    )


def build_settlement_service(
    ledger_store,
    admin_directory,
    notification_sink,
    alert_client,
    max_concurrency: int | None = None,
) -> SettlementService:
    """Wire the settlement service; shared by the API and the scheduled job."""
    return SettlementService(
        ledger_store=ledger_store,
        max_concurrency=max_concurrency,
        notifier=OutcomeNotifier(notification_sink, alert_sink=alert_client),
        reporter=RunReporter(
            admin_directory=admin_directory,
            notification_sink=notification_sink,
            alert_sink=alert_client,
        ),
    )
