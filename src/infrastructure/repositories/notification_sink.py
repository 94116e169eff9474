"""PostgreSQL implementation of NotificationSink."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.entities import NotificationPriority, NotificationType
from src.domain.interfaces import NotificationSink
from src.infrastructure.database.models import NotificationModel


class PostgresNotificationSink(NotificationSink):
    """
    Persists notifications to the notifications table.

    Push and email fan-out read from that table and are not part of
    this service.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def send(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                session.add(
                    NotificationModel(
                        user_id=user_id,
                        type=type.value,
                        title=title,
                        message=message,
                        priority=priority.value,
                    )
                )
