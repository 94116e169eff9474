"""PostgreSQL implementation of AdminDirectory."""

from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.config import settings
from src.domain.interfaces import AdminDirectory
from src.infrastructure.database.models import UserModel


class PostgresAdminDirectory(AdminDirectory):
    """Reads administrators from the users table by role."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        roles: Iterable[str] | None = None,
    ):
        self._session_factory = session_factory
        self._roles = list(roles or settings.admin_roles)

    async def get_admin_user_ids(self) -> List[str]:
        async with self._session_factory() as session:
            stmt = (
                select(UserModel.id)
                .where(UserModel.role.in_(self._roles))
                .order_by(UserModel.id)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())
