"""
Fixtures for integration tests.

Provides:
- In-memory SQLite database shared by the SQL-backed store and sinks
- Seeding helpers for members, loans and commodity orders
- Mock admin alert client
- Test client for the FastAPI app with the database and alert client
  overridden
"""

from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.main import app
from src.core.dependencies import (
    build_settlement_service,
    get_session_factory,
    get_settlement_service,
)
from src.domain.interfaces import AdminAlertSink
from src.infrastructure.database import (
    Base,
    CommodityOrderModel,
    DeductionLogModel,
    LedgerEntryModel,
    LoanModel,
    NotificationModel,
    SavingsAccountModel,
    UserModel,
)
from src.infrastructure.repositories import (
    PostgresAdminDirectory,
    PostgresLedgerStore,
    PostgresNotificationSink,
)


PERIOD = "2026-10"


# =============================================================================
# Mock Clients
# =============================================================================

class MockAdminAlertClient(AdminAlertSink):
    """Mock alert client that tracks alerts."""

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.call_count = 0
        self.alerts_sent = []

    async def send(self, alert_type, payload) -> bool:
        self.call_count += 1

        if self.fail_mode:
            return False

        self.alerts_sent.append({"alert_type": alert_type.value, "payload": payload})
        return True


class UnavailableLedgerStore(PostgresLedgerStore):
    """SQL store whose obligation listing always fails."""

    async def get_eligible_loans(self):
        raise ConnectionError("could not connect to server")


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture
def ledger_store(session_factory) -> PostgresLedgerStore:
    return PostgresLedgerStore(session_factory)


# =============================================================================
# Seeding Helpers
# =============================================================================

class Seeder:
    """Writes fixture rows and reads back table state."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def add(self, *models) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                session.add_all(models)

    async def member(self, member_id: str, balance: int, role: str = "member") -> None:
        await self.add(
            UserModel(id=member_id, name=member_id, role=role),
            SavingsAccountModel(member_id=member_id, balance=balance),
        )

    async def admin(self, user_id: str, role: str = "admin") -> None:
        await self.add(UserModel(id=user_id, name=user_id, role=role))

    async def loan(
        self,
        loan_id: str,
        member_id: str,
        total_amount: int = 120000,
        total_repaid: int = 0,
        duration: int = 12,
        monthly_payment: Optional[int] = None,
        status: str = "approved",
        last_settled_period: Optional[str] = None,
    ) -> None:
        await self.add(
            LoanModel(
                id=loan_id,
                member_id=member_id,
                status=status,
                loan_type="regular",
                total_amount=total_amount,
                total_repaid=total_repaid,
                monthly_payment=monthly_payment,
                duration=duration,
                last_settled_period=last_settled_period,
            )
        )

    async def order(
        self,
        order_id: str,
        member_id: str,
        monthly_payment: int = 5000,
        deductions_paid: int = 0,
        deductions_remaining: int = 6,
        status: str = "approved",
    ) -> None:
        await self.add(
            CommodityOrderModel(
                id=order_id,
                member_id=member_id,
                status=status,
                product_name="Rice (50kg)",
                total_amount=monthly_payment * (deductions_paid + deductions_remaining),
                monthly_payment=monthly_payment,
                deductions_paid=deductions_paid,
                deductions_remaining=deductions_remaining,
            )
        )

    async def balance(self, member_id: str) -> int:
        async with self._session_factory() as session:
            return await session.scalar(
                select(SavingsAccountModel.balance).where(
                    SavingsAccountModel.member_id == member_id
                )
            )

    async def get(self, model, key):
        async with self._session_factory() as session:
            return await session.get(model, key)

    async def all(self, model) -> List:
        async with self._session_factory() as session:
            result = await session.execute(select(model))
            return list(result.scalars().all())

    async def entries(self) -> List[LedgerEntryModel]:
        return await self.all(LedgerEntryModel)

    async def logs(self) -> List[DeductionLogModel]:
        return await self.all(DeductionLogModel)

    async def notifications(self, notification_type: Optional[str] = None) -> List[NotificationModel]:
        rows = await self.all(NotificationModel)
        if notification_type is None:
            return rows
        return [n for n in rows if n.type == notification_type]


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


# =============================================================================
# Mock Client Fixtures
# =============================================================================

@pytest.fixture
def mock_alert_client() -> MockAdminAlertClient:
    """Create a mock admin alert client."""
    return MockAdminAlertClient()


# =============================================================================
# App Client Fixtures
# =============================================================================

def _override_dependencies(session_factory, ledger_store, alert_client) -> None:
    # A StaticPool shares one connection, so the run is kept sequential.
    def override_get_settlement_service():
        return build_settlement_service(
            ledger_store=ledger_store,
            admin_directory=PostgresAdminDirectory(session_factory),
            notification_sink=PostgresNotificationSink(session_factory),
            alert_client=alert_client,
            max_concurrency=1,
        )

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_settlement_service] = override_get_settlement_service


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    ledger_store: PostgresLedgerStore,
    mock_alert_client: MockAdminAlertClient,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with mocked dependencies.

    This client:
    - Uses the in-memory SQLite database
    - Mocks the admin alert webhook
    """
    _override_dependencies(session_factory, ledger_store, mock_alert_client)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client_with_unavailable_store(
    session_factory: async_sessionmaker[AsyncSession],
    mock_alert_client: MockAdminAlertClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client whose ledger store cannot list obligations."""
    _override_dependencies(
        session_factory,
        UnavailableLedgerStore(session_factory),
        mock_alert_client,
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
