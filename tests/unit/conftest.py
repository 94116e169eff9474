"""
Fixtures for unit tests.

Provides:
- In-memory ledger store with the same atomicity and guard semantics
  as the PostgreSQL store
- Recording notification and alert sinks
- A static admin directory
"""

import asyncio
from dataclasses import replace
from typing import Callable, Dict, List, Optional

import pytest

from src.application.services import OutcomeNotifier, RunReporter, SettlementService
from src.domain.entities import (
    CommitResult,
    CommodityOrder,
    CommodityOrderStatus,
    Deduction,
    DeductionLogRecord,
    LedgerEntry,
    Loan,
    LoanStatus,
    ObligationKind,
    SavingsAccount,
)
from src.domain.exceptions import (
    DeductionAbortedException,
    InsufficientBalanceException,
    InvalidObligationException,
    SavingsAccountNotFoundException,
)
from src.domain.interfaces import (
    AdminAlertSink,
    AdminDirectory,
    LedgerStore,
    NotificationSink,
)


PERIOD = "2026-10"


# =============================================================================
# Fakes
# =============================================================================

class InMemoryLedgerStore(LedgerStore):
    """Ledger store backed by dicts, guarded by a single lock."""

    def __init__(self):
        self.loans: Dict[str, Loan] = {}
        self.orders: Dict[str, CommodityOrder] = {}
        self.balances: Dict[str, int] = {}
        self.entries: List[LedgerEntry] = []
        self.logs: List[DeductionLogRecord] = []
        self.settled: List[str] = []
        self.fail_enumeration: Optional[str] = None  # "loans" or "orders"
        self.abort_counts: Dict[str, int] = {}
        self.before_commit: Optional[Callable[[Deduction], None]] = None
        self.min_balance_seen: Optional[int] = None
        self._lock = asyncio.Lock()

    def add_loan(self, loan: Loan) -> Loan:
        self.loans[loan.id] = loan
        return loan

    def add_order(self, order: CommodityOrder) -> CommodityOrder:
        self.orders[order.id] = order
        return order

    async def get_eligible_loans(self) -> List[Loan]:
        if self.fail_enumeration == "loans":
            raise ConnectionError("datastore unavailable")
        return [loan for loan in self.loans.values() if loan.status is LoanStatus.APPROVED]

    async def get_eligible_orders(self) -> List[CommodityOrder]:
        if self.fail_enumeration == "orders":
            raise ConnectionError("datastore unavailable")
        return [
            order
            for order in self.orders.values()
            if order.status is CommodityOrderStatus.APPROVED and order.deductions_remaining > 0
        ]

    async def get_loan(self, loan_id: str) -> Loan:
        if loan_id not in self.loans:
            raise InvalidObligationException(loan_id, "loan not found")
        return self.loans[loan_id]

    async def get_order(self, order_id: str) -> CommodityOrder:
        if order_id not in self.orders:
            raise InvalidObligationException(order_id, "order not found")
        return self.orders[order_id]

    async def get_savings_account(self, member_id: str) -> SavingsAccount:
        if member_id not in self.balances:
            raise SavingsAccountNotFoundException(member_id)
        return SavingsAccount(member_id=member_id, balance=self.balances[member_id])

    async def apply_deduction(self, deduction: Deduction) -> CommitResult:
        # Yield so concurrent callers interleave between read and commit.
        await asyncio.sleep(0)

        async with self._lock:
            remaining_aborts = self.abort_counts.get(deduction.obligation_id, 0)
            if remaining_aborts:
                self.abort_counts[deduction.obligation_id] = remaining_aborts - 1
                raise DeductionAbortedException(deduction.obligation_id, "simulated conflict")

            if self.before_commit is not None:
                self.before_commit(deduction)

            if deduction.kind is ObligationKind.LOAN:
                loan = self.loans[deduction.obligation_id]
                if (
                    loan.status is not LoanStatus.APPROVED
                    or loan.total_repaid != deduction.expected_counter
                    or loan.settled_for(deduction.period)
                    or loan.total_repaid + deduction.amount > loan.total_amount
                ):
                    raise DeductionAbortedException(deduction.obligation_id, "stale loan")
                updated = replace(
                    loan,
                    total_repaid=loan.total_repaid + deduction.amount,
                    status=loan.status.after_deduction(loan.id, deduction.completes),
                    last_settled_period=deduction.period,
                )
            else:
                order = self.orders[deduction.obligation_id]
                if (
                    order.status is not CommodityOrderStatus.APPROVED
                    or order.deductions_remaining != deduction.expected_counter
                    or order.settled_for(deduction.period)
                ):
                    raise DeductionAbortedException(deduction.obligation_id, "stale order")
                updated = replace(
                    order,
                    deductions_paid=order.deductions_paid + 1,
                    deductions_remaining=order.deductions_remaining - 1,
                    status=order.status.after_deduction(order.id, deduction.completes),
                    last_settled_period=deduction.period,
                )

            if deduction.member_id not in self.balances:
                raise SavingsAccountNotFoundException(deduction.member_id)
            before = self.balances[deduction.member_id]
            if before < deduction.amount:
                raise InsufficientBalanceException(
                    deduction.member_id, deduction.amount, before
                )

            after = before - deduction.amount
            self.balances[deduction.member_id] = after
            if self.min_balance_seen is None or after < self.min_balance_seen:
                self.min_balance_seen = after

            if isinstance(updated, Loan):
                self.loans[updated.id] = updated
            else:
                self.orders[updated.id] = updated

            entry = deduction.to_ledger_entry()
            self.entries.append(entry)
            return CommitResult(entry=entry, balance_before=before, balance_after=after)

    async def mark_settled(self, obligation) -> None:
        self.settled.append(obligation.id)
        if isinstance(obligation, Loan):
            self.loans[obligation.id] = replace(obligation, status=LoanStatus.FULLY_PAID)
        else:
            self.orders[obligation.id] = replace(
                obligation, status=CommodityOrderStatus.DELIVERED
            )

    async def append_log(self, record: DeductionLogRecord) -> None:
        self.logs.append(record)


class RecordingNotificationSink(NotificationSink):
    """Keeps every notification; optionally raises on send."""

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.sent: List[dict] = []

    async def send(self, user_id, type, title, message, priority=None) -> None:
        if self.fail_mode:
            raise RuntimeError("notification store unavailable")
        self.sent.append(
            {
                "user_id": user_id,
                "type": type.value,
                "title": title,
                "message": message,
                "priority": priority.value if priority else None,
            }
        )

    def of_type(self, notification_type: str) -> List[dict]:
        return [n for n in self.sent if n["type"] == notification_type]


class RecordingAlertSink(AdminAlertSink):
    """Keeps every alert; optionally raises on send."""

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.alerts: List[dict] = []

    async def send(self, alert_type, payload) -> bool:
        if self.fail_mode:
            raise RuntimeError("alert webhook unreachable")
        self.alerts.append({"alert_type": alert_type.value, "payload": payload})
        return True


class StaticAdminDirectory(AdminDirectory):
    def __init__(self, admin_ids: List[str]):
        self.admin_ids = admin_ids

    async def get_admin_user_ids(self) -> List[str]:
        return list(self.admin_ids)


# =============================================================================
# Entity helpers
# =============================================================================

def make_loan(
    loan_id: str = "loan_1",
    member_id: str = "MEM-001",
    total_amount: int = 120000,
    total_repaid: int = 0,
    duration: int = 12,
    monthly_payment: Optional[int] = None,
    status: LoanStatus = LoanStatus.APPROVED,
    last_settled_period: Optional[str] = None,
) -> Loan:
    return Loan(
        id=loan_id,
        member_id=member_id,
        status=status,
        total_amount=total_amount,
        total_repaid=total_repaid,
        duration=duration,
        monthly_payment=monthly_payment,
        loan_type="regular",
        last_settled_period=last_settled_period,
    )


def make_order(
    order_id: str = "order_1",
    member_id: str = "MEM-001",
    monthly_payment: int = 5000,
    deductions_paid: int = 0,
    deductions_remaining: int = 6,
    status: CommodityOrderStatus = CommodityOrderStatus.APPROVED,
    last_settled_period: Optional[str] = None,
) -> CommodityOrder:
    return CommodityOrder(
        id=order_id,
        member_id=member_id,
        status=status,
        monthly_payment=monthly_payment,
        deductions_paid=deductions_paid,
        deductions_remaining=deductions_remaining,
        total_amount=monthly_payment * (deductions_paid + deductions_remaining),
        product_name="Rice (50kg)",
        last_settled_period=last_settled_period,
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def notification_sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def alert_sink() -> RecordingAlertSink:
    return RecordingAlertSink()


@pytest.fixture
def admin_directory() -> StaticAdminDirectory:
    return StaticAdminDirectory(["admin_1", "admin_2"])


@pytest.fixture
def notifier(notification_sink, alert_sink) -> OutcomeNotifier:
    return OutcomeNotifier(
        notification_sink,
        alert_sink=alert_sink,
        large_deduction_threshold=1_000_000,
    )


@pytest.fixture
def reporter(admin_directory, notification_sink, alert_sink) -> RunReporter:
    return RunReporter(
        admin_directory=admin_directory,
        notification_sink=notification_sink,
        alert_sink=alert_sink,
    )


@pytest.fixture
def service(store, notifier, reporter) -> SettlementService:
    return SettlementService(
        ledger_store=store,
        notifier=notifier,
        reporter=reporter,
        max_concurrency=4,
        run_timeout_seconds=60,
    )
