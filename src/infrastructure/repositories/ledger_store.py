"""PostgreSQL implementation of LedgerStore."""

from datetime import datetime
from typing import List

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.entities import (
    CommitResult,
    CommodityOrder,
    CommodityOrderStatus,
    Deduction,
    DeductionLogRecord,
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
    UnknownObligationStatusException,
)
from src.domain.interfaces import LedgerStore
from src.infrastructure.database.models import (
    CommodityOrderModel,
    DeductionLogModel,
    LedgerEntryModel,
    LoanModel,
    SavingsAccountModel,
)

logger = structlog.get_logger(__name__)


class PostgresLedgerStore(LedgerStore):
    """
    PostgreSQL implementation of the ledger store.

    Opens one session per operation so that independent obligations can
    be settled concurrently. Every balance change is a conditional
    UPDATE evaluated against the stored row inside the committing
    transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_eligible_loans(self) -> List[Loan]:
        async with self._session_factory() as session:
            stmt = select(LoanModel).where(LoanModel.status == LoanStatus.APPROVED.value)
            result = await session.execute(stmt)
            return [self._loan_to_entity(model) for model in result.scalars().all()]

    async def get_eligible_orders(self) -> List[CommodityOrder]:
        async with self._session_factory() as session:
            stmt = select(CommodityOrderModel).where(
                CommodityOrderModel.status == CommodityOrderStatus.APPROVED.value,
                CommodityOrderModel.deductions_remaining > 0,
            )
            result = await session.execute(stmt)
            return [self._order_to_entity(model) for model in result.scalars().all()]

    async def get_loan(self, loan_id: str) -> Loan:
        async with self._session_factory() as session:
            model = await session.get(LoanModel, loan_id)
            if model is None:
                raise InvalidObligationException(loan_id, "loan not found")
            return self._loan_to_entity(model)

    async def get_order(self, order_id: str) -> CommodityOrder:
        async with self._session_factory() as session:
            model = await session.get(CommodityOrderModel, order_id)
            if model is None:
                raise InvalidObligationException(order_id, "order not found")
            return self._order_to_entity(model)

    async def get_savings_account(self, member_id: str) -> SavingsAccount:
        async with self._session_factory() as session:
            model = await session.get(SavingsAccountModel, member_id)
            if model is None:
                raise SavingsAccountNotFoundException(member_id)
            return SavingsAccount(
                member_id=model.member_id,
                balance=model.balance,
                updated_at=model.updated_at,
            )

    async def apply_deduction(self, deduction: Deduction) -> CommitResult:
        """
        Commit one installment.

        Order inside the transaction: advance the obligation (guarded by
        its expected counter and the period marker), debit the balance
        (guarded by balance >= amount), insert the ledger entry. Any
        raised exception rolls the whole transaction back.

        Driver failures that leave nothing committed, such as a dropped
        connection or a deadlock, are raised as DeductionAbortedException
        so the caller retries them once.
        """
        now = datetime.utcnow()
        entry = deduction.to_ledger_entry()

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    if deduction.kind is ObligationKind.LOAN:
                        await self._advance_loan(session, deduction, now)
                    else:
                        await self._advance_order(session, deduction, now)

                    debit = (
                        update(SavingsAccountModel)
                        .where(
                            SavingsAccountModel.member_id == deduction.member_id,
                            SavingsAccountModel.balance >= deduction.amount,
                        )
                        .values(
                            balance=SavingsAccountModel.balance - deduction.amount,
                            updated_at=now,
                        )
                        .execution_options(synchronize_session=False)
                    )
                    result = await session.execute(debit)

                    balance = await session.scalar(
                        select(SavingsAccountModel.balance).where(
                            SavingsAccountModel.member_id == deduction.member_id
                        )
                    )
                    if balance is None:
                        raise SavingsAccountNotFoundException(deduction.member_id)
                    if result.rowcount != 1:
                        raise InsufficientBalanceException(
                            member_id=deduction.member_id,
                            required=deduction.amount,
                            available=balance,
                        )

                    session.add(
                        LedgerEntryModel(
                            id=str(entry.id),
                            member_id=entry.member_id,
                            type=entry.type.value,
                            amount=entry.amount,
                            source=entry.source.value,
                            linked_id=entry.linked_id,
                            period=entry.period,
                            description=entry.description,
                            created_at=entry.timestamp,
                        )
                    )
        except OperationalError as e:
            raise self._transient(deduction, e) from e
        except DBAPIError as e:
            if not e.connection_invalidated:
                raise
            raise self._transient(deduction, e) from e

        return CommitResult(
            entry=entry,
            balance_before=balance + deduction.amount,
            balance_after=balance,
        )

    def _transient(self, deduction: Deduction, error: DBAPIError) -> DeductionAbortedException:
        logger.warning(
            "deduction_transient_db_error",
            obligation_id=deduction.obligation_id,
            member_id=deduction.member_id,
            error=str(error.orig),
        )
        return DeductionAbortedException(deduction.obligation_id, str(error.orig))

    async def mark_settled(self, obligation: Loan | CommodityOrder) -> None:
        now = datetime.utcnow()

        if isinstance(obligation, Loan):
            stmt = (
                update(LoanModel)
                .where(
                    LoanModel.id == obligation.id,
                    LoanModel.status == LoanStatus.APPROVED.value,
                )
                .values(status=LoanStatus.FULLY_PAID.value, updated_at=now)
            )
        else:
            stmt = (
                update(CommodityOrderModel)
                .where(
                    CommodityOrderModel.id == obligation.id,
                    CommodityOrderModel.status == CommodityOrderStatus.APPROVED.value,
                )
                .values(status=CommodityOrderStatus.DELIVERED.value, updated_at=now)
            )

        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(stmt.execution_options(synchronize_session=False))

    async def append_log(self, record: DeductionLogRecord) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(
                        DeductionLogModel(
                            member_id=record.member_id,
                            linked_id=record.linked_id,
                            kind=record.kind.value,
                            amount=record.amount,
                            outcome=record.outcome.value,
                            period=record.period,
                            balance_before=record.balance_before,
                            balance_after=record.balance_after,
                            fully_paid=record.fully_paid,
                            error=record.error,
                            created_at=record.timestamp,
                        )
                    )
        except Exception as e:
            logger.error(
                "deduction_log_write_failed",
                member_id=record.member_id,
                linked_id=record.linked_id,
                outcome=record.outcome.value,
                error=str(e),
            )

    async def _advance_loan(
        self,
        session: AsyncSession,
        deduction: Deduction,
        now: datetime,
    ) -> None:
        new_status = LoanStatus.APPROVED.after_deduction(
            deduction.obligation_id, deduction.completes
        )
        stmt = (
            update(LoanModel)
            .where(
                LoanModel.id == deduction.obligation_id,
                LoanModel.status == LoanStatus.APPROVED.value,
                LoanModel.total_repaid == deduction.expected_counter,
                LoanModel.total_repaid + deduction.amount <= LoanModel.total_amount,
                or_(
                    LoanModel.last_settled_period.is_(None),
                    LoanModel.last_settled_period != deduction.period,
                ),
            )
            .values(
                total_repaid=LoanModel.total_repaid + deduction.amount,
                status=new_status.value,
                last_settled_period=deduction.period,
                last_deduction_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)

        if result.rowcount != 1:
            raise DeductionAbortedException(
                deduction.obligation_id,
                "loan changed since it was read or is already settled for "
                f"{deduction.period}",
            )

    async def _advance_order(
        self,
        session: AsyncSession,
        deduction: Deduction,
        now: datetime,
    ) -> None:
        new_status = CommodityOrderStatus.APPROVED.after_deduction(
            deduction.obligation_id, deduction.completes
        )
        stmt = (
            update(CommodityOrderModel)
            .where(
                CommodityOrderModel.id == deduction.obligation_id,
                CommodityOrderModel.status == CommodityOrderStatus.APPROVED.value,
                CommodityOrderModel.deductions_remaining == deduction.expected_counter,
                CommodityOrderModel.deductions_remaining > 0,
                or_(
                    CommodityOrderModel.last_settled_period.is_(None),
                    CommodityOrderModel.last_settled_period != deduction.period,
                ),
            )
            .values(
                deductions_paid=CommodityOrderModel.deductions_paid + 1,
                deductions_remaining=CommodityOrderModel.deductions_remaining - 1,
                status=new_status.value,
                last_settled_period=deduction.period,
                last_deduction_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)

        if result.rowcount != 1:
            raise DeductionAbortedException(
                deduction.obligation_id,
                "order changed since it was read or is already settled for "
                f"{deduction.period}",
            )

    def _loan_to_entity(self, model: LoanModel) -> Loan:
        try:
            status = LoanStatus(model.status)
        except ValueError:
            raise UnknownObligationStatusException("loan", model.status)

        return Loan(
            id=model.id,
            member_id=model.member_id,
            status=status,
            total_amount=model.total_amount,
            total_repaid=model.total_repaid,
            duration=model.duration,
            monthly_payment=model.monthly_payment,
            loan_type=model.loan_type,
            last_settled_period=model.last_settled_period,
            last_deduction_at=model.last_deduction_at,
        )

    def _order_to_entity(self, model: CommodityOrderModel) -> CommodityOrder:
        try:
            status = CommodityOrderStatus(model.status)
        except ValueError:
            raise UnknownObligationStatusException("commodity order", model.status)

        return CommodityOrder(
            id=model.id,
            member_id=model.member_id,
            status=status,
            monthly_payment=model.monthly_payment,
            deductions_paid=model.deductions_paid,
            deductions_remaining=model.deductions_remaining,
            total_amount=model.total_amount,
            product_name=model.product_name,
            last_settled_period=model.last_settled_period,
            last_deduction_at=model.last_deduction_at,
        )
