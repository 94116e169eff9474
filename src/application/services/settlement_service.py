"""Settlement service - orchestrates the monthly deduction run."""

import asyncio
import time
from collections import defaultdict
from datetime import datetime
from typing import Awaitable, Callable, Sequence

import structlog

from src.core.config import settings
from src.core.metrics import (
    record_deduction,
    record_deduction_retry,
    record_run,
    track_run_duration,
)
from src.domain.entities import (
    CommodityOrder,
    Deduction,
    DeductionLogRecord,
    DeductionOutcome,
    ItemOutcome,
    Loan,
    ObligationKind,
    RunSummary,
)
from src.domain.exceptions import (
    DeductionAbortedException,
    InsufficientBalanceException,
    SettlementEnumerationException,
)
from src.domain.interfaces import LedgerStore
from src.service.deductions import DeductionQuote, current_period, quote_loan, quote_order

from .outcome_notifier import OutcomeNotifier
from .run_reporter import RunReporter

logger = structlog.get_logger(__name__)

Obligation = Loan | CommodityOrder


class SettlementService:
    """
    Application service for the monthly settlement run.

    Lists every eligible loan and commodity order, then settles them with
    bounded concurrency. Obligations of the same member never run at the
    same time, and the store re-checks the balance inside the commit.
    A failure on one obligation is recorded and never stops the run;
    only failing to list the obligations aborts it.
    """

    def __init__(
        self,
        ledger_store: LedgerStore,
        notifier: OutcomeNotifier,
        reporter: RunReporter,
        max_concurrency: int | None = None,
        run_timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store = ledger_store
        self._notifier = notifier
        self._reporter = reporter
        self._max_concurrency = max_concurrency or settings.settlement_max_concurrency
        self._run_timeout = run_timeout_seconds or settings.settlement_run_timeout_seconds
        self._clock = clock

    async def run(self, period: str | None = None) -> RunSummary:
        """
        Execute one settlement run.

        Args:
            period: "YYYY-MM" being settled; defaults to the current month
                in the configured timezone

        Returns:
            The completed RunSummary

        Raises:
            SettlementEnumerationException: If eligible obligations cannot be
                listed. Administrators are alerted before it is raised.
        """
        period = period or current_period(settings.settlement_timezone)
        summary = RunSummary(period=period)
        log = logger.bind(period=period)
        log.info("settlement_run_started")

        deadline = self._clock() + self._run_timeout

        with track_run_duration():
            try:
                loans = await self._enumerate("loans", self._store.get_eligible_loans)
                orders = await self._enumerate("commodity orders", self._store.get_eligible_orders)
            except SettlementEnumerationException as e:
                log.error("settlement_run_failed", error=e.message)
                record_run(completed=False)
                await self._reporter.report_fatal(e, period)
                raise

            log.info("obligations_found", loans=len(loans), orders=len(orders))

            # Loans settle before orders so the loan installment has first
            # claim on the balance.
            member_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
            await self._settle_all(loans, summary, period, deadline, member_locks)
            await self._settle_all(orders, summary, period, deadline, member_locks)

        summary.finished_at = datetime.utcnow()
        record_run(completed=True)
        log.info(
            "settlement_run_completed",
            loans_processed=summary.loans_processed,
            loans_failed=summary.loans_failed,
            commodities_processed=summary.commodities_processed,
            commodities_failed=summary.commodities_failed,
            deferred=summary.deferred,
            total_deducted=summary.total_deducted,
        )

        await self._reporter.report(summary)

        return summary

    async def _enumerate(
        self,
        collection: str,
        fetch: Callable[[], Awaitable[list]],
    ) -> list:
        try:
            return await fetch()
        except Exception as e:
            raise SettlementEnumerationException(collection, e) from e

    async def _settle_all(
        self,
        obligations: Sequence[Obligation],
        summary: RunSummary,
        period: str,
        deadline: float,
        member_locks: defaultdict[str, asyncio.Lock],
    ) -> None:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def settle_one(obligation: Obligation) -> None:
            async with member_locks[obligation.member_id]:
                async with semaphore:
                    if self._clock() >= deadline:
                        self._defer(obligation, summary)
                        return
                    await self._settle_item(obligation, summary, period)

        await asyncio.gather(*(settle_one(o) for o in obligations))

    def _defer(self, obligation: Obligation, summary: RunSummary) -> None:
        kind = _kind_of(obligation)
        logger.warning(
            "deduction_deferred",
            kind=kind.value,
            obligation_id=obligation.id,
            member_id=obligation.member_id,
        )
        summary.record(kind, ItemOutcome.DEFERRED, obligation.member_id, obligation.id)
        record_deduction(kind.value, ItemOutcome.DEFERRED.value)

    async def _settle_item(
        self,
        obligation: Obligation,
        summary: RunSummary,
        period: str,
    ) -> None:
        """Settle one obligation; every exception stops here."""
        kind = _kind_of(obligation)
        log = logger.bind(
            period=period,
            kind=kind.value,
            obligation_id=obligation.id,
            member_id=obligation.member_id,
        )

        try:
            outcome, amount = await self._settle(obligation, kind, period, log)
        except Exception as e:
            log.error("deduction_system_error", error=str(e), error_type=type(e).__name__)
            await self._store.append_log(
                DeductionLogRecord(
                    member_id=obligation.member_id,
                    linked_id=obligation.id,
                    kind=kind,
                    amount=0,
                    outcome=DeductionOutcome.SYSTEM_ERROR,
                    period=period,
                    error=str(e),
                )
            )
            summary.record(
                kind,
                ItemOutcome.SYSTEM_ERROR,
                obligation.member_id,
                obligation.id,
                error=str(e),
            )
            record_deduction(kind.value, ItemOutcome.SYSTEM_ERROR.value)
            return

        summary.record(kind, outcome, obligation.member_id, obligation.id, amount=amount)
        record_deduction(kind.value, outcome.value, amount)

    async def _settle(
        self,
        obligation: Obligation,
        kind: ObligationKind,
        period: str,
        log: structlog.stdlib.BoundLogger,
        retried: bool = False,
    ) -> tuple[ItemOutcome, int]:
        quote = _quote(obligation)

        if quote.already_settled:
            await self._store.mark_settled(obligation)
            log.info("obligation_already_settled")
            return ItemOutcome.SKIPPED, 0

        if obligation.settled_for(period):
            log.info("obligation_already_settled_for_period")
            return ItemOutcome.SKIPPED, 0

        obligation.status.ensure_deductible(obligation.id)

        account = await self._store.get_savings_account(obligation.member_id)

        if not account.can_cover(quote.amount):
            await self._insufficient(obligation, kind, period, quote.amount, account.balance, log)
            return ItemOutcome.INSUFFICIENT_BALANCE, 0

        deduction = Deduction(
            kind=kind,
            obligation_id=obligation.id,
            member_id=obligation.member_id,
            amount=quote.amount,
            completes=quote.completes,
            expected_counter=_counter_of(obligation),
            period=period,
            description=_description(obligation),
        )

        try:
            result = await self._store.apply_deduction(deduction)
        except InsufficientBalanceException as e:
            await self._insufficient(obligation, kind, period, e.required, e.available, log)
            return ItemOutcome.INSUFFICIENT_BALANCE, 0
        except DeductionAbortedException as e:
            if retried:
                raise
            log.warning("deduction_aborted_retrying", reason=e.reason)
            record_deduction_retry()
            refreshed = await self._refresh(obligation)
            return await self._settle(refreshed, kind, period, log, retried=True)

        log.info(
            "deduction_committed",
            amount=quote.amount,
            balance_before=result.balance_before,
            balance_after=result.balance_after,
            fully_paid=quote.completes,
        )

        await self._store.append_log(
            DeductionLogRecord(
                member_id=obligation.member_id,
                linked_id=obligation.id,
                kind=kind,
                amount=quote.amount,
                outcome=DeductionOutcome.SUCCESS,
                period=period,
                balance_before=result.balance_before,
                balance_after=result.balance_after,
                fully_paid=quote.completes,
            )
        )
        await self._notifier.deduction_succeeded(
            kind=kind,
            member_id=obligation.member_id,
            obligation_id=obligation.id,
            amount=quote.amount,
            completed=quote.completes,
        )

        return ItemOutcome.SUCCESS, quote.amount

    async def _insufficient(
        self,
        obligation: Obligation,
        kind: ObligationKind,
        period: str,
        required: int,
        available: int,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        log.warning("deduction_insufficient_balance", required=required, available=available)
        await self._store.append_log(
            DeductionLogRecord(
                member_id=obligation.member_id,
                linked_id=obligation.id,
                kind=kind,
                amount=required,
                outcome=DeductionOutcome.INSUFFICIENT_BALANCE,
                period=period,
                balance_before=available,
                balance_after=available,
            )
        )
        await self._notifier.deduction_failed(
            kind=kind,
            member_id=obligation.member_id,
            required=required,
            available=available,
        )

    async def _refresh(self, obligation: Obligation) -> Obligation:
        if isinstance(obligation, Loan):
            return await self._store.get_loan(obligation.id)
        return await self._store.get_order(obligation.id)


def _kind_of(obligation: Obligation) -> ObligationKind:
    if isinstance(obligation, Loan):
        return ObligationKind.LOAN
    return ObligationKind.COMMODITY


def _quote(obligation: Obligation) -> DeductionQuote:
    if isinstance(obligation, Loan):
        return quote_loan(obligation)
    return quote_order(obligation)


def _counter_of(obligation: Obligation) -> int:
    if isinstance(obligation, Loan):
        return obligation.total_repaid
    return obligation.deductions_remaining


def _description(obligation: Obligation) -> str:
    if isinstance(obligation, Loan):
        label, name = "Monthly loan payment", obligation.loan_type
    else:
        label, name = "Monthly commodity payment", obligation.product_name
    return f"{label} - {name}" if name else label
