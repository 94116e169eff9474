"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import List

from src.domain.entities import (
    CommitResult,
    CommodityOrder,
    Deduction,
    DeductionLogRecord,
    Loan,
    SavingsAccount,
)


class LedgerStore(ABC):
    """
    Abstract store for savings balances, obligations and the ledger.

    Implementations may use PostgreSQL, in-memory storage, etc., but
    apply_deduction must be atomic and must check the balance against
    the currently stored value.
    """

    @abstractmethod
    async def get_eligible_loans(self) -> List[Loan]:
        """
        List all loans in status approved.

        Returns:
            Loans in storage order
        """
        ...

    @abstractmethod
    async def get_eligible_orders(self) -> List[CommodityOrder]:
        """
        List all approved commodity orders with deductions remaining.

        Returns:
            Orders in storage order
        """
        ...

    @abstractmethod
    async def get_loan(self, loan_id: str) -> Loan:
        """
        Re-read a single loan.

        Raises:
            InvalidObligationException: If the loan no longer exists
        """
        ...

    @abstractmethod
    async def get_order(self, order_id: str) -> CommodityOrder:
        """
        Re-read a single commodity order.

        Raises:
            InvalidObligationException: If the order no longer exists
        """
        ...

    @abstractmethod
    async def get_savings_account(self, member_id: str) -> SavingsAccount:
        """
        Read a member's savings account.

        Raises:
            SavingsAccountNotFoundException: If the member has none
        """
        ...

    @abstractmethod
    async def apply_deduction(self, deduction: Deduction) -> CommitResult:
        """
        Debit the balance, insert the ledger entry and advance the
        obligation as one atomic unit.

        Args:
            deduction: The installment to commit

        Returns:
            The ledger entry written and the balances around it

        Raises:
            InsufficientBalanceException: If the stored balance is below
                the amount at commit time; nothing is written
            DeductionAbortedException: If the obligation changed since it
                was read or was already settled for the period; nothing is
                written
        """
        ...

    @abstractmethod
    async def mark_settled(self, obligation: Loan | CommodityOrder) -> None:
        """
        Move an already-satisfied obligation to its terminal status.

        No ledger entry or balance change is made.
        """
        ...

    @abstractmethod
    async def append_log(self, record: DeductionLogRecord) -> None:
        """
        Append an audit record for a deduction attempt.

        Note:
            Implementations must never raise; a failed write is logged
            and dropped.
        """
        ...


class AdminDirectory(ABC):
    """Lookup of the administrators that receive run reports."""

    @abstractmethod
    async def get_admin_user_ids(self) -> List[str]:
        """
        List the user ids of all administrators.

        Returns:
            User ids with an administrative role
        """
        ...
