"""
Deduction Calculator for the monthly settlement.

Pure functions: no I/O, no clock. All amounts are integers in minor
currency units.

Rounding policy for loans without an agreed monthly payment:
the base installment is total_amount // duration and the remainder
total_amount % duration is collected by the final installment. For
example 100000 over 3 months is 33333, 33333, 33334.
"""

from dataclasses import dataclass

from src.domain.entities import CommodityOrder, Loan
from src.domain.exceptions import InvalidObligationException


@dataclass(frozen=True)
class DeductionQuote:
    """
    Amount owed this cycle for one obligation.

    Attributes:
        amount: Amount to deduct (0 when already settled)
        completes: True if this deduction finishes the obligation
        already_settled: True if nothing is owed and the obligation
            only needs its status moved to the terminal state
    """

    amount: int
    completes: bool
    already_settled: bool = False


SETTLED = DeductionQuote(amount=0, completes=True, already_settled=True)


def base_installment(total_amount: int, duration: int) -> tuple[int, int]:
    """
    Split a loan total into equal monthly installments.

    Args:
        total_amount: Amount to be repaid over the loan's life
        duration: Number of installments

    Returns:
        (base installment, remainder carried by the final installment)
    """
    return divmod(total_amount, duration)


def quote_loan(loan: Loan) -> DeductionQuote:
    """
    Compute this cycle's deduction for a loan.

    due = min(monthly_payment, total_amount - total_repaid), with
    monthly_payment derived from duration when absent.

    Raises:
        InvalidObligationException: If no positive installment can be derived
    """
    if loan.is_settled:
        return SETTLED

    remaining = loan.remaining

    if loan.monthly_payment:
        if loan.monthly_payment < 0:
            raise InvalidObligationException(loan.id, "monthly payment is negative")
        due = min(loan.monthly_payment, remaining)
    else:
        if loan.duration <= 0:
            raise InvalidObligationException(
                loan.id, "loan has no monthly payment and no duration"
            )
        base, remainder = base_installment(loan.total_amount, loan.duration)
        if remaining <= base + remainder:
            due = remaining
        else:
            due = base

    if due <= 0:
        raise InvalidObligationException(loan.id, f"computed installment {due} is not positive")

    return DeductionQuote(amount=due, completes=due >= remaining)


def quote_order(order: CommodityOrder) -> DeductionQuote:
    """
    Compute this cycle's deduction for a commodity order.

    The stored monthly payment is authoritative. The order completes when
    this is its last remaining deduction.

    Raises:
        InvalidObligationException: If the monthly payment is not positive
    """
    if order.is_settled:
        return SETTLED

    if order.monthly_payment <= 0:
        raise InvalidObligationException(
            order.id, f"monthly payment {order.monthly_payment} is not positive"
        )

    return DeductionQuote(
        amount=order.monthly_payment,
        completes=order.deductions_remaining - 1 <= 0,
    )
