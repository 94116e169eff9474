"""Settlement run API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.application.dto import RunSummaryResponse
from src.application.services import SettlementService
from src.core.dependencies import get_settlement_service
from src.presentation.schemas import (
    ErrorResponseSchema,
    RunSummaryResponseSchema,
    SettlementErrorSchema,
)

settlement_router = APIRouter(
    prefix="/settlements",
    responses={
        503: {"model": ErrorResponseSchema, "description": "Obligations could not be listed"},
    },
)


@settlement_router.post(
    "/run",
    response_model=RunSummaryResponseSchema,
    status_code=200,
    summary="Run Monthly Settlement",
    description="""
    Run the monthly deduction for every eligible loan and commodity order.

    Called by the scheduler on the first of each month. Obligations already
    settled for the current period are skipped, so a repeated call does not
    deduct twice.
    """,
    responses={
        200: {"description": "Run completed; per-item failures are listed in errors"},
    },
)
async def run_settlement(
    settlement_service: Annotated[SettlementService, Depends(get_settlement_service)],
) -> RunSummaryResponseSchema:
    summary = await settlement_service.run()
    response = RunSummaryResponse.from_entity(summary)

    return RunSummaryResponseSchema(
        period=response.period,
        loans_processed=response.loans_processed,
        loans_failed=response.loans_failed,
        loans_skipped=response.loans_skipped,
        commodities_processed=response.commodities_processed,
        commodities_failed=response.commodities_failed,
        commodities_skipped=response.commodities_skipped,
        deferred=response.deferred,
        total_deducted=response.total_deducted,
        errors=[
            SettlementErrorSchema(
                kind=e.kind,
                obligation_id=e.obligation_id,
                member_id=e.member_id,
                reason=e.reason,
                error=e.error,
            )
            for e in response.errors
        ],
    )
