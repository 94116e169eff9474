"""Settlement-related Pydantic schemas."""

from pydantic import BaseModel, Field


class SettlementErrorSchema(BaseModel):
    """Schema for one failed obligation in a run summary."""

    kind: str = Field(
        ...,
        description="Obligation kind",
        examples=["loan"],
    )
    obligation_id: str = Field(
        ...,
        description="Loan or commodity order id",
    )
    member_id: str = Field(
        ...,
        description="Member who owns the obligation",
    )
    reason: str = Field(
        ...,
        description="Outcome that made the item fail",
        examples=["insufficient_balance"],
    )
    error: str | None = Field(
        None,
        description="Error message for system errors",
    )


class RunSummaryResponseSchema(BaseModel):
    """Schema for POST /v1/settlements/run response."""

    period: str = Field(
        ...,
        description="Settled period (YYYY-MM)",
        examples=["2026-10"],
    )
    loans_processed: int = Field(..., ge=0)
    loans_failed: int = Field(..., ge=0)
    loans_skipped: int = Field(..., ge=0)
    commodities_processed: int = Field(..., ge=0)
    commodities_failed: int = Field(..., ge=0)
    commodities_skipped: int = Field(..., ge=0)
    deferred: int = Field(
        ...,
        ge=0,
        description="Items left for the next run because the run deadline passed",
    )
    total_deducted: int = Field(
        ...,
        ge=0,
        description="Total deducted in minor currency units (kobo)",
        examples=[1500000],
    )
    errors: list[SettlementErrorSchema] = Field(
        default_factory=list,
        description="Failed items",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "period": "2026-10",
                    "loans_processed": 42,
                    "loans_failed": 1,
                    "loans_skipped": 0,
                    "commodities_processed": 17,
                    "commodities_failed": 0,
                    "commodities_skipped": 0,
                    "deferred": 0,
                    "total_deducted": 53000000,
                    "errors": [
                        {
                            "kind": "loan",
                            "obligation_id": "loan_123",
                            "member_id": "MEM-0042",
                            "reason": "insufficient_balance",
                            "error": None,
                        }
                    ],
                }
            ]
        }
    }
