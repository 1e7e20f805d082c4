"""Data contracts for decumulation (SWP) projections."""

from typing import List

from pydantic import ConfigDict, Field

from sipcalc.schemas.accumulation import MAX_RATE_PERCENT, MIN_RATE_PERCENT, EngineModel


class DecumulationRequest(EngineModel):
    """Inputs required to simulate a systematic withdrawal plan."""

    initial_amount: float
    monthly_withdrawal: float
    annual_rate_percent: float
    years: float


class DecumulationInput(DecumulationRequest):
    """Decumulation request as accepted from a user."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    initial_amount: float = Field(..., gt=0, description="Corpus at the start of withdrawals.")
    monthly_withdrawal: float = Field(..., gt=0, description="Amount withdrawn each month.")
    annual_rate_percent: float = Field(
        ...,
        ge=MIN_RATE_PERCENT,
        le=MAX_RATE_PERCENT,
        description="Expected annual return in percent, applied monthly.",
    )
    years: int = Field(..., ge=1, le=30, description="Withdrawal period in whole years.")


class DecumulationResult(EngineModel):
    final_balance: float
    total_withdrawn: float
    months_supported: int = Field(..., ge=0)
    years_supported: float


class DecumulationPoint(EngineModel):
    """Year-end snapshot of a withdrawal simulation."""

    year: int = Field(..., ge=1)
    balance: float
    withdrawn: float
    months_supported: int


class DecumulationResponse(DecumulationResult):
    schedule: List[DecumulationPoint]
