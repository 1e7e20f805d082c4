"""Data contracts for accumulation (SIP, step-up SIP and lumpsum) projections."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# bounds on user-entered annual return rates
MIN_RATE_PERCENT = -100.0
MAX_RATE_PERCENT = 100.0


class EngineModel(BaseModel):
    """Immutable record with camelCase JSON aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AccumulationRequest(EngineModel):
    """Inputs required to project an accumulation plan.

    The engine accepts any numbers here; ``AccumulationInput`` is the
    validated variant used at the API boundary.
    """

    monthly_amount: float = 0.0
    lumpsum_amount: float = 0.0
    annual_rate_percent: float
    years: float
    step_up_percent: float = 0.0


class AccumulationInput(AccumulationRequest):
    """Accumulation request as accepted from a user."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    monthly_amount: float = Field(0.0, ge=0, description="Monthly SIP contribution.")
    lumpsum_amount: float = Field(0.0, ge=0, description="One-time investment at period 0.")
    annual_rate_percent: float = Field(
        ...,
        ge=MIN_RATE_PERCENT,
        le=MAX_RATE_PERCENT,
        description="Expected annual return in percent (e.g. 12 for 12%).",
    )
    years: int = Field(..., ge=1, le=30, description="Investment horizon in whole years.")
    step_up_percent: float = Field(
        0.0,
        ge=0,
        description="Yearly increase of the monthly contribution in percent.",
    )

    @model_validator(mode="after")
    def ensure_some_investment(self) -> "AccumulationInput":
        if self.monthly_amount <= 0 and self.lumpsum_amount <= 0:
            raise ValueError("Please enter at least one investment amount")
        return self


class AccumulationResult(EngineModel):
    """Projected maturity and cost basis of an accumulation plan."""

    maturity_amount: float
    total_invested: float
    returns: float
    monthly_investment: float
    lumpsum_investment: float
    # 0.0 when nothing was invested
    absolute_return_percent: float


class AccumulationPoint(EngineModel):
    """Single row of a yearly accumulation schedule."""

    year: int = Field(..., ge=0)
    invested: float
    value: float


class AccumulationResponse(AccumulationResult):
    """Accumulation result together with its yearly schedule."""

    schedule: List[AccumulationPoint]
