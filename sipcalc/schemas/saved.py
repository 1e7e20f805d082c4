"""Saved calculation records kept in the local history."""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import ConfigDict, Field, TypeAdapter, field_validator

from sipcalc.core import currency as currencies
from sipcalc.schemas.accumulation import (
    AccumulationInput,
    AccumulationRequest,
    AccumulationResult,
    EngineModel,
)
from sipcalc.schemas.decumulation import (
    DecumulationInput,
    DecumulationRequest,
    DecumulationResult,
)


class CalculationKind(str, Enum):
    ACCUMULATION = "accumulation"
    DECUMULATION = "decumulation"


class SavedAccumulation(EngineModel):
    id: str
    kind: Literal[CalculationKind.ACCUMULATION] = CalculationKind.ACCUMULATION
    created_at: datetime
    currency: str
    request: AccumulationRequest
    result: AccumulationResult


class SavedDecumulation(EngineModel):
    id: str
    kind: Literal[CalculationKind.DECUMULATION] = CalculationKind.DECUMULATION
    created_at: datetime
    currency: str
    request: DecumulationRequest
    result: DecumulationResult


SavedCalculation = Annotated[
    Union[SavedAccumulation, SavedDecumulation],
    Field(discriminator="kind"),
]

saved_calculation_adapter: TypeAdapter[SavedCalculation] = TypeAdapter(SavedCalculation)
saved_calculations_adapter: TypeAdapter[List[SavedCalculation]] = TypeAdapter(
    List[SavedCalculation]
)


class SavePayloadBase(EngineModel):
    model_config = ConfigDict(extra="forbid")

    currency: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def ensure_supported_currency(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        code = value.upper()
        if not currencies.is_supported(code):
            raise ValueError(f"unsupported currency {value}")
        return code


class SaveAccumulationPayload(SavePayloadBase):
    kind: Literal[CalculationKind.ACCUMULATION]
    request: AccumulationInput


class SaveDecumulationPayload(SavePayloadBase):
    kind: Literal[CalculationKind.DECUMULATION]
    request: DecumulationInput


SavePayload = Annotated[
    Union[SaveAccumulationPayload, SaveDecumulationPayload],
    Field(discriminator="kind"),
]

save_payload_adapter: TypeAdapter[SavePayload] = TypeAdapter(SavePayload)


class CurrencyInfo(EngineModel):
    code: str
    symbol: str
    name: str


class CurrencyPreference(EngineModel):
    model_config = ConfigDict(extra="forbid")

    currency: str = Field(..., min_length=3, max_length=3)
