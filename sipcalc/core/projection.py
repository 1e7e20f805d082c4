"""Projection engine for SIP (accumulation) and SWP (decumulation) plans.

Every function here is pure: no I/O, no shared state, and no exceptions for
any numeric input. Non-finite inputs propagate into non-finite outputs
instead of raising.

Conventions:
  - Rates are given as annual percentages. The monthly rate is
    ``annual_rate_percent / 12 / 100``.
  - The horizon in months is ``round(years * 12)``; a horizon that is not
    positive, or whose month count is not finite, has zero months.
  - SIP contributions are an annuity-due: each deposit earns interest for the
    month it is made in.
  - The lumpsum compounds annually, not monthly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List

from pydantic import BaseModel

from sipcalc.schemas.accumulation import (
    AccumulationPoint,
    AccumulationRequest,
    AccumulationResult,
)
from sipcalc.schemas.decumulation import (
    DecumulationPoint,
    DecumulationRequest,
    DecumulationResult,
)

MONTHS_PER_YEAR = 12


# -----------------------------
# Shared numeric helpers
# -----------------------------


def monthly_rate(annual_rate_percent: float) -> float:
    return annual_rate_percent / 12 / 100


def month_count(years: float) -> int:
    """Number of whole months in the horizon; 0 for a degenerate horizon."""
    if not years > 0:
        return 0
    months = years * MONTHS_PER_YEAR
    if not math.isfinite(months):
        return 0
    return int(round(months))


def growth_factor(rate: float, periods: float) -> float:
    """``(1 + rate) ** periods`` without raising.

    Overflow gives ``inf`` and a negative base with a fractional exponent
    gives ``nan``.
    """
    base = 1 + rate
    if base < 0 and not float(periods).is_integer():
        return math.nan
    try:
        return base**periods
    except OverflowError:
        return math.inf
    except ZeroDivisionError:
        # 0 ** negative
        return math.inf


def is_finite_result(result: BaseModel) -> bool:
    """True when every number in ``result`` can be shown or stored as-is."""
    return all(
        math.isfinite(value)
        for value in result.model_dump().values()
        if isinstance(value, (int, float))
    )


def annuity_due_factor(rate: float, months: int) -> float:
    """Future value of 1 paid at the start of each of ``months`` periods."""
    if rate == 0:
        return months
    return ((growth_factor(rate, months) - 1) / rate) * (1 + rate)


# -----------------------------
# Accumulation
# -----------------------------


def _plain_sip_maturity(monthly_amount: float, rate: float, months: int) -> float:
    if months <= 0:
        return 0.0
    return monthly_amount * annuity_due_factor(rate, months)


def _step_up_sip_maturity(
    monthly_amount: float, rate: float, months: int, step_up_percent: float
) -> float:
    """Sum of the annuity-due value at each month's remaining horizon.

    Each month's contribution is valued with the annuity-due closed form over
    the months left until maturity, not compounded as a single deposit.
    """
    step_up = step_up_percent / 100
    current = monthly_amount
    total = 0.0
    for index in range(months):
        months_remaining = months - index
        total += current * annuity_due_factor(rate, months_remaining)
        # step up after a completed year, unless nothing is left to invest
        if index % MONTHS_PER_YEAR == MONTHS_PER_YEAR - 1 and index < months - 1:
            current = current * (1 + step_up)
    return total


def _sip_principal(monthly_amount: float, months: int, step_up_percent: float) -> float:
    if step_up_percent <= 0:
        return monthly_amount * months

    step_up = step_up_percent / 100
    full_years, leftover = divmod(months, MONTHS_PER_YEAR)
    current = monthly_amount
    total = 0.0
    for _ in range(full_years):
        total += current * MONTHS_PER_YEAR
        current = current * (1 + step_up)
    if leftover:
        total += current * leftover
    return total


def project_accumulation(request: AccumulationRequest) -> AccumulationResult:
    """Project the maturity value and cost basis of a SIP and/or lumpsum."""
    rate = monthly_rate(request.annual_rate_percent)
    months = month_count(request.years)

    sip_maturity = 0.0
    if request.monthly_amount > 0:
        if request.step_up_percent > 0:
            sip_maturity = _step_up_sip_maturity(
                request.monthly_amount, rate, months, request.step_up_percent
            )
        else:
            sip_maturity = _plain_sip_maturity(request.monthly_amount, rate, months)

    lumpsum_maturity = 0.0
    if request.lumpsum_amount > 0:
        if request.years > 0:
            lumpsum_maturity = request.lumpsum_amount * growth_factor(
                request.annual_rate_percent / 100, request.years
            )
        else:
            lumpsum_maturity = request.lumpsum_amount

    maturity = sip_maturity + lumpsum_maturity
    invested = (
        _sip_principal(request.monthly_amount, months, request.step_up_percent)
        + request.lumpsum_amount
    )
    returns = maturity - invested

    return AccumulationResult(
        maturity_amount=maturity,
        total_invested=invested,
        returns=returns,
        monthly_investment=request.monthly_amount,
        lumpsum_investment=request.lumpsum_amount,
        absolute_return_percent=(returns / invested) * 100 if invested != 0 else 0.0,
    )


def accumulation_schedule(request: AccumulationRequest) -> List[AccumulationPoint]:
    """Value and cost basis at the end of each whole year of the horizon."""
    schedule: List[AccumulationPoint] = []
    whole_years = month_count(request.years) // MONTHS_PER_YEAR
    for year in range(1, whole_years + 1):
        result = project_accumulation(request.model_copy(update={"years": year}))
        schedule.append(
            AccumulationPoint(
                year=year,
                invested=result.total_invested,
                value=result.maturity_amount,
            )
        )
    return schedule


# -----------------------------
# Decumulation
# -----------------------------


@dataclass
class DrawdownState:
    month: int
    balance: float
    total_withdrawn: float
    months_supported: int


def _drawdown(request: DecumulationRequest) -> Iterator[DrawdownState]:
    """Yield the state after every simulated month.

    Order of operations per month:
      1) Apply the month's growth to the balance.
      2) Withdraw the full amount if the balance covers it (an exact match is
         a full withdrawal), otherwise withdraw what is left and stop.
    """
    rate = monthly_rate(request.annual_rate_percent)
    withdrawal = request.monthly_withdrawal

    balance = request.initial_amount
    total_withdrawn = 0.0
    months_supported = 0

    for month in range(1, month_count(request.years) + 1):
        if not balance > 0:
            break

        balance = balance * (1 + rate)

        if balance >= withdrawal:
            balance -= withdrawal
            total_withdrawn += withdrawal
            months_supported += 1
            yield DrawdownState(month, balance, total_withdrawn, months_supported)
            continue

        if balance > 0:
            total_withdrawn += balance
            balance = 0.0
            months_supported += 1
        yield DrawdownState(month, balance, total_withdrawn, months_supported)
        break


def _clamp(balance: float) -> float:
    return 0.0 if balance < 0 else balance


def project_decumulation(request: DecumulationRequest) -> DecumulationResult:
    """Simulate monthly withdrawals and report how long the corpus lasts."""
    if request.monthly_withdrawal <= 0:
        return DecumulationResult(
            final_balance=_clamp(request.initial_amount),
            total_withdrawn=0.0,
            months_supported=0,
            years_supported=0.0,
        )

    final = DrawdownState(0, request.initial_amount, 0.0, 0)
    for state in _drawdown(request):
        final = state

    return DecumulationResult(
        final_balance=_clamp(final.balance),
        total_withdrawn=final.total_withdrawn,
        months_supported=final.months_supported,
        years_supported=final.months_supported / MONTHS_PER_YEAR,
    )


def decumulation_schedule(request: DecumulationRequest) -> List[DecumulationPoint]:
    """Year-end balances of the withdrawal simulation.

    The last row is the year in which the corpus ran out, if it did.
    """
    if request.monthly_withdrawal <= 0:
        return []

    schedule: List[DecumulationPoint] = []
    for state in _drawdown(request):
        exhausted = state.balance <= 0
        if state.month % MONTHS_PER_YEAR == 0 or exhausted:
            schedule.append(
                DecumulationPoint(
                    year=math.ceil(state.month / MONTHS_PER_YEAR),
                    balance=_clamp(state.balance),
                    withdrawn=state.total_withdrawn,
                    months_supported=state.months_supported,
                )
            )
    return schedule


__all__ = [
    "AccumulationRequest",
    "AccumulationResult",
    "DecumulationRequest",
    "DecumulationResult",
    "monthly_rate",
    "month_count",
    "growth_factor",
    "annuity_due_factor",
    "is_finite_result",
    "project_accumulation",
    "accumulation_schedule",
    "project_decumulation",
    "decumulation_schedule",
]
