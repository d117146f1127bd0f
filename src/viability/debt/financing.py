# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt/financing waterfall stage.

Tranches are processed one at a time in `draw_priority` order. Each tranche
first takes its share of whatever funding need the senior tranches left
unmet, then runs its own service schedule (interest, amortization, fees) and
reserve account. Results are aggregated across tranches at the end.

Timing conventions:
- draws land at the start of a period and bear that period's interest
- interest = opening balance (after draws) x rate / 12
- ongoing fee accrues on the closing balance, commitment fee on the undrawn
  facility while the availability window is open
- funding need beyond every facility's capacity is left undrawn
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ..core.context import RunContext
from ..core.primitives import DsraBasisEnum
from ..development.costs import CostSchedule
from ..development.escrow import EscrowRelease
from ..utils.series import ZERO, Series, add, total, zeros
from .tranche import TWELVE, DebtTranche, DsraPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrancheSchedule:
    """Full period-by-period schedule of one tranche."""

    key: str
    draw_priority: int
    facility_limit: Decimal
    draws: Series
    opening_balance: Series
    interest: Series
    principal: Series
    closing_balance: Series
    upfront_fee: Series
    ongoing_fee: Series
    commitment_fee: Series
    dsra_target: Series
    dsra_funding: Series
    dsra_release: Series
    dsra_balance: Series
    first_draw_period: Optional[int] = None
    final_draw_period: Optional[int] = None

    @property
    def fees(self) -> Series:
        return add(self.upfront_fee, self.ongoing_fee, self.commitment_fee)

    @property
    def debt_service(self) -> Series:
        return add(self.interest, self.principal)

    @property
    def total_drawn(self) -> Decimal:
        return total(self.draws)


@dataclass(frozen=True)
class FinancingSchedule:
    """Output of the financing stage, aggregated over tranches."""

    funding_need: Series
    unfunded_need: Series
    draws: Series
    interest: Series
    principal: Series
    upfront_fees: Series
    ongoing_fees: Series
    commitment_fees: Series
    debt_balance: Series
    dsra_funding: Series
    dsra_release: Series
    dsra_balance: Series
    tranches: Dict[str, TrancheSchedule] = field(default_factory=dict)

    @property
    def fees(self) -> Series:
        return add(self.upfront_fees, self.ongoing_fees, self.commitment_fees)

    @property
    def debt_service(self) -> Series:
        return add(self.interest, self.principal)


def draw_tranche(
    tranche: DebtTranche,
    funding_need: Sequence[Decimal],
    remaining_need: List[Decimal],
    facility_limit: Decimal,
) -> Series:
    """
    Draw a tranche against the need left by senior tranches.

    `remaining_need` is reduced in place by the amounts drawn so the next
    tranche only sees what is still unmet.
    """
    periods = len(funding_need)
    drawn_to_date = ZERO
    draws: List[Decimal] = []
    for t in range(periods):
        amount = ZERO
        if tranche.is_available(t, periods) and remaining_need[t] > ZERO:
            amount = min(remaining_need[t], facility_limit - drawn_to_date)
            if tranche.limit_ltc is not None:
                amount = min(amount, funding_need[t] * tranche.limit_ltc)
            amount = max(amount, ZERO)
        remaining_need[t] -= amount
        drawn_to_date += amount
        draws.append(amount)
    return tuple(draws)


def reserve_targets(
    debt_service: Sequence[Decimal],
    closing_balance: Sequence[Decimal],
    policy: DsraPolicy,
) -> Series:
    """Reserve target per period; zero once the tranche is repaid."""
    periods = len(debt_service)
    targets: List[Decimal] = []
    for t in range(periods):
        if closing_balance[t] <= ZERO:
            targets.append(ZERO)
            continue
        if policy.basis == DsraBasisEnum.FORWARD:
            window = debt_service[t + 1 : t + 1 + policy.months]
        else:
            window = debt_service[max(0, t - policy.months + 1) : t + 1]
        targets.append(total(window))
    return tuple(targets)


def service_tranche(
    tranche: DebtTranche, draws: Series, facility_limit: Decimal
) -> TrancheSchedule:
    """Interest, amortization, fees and reserve account of one tranche."""
    periods = len(draws)
    drawn_periods = [t for t, d in enumerate(draws) if d > ZERO]
    first_draw = drawn_periods[0] if drawn_periods else None
    final_draw = drawn_periods[-1] if drawn_periods else None
    rate = tranche.monthly_rate
    window_end = tranche.availability_end(periods)

    opening: List[Decimal] = []
    interest: List[Decimal] = []
    principal: List[Decimal] = []
    closing: List[Decimal] = []
    upfront: List[Decimal] = []
    ongoing: List[Decimal] = []
    commitment: List[Decimal] = []

    balance = ZERO
    drawn_to_date = ZERO
    for t in range(periods):
        drawn_to_date += draws[t]
        balance_open = balance + draws[t]
        accrued = balance_open * rate
        repaid = ZERO
        if final_draw is not None and balance_open > ZERO:
            repaid = tranche.amortization.principal_due(t, final_draw, balance_open, rate)
            repaid = min(max(repaid, ZERO), balance_open)
        balance = balance_open - repaid

        opening.append(balance_open)
        interest.append(accrued)
        principal.append(repaid)
        closing.append(balance)
        upfront.append(draws[t] * tranche.upfront_fee_pct if t == first_draw else ZERO)
        ongoing.append(balance * tranche.ongoing_fee_pct_pa / TWELVE)
        undrawn = max(facility_limit - drawn_to_date, ZERO)
        commitment.append(
            undrawn * tranche.commitment_fee_pct_pa / TWELVE
            if tranche.availability_start_m <= t <= window_end
            else ZERO
        )

    debt_service = add(tuple(interest), tuple(principal))
    if tranche.dsra is not None:
        targets = reserve_targets(debt_service, closing, tranche.dsra)
    else:
        targets = zeros(periods)

    funding: List[Decimal] = []
    release: List[Decimal] = []
    reserve: List[Decimal] = []
    held = ZERO
    for target in targets:
        funding.append(max(target - held, ZERO))
        release.append(max(held - target, ZERO))
        held = target
        reserve.append(held)

    return TrancheSchedule(
        key=tranche.key,
        draw_priority=tranche.draw_priority,
        facility_limit=facility_limit,
        draws=draws,
        opening_balance=tuple(opening),
        interest=tuple(interest),
        principal=tuple(principal),
        closing_balance=tuple(closing),
        upfront_fee=tuple(upfront),
        ongoing_fee=tuple(ongoing),
        commitment_fee=tuple(commitment),
        dsra_target=targets,
        dsra_funding=tuple(funding),
        dsra_release=tuple(release),
        dsra_balance=tuple(reserve),
        first_draw_period=first_draw,
        final_draw_period=final_draw,
    )


def schedule_tranches(
    tranches: Sequence[DebtTranche],
    funding_need: Series,
    gross_value: Decimal = ZERO,
) -> FinancingSchedule:
    """
    Draw, service and aggregate a debt stack against a funding need series.

    Args:
        tranches: Debt stack in any order; sorted by draw priority, then key.
        funding_need: Per-period amount to fund (project capex).
        gross_value: Gross sales value used for LTV sizing.
    """
    periods = len(funding_need)
    total_cost = total(funding_need)
    remaining = list(funding_need)
    schedules: Dict[str, TrancheSchedule] = {}

    for tranche in sorted(tranches, key=lambda tr: (tr.draw_priority, tr.key)):
        limit = tranche.facility_limit(total_cost, gross_value)
        draws = draw_tranche(tranche, funding_need, remaining, limit)
        schedules[tranche.key] = service_tranche(tranche, draws, limit)
        logger.debug(
            f"Tranche '{tranche.key}' (priority {tranche.draw_priority}): "
            f"limit {limit}, drawn {schedules[tranche.key].total_drawn}"
        )

    unfunded = tuple(remaining)
    if tranches and total(unfunded) > ZERO:
        logger.debug(f"Funding need left undrawn by the debt stack: {total(unfunded)}")

    def combine(attribute: str) -> Series:
        return add(zeros(periods), *(getattr(s, attribute) for s in schedules.values()))

    return FinancingSchedule(
        funding_need=funding_need,
        unfunded_need=unfunded,
        draws=combine("draws"),
        interest=combine("interest"),
        principal=combine("principal"),
        upfront_fees=combine("upfront_fee"),
        ongoing_fees=combine("ongoing_fee"),
        commitment_fees=combine("commitment_fee"),
        debt_balance=combine("closing_balance"),
        dsra_funding=combine("dsra_funding"),
        dsra_release=combine("dsra_release"),
        dsra_balance=combine("dsra_balance"),
        tranches=schedules,
    )


def compute_financing(
    ctx: RunContext, costs: CostSchedule, escrow: EscrowRelease
) -> FinancingSchedule:
    """Run the financing stage against finalized capex."""
    return schedule_tranches(ctx.inputs.debt, costs.capex, escrow.contract_value_total)
