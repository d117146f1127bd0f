# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Escrow release curve stage.

Off-plan sale proceeds sit in escrow and are released to the developer as
construction progresses. The stage turns capex progress into a cumulative
release cap on the total contract value; the revenue stage truncates both
collections and recognized revenue to that cap.

Release rules:
- alpha_beta: smooth power-law curve of cost progress
- milestones: month-keyed cumulative release table

Disabled escrow releases the full contract value in period 0, so the cap
never binds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Literal, Sequence, Tuple, Union

from pydantic import Field, field_validator
from typing_extensions import Annotated

from ..core.context import RunContext
from ..core.primitives import DecimalBetween0And1, Model, NonNegativeDecimal, PositiveInt
from ..utils.series import (
    ONE,
    ZERO,
    Series,
    clamp,
    constant,
    cumsum,
    decumulate,
    safe_divide,
    total,
)
from .costs import CostSchedule

logger = logging.getLogger(__name__)

_EXPONENT_FLOOR = Decimal("1e-9")


class AlphaBetaRelease(Model):
    """
    Power-law release rule.

    release = p^alpha when beta is 1, otherwise
    p^alpha / (p^alpha + (1 - p)^beta), clamped to [0, 1].
    """

    kind: Literal["alpha_beta"] = "alpha_beta"
    alpha: NonNegativeDecimal = Decimal(1)
    beta: NonNegativeDecimal = Decimal(1)

    def fraction(self, progress: Decimal) -> Decimal:
        return release_fraction_alpha_beta(progress, self.alpha, self.beta)


class Milestone(Model):
    month: PositiveInt
    pct_cum_release: DecimalBetween0And1


class MilestoneRelease(Model):
    """Cumulative release fraction keyed by month; the highest reached applies."""

    kind: Literal["milestones"] = "milestones"
    milestones: List[Milestone] = Field(min_length=1)

    def fraction_at(self, t: int) -> Decimal:
        reached = [m.pct_cum_release for m in self.milestones if m.month <= t]
        return max(reached, default=ZERO)


AnyReleaseRule = Annotated[
    Union[AlphaBetaRelease, MilestoneRelease],
    Field(discriminator="kind"),
]


class EscrowConfig(Model):
    """Escrow (WAFI-style) release configuration."""

    enabled: bool = False
    release: AnyReleaseRule = Field(default_factory=AlphaBetaRelease)

    @field_validator("release")
    @classmethod
    def validate_release(cls, v):
        if isinstance(v, MilestoneRelease):
            months = [m.month for m in v.milestones]
            if len(months) != len(set(months)):
                raise ValueError("Escrow milestones must have distinct months")
        return v


def release_fraction_alpha_beta(progress: Decimal, alpha: Decimal, beta: Decimal) -> Decimal:
    """Smooth S-curve generalization of progress-linked release."""
    p = clamp(progress)
    a = max(alpha, _EXPONENT_FLOOR)
    b = max(beta, _EXPONENT_FLOOR)
    pa = p**a
    if abs(b - ONE) < _EXPONENT_FLOOR:
        return clamp(pa)
    denominator = pa + (ONE - p) ** b
    return clamp(safe_divide(pa, denominator))


def cost_progress(capex: Sequence[Decimal]) -> Series:
    """Cumulative capex share, 0 throughout when there is no capex."""
    capex_total = total(capex)
    if capex_total == ZERO:
        return constant(ZERO, len(capex))
    return tuple(clamp(c / capex_total) for c in cumsum(capex))


def cap_to_release(
    raw: Sequence[Decimal], allowed: Sequence[Decimal]
) -> Tuple[Series, bool]:
    """
    Truncate a flow so its cumulative sum never exceeds cumulative release.

    Amounts held back in one period flow out in later periods as soon as the
    cumulative release catches up.

    Returns:
        (capped series, True when any period was truncated)
    """
    cum_raw = cumsum(raw)
    cum_allowed = cumsum(allowed)
    truncated = False
    capped_cum: List[Decimal] = []
    for raw_to_date, allowed_to_date in zip(cum_raw, cum_allowed, strict=True):
        if raw_to_date > allowed_to_date:
            truncated = True
            capped_cum.append(allowed_to_date)
        else:
            capped_cum.append(raw_to_date)
    return decumulate(capped_cum), truncated


@dataclass(frozen=True)
class EscrowRelease:
    """Output of the escrow stage."""

    enabled: bool
    contract_value_total: Decimal
    progress: Series
    release_fraction: Series
    allowed_release: Series

    @property
    def cumulative_allowed(self) -> Series:
        return cumsum(self.allowed_release)


def contract_value_total(ctx: RunContext) -> Decimal:
    """Total escalated billings across sale unit types."""
    periods = ctx.periods
    return sum(
        (
            total(ut.billing_series(periods, ctx.escalation.series(ut.index_bucket_price)))
            for ut in ctx.inputs.unit_types
            if ut.is_sale
        ),
        ZERO,
    )


def compute_escrow_release(ctx: RunContext, costs: CostSchedule) -> EscrowRelease:
    """Run the escrow stage: progress → release fraction → allowed increments."""
    config = ctx.inputs.escrow
    periods = ctx.periods
    contract_total = contract_value_total(ctx)
    progress = cost_progress(costs.capex)

    if not config.enabled:
        fractions = constant(ONE, periods)
    elif isinstance(config.release, MilestoneRelease):
        fractions = tuple(config.release.fraction_at(t) for t in range(periods))
    else:
        fractions = tuple(config.release.fraction(p) for p in progress)

    allowed: List[Decimal] = []
    released = ZERO
    for fraction in fractions:
        increment = max(ZERO, contract_total * fraction - released)
        allowed.append(increment)
        released += increment

    logger.debug(
        f"Escrow release: enabled={config.enabled}, contract value {contract_total}, "
        f"released by horizon {released}"
    )
    return EscrowRelease(
        enabled=config.enabled,
        contract_value_total=contract_total,
        progress=progress,
        release_fraction=fractions,
        allowed_release=tuple(allowed),
    )
