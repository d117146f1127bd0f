# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cost schedule stage.

Spreads every cost item over the timeline by its phasing, escalates it and
splits the result into capex and opex. The per-item series are kept in the
record because escrow progress, depreciation, VAT input recovery and CAM all
read them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Optional, Sequence

from ..core.context import RunContext
from ..utils.series import (
    ZERO,
    Series,
    add,
    multiply,
    normalize,
    resample_linear,
    scale,
    total,
    zeros,
)
from .budget import CostItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostItemDetail:
    """Escalated series of one cost item."""

    key: str
    is_opex: bool
    series: Series
    total: Decimal
    plot_key: Optional[str] = None
    recoverable: bool = False
    vat_input_eligible: bool = False


@dataclass(frozen=True)
class CostSchedule:
    """Output of the cost schedule stage."""

    capex: Series
    opex: Series
    recoverable_opex: Series
    items: Dict[str, CostItemDetail] = field(default_factory=dict)

    @property
    def total_capex(self) -> Decimal:
        return total(self.capex)

    @property
    def total_opex(self) -> Decimal:
        return total(self.opex)

    def capex_items(self) -> Iterable[CostItemDetail]:
        return (d for d in self.items.values() if not d.is_opex)

    def recoverable_by_plot(self, default_plot: str) -> Dict[str, Series]:
        """Recoverable opex grouped by plot key."""
        grouped: Dict[str, Series] = {}
        for detail in self.items.values():
            if not detail.recoverable:
                continue
            plot = detail.plot_key or default_plot
            if plot in grouped:
                grouped[plot] = add(grouped[plot], detail.series)
            else:
                grouped[plot] = detail.series
        return grouped


def phasing_weights(item: CostItem, periods: int) -> Series:
    """
    Length-T weights summing to one (or all zeros).

    Explicit phasing is normalized, resampled by linear interpolation and
    normalized again so the item's full base amount is spent inside the
    timeline.
    """
    if item.schedule is not None:
        return item.schedule.weights(periods)
    if not item.phasing:
        return zeros(periods)
    shaped = normalize(item.phasing)
    if total(shaped) == ZERO:
        return zeros(periods)
    return normalize(resample_linear(shaped, periods))


def escalate_cost_item(
    item: CostItem, periods: int, index_series: Sequence[Decimal]
) -> Series:
    """base amount x phasing weight x escalation multiplier, per period."""
    weights = phasing_weights(item, periods)
    return multiply(scale(weights, item.base_amount), index_series)


def compute_cost_schedule(ctx: RunContext) -> CostSchedule:
    """Run the cost schedule stage for all cost items."""
    periods = ctx.periods
    capex = zeros(periods)
    opex = zeros(periods)
    recoverable = zeros(periods)
    items: Dict[str, CostItemDetail] = {}

    for item in ctx.inputs.cost_items:
        series = escalate_cost_item(item, periods, ctx.escalation.series(item.index_bucket))
        items[item.key] = CostItemDetail(
            key=item.key,
            is_opex=item.is_opex,
            series=series,
            total=total(series),
            plot_key=item.plot_key,
            recoverable=item.recoverable,
            vat_input_eligible=item.vat_input_eligible,
        )
        if item.is_opex:
            opex = add(opex, series)
            if item.recoverable:
                recoverable = add(recoverable, series)
        else:
            capex = add(capex, series)

    schedule = CostSchedule(
        capex=capex, opex=opex, recoverable_opex=recoverable, items=items
    )
    logger.debug(
        f"Cost schedule: {len(items)} items, capex {schedule.total_capex}, opex {schedule.total_opex}"
    )
    return schedule
