# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Depreciation stage.

Straight-line only. The basis of an item is its escalated capex spent up to
and including the start month, less salvage; later spend on the same item
is carried at cost in NBV without being depreciated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from ..core.context import RunContext
from ..utils.series import ZERO, Series, add, cumsum, total, zeros
from .costs import CostSchedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepreciationDetail:
    key: str
    basis: Decimal
    monthly_charge: Decimal
    start_month: int
    useful_life_months: int
    charge: Series


@dataclass(frozen=True)
class DepreciationSchedule:
    """Output of the depreciation stage."""

    depreciation: Series
    accumulated: Series
    nbv: Series
    items: Dict[str, DepreciationDetail] = field(default_factory=dict)


def straight_line_charge(
    key: str,
    capex: Series,
    start_month: int,
    useful_life_months: int,
    salvage: Decimal,
) -> DepreciationDetail:
    periods = len(capex)
    spent_to_start = total(capex[: start_month + 1])
    basis = max(spent_to_start - salvage, ZERO)
    monthly = basis / Decimal(useful_life_months)
    charge: List[Decimal] = list(zeros(periods))
    for t in range(start_month, min(start_month + useful_life_months, periods)):
        charge[t] = monthly
    return DepreciationDetail(
        key=key,
        basis=basis,
        monthly_charge=monthly,
        start_month=start_month,
        useful_life_months=useful_life_months,
        charge=tuple(charge),
    )


def compute_depreciation(ctx: RunContext, costs: CostSchedule) -> DepreciationSchedule:
    """Run the depreciation stage and roll NBV forward."""
    periods = ctx.periods
    items: Dict[str, DepreciationDetail] = {}
    for item in ctx.inputs.cost_items:
        policy = item.depreciation
        if policy is None:
            continue
        items[item.key] = straight_line_charge(
            item.key,
            costs.items[item.key].series,
            policy.start_month,
            policy.useful_life_months,
            policy.salvage_value,
        )

    depreciation = add(zeros(periods), *(d.charge for d in items.values()))
    accumulated = cumsum(depreciation)
    nbv = tuple(
        max(capex_to_date - dep_to_date, ZERO)
        for capex_to_date, dep_to_date in zip(cumsum(costs.capex), accumulated)
    )
    logger.debug(f"Depreciation: {len(items)} items, total charge {total(depreciation)}")
    return DepreciationSchedule(
        depreciation=depreciation, accumulated=accumulated, nbv=nbv, items=items
    )
