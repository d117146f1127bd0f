# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Revenue engine stage.

For each unit type the engine builds three sale series (billings, raw
collections, raw recognized revenue) plus rent for lease products. Raw
collections and raw recognition are summed across unit types and capped as
totals against the escrow release; the capped totals are then shared back
to unit types pro-rata by their outstanding uncapped backlog so downstream
VAT can still be computed per VAT class.

Recognition policies:
- handover: whole contract value in the delivery month (billings if none)
- poc_cost: contract value x increase in overall cost progress
- poc_physical: contract value along the unit's sell-through curve
- billings_capped: billings as issued
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Mapping, Sequence

from ..core.context import RunContext
from ..core.primitives import VatClassEnum
from ..utils.series import (
    ZERO,
    Series,
    add,
    allocate_pro_rata,
    cumsum,
    decumulate,
    scale,
    subtract,
    total,
    zeros,
)
from .escrow import EscrowRelease, cap_to_release
from .program import (
    BillingsCappedRecognition,
    HandoverRecognition,
    PocCostRecognition,
    PocPhysicalRecognition,
    UnitType,
    weights_from_curve,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitRevenueDetail:
    """Per unit type revenue breakdown."""

    key: str
    is_sale: bool
    vat_class: VatClassEnum
    contract_value: Decimal
    billings: Series
    collections_raw: Series
    recognized_raw: Series
    collections: Series
    recognized: Series
    rent: Series


@dataclass(frozen=True)
class RevenueSchedule:
    """Output of the revenue stage (escrow-capped)."""

    billings: Series
    collections: Series
    recognized: Series
    rent: Series
    collections_raw: Series
    recognized_raw: Series
    accounts_receivable: Series
    contract_balance: Series
    collections_truncated: bool
    recognition_truncated: bool
    units: Dict[str, UnitRevenueDetail] = field(default_factory=dict)

    @property
    def escrow_truncated(self) -> bool:
        return self.collections_truncated or self.recognition_truncated

    @property
    def deferred_revenue(self) -> Series:
        """Contract liability: billed ahead of recognition."""
        return tuple(max(v, ZERO) for v in self.contract_balance)

    @property
    def contract_asset(self) -> Series:
        """Recognized ahead of billing."""
        return tuple(max(-v, ZERO) for v in self.contract_balance)

    def by_vat_class(self, attribute: str, vat_class: VatClassEnum) -> Series:
        """Sum one per-unit series over unit types of a VAT class."""
        periods = len(self.billings)
        selected = [
            getattr(detail, attribute)
            for detail in self.units.values()
            if detail.vat_class == vat_class
        ]
        return add(zeros(periods), *selected)


def recognize_unit(
    unit: UnitType,
    billings: Series,
    contract_value: Decimal,
    progress: Sequence[Decimal],
) -> Series:
    """Raw (uncapped) recognized revenue of a sale unit type under its policy."""
    periods = len(billings)
    policy = unit.revenue_policy
    if isinstance(policy, HandoverRecognition):
        if policy.delivery_month is None:
            return billings
        out = list(zeros(periods))
        if policy.delivery_month < periods:
            out[policy.delivery_month] = contract_value
        return tuple(out)
    if isinstance(policy, PocCostRecognition):
        return scale(decumulate(progress), contract_value)
    if isinstance(policy, PocPhysicalRecognition):
        return scale(weights_from_curve(unit.curve.values, periods), contract_value)
    if isinstance(policy, BillingsCappedRecognition):
        return billings
    raise ValueError(f"Unsupported revenue policy: {type(policy).__name__}")


def collect_unit(unit: UnitType, billings: Series, contract_value: Decimal) -> Series:
    """Raw (uncapped) collections: collection profile, or billings when none."""
    if unit.collection_curve is None:
        return billings
    return scale(weights_from_curve(unit.collection_curve, len(billings)), contract_value)


def allocate_by_backlog(
    raw_by_unit: Mapping[str, Series], capped_total: Sequence[Decimal]
) -> Dict[str, Series]:
    """
    Share a capped total back to its components.

    Each period's capped amount is split pro-rata by every component's
    outstanding backlog (cumulative raw less cumulative allocated), so no
    component is ever allocated more than it raised.
    """
    keys = list(raw_by_unit)
    cum_raw = {k: ZERO for k in keys}
    cum_alloc = {k: ZERO for k in keys}
    out: Dict[str, List[Decimal]] = {k: [] for k in keys}
    for t, amount in enumerate(capped_total):
        for k in keys:
            cum_raw[k] += raw_by_unit[k][t]
        backlogs = [max(cum_raw[k] - cum_alloc[k], ZERO) for k in keys]
        shares = allocate_pro_rata(amount, backlogs) if amount != ZERO else (ZERO,) * len(keys)
        for k, share in zip(keys, shares):
            cum_alloc[k] += share
            out[k].append(share)
    return {k: tuple(v) for k, v in out.items()}


def compute_revenue(ctx: RunContext, escrow: EscrowRelease) -> RevenueSchedule:
    """Run the revenue stage."""
    periods = ctx.periods
    billings_by_unit: Dict[str, Series] = {}
    collections_by_unit: Dict[str, Series] = {}
    recognized_by_unit: Dict[str, Series] = {}
    rent_by_unit: Dict[str, Series] = {}
    contract_by_unit: Dict[str, Decimal] = {}

    for unit in ctx.inputs.unit_types:
        billings = unit.billing_series(periods, ctx.escalation.series(unit.index_bucket_price))
        contract_value = total(billings)
        billings_by_unit[unit.key] = billings
        contract_by_unit[unit.key] = contract_value
        rent_by_unit[unit.key] = unit.rent_series(
            periods, ctx.escalation.series(unit.index_bucket_rent)
        )
        if unit.is_sale:
            collections_by_unit[unit.key] = collect_unit(unit, billings, contract_value)
            recognized_by_unit[unit.key] = recognize_unit(
                unit, billings, contract_value, escrow.progress
            )
        else:
            collections_by_unit[unit.key] = zeros(periods)
            recognized_by_unit[unit.key] = zeros(periods)

    billings = add(zeros(periods), *billings_by_unit.values())
    rent = add(zeros(periods), *rent_by_unit.values())
    collections_raw = add(zeros(periods), *collections_by_unit.values())
    recognized_raw = add(zeros(periods), *recognized_by_unit.values())

    collections, collections_truncated = cap_to_release(collections_raw, escrow.allowed_release)
    recognized, recognition_truncated = cap_to_release(recognized_raw, escrow.allowed_release)
    if collections_truncated or recognition_truncated:
        logger.warning(
            f"Escrow cap truncated revenue: collections={collections_truncated}, "
            f"recognition={recognition_truncated}"
        )

    collections_alloc = allocate_by_backlog(collections_by_unit, collections)
    recognized_alloc = allocate_by_backlog(recognized_by_unit, recognized)

    units = {
        unit.key: UnitRevenueDetail(
            key=unit.key,
            is_sale=unit.is_sale,
            vat_class=unit.vat_class,
            contract_value=contract_by_unit[unit.key],
            billings=billings_by_unit[unit.key],
            collections_raw=collections_by_unit[unit.key],
            recognized_raw=recognized_by_unit[unit.key],
            collections=collections_alloc[unit.key],
            recognized=recognized_alloc[unit.key],
            rent=rent_by_unit[unit.key],
        )
        for unit in ctx.inputs.unit_types
    }

    cum_billings = cumsum(billings)
    schedule = RevenueSchedule(
        billings=billings,
        collections=collections,
        recognized=recognized,
        rent=rent,
        collections_raw=collections_raw,
        recognized_raw=recognized_raw,
        accounts_receivable=subtract(cum_billings, cumsum(collections)),
        contract_balance=subtract(cum_billings, cumsum(recognized)),
        collections_truncated=collections_truncated,
        recognition_truncated=recognition_truncated,
        units=units,
    )
    logger.debug(
        f"Revenue: billings {total(billings)}, collected {total(collections)}, "
        f"recognized {total(recognized)}, rent {total(rent)}"
    )
    return schedule
