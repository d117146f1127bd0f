# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Common-area-maintenance (CAM) recovery stage.

Recoverable opex is billed to tenants of billable-category lease products.
The bill is grossed up against occupancy, with occupancy floored at a
threshold so the landlord does not absorb the vacant share below that
level, and is then allocated to plots by occupied area.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from pydantic import Field

from ..core.context import RunContext
from ..core.primitives import (
    DecimalBetween0And1,
    Model,
    NonNegativeDecimal,
    UnitCategoryEnum,
    VatClassEnum,
)
from ..utils.series import ONE, ZERO, Series, add, safe_divide, subtract, total, zeros
from .costs import CostSchedule

logger = logging.getLogger(__name__)

UNASSIGNED_PLOT = "_unassigned"


class CamConfig(Model):
    """
    CAM recovery configuration.

    Attributes:
        enabled: Bill recoverable opex to tenants.
        admin_fee_pct: Mark-up on the recovered amount.
        gross_up_threshold: Occupancy floor used when grossing up.
        billable_categories: Unit categories whose tenants pay CAM.
        vat_class: VAT treatment of CAM billings.
    """

    enabled: bool = False
    admin_fee_pct: NonNegativeDecimal = Decimal(0)
    gross_up_threshold: DecimalBetween0And1 = Decimal("0.95")
    billable_categories: List[UnitCategoryEnum] = Field(
        default_factory=lambda: [
            UnitCategoryEnum.RETAIL,
            UnitCategoryEnum.OFFICE,
            UnitCategoryEnum.INDUSTRIAL,
        ]
    )
    vat_class: VatClassEnum = VatClassEnum.STANDARD


@dataclass(frozen=True)
class CamAllocation:
    """Output of the CAM stage."""

    enabled: bool
    cam_revenue: Series
    opex_net_of_cam: Series
    recoverable_opex: Series
    occupied_area: Series
    leasable_area: Decimal
    occupancy: Series
    occupancy_billed: Series
    vat_class: VatClassEnum = VatClassEnum.STANDARD
    by_plot: Dict[str, Series] = field(default_factory=dict)
    recoverable_by_plot: Dict[str, Series] = field(default_factory=dict)


def compute_cam(ctx: RunContext, costs: CostSchedule) -> CamAllocation:
    """Run the CAM stage. Disabled CAM bills nothing and passes opex through."""
    config = ctx.inputs.cam
    periods = ctx.periods
    if not config.enabled:
        return CamAllocation(
            enabled=False,
            cam_revenue=zeros(periods),
            opex_net_of_cam=costs.opex,
            recoverable_opex=zeros(periods),
            occupied_area=zeros(periods),
            leasable_area=ZERO,
            occupancy=zeros(periods),
            occupancy_billed=zeros(periods),
            vat_class=config.vat_class,
        )

    billable = set(config.billable_categories)
    occupied_by_plot: Dict[str, Series] = {}
    leasable = ZERO
    for unit in ctx.inputs.unit_types:
        if not unit.is_lease or unit.category not in billable:
            continue
        area = unit.total_area_sqm
        leasable += area
        plot = unit.plot_key or UNASSIGNED_PLOT
        occupied = tuple(area * occ for occ in unit.occupancy_series(periods))
        occupied_by_plot[plot] = add(occupied_by_plot.get(plot, zeros(periods)), occupied)

    occupied_area = add(zeros(periods), *occupied_by_plot.values())
    recoverable = costs.recoverable_opex
    markup = ONE + config.admin_fee_pct

    occupancy: List[Decimal] = []
    occupancy_billed: List[Decimal] = []
    bill: List[Decimal] = []
    for t in range(periods):
        occ = safe_divide(occupied_area[t], leasable)
        billed_occ = max(occ, config.gross_up_threshold)
        occupancy.append(occ)
        occupancy_billed.append(billed_occ)
        if occupied_area[t] == ZERO or billed_occ == ZERO:
            bill.append(ZERO)
        else:
            bill.append(recoverable[t] / billed_occ * markup)

    by_plot = {
        plot: tuple(
            safe_divide(bill[t] * area[t], occupied_area[t]) for t in range(periods)
        )
        for plot, area in occupied_by_plot.items()
    }

    cam_revenue = tuple(bill)
    logger.debug(
        f"CAM: recoverable {total(recoverable)}, billed {total(cam_revenue)}, "
        f"leasable area {leasable}"
    )
    return CamAllocation(
        enabled=True,
        cam_revenue=cam_revenue,
        opex_net_of_cam=subtract(costs.opex, cam_revenue),
        recoverable_opex=recoverable,
        occupied_area=occupied_area,
        leasable_area=leasable,
        occupancy=tuple(occupancy),
        occupancy_billed=tuple(occupancy_billed),
        vat_class=config.vat_class,
        by_plot=by_plot,
        recoverable_by_plot=costs.recoverable_by_plot(UNASSIGNED_PLOT),
    )
