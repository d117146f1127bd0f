# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tax stack stage: VAT, then corporate tax, then zakat.

Runs after financing so that interest is final when the deductibility cap
is applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.context import RunContext
from ..debt.financing import FinancingSchedule
from ..development.cam import CamAllocation
from ..development.costs import CostSchedule
from ..development.depreciation import DepreciationSchedule
from ..development.revenue import RevenueSchedule
from ..utils.series import Series, add, subtract, total
from .corporate import (
    CorporateTaxSchedule,
    ZakatSchedule,
    compute_corporate_tax,
    compute_ebit,
    compute_zakat,
)
from .vat import VatSchedule, compute_vat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaxStack:
    """Output of the tax stage."""

    vat: VatSchedule
    corporate: CorporateTaxSchedule
    zakat: ZakatSchedule

    @property
    def vat_net(self) -> Series:
        return self.vat.settlement

    @property
    def corp_tax(self) -> Series:
        return self.corporate.tax

    @property
    def zakat_charge(self) -> Series:
        return self.zakat.zakat


def pre_tax_project_cash(
    costs: CostSchedule,
    revenue: RevenueSchedule,
    cam: CamAllocation,
    financing: FinancingSchedule,
    vat: VatSchedule,
) -> Series:
    """Project cash before corporate tax and zakat."""
    inflows = add(
        revenue.collections,
        revenue.rent,
        cam.cam_revenue,
        financing.draws,
        financing.dsra_release,
        vat.passthrough,
    )
    outflows = add(
        costs.capex,
        costs.opex,
        financing.interest,
        financing.principal,
        financing.fees,
        financing.dsra_funding,
        vat.settlement,
    )
    return subtract(inflows, outflows)


def compute_tax_stack(
    ctx: RunContext,
    costs: CostSchedule,
    revenue: RevenueSchedule,
    cam: CamAllocation,
    depreciation: DepreciationSchedule,
    financing: FinancingSchedule,
) -> TaxStack:
    """Run the tax stage."""
    config = ctx.inputs.tax
    vat = compute_vat(config.vat, costs, revenue, cam)

    revenue_pl = add(revenue.recognized, revenue.rent, cam.cam_revenue)
    ebit = compute_ebit(revenue_pl, costs.opex, depreciation.depreciation)
    corporate = compute_corporate_tax(config.corporate, ebit, financing.interest)

    zakat = compute_zakat(
        config.zakat,
        depreciation.nbv,
        pre_tax_project_cash(costs, revenue, cam, financing, vat),
    )
    logger.debug(
        f"Tax stack: VAT settled {total(vat.settlement)}, corporate tax {total(corporate.tax)}, "
        f"zakat {total(zakat.zakat)}"
    )
    return TaxStack(vat=vat, corporate=corporate, zakat=zakat)
