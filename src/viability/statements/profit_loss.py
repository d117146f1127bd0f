# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.context import RunContext
from ..debt.financing import FinancingSchedule
from ..development.cam import CamAllocation
from ..development.costs import CostSchedule
from ..development.depreciation import DepreciationSchedule
from ..development.revenue import RevenueSchedule
from ..tax.stack import TaxStack
from ..utils.series import Series, add, subtract, total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfitAndLoss:
    """Monthly income statement. Financing fees are expensed with interest."""

    revenue_sales: Series
    revenue_rent: Series
    revenue_cam: Series
    revenue: Series
    opex: Series
    ebitda: Series
    depreciation: Series
    ebit: Series
    interest: Series
    fees: Series
    pbt: Series
    corp_tax: Series
    zakat: Series
    patmi: Series


def compute_profit_and_loss(
    ctx: RunContext,
    costs: CostSchedule,
    revenue: RevenueSchedule,
    cam: CamAllocation,
    depreciation: DepreciationSchedule,
    financing: FinancingSchedule,
    taxes: TaxStack,
) -> ProfitAndLoss:
    total_revenue = add(revenue.recognized, revenue.rent, cam.cam_revenue)
    ebitda = subtract(total_revenue, costs.opex)
    ebit = subtract(ebitda, depreciation.depreciation)
    fees = financing.fees
    pbt = subtract(ebit, add(financing.interest, fees))
    patmi = subtract(pbt, add(taxes.corp_tax, taxes.zakat_charge))
    logger.debug(f"P&L: revenue {total(total_revenue)}, PATMI {total(patmi)}")
    return ProfitAndLoss(
        revenue_sales=revenue.recognized,
        revenue_rent=revenue.rent,
        revenue_cam=cam.cam_revenue,
        revenue=total_revenue,
        opex=costs.opex,
        ebitda=ebitda,
        depreciation=depreciation.depreciation,
        ebit=ebit,
        interest=financing.interest,
        fees=fees,
        pbt=pbt,
        corp_tax=taxes.corp_tax,
        zakat=taxes.zakat_charge,
        patmi=patmi,
    )
