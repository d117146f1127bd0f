# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cash assembly stage.

    project_before_fin = collections + rent + CAM - capex - opex
    project = project_before_fin + draws - interest - principal - fees
              - dsra_funding + dsra_release - vat_net + vat_passthrough
              - corp_tax - zakat
    equity_cf = project - draws

`vat_passthrough` is the VAT collected from customers less the VAT paid to
suppliers; together with the `vat_net` settlement it makes the cash effect
of VAT equal to the change in the VAT position. Every period with negative
project cash is funded by an equity injection of the same amount.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.context import RunContext
from ..debt.financing import FinancingSchedule
from ..development.cam import CamAllocation
from ..development.costs import CostSchedule
from ..development.revenue import RevenueSchedule
from ..tax.stack import TaxStack
from ..utils.series import (
    Series,
    add,
    cumsum,
    negate,
    negative_part,
    subtract,
    total,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashFlows:
    """Output of the cash assembly stage, including the cash-flow statement."""

    cash_revenue: Series
    capex: Series
    opex: Series
    project_before_fin: Series
    draws: Series
    interest: Series
    principal: Series
    fees: Series
    dsra_funding: Series
    dsra_release: Series
    vat_net: Series
    vat_passthrough: Series
    corp_tax: Series
    zakat: Series
    project: Series
    equity_cf: Series
    equity_injection: Series
    operating: Series
    investing: Series
    financing: Series
    net_cash_flow: Series
    cash_balance: Series

    @property
    def cfads(self) -> Series:
        """Cash flow available for debt service: operating receipts less opex and taxes."""
        return subtract(subtract(self.cash_revenue, self.opex), add(self.corp_tax, self.zakat))


def compute_cash_flows(
    ctx: RunContext,
    costs: CostSchedule,
    revenue: RevenueSchedule,
    cam: CamAllocation,
    financing: FinancingSchedule,
    taxes: TaxStack,
) -> CashFlows:
    """Run the cash assembly stage."""
    cash_revenue = add(revenue.collections, revenue.rent, cam.cam_revenue)
    project_before_fin = subtract(cash_revenue, add(costs.capex, costs.opex))
    fees = financing.fees
    passthrough = taxes.vat.passthrough

    project = subtract(
        add(project_before_fin, financing.draws, financing.dsra_release, passthrough),
        add(
            financing.interest,
            financing.principal,
            fees,
            financing.dsra_funding,
            taxes.vat_net,
            taxes.corp_tax,
            taxes.zakat_charge,
        ),
    )
    equity_cf = subtract(project, financing.draws)
    injection = negative_part(project)

    operating = subtract(
        add(cash_revenue, passthrough),
        add(costs.opex, taxes.vat_net, taxes.corp_tax, taxes.zakat_charge),
    )
    investing = negate(costs.capex)
    financing_section = subtract(
        add(financing.draws, financing.dsra_release, injection),
        add(financing.interest, financing.principal, fees, financing.dsra_funding),
    )
    net_cash_flow = add(project, injection)

    logger.debug(
        f"Cash assembly: project cash {total(project)}, equity injected {total(injection)}"
    )
    return CashFlows(
        cash_revenue=cash_revenue,
        capex=costs.capex,
        opex=costs.opex,
        project_before_fin=project_before_fin,
        draws=financing.draws,
        interest=financing.interest,
        principal=financing.principal,
        fees=fees,
        dsra_funding=financing.dsra_funding,
        dsra_release=financing.dsra_release,
        vat_net=taxes.vat_net,
        vat_passthrough=passthrough,
        corp_tax=taxes.corp_tax,
        zakat=taxes.zakat_charge,
        project=project,
        equity_cf=equity_cf,
        equity_injection=injection,
        operating=operating,
        investing=investing,
        financing=financing_section,
        net_cash_flow=net_cash_flow,
        cash_balance=cumsum(net_cash_flow),
    )
