# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Balance sheet reconciliation stage.

Every line is rolled forward from the flows of earlier stages; retained
earnings is cumulative PATMI, never a plug. The stage then measures
`assets_total - liab_equity_total` in every period. A non-zero imbalance
means an earlier stage is inconsistent; it is reported through `tie_out_ok`
and never corrected here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.context import RunContext
from ..debt.financing import FinancingSchedule
from ..development.depreciation import DepreciationSchedule
from ..development.revenue import RevenueSchedule
from ..tax.stack import TaxStack
from ..utils.series import ZERO, Series, add, cumsum, subtract
from .cash import CashFlows
from .profit_loss import ProfitAndLoss

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceSheet:
    """Output of the balance sheet stage."""

    cash: Series
    accounts_receivable: Series
    dsra: Series
    nbv: Series
    vat_asset: Series
    contract_asset: Series
    assets_total: Series
    debt: Series
    vat_liability: Series
    deferred_revenue: Series
    paid_in_equity: Series
    retained_earnings: Series
    liabilities_total: Series
    equity_total: Series
    liab_equity_total: Series
    imbalance: Series
    tie_out_ok: bool
    max_abs_imbalance: Decimal
    first_imbalance_period: Optional[int] = None


def compute_balance_sheet(
    ctx: RunContext,
    revenue: RevenueSchedule,
    depreciation: DepreciationSchedule,
    financing: FinancingSchedule,
    taxes: TaxStack,
    cash: CashFlows,
    pnl: ProfitAndLoss,
) -> BalanceSheet:
    """Assemble the balance sheet and check the identity."""
    tolerance = ctx.settings.calculation.tie_out_tolerance

    assets_total = add(
        cash.cash_balance,
        revenue.accounts_receivable,
        financing.dsra_balance,
        depreciation.nbv,
        taxes.vat.carryforward,
        revenue.contract_asset,
    )
    paid_in = cumsum(cash.equity_injection)
    retained = cumsum(pnl.patmi)
    liabilities = add(financing.debt_balance, taxes.vat.liability, revenue.deferred_revenue)
    equity = add(paid_in, retained)
    liab_equity_total = add(liabilities, equity)
    imbalance = subtract(assets_total, liab_equity_total)

    breaches = [t for t, gap in enumerate(imbalance) if abs(gap) >= tolerance]
    tie_out_ok = not breaches
    max_gap = max((abs(gap) for gap in imbalance), default=ZERO)
    if not tie_out_ok:
        logger.warning(
            f"Balance sheet does not tie out: max |imbalance| {max_gap} "
            f"first at period {breaches[0]}"
        )

    return BalanceSheet(
        cash=cash.cash_balance,
        accounts_receivable=revenue.accounts_receivable,
        dsra=financing.dsra_balance,
        nbv=depreciation.nbv,
        vat_asset=taxes.vat.carryforward,
        contract_asset=revenue.contract_asset,
        assets_total=assets_total,
        debt=financing.debt_balance,
        vat_liability=taxes.vat.liability,
        deferred_revenue=revenue.deferred_revenue,
        paid_in_equity=paid_in,
        retained_earnings=retained,
        liabilities_total=liabilities,
        equity_total=equity,
        liab_equity_total=liab_equity_total,
        imbalance=imbalance,
        tie_out_ok=tie_out_ok,
        max_abs_imbalance=max_gap,
        first_imbalance_period=breaches[0] if breaches else None,
    )
