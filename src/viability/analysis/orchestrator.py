# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Feasibility Run Orchestrator

The FeasibilityCalculator runs the thirteen stages of a feasibility run in
their fixed order. Each stage is a pure function of the run context and the
records returned by earlier stages; the calculator only threads those
records through and composes them into an EngineResult.

Stage order:
1. **Escalation** - index multipliers (resolved when the context is built)
2. **Cost Schedule** - phased and escalated capex and opex
3. **Escrow** - allowed release of buyer cash
4. **Revenue** - billings, collections, recognition and rent
5. **CAM** - recovery of recoverable opex from tenants
6. **Depreciation** - straight-line charges and NBV
7. **Financing** - draws, interest, repayment, fees and DSRA
8. **Tax** - VAT, corporate tax and zakat
9. **Cash Assembly** - project and equity cash, cash-flow statement
10. **Profit & Loss**
11. **Balance Sheet** - rollforward and tie-out diagnostic
12. **Equity Waterfall** - calls, pref, catch-up, promote, KPIs
13. **Covenants** - DSCR and ICR tests

Example:
    ```python
    from viability.analysis.orchestrator import FeasibilityCalculator

    result = FeasibilityCalculator(inputs, EngineSettings()).run()
    print(result.balance_sheet.tie_out_ok)
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import localcontext

from ..core.context import RunContext
from ..core.primitives import EngineSettings
from ..deal.waterfall import compute_equity_waterfall
from ..debt.covenants import compute_covenants
from ..debt.financing import compute_financing
from ..development.cam import compute_cam
from ..development.costs import compute_cost_schedule
from ..development.depreciation import compute_depreciation
from ..development.escrow import compute_escrow_release
from ..development.revenue import compute_revenue
from ..statements.balance_sheet import compute_balance_sheet
from ..statements.cash import compute_cash_flows
from ..statements.profit_loss import compute_profit_and_loss
from ..tax.stack import compute_tax_stack
from .project import ProjectInputs
from .results import EngineResult

logger = logging.getLogger(__name__)


@dataclass
class FeasibilityCalculator:
    """
    Service class that runs the feasibility pipeline for validated inputs.

    Attributes:
        inputs: Validated project inputs
        settings: Engine settings (decimal context, tolerances, IRR solver)
    """

    inputs: ProjectInputs
    settings: EngineSettings

    def run(self) -> EngineResult:
        """
        Execute every stage in order inside the run's decimal context.

        Returns:
            EngineResult composed of the stage records

        Raises:
            RuntimeError: If a stage fails
        """
        try:
            with localcontext(self.settings.calculation.decimal_context()):
                return self._run_stages()
        except Exception as e:
            raise RuntimeError(f"Feasibility run failed: {str(e)}") from e

    def _run_stages(self) -> EngineResult:
        # === ESCALATION ===
        ctx = RunContext.create(self.inputs, self.settings)
        logger.debug(f"Running feasibility over {ctx.periods} periods from {ctx.timeline.start_date}")

        # === DEVELOPMENT PASSES ===
        costs = compute_cost_schedule(ctx)
        escrow = compute_escrow_release(ctx, costs)
        revenue = compute_revenue(ctx, escrow)
        cam = compute_cam(ctx, costs)
        depreciation = compute_depreciation(ctx, costs)

        # === FINANCING AND TAX ===
        financing = compute_financing(ctx, costs, escrow)
        taxes = compute_tax_stack(ctx, costs, revenue, cam, depreciation, financing)

        # === STATEMENTS ===
        cash = compute_cash_flows(ctx, costs, revenue, cam, financing, taxes)
        pnl = compute_profit_and_loss(ctx, costs, revenue, cam, depreciation, financing, taxes)
        balance_sheet = compute_balance_sheet(
            ctx, revenue, depreciation, financing, taxes, cash, pnl
        )

        # === EQUITY AND COVENANTS ===
        nav = depreciation.nbv[-1]
        equity = compute_equity_waterfall(ctx, cash.project, nav)
        covenants = compute_covenants(ctx, financing, cash.cfads, pnl.ebit)

        logger.debug(
            f"Feasibility run complete: tie_out_ok={balance_sheet.tie_out_ok}, "
            f"breach periods={covenants.total_breach_periods}"
        )
        return EngineResult(
            inputs=self.inputs,
            settings=self.settings,
            timeline=ctx.timeline,
            escalation=ctx.escalation,
            costs=costs,
            escrow=escrow,
            revenue=revenue,
            cam=cam,
            depreciation=depreciation,
            financing=financing,
            taxes=taxes,
            cash=cash,
            profit_and_loss=pnl,
            balance_sheet=balance_sheet,
            equity=equity,
            covenants=covenants,
        )
