# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Feasibility run results.

`EngineResult` composes the immutable records returned by each stage. It
never recomputes anything; `to_dict()` walks the records into a plain tree
for callers that only read serialized output.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..core.calculations import FinancialCalculations
from ..core.primitives import EngineSettings, EscalationIndex, Timeline
from ..deal.waterfall import EquityWaterfall, ReturnMetrics
from ..debt.covenants import CovenantReport
from ..debt.financing import FinancingSchedule
from ..development.cam import CamAllocation
from ..development.costs import CostSchedule
from ..development.depreciation import DepreciationSchedule
from ..development.escrow import EscrowRelease
from ..development.revenue import RevenueSchedule
from ..statements.balance_sheet import BalanceSheet
from ..statements.cash import CashFlows
from ..statements.profit_loss import ProfitAndLoss
from ..tax.stack import TaxStack
from .project import ProjectInputs


def _plain(value: Any, decimals_as_str: bool) -> Any:
    if isinstance(value, Decimal):
        return str(value) if decimals_as_str else value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return _plain(value.model_dump(), decimals_as_str)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: _plain(getattr(value, f.name), decimals_as_str)
            for f in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(k): _plain(v, decimals_as_str) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v, decimals_as_str) for v in value]
    if isinstance(value, (bool, int, str)) or value is None:
        return value
    return str(value)


@dataclass(frozen=True)
class EngineResult:
    """
    Results of one feasibility run.

    Attributes:
        inputs: Validated inputs the run used
        settings: Engine settings the run used
        timeline: Monthly timeline; every series has `timeline.periods` entries
        escalation: Resolved index multipliers (stage 1)
        costs: Cost schedule (stage 2)
        escrow: Escrow release curve (stage 3)
        revenue: Revenue schedule (stage 4)
        cam: CAM allocation (stage 5)
        depreciation: Depreciation schedule (stage 6)
        financing: Debt stack and DSRA (stage 7)
        taxes: VAT, corporate tax and zakat (stage 8)
        cash: Cash assembly and cash-flow statement (stage 9)
        profit_and_loss: Income statement (stage 10)
        balance_sheet: Reconciled balance sheet (stage 11)
        equity: Equity waterfall (stage 12)
        covenants: Coverage ratios and breaches (stage 13)
    """

    inputs: ProjectInputs
    settings: EngineSettings
    timeline: Timeline
    escalation: EscalationIndex
    costs: CostSchedule
    escrow: EscrowRelease
    revenue: RevenueSchedule
    cam: CamAllocation
    depreciation: DepreciationSchedule
    financing: FinancingSchedule
    taxes: TaxStack
    cash: CashFlows
    profit_and_loss: ProfitAndLoss
    balance_sheet: BalanceSheet
    equity: EquityWaterfall
    covenants: CovenantReport

    @property
    def periods(self) -> int:
        return self.timeline.periods

    @property
    def tie_out_ok(self) -> bool:
        return self.balance_sheet.tie_out_ok

    @property
    def kpis(self) -> ReturnMetrics:
        return self.equity.kpis

    @property
    def project_irr(self) -> Optional[Decimal]:
        """Unlevered IRR of project cash before financing."""
        return FinancialCalculations.calculate_irr(
            self.cash.project_before_fin, self.settings.irr
        )

    def diagnostics(self) -> Dict[str, Any]:
        """Run-level flags callers should check before trusting KPIs."""
        return {
            "tie_out_ok": self.balance_sheet.tie_out_ok,
            "max_abs_imbalance": self.balance_sheet.max_abs_imbalance,
            "first_imbalance_period": self.balance_sheet.first_imbalance_period,
            "escrow_truncated": self.revenue.escrow_truncated,
            "unfunded_need": sum(self.financing.unfunded_need, Decimal(0)),
            "covenant_breaches": self.covenants.breaches_summary(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested tree of every stage record, KPIs and diagnostics."""
        return self._tree(decimals_as_str=False)

    def to_json_dict(self) -> Dict[str, Any]:
        """Like `to_dict()` with decimals rendered as strings."""
        return self._tree(decimals_as_str=True)

    def _tree(self, decimals_as_str: bool) -> Dict[str, Any]:
        stages = {
            "escalation": self.escalation,
            "costs": self.costs,
            "escrow": self.escrow,
            "revenue": self.revenue,
            "cam": self.cam,
            "depreciation": self.depreciation,
            "financing": self.financing,
            "taxes": self.taxes,
            "cash": self.cash,
            "profit_and_loss": self.profit_and_loss,
            "balance_sheet": self.balance_sheet,
            "equity": self.equity,
            "covenants": self.covenants,
        }
        tree = {name: _plain(record, decimals_as_str) for name, record in stages.items()}
        tree["project"] = {
            "name": self.inputs.project.name,
            "start": str(self.timeline.start_date),
            "periods": self.periods,
            "labels": [str(p) for p in self.timeline.period_index],
        }
        tree["derived"] = _plain(
            {
                "fees": self.financing.fees,
                "debt_service": self.financing.debt_service,
                "vat_passthrough": self.taxes.vat.passthrough,
                "cfads": self.cash.cfads,
                "project_irr": self.project_irr,
            },
            decimals_as_str,
        )
        tree["kpis"] = _plain(self.equity.kpis, decimals_as_str)
        tree["diagnostics"] = _plain(self.diagnostics(), decimals_as_str)
        return tree
