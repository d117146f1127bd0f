# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Viability Reporting Module

pandas views of an EngineResult:

    result = viability.run(inputs)
    pnl = ProfitAndLossReport(result).generate("A")
    bs = BalanceSheetReport(result).generate("Q")
"""

from .base import BALANCE, FLOW, BaseReport, normalize_frequency
from .statements import (
    BalanceSheetReport,
    CashFlowReport,
    DebtScheduleReport,
    EquityDistributionReport,
    ProfitAndLossReport,
    covenant_table,
    equity_kpis_table,
)

__all__ = [
    "BALANCE",
    "FLOW",
    "BalanceSheetReport",
    "BaseReport",
    "CashFlowReport",
    "DebtScheduleReport",
    "EquityDistributionReport",
    "ProfitAndLossReport",
    "covenant_table",
    "equity_kpis_table",
    "normalize_frequency",
]
