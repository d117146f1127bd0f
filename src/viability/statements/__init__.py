# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .balance_sheet import BalanceSheet, compute_balance_sheet
from .cash import CashFlows, compute_cash_flows
from .profit_loss import ProfitAndLoss, compute_profit_and_loss

__all__ = [
    "BalanceSheet",
    "CashFlows",
    "ProfitAndLoss",
    "compute_balance_sheet",
    "compute_cash_flows",
    "compute_profit_and_loss",
]
