# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the pandas statement reports.
"""

from __future__ import annotations

from decimal import Decimal

import pandas as pd
import pytest

import viability
from tests.conftest import full_stack_inputs
from viability.reporting import (
    BalanceSheetReport,
    CashFlowReport,
    DebtScheduleReport,
    EquityDistributionReport,
    ProfitAndLossReport,
    covenant_table,
    equity_kpis_table,
    normalize_frequency,
)

D = Decimal
TOLERANCE = D("1e-12")


@pytest.fixture(scope="module")
def result():
    return viability.run(full_stack_inputs(periods=24))


class TestFrequencies:
    @pytest.mark.parametrize(
        "frequency,expected", [("M", "M"), ("q", "Q"), ("A", "Y"), ("Y", "Y")]
    )
    def test_aliases(self, frequency, expected):
        assert normalize_frequency(frequency) == expected

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported frequency"):
            normalize_frequency("W")

    def test_report_requires_engine_result(self):
        with pytest.raises(TypeError, match="EngineResult"):
            ProfitAndLossReport({"cash": []})


class TestStatementReports:
    def test_monthly_layout(self, result):
        report = ProfitAndLossReport(result).generate("M")
        assert report.shape == (14, 24)
        assert list(report.columns) == list(result.timeline.period_index)
        assert report.loc["PATMI"].iloc[5] == result.profit_and_loss.patmi[5]

    def test_quarterly_flows_are_summed(self, result):
        report = ProfitAndLossReport(result).generate("Q")
        assert report.shape[1] == 8
        fifth_quarter = sum(result.profit_and_loss.revenue[12:15])
        assert abs(report.loc["Total Revenue"].iloc[4] - fifth_quarter) < TOLERANCE

    def test_quarterly_balances_take_period_end(self, result):
        report = BalanceSheetReport(result).generate("Q")
        assert report.loc["Cash"].iloc[0] == result.balance_sheet.cash[2]
        assert report.loc["Debt"].iloc[-1] == result.balance_sheet.debt[-1]

    def test_annual_cash_flow(self, result):
        report = CashFlowReport(result).generate("A")
        assert report.shape[1] == 2
        assert report.loc["Closing Cash"].iloc[0] == result.cash.cash_balance[11]
        assert abs(report.loc["Capex"].iloc[1] - sum(result.cash.capex[12:])) < TOLERANCE

    def test_debt_schedule(self, result):
        frame = DebtScheduleReport(result).monthly()
        assert isinstance(frame.index, pd.PeriodIndex)
        assert list(frame["Draws"]) == list(result.financing.draws)

    def test_equity_distributions_per_investor(self, result):
        frame = EquityDistributionReport(result).monthly()
        assert {"lp Calls", "lp Distributions", "gp Calls", "gp Distributions"} <= set(
            frame.columns
        )


class TestTables:
    def test_equity_kpis_table(self, result):
        table = equity_kpis_table(result)
        assert list(table.index) == ["total", "lp", "gp"]
        assert table.loc["total", "contributed"] == result.equity.kpis.contributed

    def test_covenant_table(self, result):
        table = covenant_table(result)
        assert len(table) == 24
        assert list(table["Breach"]) == list(result.covenants.portfolio.breach)
