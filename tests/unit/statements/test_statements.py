# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for cash assembly, the income statement and the balance sheet.
"""

from __future__ import annotations

import dataclasses
import logging
from decimal import Decimal

import pytest

import viability
from tests.conftest import annuity_tranche, make_context, residential_scenario_inputs
from viability.statements import compute_balance_sheet
from viability.utils.series import cumsum, negative_part

D = Decimal
TOLERANCE = D("1e-12")


def assert_close(left, right):
    assert len(left) == len(right)
    for a, b in zip(left, right):
        assert abs(a - b) < TOLERANCE


@pytest.fixture(scope="module")
def inputs():
    data = residential_scenario_inputs()
    data["debt"] = [annuity_tranche(limit_ltc="0.5", tenor=6)]
    data["tax"]["corporate"] = {"enabled": True, "rate": "0.2"}
    return data


@pytest.fixture(scope="module")
def result(inputs):
    return viability.run(inputs)


class TestCashAssembly:
    def test_project_cash_identity(self, result):
        cash = result.cash
        for t in range(result.periods):
            expected = (
                cash.project_before_fin[t]
                + cash.draws[t]
                + cash.dsra_release[t]
                + cash.vat_passthrough[t]
                - cash.interest[t]
                - cash.principal[t]
                - cash.fees[t]
                - cash.dsra_funding[t]
                - cash.vat_net[t]
                - cash.corp_tax[t]
                - cash.zakat[t]
            )
            assert abs(cash.project[t] - expected) < TOLERANCE

    def test_negative_project_cash_is_injected(self, result):
        cash = result.cash
        assert_close(cash.equity_injection, negative_part(cash.project))
        assert all(balance >= 0 for balance in cash.cash_balance)

    def test_statement_sections_add_up(self, result):
        cash = result.cash
        for t in range(result.periods):
            sections = cash.operating[t] + cash.investing[t] + cash.financing[t]
            assert abs(sections - cash.net_cash_flow[t]) < TOLERANCE
        assert_close(cash.investing, [-c for c in cash.capex])

    def test_equity_cash_and_cfads(self, result):
        cash = result.cash
        for t in range(result.periods):
            assert abs(cash.equity_cf[t] - (cash.project[t] - cash.draws[t])) < TOLERANCE
            taxes = cash.corp_tax[t] + cash.zakat[t]
            assert abs(cash.cfads[t] - (cash.cash_revenue[t] - cash.opex[t] - taxes)) < TOLERANCE


class TestProfitAndLoss:
    def test_income_statement_cascade(self, result):
        pnl = result.profit_and_loss
        revenue = zip(pnl.revenue_sales, pnl.revenue_rent, pnl.revenue_cam)
        assert_close(pnl.revenue, [sales + rent + cam for sales, rent, cam in revenue])
        assert_close(pnl.ebitda, [r - o for r, o in zip(pnl.revenue, pnl.opex)])
        assert_close(pnl.ebit, [e - d for e, d in zip(pnl.ebitda, pnl.depreciation)])
        finance = zip(pnl.ebit, pnl.interest, pnl.fees)
        assert_close(pnl.pbt, [e - i - f for e, i, f in finance])
        taxes = zip(pnl.pbt, pnl.corp_tax, pnl.zakat)
        assert_close(pnl.patmi, [p - c - z for p, c, z in taxes])

    def test_corporate_tax_charged_on_profit(self, result):
        assert sum(result.profit_and_loss.corp_tax) > 0


class TestBalanceSheet:
    def test_ties_out(self, result):
        sheet = result.balance_sheet
        assert sheet.tie_out_ok
        assert sheet.first_imbalance_period is None
        assert sheet.max_abs_imbalance < result.settings.calculation.tie_out_tolerance

    def test_rollforwards(self, result):
        sheet = result.balance_sheet
        assert_close(sheet.retained_earnings, cumsum(result.profit_and_loss.patmi))
        assert_close(sheet.paid_in_equity, cumsum(result.cash.equity_injection))
        assert sheet.debt == result.financing.debt_balance

    def test_imbalance_is_reported_not_corrected(self, inputs, result, caplog):
        pnl = result.profit_and_loss
        skewed = list(pnl.patmi)
        skewed[3] += D(1)
        broken = dataclasses.replace(pnl, patmi=tuple(skewed))

        with caplog.at_level(logging.WARNING, logger="viability"):
            sheet = compute_balance_sheet(
                make_context(inputs),
                result.revenue,
                result.depreciation,
                result.financing,
                result.taxes,
                result.cash,
                broken,
            )

        assert not sheet.tie_out_ok
        assert sheet.first_imbalance_period == 3
        assert abs(sheet.imbalance[-1] + D(1)) < TOLERANCE
        assert "does not tie out" in caplog.text
