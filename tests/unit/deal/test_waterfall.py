# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the equity waterfall.

Scenarios are sized so every tier can be followed by hand: a 900/100 LP/GP
class, a 12% simple pref (1% a month) where a pref is wanted, and a 20%
GP target share.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from tests.conftest import make_context, project_inputs
from viability.core.calculations import FinancialCalculations
from viability.core.primitives import IrrSolverSettings
from viability.deal import EquityConfig, compute_equity_waterfall, return_metrics
from viability.deal.waterfall import EquityWaterfallCalculator

D = Decimal
TOLERANCE = D("1e-9")

NO_PREF = {"kind": "simple", "rate_pa": "0"}
PREF_12 = {"kind": "simple", "rate_pa": "0.12"}


def _series(*values):
    return tuple(D(v) for v in values)


def _run(cash, equity_class, investors=None, **config):
    equity = EquityConfig(
        enabled=True,
        classes=[{"key": "common", **equity_class}],
        investors=investors
        or [
            {"key": "lp", "class_key": "common", "commitment": 900},
            {"key": "gp", "class_key": "common", "role": "gp", "commitment": 100},
        ],
        **config,
    )
    calculator = EquityWaterfallCalculator(config=equity, periods=len(cash))
    return calculator.calculate(_series(*cash), D(0))


class TestCallsAndReturnOfCapital:
    def test_call_and_return_only(self):
        result = _run(
            [-1_000_000, 0, 1_000_000],
            {"pref": NO_PREF},
            investors=[
                {"key": "lp", "class_key": "common", "commitment": 800_000},
                {"key": "gp", "class_key": "common", "role": "gp", "commitment": 200_000},
            ],
        )
        assert result.calls_by_investor["lp"] == _series(800_000, 0, 0)
        assert result.calls_by_investor["gp"] == _series(200_000, 0, 0)
        assert result.distributions_by_investor["lp"][2] == D(800_000)
        assert result.distributions_by_investor["gp"][2] == D(200_000)
        assert result.classes["common"].return_of_capital[2] == D(1_000_000)
        assert sum(result.gp_promote) == D(0)
        assert result.unreturned_capital == {"lp": D(0), "gp": D(0)}
        assert result.kpis.moic == D(1)
        assert abs(result.kpis.irr) < D("1e-6")

    def test_fixed_share_calls(self):
        result = _run(
            [-100, 100],
            {"pref": NO_PREF},
            investors=[
                {"key": "lp", "class_key": "common", "commitment": 900, "fixed_share": "0.75"},
                {
                    "key": "gp",
                    "class_key": "common",
                    "role": "gp",
                    "commitment": 100,
                    "fixed_share": "0.25",
                },
            ],
            call_order="fixed_shares",
        )
        assert result.calls_by_investor["lp"][0] == D(75)
        assert result.calls_by_investor["gp"][0] == D(25)

    def test_distributions_never_exceed_positive_cash(self):
        cash = [-1000, 300, -200, 1500]
        result = _run(cash, {"pref": PREF_12, "catchup": {"target_gp_share": "0.2"}})
        assert sum(result.distributions_total) == D(1800)
        assert sum(result.calls_total) == D(1200)

    @pytest.mark.parametrize("empty_seniority", [0, 2])
    def test_class_without_investors_passes_cash_on(self, empty_seniority):
        equity = EquityConfig(
            enabled=True,
            classes=[
                {"key": "common", "pref": NO_PREF},
                {
                    "key": "empty",
                    "seniority": empty_seniority,
                    "tiers": [{"irr_hurdle_pa": "0.1", "split_lp": "0.8", "split_gp": "0.2"}],
                },
            ],
            investors=[{"key": "lp", "class_key": "common", "commitment": 1_000_000}],
        )
        calculator = EquityWaterfallCalculator(config=equity, periods=13)
        cash = _series(-1_000_000, *([0] * 11), 2_000_000)
        result = calculator.calculate(cash, D(0))
        assert sum(result.distributions_total) == D(2_000_000)
        assert result.distributions_by_investor["lp"][12] == D(2_000_000)
        assert result.residual[12] == D(1_000_000)
        assert sum(result.classes["empty"].promote) == D(0)


class TestPreferredReturn:
    """Single LP, 1,000 called at t0 and 2,000 returned at t3."""

    def test_pref_accrues_and_is_paid_before_residual(self):
        result = _run(
            [-1000, 0, 0, 2000],
            {"pref": PREF_12},
            investors=[{"key": "lp", "class_key": "common", "commitment": 1000}],
        )
        ledger = result.classes["common"]
        assert ledger.pref_accrued == _series(10, 10, 10, 10)
        assert ledger.pref_balance == _series(10, 20, 30, 0)
        assert ledger.pref_paid[3] == D(40)
        assert result.residual[3] == D(960)
        assert result.distributions_by_investor["lp"][3] == D(2000)

    def test_pref_is_paid_to_lps_only(self):
        result = _run([-1000, 0, 1020], {"pref": PREF_12})
        assert result.distributions_by_investor["gp"][2] == D(100)
        assert result.distributions_by_investor["lp"][2] == D(920)


class TestCatchUp:
    def test_full_catchup_reaches_target_share(self):
        result = _run([-1000, 1500], {"pref": PREF_12, "catchup": {"target_gp_share": "0.2"}})
        ledger = result.classes["common"]
        assert ledger.pref_paid[1] == D(20)
        assert ledger.catchup[1] == D(5)
        assert ledger.gp_profit == D(5)
        assert ledger.profit_distributed == D(25)
        assert result.gp_promote[1] == D(5)
        assert result.residual[1] == D(475)

    def test_partial_catchup_rate(self):
        result = _run(
            [-1000, 1500],
            {"pref": PREF_12, "catchup": {"target_gp_share": "0.2", "catchup_rate": "0.5"}},
        )
        ledger = result.classes["common"]
        assert abs(ledger.gp_profit / ledger.profit_distributed - D("0.2")) < TOLERANCE
        assert abs(ledger.catchup[1] - D(20) / D(3)) < TOLERANCE

    def test_no_catchup_without_gp(self):
        result = _run(
            [-1000, 1500],
            {"pref": PREF_12, "catchup": {"target_gp_share": "0.2"}},
            investors=[{"key": "lp", "class_key": "common", "commitment": 1000}],
        )
        assert result.classes["common"].catchup == _series(0, 0)


class TestPromoteTiers:
    """1,000 called at t0, 1,200 returned at t12, one 80/20 tier at a 12% hurdle."""

    @pytest.fixture
    def result(self):
        cash = [-1000] + [0] * 11 + [1200]
        return _run(
            cash,
            {
                "pref": NO_PREF,
                "tiers": [{"irr_hurdle_pa": "0.12", "split_lp": "0.8", "split_gp": "0.2"}],
            },
        )

    def test_tier_lifts_lp_to_hurdle(self, result):
        monthly = FinancialCalculations.annual_to_monthly(D("0.12"))
        lp_needed = D(900) * (1 + monthly) ** 12 - D(900)
        assert abs(lp_needed - D(108)) < TOLERANCE
        gp_total = result.distributions_by_investor["gp"][12]
        # 100 of capital, 27 from the tier and 13 from the split above it
        assert abs(gp_total - D(140)) < TOLERANCE
        assert abs(result.gp_promote[12] - D(40)) < TOLERANCE

    def test_lp_irr_above_hurdle(self, result):
        lp_flows = result.classes["common"].lp_cash_flows
        irr = FinancialCalculations.calculate_irr(lp_flows, IrrSolverSettings())
        assert irr > D("0.12")

    def test_all_cash_distributed(self, result):
        assert abs(sum(result.distributions_total) - D(1200)) < TOLERANCE
        assert result.residual[12] == D(0)


class TestDistributionTiming:
    def test_quarterly_accumulates_until_quarter_end(self):
        result = _run(
            [-100, 10, 10, 10, 10, 10],
            {"pref": NO_PREF},
            investors=[{"key": "lp", "class_key": "common", "commitment": 100}],
            distribution_frequency="quarterly",
        )
        assert result.distributions_total == _series(0, 0, 20, 0, 0, 30)

    def test_final_period_flushes_accumulated_cash(self):
        result = _run(
            [-100, 10, 10, 10, 50],
            {"pref": NO_PREF},
            investors=[{"key": "lp", "class_key": "common", "commitment": 100}],
            distribution_frequency="quarterly",
        )
        assert result.distributions_total == _series(0, 0, 20, 0, 60)


class TestClawback:
    def test_promote_clawed_back_when_capital_is_not_returned(self):
        result = _run(
            [-1000, 1500, -500],
            {"pref": PREF_12, "catchup": {"target_gp_share": "0.2"}},
        )
        assert result.classes["common"].clawback == D(5)
        assert result.gp_clawback == _series(0, 0, 5)

    def test_no_clawback_when_outcome_supports_promote(self):
        result = _run([-1000, 1500], {"pref": PREF_12, "catchup": {"target_gp_share": "0.2"}})
        assert result.classes["common"].clawback == D(0)
        assert sum(result.gp_clawback) == D(0)


class TestReturnMetrics:
    def test_multiples_and_irr(self):
        metrics = return_metrics(_series(100, 0), _series(0, 110), D(0), IrrSolverSettings())
        assert metrics.moic == D("1.1")
        assert metrics.dpi == D("1.1")
        assert metrics.rvpi == D(0)
        expected = FinancialCalculations.monthly_to_annual(D("0.1"))
        assert abs(metrics.irr - expected) < D("1e-5")

    def test_nav_counts_towards_tvpi(self):
        metrics = return_metrics(_series(100, 0), _series(0, 50), D(70), IrrSolverSettings())
        assert metrics.tvpi == D("1.2")
        assert metrics.rvpi == D("0.7")

    def test_no_calls_means_no_multiples(self):
        metrics = return_metrics(_series(0, 0), _series(0, 0), D(0), IrrSolverSettings())
        assert metrics.irr is None
        assert metrics.moic is None
        assert metrics.dpi is None


class TestWaterfallStage:
    def test_disabled_equity(self):
        ctx = make_context(project_inputs(periods=3))
        result = compute_equity_waterfall(ctx, _series(-10, 0, 20), D(0))
        assert not result.enabled
        assert result.calls_total == _series(0, 0, 0)
        assert result.kpis.irr is None

    def test_nav_split_by_contributed_capital(self):
        ctx = make_context(
            project_inputs(
                periods=2,
                equity={
                    "enabled": True,
                    "classes": [{"key": "common", "pref": NO_PREF}],
                    "investors": [
                        {"key": "lp", "class_key": "common", "commitment": 900},
                        {"key": "gp", "class_key": "common", "role": "gp", "commitment": 100},
                    ],
                },
            )
        )
        result = compute_equity_waterfall(ctx, _series(-1000, 0), D(500))
        assert result.kpis_by_investor["lp"].nav == D(450)
        assert result.kpis_by_investor["gp"].nav == D(50)
        assert result.kpis.tvpi == D("0.5")
        assert result.net_cash_flows == _series(-1000, 0)
