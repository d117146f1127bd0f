# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for covenant ratios and breach detection.
"""

from __future__ import annotations

from decimal import Decimal

from tests.conftest import annuity_tranche, make_context, project_inputs
from viability.core.calculations import FinancialCalculations
from viability.core.primitives import CovenantTestBasisEnum
from viability.debt import CovenantTerms, compute_covenants, schedule_tranches
from viability.debt.covenants import evaluate_scope, portfolio_terms

D = Decimal
INF = D("Infinity")


def _series(*values):
    return tuple(D(v) for v in values)


class TestRatios:
    def test_zero_debt_service_gives_infinite_coverage(self):
        scope = evaluate_scope(
            _series(5, 5), _series(1, 1), _series(0, 0), _series(0, 0), CovenantTerms(), 12
        )
        assert scope.dscr == (INF, INF)
        assert scope.icr == (INF, INF)
        assert scope.breach == (False, False)

    def test_ltm_ratios_wait_for_a_full_window(self):
        scope = evaluate_scope(
            _series(2, 2, 2, 2),
            _series(1, 1, 1, 1),
            _series(1, 1, 1, 1),
            _series(1, 1, 1, 1),
            CovenantTerms(),
            3,
        )
        assert scope.dscr_ltm == (None, None, D(2), D(2))
        assert scope.icr_ltm[:2] == (None, None)

    def test_headroom(self):
        scope = evaluate_scope(
            _series(3), _series(1), _series(1), _series(2), CovenantTerms(dscr_min=D(1)), 12
        )
        assert scope.dscr_headroom == (D("0.5"),)
        assert scope.icr_headroom == (None,)


class TestBreaches:
    def test_grace_period_delays_breach(self):
        terms = CovenantTerms(dscr_min=D("1.5"), grace_period_months=1)
        scope = evaluate_scope(
            _series(1, 1, 1, 2),
            _series(9, 9, 9, 9),
            _series(1, 1, 1, 1),
            _series(1, 1, 1, 1),
            terms,
            12,
        )
        assert scope.breach == (False, True, True, False)
        assert scope.total_breach_periods == 2
        assert scope.first_breach_index == 1

    def test_test_basis_selects_point_or_ltm(self):
        flows = (_series(3, 0, 3), _series(9, 9, 9), _series(1, 1, 1), _series(1, 1, 1))

        def breaches(basis):
            terms = CovenantTerms(dscr_min=D(1), test_basis=basis)
            return evaluate_scope(*flows, terms, 2).breach

        assert breaches(CovenantTestBasisEnum.POINT) == (False, True, False)
        assert breaches(CovenantTestBasisEnum.LTM) == (False, False, False)
        assert breaches(CovenantTestBasisEnum.BOTH) == (False, True, False)

    def test_icr_breach(self):
        scope = evaluate_scope(
            _series(9, 9),
            _series(1, 1),
            _series(2, 0),
            _series(2, 0),
            CovenantTerms(icr_min=D(1)),
            12,
        )
        assert scope.icr == (D("0.5"), INF)
        assert scope.breach == (True, False)


class TestPortfolioTerms:
    def test_combined_terms(self):
        combined = portfolio_terms(
            [
                CovenantTerms(dscr_min=D("1.2"), grace_period_months=2),
                CovenantTerms(
                    dscr_min=D("1.3"),
                    icr_min=D(2),
                    test_basis=CovenantTestBasisEnum.LTM,
                    grace_period_months=1,
                    strict_dscr=True,
                ),
            ]
        )
        assert combined.dscr_min == D("1.2")
        assert combined.icr_min == D(2)
        assert combined.test_basis == CovenantTestBasisEnum.BOTH
        assert combined.grace_period_months == 1
        assert combined.strict_dscr

    def test_single_basis_is_kept(self):
        combined = portfolio_terms([CovenantTerms(test_basis=CovenantTestBasisEnum.LTM)])
        assert combined.test_basis == CovenantTestBasisEnum.LTM

    def test_no_terms(self):
        assert portfolio_terms([]) == CovenantTerms()


class TestCovenantStage:
    def test_strict_dscr_includes_ongoing_fees(self):
        ctx = make_context(
            project_inputs(
                periods=4,
                debt=[
                    annuity_tranche(
                        tenor=4,
                        ongoing_fee_pct_pa="0.012",
                        covenants={"dscr_min": "1.2", "strict_dscr": True},
                    )
                ],
            )
        )
        financing = schedule_tranches(ctx.inputs.debt, _series(1000, 0, 0, 0))
        cfads = _series(100, 100, 100, 100)
        report = compute_covenants(ctx, financing, cfads, cfads)

        for t in range(4):
            service = financing.debt_service[t] + financing.ongoing_fees[t]
            assert report.portfolio.dscr[t] == FinancialCalculations.calculate_ratio(
                D(100), service
            )
        assert report.tranches["senior"].dscr == report.portfolio.dscr
        assert report.total_breach_periods == 4
        assert report.breaches_summary()["senior"] == {
            "total_breach_periods": 4,
            "first_breach_index": 0,
        }

    def test_without_covenants_nothing_breaches(self):
        ctx = make_context(project_inputs(periods=2, debt=[annuity_tranche(tenor=2)]))
        financing = schedule_tranches(ctx.inputs.debt, _series(100, 0))
        report = compute_covenants(ctx, financing, _series(0, 0), _series(0, 0))
        assert report.first_breach_index is None
        assert report.portfolio.dscr_min is None
