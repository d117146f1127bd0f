# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for corporate income tax and zakat.
"""

from __future__ import annotations

from decimal import Decimal

from viability.tax import CorporateTaxConfig, ZakatConfig, compute_corporate_tax, compute_zakat
from viability.tax.corporate import compute_ebit, net_equity_outstanding

D = Decimal


def _series(*values):
    return tuple(D(v) for v in values)


class TestCorporateTax:
    """20% rate with interest deductible up to 30% of EBIT."""

    config = CorporateTaxConfig(enabled=True, rate=D("0.2"), interest_cap_pct_ebit=D("0.3"))

    def test_interest_cap_and_loss_carryforward(self):
        schedule = compute_corporate_tax(
            self.config, _series(100, -50, 80), _series(40, 10, 0)
        )
        assert schedule.interest_allowed == _series(30, 0, 0)
        assert schedule.interest_disallowed == _series(10, 10, 0)
        assert schedule.taxable_before_nol == _series(70, -50, 80)
        assert schedule.nol_balance == _series(0, 50, 0)
        assert schedule.nol_used == _series(0, 0, 50)
        assert schedule.tax == _series(14, 0, 6)

    def test_without_carryforward_losses_are_lost(self):
        config = self.config.model_copy(update={"allow_nol_carryforward": False})
        schedule = compute_corporate_tax(config, _series(-50, 80), _series(0, 0))
        assert schedule.tax == _series(0, 16)
        assert schedule.nol_balance == _series(0, 0)

    def test_disabled_charges_nothing(self):
        schedule = compute_corporate_tax(CorporateTaxConfig(), _series(100), _series(0))
        assert schedule.tax == _series(0)
        assert schedule.taxable_income == _series(100)

    def test_ebit(self):
        assert compute_ebit(_series(100), _series(30), _series(20)) == _series(50)


class TestZakat:
    def test_nbv_base(self):
        schedule = compute_zakat(
            ZakatConfig(enabled=True, rate=D("0.024")), _series(1200, 600), _series(0, 0)
        )
        assert schedule.zakat == _series("2.4", "1.2")

    def test_net_equity_base(self):
        assert net_equity_outstanding(_series(-100, -50, 200)) == _series(100, 150, 0)
        schedule = compute_zakat(
            ZakatConfig(enabled=True, rate=D("0.024"), base="net_equity"),
            _series(0, 0, 0),
            _series(-100, -50, 200),
        )
        assert schedule.zakat == _series("0.2", "0.3", 0)

    def test_disabled(self):
        schedule = compute_zakat(ZakatConfig(), _series(1200), _series(0))
        assert schedule.base == _series(1200)
        assert schedule.zakat == _series(0)
