# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for viability testing.

Builders return plain dictionaries in the input schema so tests can tweak a
single block and validate the whole project, mirroring how callers hand
inputs to `viability.run`.
"""

from __future__ import annotations

import copy
from decimal import Decimal
from typing import Any, Dict, Optional

import pytest

from viability.analysis import ProjectInputs
from viability.core.context import RunContext
from viability.core.primitives import EngineSettings

D = Decimal


# Input builders
def residential_unit(
    key: str = "apt",
    count: int = 100,
    area: int = 100,
    price: int = 10_000,
    curve: Optional[list] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    """Sale unit type with a sell-through curve."""
    unit = {
        "key": key,
        "category": "residential",
        "count": count,
        "sellable_area_sqm": area,
        "initial_price_sqm_sale": price,
        "curve": {"meaning": "sell_through", "values": curve or [1]},
    }
    unit.update(overrides)
    return unit


def retail_lease_unit(
    key: str = "shops",
    count: int = 10,
    area: int = 100,
    rent: int = 50,
    occupancy: Optional[list] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    """Lease unit type with an occupancy curve."""
    unit = {
        "key": key,
        "category": "retail",
        "count": count,
        "sellable_area_sqm": area,
        "initial_rent_sqm_m": rent,
        "curve": {"meaning": "occupancy", "values": occupancy or [1]},
    }
    unit.update(overrides)
    return unit


def cost_item(key: str, amount: Any, phasing: list, **overrides: Any) -> Dict[str, Any]:
    item = {"key": key, "base_amount": amount, "phasing": phasing}
    item.update(overrides)
    return item


def annuity_tranche(key: str = "senior", tenor: int = 24, **overrides: Any) -> Dict[str, Any]:
    tranche = {
        "key": key,
        "amortization": {"kind": "annuity", "tenor_months": tenor},
        "limit_ltc": "1",
        "nominal_rate_pa": "0.08",
    }
    tranche.update(overrides)
    return tranche


def project_inputs(periods: int = 12, **blocks: Any) -> Dict[str, Any]:
    """Minimal project mapping; extra keyword blocks are merged in."""
    data: Dict[str, Any] = {"project": {"start_date": "2025-01-01", "periods": periods}}
    data.update(copy.deepcopy(blocks))
    return data


def make_context(data: Dict[str, Any], settings: Optional[EngineSettings] = None) -> RunContext:
    """Validate a mapping and build the run context for stage-level tests."""
    return RunContext.create(ProjectInputs.model_validate(data), settings or EngineSettings())


def residential_scenario_inputs() -> Dict[str, Any]:
    """
    T=12, 100 units x 100 sqm x 10,000/sqm sold in months 3-6, capex
    50,000,000 phased 50/30/20 over months 0-2, VAT 5% on a cash basis and
    escrow released linearly with cost progress.
    """
    return project_inputs(
        periods=12,
        unit_types=[
            residential_unit(
                curve=[0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0],
                vat_class="standard",
            )
        ],
        cost_items=[
            cost_item(
                "construction",
                50_000_000,
                [D("0.5"), D("0.3"), D("0.2")] + [0] * 9,
            )
        ],
        tax={"vat": {"enabled": True, "rate": "0.05", "timing": "cash"}},
        escrow={"enabled": True, "release": {"kind": "alpha_beta", "alpha": 1, "beta": 1}},
    )


def full_stack_inputs(periods: int = 36) -> Dict[str, Any]:
    """Mixed-use project exercising every stage."""
    sale_curve = [0] * 6 + [1] * 12 + [0] * (periods - 18)
    return project_inputs(
        periods=periods,
        index_buckets=[
            {"key": "sales", "rate_nominal_pa": "0.03"},
            {"key": "build", "rate_nominal_pa": "0.05", "cap_pa": "0.04"},
        ],
        plots=[{"key": "north"}],
        unit_types=[
            residential_unit(
                count=40,
                price=8_000,
                curve=sale_curve,
                index_bucket_price="sales",
                vat_class="standard",
                collection_curve=[1] * 6 + [2] * 12 + [1] * (periods - 18),
                revenue_policy={"kind": "poc_cost"},
            ),
            retail_lease_unit(
                occupancy=[0] * 12 + [D("0.5")] * 6 + [1] * (periods - 18),
                vat_class="standard",
                plot_key="north",
            ),
        ],
        cost_items=[
            cost_item(
                "land",
                4_000_000,
                [1] + [0] * (periods - 1),
                vat_input_eligible=False,
            ),
            {
                "key": "construction",
                "base_amount": 20_000_000,
                "schedule": {"kind": "s_curve", "start_month": 1, "end_month": 18, "sigma": 4},
                "index_bucket": "build",
                "vat_input_eligible": True,
                "depreciation": {"useful_life_months": 120, "start_month": 18},
            },
            cost_item(
                "facility_mgmt",
                360_000,
                [0] * 12 + [1] * (periods - 12),
                is_opex=True,
                recoverable=True,
                plot_key="north",
            ),
        ],
        debt=[
            annuity_tranche(
                tenor=18,
                limit_ltc="0.6",
                limit_ltv="0.5",
                upfront_fee_pct="0.01",
                ongoing_fee_pct_pa="0.005",
                commitment_fee_pct_pa="0.0025",
                dsra={"months": 3},
                covenants={"dscr_min": "1.2", "icr_min": "1.5", "test_basis": "both"},
            ),
            {
                "key": "mezz",
                "amortization": {"kind": "bullet", "tenor_months": 12},
                "limit_ltc": "0.15",
                "nominal_rate_pa": "0.12",
                "draw_priority": 2,
            },
        ],
        tax={
            "vat": {"enabled": True, "rate": "0.15"},
            "corporate": {"enabled": True, "rate": "0.2", "interest_cap_pct_ebit": "0.3"},
            "zakat": {"enabled": True, "base": "net_equity"},
        },
        escrow={"enabled": True, "release": {"kind": "alpha_beta", "alpha": "1.2", "beta": 1}},
        cam={"enabled": True, "admin_fee_pct": "0.1"},
        equity={
            "enabled": True,
            "distribution_frequency": "quarterly",
            "classes": [
                {
                    "key": "common",
                    "pref": {"kind": "compound", "rate_pa": "0.08"},
                    "catchup": {"target_gp_share": "0.2"},
                    "tiers": [
                        {"irr_hurdle_pa": "0.12", "split_lp": "0.8", "split_gp": "0.2"},
                        {"irr_hurdle_pa": "0.18", "split_lp": "0.7", "split_gp": "0.3"},
                    ],
                }
            ],
            "investors": [
                {"key": "lp", "class_key": "common", "commitment": 9_000_000},
                {"key": "gp", "class_key": "common", "role": "gp", "commitment": 1_000_000},
            ],
        },
    )


# Fixtures
@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture
def residential_inputs() -> Dict[str, Any]:
    return residential_scenario_inputs()


@pytest.fixture
def full_inputs() -> Dict[str, Any]:
    return full_stack_inputs()
