# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .partnership import (
    AnyPref,
    CatchUp,
    CompoundPref,
    EquityClass,
    EquityConfig,
    EquityInvestor,
    PromoteTier,
    SimplePref,
)
from .waterfall import (
    ClassWaterfall,
    EquityWaterfall,
    EquityWaterfallCalculator,
    ReturnMetrics,
    compute_equity_waterfall,
    disabled_waterfall,
    return_metrics,
)

__all__ = [
    "AnyPref",
    "CatchUp",
    "ClassWaterfall",
    "CompoundPref",
    "EquityClass",
    "EquityConfig",
    "EquityInvestor",
    "EquityWaterfall",
    "EquityWaterfallCalculator",
    "PromoteTier",
    "ReturnMetrics",
    "SimplePref",
    "compute_equity_waterfall",
    "disabled_waterfall",
    "return_metrics",
]
