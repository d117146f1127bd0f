# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Development program stages: unit mix, cost budget, escrow, revenue, CAM and
depreciation.
"""

from .budget import CostItem, DepreciationPolicy
from .cam import CamAllocation, CamConfig, compute_cam
from .costs import CostItemDetail, CostSchedule, compute_cost_schedule
from .depreciation import DepreciationSchedule, compute_depreciation
from .escrow import (
    AlphaBetaRelease,
    EscrowConfig,
    EscrowRelease,
    Milestone,
    MilestoneRelease,
    cap_to_release,
    compute_escrow_release,
    cost_progress,
    release_fraction_alpha_beta,
)
from .program import (
    BillingsCappedRecognition,
    Curve,
    HandoverRecognition,
    Plot,
    PocCostRecognition,
    PocPhysicalRecognition,
    UnitType,
)
from .revenue import RevenueSchedule, UnitRevenueDetail, compute_revenue

__all__ = [
    "AlphaBetaRelease",
    "BillingsCappedRecognition",
    "CamAllocation",
    "CamConfig",
    "CostItem",
    "CostItemDetail",
    "CostSchedule",
    "Curve",
    "DepreciationPolicy",
    "DepreciationSchedule",
    "EscrowConfig",
    "EscrowRelease",
    "HandoverRecognition",
    "Milestone",
    "MilestoneRelease",
    "Plot",
    "PocCostRecognition",
    "PocPhysicalRecognition",
    "RevenueSchedule",
    "UnitRevenueDetail",
    "UnitType",
    "cap_to_release",
    "compute_cam",
    "compute_cost_schedule",
    "compute_depreciation",
    "compute_escrow_release",
    "compute_revenue",
    "cost_progress",
    "release_fraction_alpha_beta",
]
