# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt stack: tranche definitions, amortization variants, the financing
waterfall with reserve accounts, and covenant testing.
"""

from .amortization import (
    AnnuityAmortization,
    AnyAmortization,
    BulletAmortization,
    StraightLineAmortization,
)
from .covenants import CovenantReport, CovenantSeries, compute_covenants
from .financing import (
    FinancingSchedule,
    TrancheSchedule,
    compute_financing,
    schedule_tranches,
)
from .tranche import CovenantTerms, DebtTranche, DsraPolicy

__all__ = [
    "AnnuityAmortization",
    "AnyAmortization",
    "BulletAmortization",
    "CovenantReport",
    "CovenantSeries",
    "CovenantTerms",
    "DebtTranche",
    "DsraPolicy",
    "FinancingSchedule",
    "StraightLineAmortization",
    "TrancheSchedule",
    "compute_covenants",
    "compute_financing",
    "schedule_tranches",
]
