# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Viability Core Primitives

Building blocks shared by every stage: the immutable model base, constrained
types, the monthly timeline, settings, escalation indices, phasing schedules
and validation helpers.
"""

from .enums import (
    CallOrderEnum,
    CovenantTestBasisEnum,
    CurveMeaningEnum,
    DistributionFrequencyEnum,
    DsraBasisEnum,
    InputRecoveryMethodEnum,
    UnitCategoryEnum,
    VatClassEnum,
    VatTimingEnum,
    ZakatBaseEnum,
)
from .growth_rates import EscalationIndex, IndexBucket, escalation_series
from .model import Model
from .phasing import AnyPhasingSchedule, PhasingSchedule, SCurvePhasing, UniformPhasing
from .settings import CalculationSettings, EngineSettings, IrrSolverSettings
from .timeline import Timeline, to_month_period
from .types import (
    DecimalBetween0And1,
    NonNegativeDecimal,
    PositiveInt,
    PositiveIntGt0,
    Rate,
)
from .validation import ValidationMixin

__all__ = [
    "AnyPhasingSchedule",
    "CalculationSettings",
    "CallOrderEnum",
    "CovenantTestBasisEnum",
    "CurveMeaningEnum",
    "DecimalBetween0And1",
    "DistributionFrequencyEnum",
    "DsraBasisEnum",
    "EngineSettings",
    "EscalationIndex",
    "IndexBucket",
    "InputRecoveryMethodEnum",
    "IrrSolverSettings",
    "Model",
    "NonNegativeDecimal",
    "PhasingSchedule",
    "PositiveInt",
    "PositiveIntGt0",
    "Rate",
    "SCurvePhasing",
    "Timeline",
    "UniformPhasing",
    "UnitCategoryEnum",
    "ValidationMixin",
    "VatClassEnum",
    "VatTimingEnum",
    "ZakatBaseEnum",
    "escalation_series",
    "to_month_period",
]
