# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Context, Decimal

from pydantic import Field

from .model import Model
from .types import PositiveIntGt0


class IrrSolverSettings(Model):
    """Newton-Raphson IRR solver limits."""

    max_iterations: PositiveIntGt0 = Field(
        default=100, description="Iteration cap before the solver gives up."
    )
    tolerance: Decimal = Field(
        default=Decimal("1e-6"),
        gt=0,
        description="Absolute NPV tolerance that counts as converged.",
    )
    initial_guess_monthly: Decimal = Field(
        default=Decimal("0.01"),
        gt=-1,
        description="Starting monthly rate for the iteration.",
    )


class CalculationSettings(Model):
    """
    Numerical behaviour of a run.

    The pipeline executes inside a decimal context built from these settings,
    so two runs with identical inputs and settings produce identical digits.
    """

    decimal_precision: PositiveIntGt0 = Field(
        default=34, ge=16, description="Significant digits of the decimal context."
    )
    tie_out_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        gt=0,
        description="Absolute tolerance for the balance-sheet identity and cap checks.",
    )
    ltm_window_months: PositiveIntGt0 = Field(
        default=12, description="Rolling window for last-twelve-months covenant ratios."
    )

    def decimal_context(self) -> Context:
        return Context(prec=self.decimal_precision, rounding=ROUND_HALF_EVEN)


class EngineSettings(Model):
    """Top-level settings passed alongside ProjectInputs."""

    calculation: CalculationSettings = Field(default_factory=CalculationSettings)
    irr: IrrSolverSettings = Field(default_factory=IrrSolverSettings)
