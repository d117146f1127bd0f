# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt Tranche - one layer of the project's debt stack.

Tranches share the period's funding need in `draw_priority` order (lower
first). Each carries its own sizing limits, availability window, pricing,
fees, optional reserve account and covenant terms.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from ..core.primitives import (
    CovenantTestBasisEnum,
    DecimalBetween0And1,
    DsraBasisEnum,
    Model,
    NonNegativeDecimal,
    PositiveInt,
    PositiveIntGt0,
)
from ..utils.series import ZERO
from .amortization import AnyAmortization

TWELVE = Decimal(12)


class DsraPolicy(Model):
    """Debt service reserve sized as `months` of debt service."""

    months: PositiveIntGt0 = 3
    basis: DsraBasisEnum = DsraBasisEnum.FORWARD


class CovenantTerms(Model):
    """
    Lender coverage tests.

    Attributes:
        dscr_min: Minimum debt service coverage ratio.
        icr_min: Minimum interest coverage ratio.
        test_basis: Test point ratios, LTM ratios, or both.
        grace_period_months: Consecutive failing periods tolerated before a
            breach is recorded.
        strict_dscr: Include ongoing fees in debt service.
    """

    dscr_min: Optional[NonNegativeDecimal] = None
    icr_min: Optional[NonNegativeDecimal] = None
    test_basis: CovenantTestBasisEnum = CovenantTestBasisEnum.POINT
    grace_period_months: PositiveInt = 0
    strict_dscr: bool = False


class DebtTranche(Model):
    """
    Individual debt tranche.

    Attributes:
        key: Tranche identifier.
        amortization: Repayment variant (bullet, annuity, straight_line).
        limit_ltc: Loan-to-cost limit; also caps each period's draw at this
            share of the period's funding need.
        limit_ltv: Loan-to-value limit against gross sales value.
        nominal_rate_pa: Annual rate; interest accrues at rate/12.
        upfront_fee_pct: Fee on the first draw amount.
        ongoing_fee_pct_pa: Annual fee on the outstanding balance.
        commitment_fee_pct_pa: Annual fee on undrawn facility while available.
        availability_start_m: First period draws are allowed.
        availability_end_m: Last period draws are allowed (default: horizon).
        draw_priority: Lower values draw first.
        dsra: Optional debt service reserve account.
        covenants: Optional coverage covenants.

    Example:
        >>> senior = DebtTranche(
        ...     key="senior",
        ...     amortization={"kind": "annuity", "tenor_months": 60},
        ...     limit_ltc=Decimal("0.6"),
        ...     nominal_rate_pa=Decimal("0.07"),
        ... )
    """

    key: str
    amortization: AnyAmortization
    limit_ltc: Optional[DecimalBetween0And1] = None
    limit_ltv: Optional[DecimalBetween0And1] = None
    nominal_rate_pa: NonNegativeDecimal = Decimal("0.08")
    upfront_fee_pct: NonNegativeDecimal = Decimal(0)
    ongoing_fee_pct_pa: NonNegativeDecimal = Decimal(0)
    commitment_fee_pct_pa: NonNegativeDecimal = Decimal(0)
    availability_start_m: PositiveInt = 0
    availability_end_m: Optional[PositiveInt] = None
    draw_priority: int = 1
    dsra: Optional[DsraPolicy] = None
    covenants: Optional[CovenantTerms] = None

    @model_validator(mode="after")
    def validate_tranche(self) -> "DebtTranche":
        if self.limit_ltc is None and self.limit_ltv is None:
            raise ValueError(f"Tranche '{self.key}': set limit_ltc and/or limit_ltv")
        if (
            self.availability_end_m is not None
            and self.availability_end_m < self.availability_start_m
        ):
            raise ValueError(
                f"Tranche '{self.key}': availability_end_m precedes availability_start_m"
            )
        return self

    @property
    def monthly_rate(self) -> Decimal:
        return self.nominal_rate_pa / TWELVE

    def availability_end(self, periods: int) -> int:
        end = periods - 1 if self.availability_end_m is None else self.availability_end_m
        return min(end, periods - 1)

    def is_available(self, t: int, periods: int) -> bool:
        return self.availability_start_m <= t <= self.availability_end(periods)

    def facility_limit(self, total_cost: Decimal, gross_value: Decimal) -> Decimal:
        """Smallest of the LTC and LTV sized amounts."""
        limits = []
        if self.limit_ltc is not None:
            limits.append(self.limit_ltc * total_cost)
        if self.limit_ltv is not None:
            limits.append(self.limit_ltv * gross_value)
        return max(min(limits), ZERO)
