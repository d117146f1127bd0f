# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Loan amortization rules.

Each amortization type is a tagged variant carrying only the fields it
needs. A variant answers one question per period: how much principal is due
given the opening balance. Repayment is anchored on the tranche's final draw
period:

- bullet: whole balance at final draw + tenor
- annuity: level payments over `tenor_months` periods starting in the final
  draw period
- straight_line: equal principal installments over the same window
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Literal, Union

from pydantic import Field
from typing_extensions import Annotated

from ..core.calculations import FinancialCalculations
from ..core.primitives import Model, PositiveIntGt0
from ..utils.series import ZERO


class AmortizationBase(Model, ABC):
    tenor_months: PositiveIntGt0 = Field(..., description="Repayment tenor in months")

    def window_end(self, final_draw: int) -> int:
        """Last period of the repayment window."""
        return final_draw + self.tenor_months - 1

    @abstractmethod
    def principal_due(
        self,
        t: int,
        final_draw: int,
        opening_balance: Decimal,
        monthly_rate: Decimal,
    ) -> Decimal:
        """Principal repaid in period t out of `opening_balance`."""


class BulletAmortization(AmortizationBase):
    """Interest only, full balance repaid at maturity."""

    kind: Literal["bullet"] = "bullet"

    def maturity(self, final_draw: int) -> int:
        return final_draw + self.tenor_months

    def principal_due(self, t, final_draw, opening_balance, monthly_rate):
        return opening_balance if t == self.maturity(final_draw) else ZERO


class AnnuityAmortization(AmortizationBase):
    """
    Level total debt service.

    The payment is re-derived each period from the opening balance and the
    periods left in the window, which yields a constant payment once draws
    have stopped. A zero rate degenerates to equal installments.
    """

    kind: Literal["annuity"] = "annuity"

    def principal_due(self, t, final_draw, opening_balance, monthly_rate):
        end = self.window_end(final_draw)
        if t < final_draw or t > end or opening_balance <= ZERO:
            return ZERO
        remaining = end - t + 1
        if remaining == 1:
            return opening_balance
        payment = FinancialCalculations.calculate_payment(
            opening_balance, monthly_rate, remaining
        )
        principal = max(payment - opening_balance * monthly_rate, ZERO)
        return min(principal, opening_balance)


class StraightLineAmortization(AmortizationBase):
    """Equal principal installments over the repayment window."""

    kind: Literal["straight_line"] = "straight_line"

    def principal_due(self, t, final_draw, opening_balance, monthly_rate):
        end = self.window_end(final_draw)
        if t < final_draw or t > end or opening_balance <= ZERO:
            return ZERO
        return opening_balance / Decimal(end - t + 1)


AnyAmortization = Annotated[
    Union[BulletAmortization, AnnuityAmortization, StraightLineAmortization],
    Field(discriminator="kind"),
]
