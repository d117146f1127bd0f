# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Financial calculation functions.

Contains static methods for core financial metrics. These functions are pure
(math-only) decimal routines; the stages delegate to them so there is a
single source of truth for IRR, payment and multiple calculations.
"""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from ..utils.series import INFINITY, ONE, ZERO
from .primitives.settings import IrrSolverSettings

logger = logging.getLogger(__name__)

TWELVE = Decimal(12)


class FinancialCalculations:
    """
    Pure mathematical functions for financial calculations.

    All inputs and outputs are Decimal. Periods are months; period t of a
    cash-flow sequence is discounted by (1 + monthly_rate) ** t.
    """

    @staticmethod
    def monthly_to_annual(monthly_rate: Decimal) -> Decimal:
        """Compound a monthly rate to an effective annual rate."""
        return (ONE + monthly_rate) ** 12 - ONE

    @staticmethod
    def annual_to_monthly(annual_rate: Decimal) -> Decimal:
        """Effective monthly rate equivalent to an annual rate."""
        return (ONE + annual_rate) ** (ONE / TWELVE) - ONE

    @staticmethod
    def calculate_npv(monthly_rate: Decimal, cash_flows: Sequence[Decimal]) -> Decimal:
        """Net present value at period 0."""
        growth = ONE + monthly_rate
        discount = ONE
        value = ZERO
        for amount in cash_flows:
            value += amount * discount
            discount /= growth
        return value

    @staticmethod
    def calculate_future_value(
        monthly_rate: Decimal, cash_flows: Sequence[Decimal], at_period: int
    ) -> Decimal:
        """Value of flows[0..at_period] compounded to `at_period`."""
        growth = ONE + monthly_rate
        value = ZERO
        for t, amount in enumerate(cash_flows[: at_period + 1]):
            value += amount * growth ** (at_period - t)
        return value

    @staticmethod
    def calculate_irr(
        cash_flows: Sequence[Decimal],
        settings: Optional[IrrSolverSettings] = None,
    ) -> Optional[Decimal]:
        """
        Annualized IRR of a monthly cash-flow sequence.

        Newton-Raphson on the monthly rate, compounded to annual as
        (1 + m) ** 12 - 1.

        Args:
            cash_flows: Monthly flows. Negative = calls/outflows,
                        positive = distributions/inflows.
            settings: Iteration cap, NPV tolerance and starting guess.

        Returns:
            Annual IRR as Decimal, or None when it cannot be solved

        Edge Cases Handled:
            - Empty sequence → None
            - No negative or no positive flow → None
            - Derivative vanishes → None
            - No convergence within the iteration cap → None
        """
        settings = settings or IrrSolverSettings()
        if not cash_flows:
            return None
        if not any(cf < ZERO for cf in cash_flows) or not any(cf > ZERO for cf in cash_flows):
            return None

        rate = settings.initial_guess_monthly
        for _ in range(settings.max_iterations):
            growth = ONE + rate
            discount = ONE
            npv = ZERO
            derivative = ZERO
            for t, amount in enumerate(cash_flows):
                npv += amount * discount
                # d/dr of amount / growth**t
                derivative -= Decimal(t) * amount * discount / growth
                discount /= growth

            if abs(npv) < settings.tolerance:
                return FinancialCalculations.monthly_to_annual(rate)
            if derivative == ZERO:
                logger.debug("IRR derivative vanished; returning None")
                return None

            next_rate = rate - npv / derivative
            if next_rate <= -ONE:
                # Step past -100%: halve the distance instead.
                next_rate = (rate - ONE) / 2
            rate = next_rate

        logger.debug(
            f"IRR did not converge in {settings.max_iterations} iterations; returning None"
        )
        return None

    @staticmethod
    def calculate_payment(principal: Decimal, monthly_rate: Decimal, periods: int) -> Decimal:
        """
        Level payment that amortizes `principal` over `periods` months.

        PMT = P * r / (1 - (1 + r) ** -n); a zero rate degenerates to P / n.
        """
        if periods <= 0:
            return principal
        if monthly_rate == ZERO:
            return principal / Decimal(periods)
        return principal * monthly_rate / (ONE - (ONE + monthly_rate) ** -periods)

    @staticmethod
    def calculate_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
        """Coverage-style ratio: +Infinity when the denominator is zero."""
        if denominator == ZERO:
            return INFINITY
        return numerator / denominator

    @staticmethod
    def calculate_multiple(
        returned: Decimal, invested: Decimal
    ) -> Optional[Decimal]:
        """
        Multiple of invested capital.

        Returns:
            returned / invested, or None when nothing was invested
        """
        if invested <= ZERO:
            return None
        return returned / invested
