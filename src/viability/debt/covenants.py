# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt covenant engine.

Computes coverage ratios for the whole debt stack (portfolio) and for each
tranche, and flags breaches against the covenant terms.

Ratios:
- DSCR = CFADS / (interest + principal), plus ongoing fees for strict tests
- ICR = EBIT / interest
- LTM variants use trailing window sums (None until the window fills)

A zero denominator yields +Infinity rather than an error. The portfolio
threshold for each ratio is the lowest threshold set by any tranche; a
tranche is tested against its own terms. A failing period becomes a breach
once the failing streak exceeds the grace period.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.calculations import FinancialCalculations
from ..core.context import RunContext
from ..core.primitives import CovenantTestBasisEnum
from ..utils.series import Series, add, rolling_sum
from .financing import FinancingSchedule
from .tranche import CovenantTerms

logger = logging.getLogger(__name__)

OptionalSeries = Tuple[Optional[Decimal], ...]


@dataclass(frozen=True)
class CovenantSeries:
    """Ratios, headroom and breach flags for one tested scope."""

    dscr: Series
    icr: Series
    dscr_ltm: OptionalSeries
    icr_ltm: OptionalSeries
    dscr_min: Optional[Decimal]
    icr_min: Optional[Decimal]
    test_basis: CovenantTestBasisEnum
    dscr_headroom: OptionalSeries
    icr_headroom: OptionalSeries
    breach: Tuple[bool, ...]
    total_breach_periods: int
    first_breach_index: Optional[int]


@dataclass(frozen=True)
class CovenantReport:
    """Output of the covenant stage."""

    portfolio: CovenantSeries
    tranches: Dict[str, CovenantSeries] = field(default_factory=dict)

    @property
    def total_breach_periods(self) -> int:
        return self.portfolio.total_breach_periods

    @property
    def first_breach_index(self) -> Optional[int]:
        return self.portfolio.first_breach_index

    def breaches_summary(self) -> Dict[str, Dict[str, Optional[int]]]:
        summary = {
            "portfolio": {
                "total_breach_periods": self.portfolio.total_breach_periods,
                "first_breach_index": self.portfolio.first_breach_index,
            }
        }
        for key, scope in self.tranches.items():
            summary[key] = {
                "total_breach_periods": scope.total_breach_periods,
                "first_breach_index": scope.first_breach_index,
            }
        return summary


def ratio_series(numerator: Sequence[Decimal], denominator: Sequence[Decimal]) -> Series:
    return tuple(
        FinancialCalculations.calculate_ratio(n, d) for n, d in zip(numerator, denominator)
    )


def ltm_ratio_series(
    numerator: Sequence[Decimal], denominator: Sequence[Decimal], window: int
) -> OptionalSeries:
    out: List[Optional[Decimal]] = []
    for n, d in zip(rolling_sum(numerator, window), rolling_sum(denominator, window)):
        out.append(None if n is None or d is None else FinancialCalculations.calculate_ratio(n, d))
    return tuple(out)


def _fails(
    point: Decimal, ltm: Optional[Decimal], minimum: Optional[Decimal], basis: CovenantTestBasisEnum
) -> bool:
    if minimum is None:
        return False
    point_fail = point < minimum
    ltm_fail = ltm is not None and ltm < minimum
    if basis == CovenantTestBasisEnum.POINT:
        return point_fail
    if basis == CovenantTestBasisEnum.LTM:
        return ltm_fail
    return point_fail or ltm_fail


def _headroom(values: Sequence[Optional[Decimal]], minimum: Optional[Decimal]) -> OptionalSeries:
    if minimum is None:
        return (None,) * len(values)
    return tuple(None if v is None else v - minimum for v in values)


def evaluate_scope(
    cfads: Sequence[Decimal],
    ebit: Sequence[Decimal],
    interest: Sequence[Decimal],
    debt_service: Sequence[Decimal],
    terms: CovenantTerms,
    window: int,
) -> CovenantSeries:
    """Ratios and breach flags for one set of debt service flows and terms."""
    dscr = ratio_series(cfads, debt_service)
    icr = ratio_series(ebit, interest)
    dscr_ltm = ltm_ratio_series(cfads, debt_service, window)
    icr_ltm = ltm_ratio_series(ebit, interest, window)

    breach: List[bool] = []
    streak = 0
    for t in range(len(dscr)):
        failing = _fails(dscr[t], dscr_ltm[t], terms.dscr_min, terms.test_basis) or _fails(
            icr[t], icr_ltm[t], terms.icr_min, terms.test_basis
        )
        streak = streak + 1 if failing else 0
        breach.append(failing and streak > terms.grace_period_months)

    first = next((t for t, flagged in enumerate(breach) if flagged), None)
    return CovenantSeries(
        dscr=dscr,
        icr=icr,
        dscr_ltm=dscr_ltm,
        icr_ltm=icr_ltm,
        dscr_min=terms.dscr_min,
        icr_min=terms.icr_min,
        test_basis=terms.test_basis,
        dscr_headroom=_headroom(dscr, terms.dscr_min),
        icr_headroom=_headroom(icr, terms.icr_min),
        breach=tuple(breach),
        total_breach_periods=sum(breach),
        first_breach_index=first,
    )


def portfolio_terms(terms: Sequence[CovenantTerms]) -> CovenantTerms:
    """Combine tranche terms: lowest thresholds, widest test basis, shortest grace."""
    if not terms:
        return CovenantTerms()
    dscr = [t.dscr_min for t in terms if t.dscr_min is not None]
    icr = [t.icr_min for t in terms if t.icr_min is not None]
    bases = {t.test_basis for t in terms}
    if CovenantTestBasisEnum.BOTH in bases or len(bases) > 1:
        basis = CovenantTestBasisEnum.BOTH
    else:
        basis = bases.pop()
    return CovenantTerms(
        dscr_min=min(dscr) if dscr else None,
        icr_min=min(icr) if icr else None,
        test_basis=basis,
        grace_period_months=min(t.grace_period_months for t in terms),
        strict_dscr=any(t.strict_dscr for t in terms),
    )


def compute_covenants(
    ctx: RunContext,
    financing: FinancingSchedule,
    cfads: Series,
    ebit: Series,
) -> CovenantReport:
    """Run the covenant stage."""
    window = ctx.settings.calculation.ltm_window_months
    tranche_terms = {
        tranche.key: tranche.covenants
        for tranche in ctx.inputs.debt
        if tranche.covenants is not None
    }

    combined = portfolio_terms(list(tranche_terms.values()))
    service = financing.debt_service
    if combined.strict_dscr:
        service = add(service, financing.ongoing_fees)
    portfolio = evaluate_scope(cfads, ebit, financing.interest, service, combined, window)

    tranches: Dict[str, CovenantSeries] = {}
    for tranche in ctx.inputs.debt:
        schedule = financing.tranches[tranche.key]
        terms = tranche.covenants or CovenantTerms()
        tranche_service = schedule.debt_service
        if terms.strict_dscr:
            tranche_service = add(tranche_service, schedule.ongoing_fee)
        tranches[tranche.key] = evaluate_scope(
            cfads, ebit, schedule.interest, tranche_service, terms, window
        )

    if portfolio.total_breach_periods:
        logger.debug(
            f"Covenant breaches: {portfolio.total_breach_periods} periods, "
            f"first at {portfolio.first_breach_index}"
        )
    return CovenantReport(portfolio=portfolio, tranches=tranches)
