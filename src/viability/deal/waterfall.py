# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Equity Waterfall Calculator

Period-by-period state machine over project cash:

1. Capital calls: negative project cash is called from investors pro-rata by
   commitment or by fixed share.
2. Preferred return accrual on each class's unreturned capital.
3. Distributions of positive project cash (monthly, or accumulated and paid
   on quarter boundaries and in the final period). Classes with investors
   are walked senior to junior:
   - return of capital pro-rata by unreturned balance
   - accrued pref to the class LPs pro-rata by commitment
   - GP catch-up
   - promote tiers, each paying its split until the class LP IRR reaches the
     tier hurdle; anything left is split at the last tier's split
   Cash left after every class is paid to all investors pro-rata by
   commitment.
4. Clawback in the final period when the GP's promote is not supported by
   the final outcome.

Catch-up solves G + c*Y = tau*(A + Y) for the catch-up amount Y, where A is
the class profit distributed so far, G the GP's share of it, tau the target
GP share and c the catch-up rate:

    Y = (tau*A - G) / (c - tau)

Tier amounts use the hurdle account: the LP distribution that brings the
class LP flows to a zero future value at the tier's monthly hurdle rate is
exactly the amount that lifts the LP IRR to the hurdle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ..core.calculations import FinancialCalculations
from ..core.context import RunContext
from ..core.primitives import (
    CallOrderEnum,
    DistributionFrequencyEnum,
    IrrSolverSettings,
)
from ..utils.series import (
    ZERO,
    Series,
    add,
    allocate_pro_rata,
    negative_part,
    positive_part,
    subtract,
    total,
    zeros,
)
from .partnership import EquityClass, EquityConfig, EquityInvestor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReturnMetrics:
    """IRR and multiples for one investor or the whole equity stack."""

    contributed: Decimal
    distributed: Decimal
    nav: Decimal
    irr: Optional[Decimal]
    moic: Optional[Decimal]
    dpi: Optional[Decimal]
    rvpi: Optional[Decimal]
    tvpi: Optional[Decimal]


@dataclass(frozen=True)
class ClassWaterfall:
    """Per-class ledgers."""

    key: str
    pref_accrued: Series
    pref_balance: Series
    return_of_capital: Series
    pref_paid: Series
    catchup: Series
    promote: Series
    lp_cash_flows: Series
    profit_distributed: Decimal
    gp_profit: Decimal
    clawback: Decimal


@dataclass(frozen=True)
class EquityWaterfall:
    """Output of the equity waterfall stage."""

    enabled: bool
    calls_total: Series
    distributions_total: Series
    residual: Series
    gp_promote: Series
    gp_clawback: Series
    calls_by_investor: Dict[str, Series]
    distributions_by_investor: Dict[str, Series]
    unreturned_capital: Dict[str, Decimal]
    classes: Dict[str, ClassWaterfall]
    kpis: ReturnMetrics
    kpis_by_investor: Dict[str, ReturnMetrics]

    @property
    def net_cash_flows(self) -> Series:
        """Equity-holder view: distributions less calls."""
        return subtract(self.distributions_total, self.calls_total)


def return_metrics(
    calls: Sequence[Decimal],
    distributions: Sequence[Decimal],
    nav: Decimal,
    settings: IrrSolverSettings,
) -> ReturnMetrics:
    """IRR on distributions less calls; multiples against total calls."""
    contributed = total(calls)
    distributed = total(distributions)
    multiple = FinancialCalculations.calculate_multiple
    return ReturnMetrics(
        contributed=contributed,
        distributed=distributed,
        nav=nav,
        irr=FinancialCalculations.calculate_irr(subtract(distributions, calls), settings),
        moic=multiple(distributed + nav, contributed),
        dpi=multiple(distributed, contributed),
        rvpi=multiple(nav, contributed),
        tvpi=multiple(distributed + nav, contributed),
    )


@dataclass
class _ClassLedger:
    """Running state of one equity class."""

    equity_class: EquityClass
    lps: List[EquityInvestor]
    gps: List[EquityInvestor]
    periods: int
    pref_balance: Decimal = ZERO
    profit_distributed: Decimal = ZERO
    gp_profit: Decimal = ZERO
    gp_promote: Decimal = ZERO
    pref_accrued: List[Decimal] = field(default_factory=list)
    pref_balance_series: List[Decimal] = field(default_factory=list)
    return_of_capital: List[Decimal] = field(default_factory=list)
    pref_paid: List[Decimal] = field(default_factory=list)
    catchup: List[Decimal] = field(default_factory=list)
    promote: List[Decimal] = field(default_factory=list)
    lp_cash_flows: List[Decimal] = field(default_factory=list)

    def __post_init__(self) -> None:
        for name in (
            "pref_accrued",
            "pref_balance_series",
            "return_of_capital",
            "pref_paid",
            "catchup",
            "promote",
            "lp_cash_flows",
        ):
            setattr(self, name, [ZERO] * self.periods)

    @property
    def investors(self) -> List[EquityInvestor]:
        return self.lps + self.gps


@dataclass
class EquityWaterfallCalculator:
    """
    Runs the equity waterfall for one project.

    Attributes:
        config: Equity block
        periods: Number of monthly periods
        irr_settings: Solver settings for tier and KPI IRRs
    """

    config: EquityConfig
    periods: int
    irr_settings: IrrSolverSettings = field(default_factory=IrrSolverSettings)

    def __post_init__(self) -> None:
        keys = [inv.key for inv in self.config.investors]
        self._calls: Dict[str, List[Decimal]] = {k: [ZERO] * self.periods for k in keys}
        self._dists: Dict[str, List[Decimal]] = {k: [ZERO] * self.periods for k in keys}
        self._unreturned: Dict[str, Decimal] = {k: ZERO for k in keys}
        self._promote: List[Decimal] = [ZERO] * self.periods
        self._residual: List[Decimal] = [ZERO] * self.periods
        self._ledgers: List[_ClassLedger] = []
        for equity_class in self.config.classes_by_seniority():
            members = self.config.investors_in(equity_class.key)
            self._ledgers.append(
                _ClassLedger(
                    equity_class=equity_class,
                    lps=[inv for inv in members if not inv.is_gp],
                    gps=[inv for inv in members if inv.is_gp],
                    periods=self.periods,
                )
            )
        self._class_of: Dict[str, _ClassLedger] = {
            inv.key: ledger for ledger in self._ledgers for inv in ledger.investors
        }

    # Allocation helpers

    def _pay(self, investors: List[EquityInvestor], amount: Decimal, t: int) -> None:
        """Distribute `amount` across investors pro-rata by commitment."""
        if amount <= ZERO or not investors:
            return
        shares = allocate_pro_rata(amount, [inv.commitment for inv in investors])
        for inv, share in zip(investors, shares):
            self._dists[inv.key][t] += share
            if not inv.is_gp:
                self._class_of[inv.key].lp_cash_flows[t] += share

    def _split(self, ledger: _ClassLedger, lp_amount: Decimal, gp_amount: Decimal, t: int) -> Decimal:
        """
        Pay an LP/GP split of class profit. A side with no investors passes
        its share to the other side.

        Returns:
            The amount paid to GPs
        """
        if not ledger.gps:
            lp_amount, gp_amount = lp_amount + gp_amount, ZERO
        elif not ledger.lps:
            lp_amount, gp_amount = ZERO, lp_amount + gp_amount
        self._pay(ledger.lps, lp_amount, t)
        self._pay(ledger.gps, gp_amount, t)
        ledger.profit_distributed += lp_amount + gp_amount
        ledger.gp_profit += gp_amount
        ledger.gp_promote += gp_amount
        self._promote[t] += gp_amount
        return gp_amount

    # Period steps

    def _call_capital(self, need: Decimal, t: int) -> None:
        investors = self.config.investors
        if self.config.call_order == CallOrderEnum.FIXED_SHARES:
            amounts = [need * inv.fixed_share for inv in investors]
        else:
            amounts = list(allocate_pro_rata(need, [inv.commitment for inv in investors]))
        for inv, amount in zip(investors, amounts):
            self._calls[inv.key][t] += amount
            self._unreturned[inv.key] += amount
            if not inv.is_gp:
                self._class_of[inv.key].lp_cash_flows[t] -= amount

    def _accrue_pref(self, t: int) -> None:
        for ledger in self._ledgers:
            unreturned = total(self._unreturned[inv.key] for inv in ledger.investors)
            accrual = unreturned * ledger.equity_class.pref.monthly_rate
            ledger.pref_balance += accrual
            ledger.pref_accrued[t] = accrual

    def _return_capital(self, ledger: _ClassLedger, remaining: Decimal, t: int) -> Decimal:
        investors = ledger.investors
        balances = [self._unreturned[inv.key] for inv in investors]
        outstanding = total(balances)
        if outstanding <= ZERO or remaining <= ZERO:
            return remaining
        payment = min(remaining, outstanding)
        for inv, share in zip(investors, allocate_pro_rata(payment, balances)):
            self._dists[inv.key][t] += share
            self._unreturned[inv.key] -= share
            if not inv.is_gp:
                ledger.lp_cash_flows[t] += share
        ledger.return_of_capital[t] += payment
        return remaining - payment

    def _pay_pref(self, ledger: _ClassLedger, remaining: Decimal, t: int) -> Decimal:
        if remaining <= ZERO or ledger.pref_balance <= ZERO or not ledger.lps:
            return remaining
        payment = min(remaining, ledger.pref_balance)
        self._pay(ledger.lps, payment, t)
        ledger.pref_balance -= payment
        ledger.pref_paid[t] += payment
        ledger.profit_distributed += payment
        return remaining - payment

    def _catch_up(self, ledger: _ClassLedger, remaining: Decimal, t: int) -> Decimal:
        terms = ledger.equity_class.catchup
        if terms is None or remaining <= ZERO or not ledger.gps:
            return remaining
        tau = terms.target_gp_share
        rate = terms.catchup_rate
        target = (tau * ledger.profit_distributed - ledger.gp_profit) / (rate - tau)
        if target <= ZERO:
            return remaining
        payment = min(remaining, target)
        ledger.catchup[t] += self._split(ledger, payment * (1 - rate), payment * rate, t)
        return remaining - payment

    def _pay_tiers(self, ledger: _ClassLedger, remaining: Decimal, t: int) -> Decimal:
        tiers = ledger.equity_class.tiers
        for tier in tiers:
            if remaining <= ZERO:
                return remaining
            monthly_hurdle = FinancialCalculations.annual_to_monthly(tier.irr_hurdle_pa)
            lp_needed = -FinancialCalculations.calculate_future_value(
                monthly_hurdle, ledger.lp_cash_flows, t
            )
            if lp_needed <= ZERO:
                continue
            if tier.split_lp == ZERO:
                amount = remaining
            else:
                amount = min(remaining, lp_needed / tier.split_lp)
            ledger.promote[t] += self._split(
                ledger, amount * tier.split_lp, amount * tier.split_gp, t
            )
            remaining -= amount
        if remaining > ZERO and tiers:
            last = tiers[-1]
            ledger.promote[t] += self._split(
                ledger, remaining * last.split_lp, remaining * last.split_gp, t
            )
            remaining = ZERO
        return remaining

    def _distribute(self, available: Decimal, t: int) -> None:
        remaining = available
        for ledger in self._ledgers:
            if remaining <= ZERO:
                break
            if not ledger.investors:
                continue
            remaining = self._return_capital(ledger, remaining, t)
            remaining = self._pay_pref(ledger, remaining, t)
            remaining = self._catch_up(ledger, remaining, t)
            remaining = self._pay_tiers(ledger, remaining, t)
        if remaining > ZERO:
            self._pay(self.config.investors, remaining, t)
            self._residual[t] = remaining

    def _is_distribution_period(self, t: int) -> bool:
        if self.config.distribution_frequency == DistributionFrequencyEnum.MONTHLY:
            return True
        return (t + 1) % 3 == 0 or t == self.periods - 1

    def _clawback(self, ledger: _ClassLedger) -> Decimal:
        if ledger.gp_promote <= ZERO:
            return ZERO
        shortfall = total(self._unreturned[inv.key] for inv in ledger.lps) + ledger.pref_balance
        excess = ledger.gp_profit - ledger.equity_class.target_gp_share * ledger.profit_distributed
        return min(ledger.gp_promote, max(shortfall, excess, ZERO))

    def calculate(self, project_cash: Sequence[Decimal], nav: Decimal) -> EquityWaterfall:
        """
        Run the waterfall.

        Args:
            project_cash: Monthly project cash; negative periods are called
            nav: Residual value at the horizon, allocated pro-rata by
                contributed capital for the KPIs

        Returns:
            EquityWaterfall with per-investor and per-class ledgers
        """
        calls = negative_part(project_cash)
        receipts = positive_part(project_cash)
        accumulated = ZERO
        for t in range(self.periods):
            if calls[t] > ZERO:
                self._call_capital(calls[t], t)
            self._accrue_pref(t)
            accumulated += receipts[t]
            if self._is_distribution_period(t) and accumulated > ZERO:
                self._distribute(accumulated, t)
                accumulated = ZERO
            for ledger in self._ledgers:
                ledger.pref_balance_series[t] = ledger.pref_balance

        clawback = zeros(self.periods)
        class_results: Dict[str, ClassWaterfall] = {}
        for ledger in self._ledgers:
            amount = self._clawback(ledger) if self.periods else ZERO
            if amount > ZERO:
                logger.debug(f"Class '{ledger.equity_class.key}': GP clawback {amount}")
                clawback = clawback[:-1] + (clawback[-1] + amount,)
            class_results[ledger.equity_class.key] = ClassWaterfall(
                key=ledger.equity_class.key,
                pref_accrued=tuple(ledger.pref_accrued),
                pref_balance=tuple(ledger.pref_balance_series),
                return_of_capital=tuple(ledger.return_of_capital),
                pref_paid=tuple(ledger.pref_paid),
                catchup=tuple(ledger.catchup),
                promote=tuple(ledger.promote),
                lp_cash_flows=tuple(ledger.lp_cash_flows),
                profit_distributed=ledger.profit_distributed,
                gp_profit=ledger.gp_profit,
                clawback=amount,
            )

        calls_by_investor = {k: tuple(v) for k, v in self._calls.items()}
        dists_by_investor = {k: tuple(v) for k, v in self._dists.items()}
        calls_total = add(*calls_by_investor.values())
        dists_total = add(*dists_by_investor.values())
        contributed_total = total(calls_total)

        kpis_by_investor = {}
        for key in calls_by_investor:
            share_nav = (
                nav * total(calls_by_investor[key]) / contributed_total
                if contributed_total > ZERO
                else ZERO
            )
            kpis_by_investor[key] = return_metrics(
                calls_by_investor[key], dists_by_investor[key], share_nav, self.irr_settings
            )
        kpis = return_metrics(calls_total, dists_total, nav, self.irr_settings)
        if kpis.irr is None and contributed_total > ZERO:
            logger.warning("Equity IRR could not be solved; reporting None")

        logger.debug(
            f"Equity waterfall: called {contributed_total}, distributed {total(dists_total)}, "
            f"promote {total(self._promote)}"
        )
        return EquityWaterfall(
            enabled=True,
            calls_total=calls_total,
            distributions_total=dists_total,
            residual=tuple(self._residual),
            gp_promote=tuple(self._promote),
            gp_clawback=clawback,
            calls_by_investor=calls_by_investor,
            distributions_by_investor=dists_by_investor,
            unreturned_capital=dict(self._unreturned),
            classes=class_results,
            kpis=kpis,
            kpis_by_investor=kpis_by_investor,
        )


def disabled_waterfall(periods: int) -> EquityWaterfall:
    empty = zeros(periods)
    return EquityWaterfall(
        enabled=False,
        calls_total=empty,
        distributions_total=empty,
        residual=empty,
        gp_promote=empty,
        gp_clawback=empty,
        calls_by_investor={},
        distributions_by_investor={},
        unreturned_capital={},
        classes={},
        kpis=ReturnMetrics(ZERO, ZERO, ZERO, None, None, None, None, None),
        kpis_by_investor={},
    )


def compute_equity_waterfall(
    ctx: RunContext, project_cash: Sequence[Decimal], nav: Decimal
) -> EquityWaterfall:
    """Run the equity waterfall stage on project cash."""
    config = ctx.inputs.equity
    if not config.is_active:
        return disabled_waterfall(ctx.periods)
    calculator = EquityWaterfallCalculator(
        config=config, periods=ctx.periods, irr_settings=ctx.settings.irr
    )
    return calculator.calculate(project_cash, nav)
