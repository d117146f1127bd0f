# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Corporate income tax and zakat.

Corporate tax:
    EBIT = revenue - opex - depreciation
    allowed interest = min(interest, max(0, cap_pct x EBIT))
    taxable = EBIT - allowed interest (the disallowed excess stays in)
    NOL absorbs losses and is consumed before new tax is charged
    tax = max(0, taxable x rate)

Zakat:
    monthly charge = base x rate / 12, base being NBV or net equity
    outstanding (cumulative pre-tax funding gap).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Sequence

from ..core.primitives import ZakatBaseEnum
from ..utils.series import ZERO, Series, cumsum, subtract, zeros
from .config import CorporateTaxConfig, ZakatConfig

TWELVE = Decimal(12)


@dataclass(frozen=True)
class CorporateTaxSchedule:
    ebit: Series
    interest_allowed: Series
    interest_disallowed: Series
    taxable_before_nol: Series
    nol_used: Series
    nol_balance: Series
    taxable_income: Series
    tax: Series


@dataclass(frozen=True)
class ZakatSchedule:
    base: Series
    zakat: Series


def compute_ebit(
    revenue: Sequence[Decimal], opex: Sequence[Decimal], depreciation: Sequence[Decimal]
) -> Series:
    return subtract(subtract(revenue, opex), depreciation)


def compute_corporate_tax(
    config: CorporateTaxConfig, ebit: Series, interest: Sequence[Decimal]
) -> CorporateTaxSchedule:
    allowed: List[Decimal] = []
    disallowed: List[Decimal] = []
    before_nol: List[Decimal] = []
    used: List[Decimal] = []
    balance_series: List[Decimal] = []
    taxable_series: List[Decimal] = []
    tax: List[Decimal] = []

    nol = ZERO
    for earnings, charge in zip(ebit, interest):
        cap = max(config.interest_cap_pct_ebit * earnings, ZERO)
        deductible = min(charge, cap)
        taxable = earnings - deductible

        consumed = ZERO
        if config.allow_nol_carryforward:
            if taxable < ZERO:
                nol += -taxable
                taxable_after = ZERO
            else:
                consumed = min(nol, taxable)
                nol -= consumed
                taxable_after = taxable - consumed
        else:
            taxable_after = max(taxable, ZERO)

        allowed.append(deductible)
        disallowed.append(charge - deductible)
        before_nol.append(taxable)
        used.append(consumed)
        balance_series.append(nol)
        taxable_series.append(taxable_after)
        tax.append(max(taxable_after * config.rate, ZERO) if config.enabled else ZERO)

    return CorporateTaxSchedule(
        ebit=ebit,
        interest_allowed=tuple(allowed),
        interest_disallowed=tuple(disallowed),
        taxable_before_nol=tuple(before_nol),
        nol_used=tuple(used),
        nol_balance=tuple(balance_series),
        taxable_income=tuple(taxable_series),
        tax=tuple(tax),
    )


def net_equity_outstanding(pre_tax_cash: Sequence[Decimal]) -> Series:
    """Cumulative funding gap the equity holders carry (never negative)."""
    return tuple(max(-position, ZERO) for position in cumsum(pre_tax_cash))


def compute_zakat(
    config: ZakatConfig, nbv: Sequence[Decimal], pre_tax_cash: Sequence[Decimal]
) -> ZakatSchedule:
    periods = len(nbv)
    if config.base == ZakatBaseEnum.NBV:
        base = tuple(nbv)
    else:
        base = net_equity_outstanding(pre_tax_cash)
    if not config.enabled:
        return ZakatSchedule(base=base, zakat=zeros(periods))
    monthly = config.rate / TWELVE
    return ZakatSchedule(base=base, zakat=tuple(b * monthly for b in base))
