# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
VAT.

Output VAT is charged on standard-rated sales (on the series chosen by the
timing policy), rent and CAM billings. Input VAT is charged on capex and
opex and recovered by the configured share. Gross VAT collected from
customers and paid to suppliers passes through project cash; the net
position is settled with the authority each period, except that an excess
of input over output is carried forward as a VAT asset and offset against
the next positive positions first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from ..core.primitives import InputRecoveryMethodEnum, VatClassEnum, VatTimingEnum
from ..development.cam import CamAllocation
from ..development.costs import CostSchedule
from ..development.revenue import RevenueSchedule
from ..utils.series import (
    ZERO,
    Series,
    add,
    constant,
    safe_divide,
    scale,
    subtract,
    total,
    zeros,
)
from .config import VatConfig

logger = logging.getLogger(__name__)

_SALES_SERIES = {
    VatTimingEnum.RECOGNITION: "recognized",
    VatTimingEnum.INVOICE: "billings",
    VatTimingEnum.CASH: "collections",
}


@dataclass(frozen=True)
class VatSchedule:
    """VAT position of the project."""

    enabled: bool
    rate: Decimal
    output_base: Series
    input_base: Series
    recovery_share: Series
    output_vat: Series
    input_vat: Series
    net: Series
    settlement: Series
    carryforward: Series
    liability: Series

    @property
    def passthrough(self) -> Series:
        """Gross VAT collected less VAT paid on costs."""
        return subtract(self.output_vat, self.input_vat)


def output_base(
    config: VatConfig, revenue: RevenueSchedule, cam: CamAllocation, vat_class: VatClassEnum
) -> Series:
    """Sales (per timing) + rent + CAM falling in `vat_class`."""
    sales = revenue.by_vat_class(_SALES_SERIES[config.timing], vat_class)
    rent = revenue.by_vat_class("rent", vat_class)
    parts = [sales, rent]
    if cam.enabled and cam.vat_class == vat_class:
        parts.append(cam.cam_revenue)
    return add(*parts)


def recovery_share(
    config: VatConfig, costs: CostSchedule, revenue: RevenueSchedule, cam: CamAllocation
) -> Series:
    """Recoverable share of input VAT for every period."""
    periods = len(costs.capex)
    method = config.input_recovery
    if method == InputRecoveryMethodEnum.FIXED_SHARE:
        return constant(config.fixed_share, periods)
    if method == InputRecoveryMethodEnum.ELIGIBLE_SHARE:
        count = len(costs.items)
        eligible = sum(1 for d in costs.items.values() if d.vat_input_eligible)
        return constant(safe_divide(Decimal(eligible), Decimal(count)), periods)
    # Partial exemption: taxable (standard + zero rated) supplies over all
    # supplies in scope, measured across the whole run.
    taxable = total(output_base(config, revenue, cam, VatClassEnum.STANDARD)) + total(
        output_base(config, revenue, cam, VatClassEnum.ZERO)
    )
    in_scope = taxable + total(output_base(config, revenue, cam, VatClassEnum.EXEMPT))
    return constant(safe_divide(taxable, in_scope), periods)


def settle(net: Series) -> tuple[Series, Series]:
    """
    Offset net VAT against the running carryforward.

    Returns:
        (settlement paid per period, carryforward balance per period)
    """
    settlement: List[Decimal] = []
    carry: List[Decimal] = []
    balance = ZERO
    for amount in net:
        position = amount - balance
        if position < ZERO:
            settlement.append(ZERO)
            balance = -position
        else:
            settlement.append(position)
            balance = ZERO
        carry.append(balance)
    return tuple(settlement), tuple(carry)


def compute_vat(
    config: VatConfig,
    costs: CostSchedule,
    revenue: RevenueSchedule,
    cam: CamAllocation,
) -> VatSchedule:
    periods = len(costs.capex)
    if not config.enabled:
        empty = zeros(periods)
        return VatSchedule(
            enabled=False,
            rate=config.rate,
            output_base=empty,
            input_base=empty,
            recovery_share=empty,
            output_vat=empty,
            input_vat=empty,
            net=empty,
            settlement=empty,
            carryforward=empty,
            liability=empty,
        )

    base_out = output_base(config, revenue, cam, VatClassEnum.STANDARD)
    base_in = add(costs.capex, costs.opex)
    share = recovery_share(config, costs, revenue, cam)
    output_vat = scale(base_out, config.rate)
    input_vat = tuple(b * s * config.rate for b, s in zip(base_in, share))
    net = subtract(output_vat, input_vat)
    settlement, carry = settle(net)

    logger.debug(
        f"VAT: output {total(output_vat)}, input {total(input_vat)}, "
        f"settled {total(settlement)}, closing carryforward {carry[-1] if carry else ZERO}"
    )
    return VatSchedule(
        enabled=True,
        rate=config.rate,
        output_base=base_out,
        input_base=base_in,
        recovery_share=share,
        output_vat=output_vat,
        input_vat=input_vat,
        net=net,
        settlement=settlement,
        carryforward=carry,
        liability=zeros(periods),
    )
