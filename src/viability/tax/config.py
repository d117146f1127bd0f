# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tax regime configuration.

The tax stack is a tunable approximation (VAT, corporate income tax with an
interest deductibility cap and loss carryforward, and zakat), not a certified
implementation of any jurisdiction's code.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from ..core.primitives import (
    DecimalBetween0And1,
    InputRecoveryMethodEnum,
    Model,
    NonNegativeDecimal,
    VatTimingEnum,
    ZakatBaseEnum,
)


class VatConfig(Model):
    """
    Value added tax.

    Attributes:
        enabled: Charge and recover VAT.
        rate: VAT rate applied to standard-rated outputs and eligible inputs.
        timing: Revenue series that carries the tax point for sales.
        input_recovery: Method for the recoverable share of input VAT.
        fixed_share: Share used by the fixed_share method.
    """

    enabled: bool = False
    rate: DecimalBetween0And1 = Decimal("0.15")
    timing: VatTimingEnum = VatTimingEnum.RECOGNITION
    input_recovery: InputRecoveryMethodEnum = InputRecoveryMethodEnum.ELIGIBLE_SHARE
    fixed_share: DecimalBetween0And1 = Decimal("0.5")


class CorporateTaxConfig(Model):
    """Corporate income tax."""

    enabled: bool = False
    rate: DecimalBetween0And1 = Decimal("0.2")
    interest_cap_pct_ebit: NonNegativeDecimal = Field(
        default=Decimal(1),
        description="Deductible interest is capped at this share of EBIT.",
    )
    allow_nol_carryforward: bool = True


class ZakatConfig(Model):
    """Zakat levied monthly at rate/12 on the selected base."""

    enabled: bool = False
    rate: DecimalBetween0And1 = Decimal("0.025")
    base: ZakatBaseEnum = ZakatBaseEnum.NBV


class TaxConfig(Model):
    vat: VatConfig = Field(default_factory=VatConfig)
    corporate: CorporateTaxConfig = Field(default_factory=CorporateTaxConfig)
    zakat: ZakatConfig = Field(default_factory=ZakatConfig)
