# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class UnitCategoryEnum(str, Enum):
    """Product category of a unit type; drives CAM billability."""

    RESIDENTIAL = "residential"
    RETAIL = "retail"
    OFFICE = "office"
    INDUSTRIAL = "industrial"
    LAND = "land"
    OTHER = "other"


class CurveMeaningEnum(str, Enum):
    """How a unit type's curve is read by the revenue engine."""

    SELL_THROUGH = "sell_through"  # share of stock sold per period, normalized to 1
    OCCUPANCY = "occupancy"  # fraction of area let per period, clamped to [0, 1]


class VatClassEnum(str, Enum):
    """VAT treatment of an output line. Only STANDARD is taxed."""

    STANDARD = "standard"
    ZERO = "zero"
    EXEMPT = "exempt"
    OUT_OF_SCOPE = "out_of_scope"


class VatTimingEnum(str, Enum):
    """Which revenue series carries the output VAT point."""

    RECOGNITION = "recognition"
    INVOICE = "invoice"
    CASH = "cash"


class InputRecoveryMethodEnum(str, Enum):
    """How the recoverable share of input VAT is derived."""

    ELIGIBLE_SHARE = "eligible_share"
    FIXED_SHARE = "fixed_share"
    PROPORTIONAL_TO_TAXABLE_OUTPUTS = "proportional_to_taxable_outputs"


class ZakatBaseEnum(str, Enum):
    """Zakat assessment base."""

    NBV = "nbv"
    NET_EQUITY = "net_equity"


class DsraBasisEnum(str, Enum):
    """Debt service window used to size a reserve account."""

    FORWARD = "forward"
    TRAILING = "trailing"


class CovenantTestBasisEnum(str, Enum):
    """Which ratio variant is tested against a covenant threshold."""

    POINT = "point"
    LTM = "ltm"
    BOTH = "both"


class CallOrderEnum(str, Enum):
    """Allocation key for equity capital calls."""

    PRO_RATA_COMMITMENT = "pro_rata_commitment"
    FIXED_SHARES = "fixed_shares"


class DistributionFrequencyEnum(str, Enum):
    """How often accumulated distributable cash is paid out."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
