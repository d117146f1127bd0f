# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Equity partnership structure: classes, investors and distribution terms.

Classes are paid senior to junior (lower `seniority` first). Within a class
LP investors take return of capital and preferred return, GP investors take
catch-up and the GP share of each promote tier.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import Field, model_validator
from typing_extensions import Annotated

from ..core.primitives import (
    CallOrderEnum,
    DecimalBetween0And1,
    DistributionFrequencyEnum,
    Model,
    NonNegativeDecimal,
    ValidationMixin,
)
from ..utils.series import ONE, ZERO

TWELVE = Decimal(12)


class SimplePref(Model):
    """Preferred return accruing at rate / 12 on unreturned capital."""

    kind: Literal["simple"] = "simple"
    rate_pa: NonNegativeDecimal = Decimal("0.08")

    @property
    def monthly_rate(self) -> Decimal:
        return self.rate_pa / TWELVE


class CompoundPref(Model):
    """Preferred return accruing at the effective monthly equivalent of rate_pa."""

    kind: Literal["compound"] = "compound"
    rate_pa: NonNegativeDecimal = Decimal("0.08")

    @property
    def monthly_rate(self) -> Decimal:
        return (ONE + self.rate_pa) ** (ONE / TWELVE) - ONE


AnyPref = Annotated[Union[SimplePref, CompoundPref], Field(discriminator="kind")]


class CatchUp(Model):
    """
    GP catch-up after the preferred return.

    Attributes:
        target_gp_share: GP share of class profit once caught up.
        catchup_rate: Share of each catch-up dollar paid to the GP; the
            rest goes to the class LPs. 1 is a full catch-up.
    """

    target_gp_share: DecimalBetween0And1 = Decimal("0.2")
    catchup_rate: DecimalBetween0And1 = Decimal(1)

    @model_validator(mode="after")
    def validate_rate(self) -> "CatchUp":
        if self.catchup_rate <= self.target_gp_share:
            raise ValueError("catchup_rate must exceed target_gp_share")
        return self


class PromoteTier(Model):
    """Split applied until the class LP IRR reaches `irr_hurdle_pa`."""

    irr_hurdle_pa: NonNegativeDecimal
    split_lp: DecimalBetween0And1
    split_gp: DecimalBetween0And1

    @model_validator(mode="after")
    def validate_split(self) -> "PromoteTier":
        if self.split_lp + self.split_gp != ONE:
            raise ValueError(
                f"Tier at hurdle {self.irr_hurdle_pa}: split_lp + split_gp must equal 1"
            )
        return self


class EquityClass(Model):
    key: str
    seniority: int = 1
    pref: AnyPref = Field(default_factory=SimplePref)
    catchup: Optional[CatchUp] = None
    tiers: List[PromoteTier] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_tiers(self) -> "EquityClass":
        hurdles = [tier.irr_hurdle_pa for tier in self.tiers]
        if hurdles != sorted(hurdles):
            raise ValueError(f"Class '{self.key}': tiers must ascend by irr_hurdle_pa")
        return self

    @property
    def target_gp_share(self) -> Decimal:
        """Largest GP profit share the class terms ever grant."""
        shares = [tier.split_gp for tier in self.tiers]
        if self.catchup is not None:
            shares.append(self.catchup.target_gp_share)
        return max(shares, default=ZERO)


class EquityInvestor(Model):
    key: str
    class_key: str
    role: Literal["lp", "gp"] = "lp"
    commitment: NonNegativeDecimal = Decimal(0)
    fixed_share: Optional[DecimalBetween0And1] = None

    @property
    def is_gp(self) -> bool:
        return self.role == "gp"


class EquityConfig(Model, ValidationMixin):
    """
    Equity block.

    Example:
        >>> EquityConfig(
        ...     enabled=True,
        ...     classes=[{"key": "common", "tiers": [
        ...         {"irr_hurdle_pa": "0.12", "split_lp": "0.8", "split_gp": "0.2"}]}],
        ...     investors=[
        ...         {"key": "lp", "class_key": "common", "commitment": 800_000},
        ...         {"key": "gp", "class_key": "common", "role": "gp", "commitment": 200_000},
        ...     ],
        ... )
    """

    enabled: bool = False
    call_order: CallOrderEnum = CallOrderEnum.PRO_RATA_COMMITMENT
    distribution_frequency: DistributionFrequencyEnum = DistributionFrequencyEnum.MONTHLY
    classes: List[EquityClass] = Field(default_factory=list)
    investors: List[EquityInvestor] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_structure(self) -> "EquityConfig":
        class_keys = self.validate_unique_keys(self.classes, "equity class")
        self.validate_unique_keys(self.investors, "equity investor")
        for investor in self.investors:
            self.validate_reference(
                investor.class_key, class_keys, "class_key", f"Investor '{investor.key}'"
            )
        if self.call_order == CallOrderEnum.FIXED_SHARES and self.investors:
            missing = [inv.key for inv in self.investors if inv.fixed_share is None]
            if missing:
                raise ValueError(f"fixed_shares call order: no fixed_share for {missing}")
            if sum(inv.fixed_share for inv in self.investors) != ONE:
                raise ValueError("fixed_shares call order: fixed_share values must sum to 1")
        return self

    @property
    def is_active(self) -> bool:
        return self.enabled and bool(self.classes) and bool(self.investors)

    def classes_by_seniority(self) -> List[EquityClass]:
        return sorted(self.classes, key=lambda cls: cls.seniority)

    def investors_in(self, class_key: str) -> List[EquityInvestor]:
        return [inv for inv in self.investors if inv.class_key == class_key]
