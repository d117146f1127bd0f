# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit mix definitions.

A unit type is one sellable or leasable product line. Its curve says either
how the stock sells through over time (sale products) or how much of the
area is let in each period (lease products). Sale products additionally
choose a revenue-recognition policy.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional, Sequence, Union

from pydantic import Field, model_validator
from typing_extensions import Annotated

from ..core.primitives import (
    CurveMeaningEnum,
    Model,
    NonNegativeDecimal,
    PositiveInt,
    UnitCategoryEnum,
    VatClassEnum,
)
from ..utils.series import Series, clamp, normalize, resample_linear, zeros


def weights_from_curve(values: Sequence[Decimal], periods: int) -> Series:
    """Normalize, resample and renormalize a curve to length-T weights."""
    return normalize(resample_linear(normalize(values), periods))


class Curve(Model):
    """Per-period weights; resampled to the timeline length when used."""

    meaning: CurveMeaningEnum = CurveMeaningEnum.SELL_THROUGH
    values: List[NonNegativeDecimal] = Field(default_factory=list)


class HandoverRecognition(Model):
    """
    Recognize the whole contract value on handover.

    Without a delivery month recognition follows billings.
    """

    kind: Literal["handover"] = "handover"
    delivery_month: Optional[PositiveInt] = Field(
        default=None, description="Period in which the units are handed over"
    )


class PocCostRecognition(Model):
    """Recognize contract value in step with overall cost progress."""

    kind: Literal["poc_cost"] = "poc_cost"


class PocPhysicalRecognition(Model):
    """Recognize contract value along the unit's own sell-through curve."""

    kind: Literal["poc_physical"] = "poc_physical"


class BillingsCappedRecognition(Model):
    """Recognize billings as issued; the escrow cap applies downstream."""

    kind: Literal["billings_capped"] = "billings_capped"


AnyRecognitionPolicy = Annotated[
    Union[
        HandoverRecognition,
        PocCostRecognition,
        PocPhysicalRecognition,
        BillingsCappedRecognition,
    ],
    Field(discriminator="kind"),
]


class UnitType(Model):
    """
    Sellable or leasable product definition.

    Attributes:
        key: Unique identifier.
        category: Product category; CAM bills only billable categories.
        count: Number of units.
        sellable_area_sqm: Area per unit.
        initial_price_sqm_sale: Sale price per sqm at period 0.
        initial_rent_sqm_m: Monthly rent per sqm at period 0.
        index_bucket_price: Escalation applied to the sale price.
        index_bucket_rent: Escalation applied to the rent.
        curve: Sell-through or occupancy curve.
        collection_curve: Optional cash collection profile for sales.
        revenue_policy: How sale revenue is recognized.
        vat_class: Output VAT treatment.
        plot_key: Plot the units sit on (CAM allocation).
    """

    key: str
    category: UnitCategoryEnum = UnitCategoryEnum.RESIDENTIAL
    count: PositiveInt = 1
    sellable_area_sqm: NonNegativeDecimal = Decimal(0)
    initial_price_sqm_sale: NonNegativeDecimal = Decimal(0)
    initial_rent_sqm_m: NonNegativeDecimal = Decimal(0)
    index_bucket_price: Optional[str] = None
    index_bucket_rent: Optional[str] = None
    curve: Curve = Field(default_factory=Curve)
    collection_curve: Optional[List[NonNegativeDecimal]] = None
    revenue_policy: AnyRecognitionPolicy = Field(default_factory=HandoverRecognition)
    vat_class: VatClassEnum = VatClassEnum.OUT_OF_SCOPE
    plot_key: Optional[str] = None

    @model_validator(mode="after")
    def validate_sale_only_fields(self) -> "UnitType":
        if self.is_lease and self.collection_curve is not None:
            raise ValueError(
                f"Unit type '{self.key}': collection_curve applies to sell_through units only"
            )
        return self

    @property
    def is_sale(self) -> bool:
        return self.curve.meaning == CurveMeaningEnum.SELL_THROUGH

    @property
    def is_lease(self) -> bool:
        return self.curve.meaning == CurveMeaningEnum.OCCUPANCY

    @property
    def total_area_sqm(self) -> Decimal:
        return self.sellable_area_sqm * self.count

    def billing_series(self, periods: int, price_index: Sequence[Decimal]) -> Series:
        """
        Sale billings: area x count x price x escalation x sell-through weight.

        The sell-through curve is renormalized after resampling so the whole
        stock sells exactly once over the timeline.
        Lease products bill nothing here.
        """
        if not self.is_sale:
            return zeros(periods)
        weights = weights_from_curve(self.curve.values, periods)
        base = self.total_area_sqm * self.initial_price_sqm_sale
        return tuple(base * index * w for index, w in zip(price_index, weights))

    def occupancy_series(self, periods: int) -> Series:
        """Occupancy clamped to [0, 1] then resampled; zeros for sale products."""
        if not self.is_lease:
            return zeros(periods)
        return resample_linear(tuple(clamp(v) for v in self.curve.values), periods)

    def rent_series(self, periods: int, rent_index: Sequence[Decimal]) -> Series:
        """Rent: area x count x rent x escalation x occupancy."""
        base = self.total_area_sqm * self.initial_rent_sqm_m
        return tuple(
            base * index * occ
            for index, occ in zip(rent_index, self.occupancy_series(periods))
        )


class Plot(Model):
    """Land parcel that cost items and unit types can be assigned to."""

    key: str
    name: Optional[str] = None
