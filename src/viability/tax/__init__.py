# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .config import CorporateTaxConfig, TaxConfig, VatConfig, ZakatConfig
from .corporate import CorporateTaxSchedule, ZakatSchedule, compute_corporate_tax, compute_zakat
from .stack import TaxStack, compute_tax_stack
from .vat import VatSchedule, compute_vat, settle

__all__ = [
    "CorporateTaxConfig",
    "CorporateTaxSchedule",
    "TaxConfig",
    "TaxStack",
    "VatConfig",
    "VatSchedule",
    "ZakatConfig",
    "ZakatSchedule",
    "compute_corporate_tax",
    "compute_tax_stack",
    "compute_vat",
    "compute_zakat",
    "settle",
]
