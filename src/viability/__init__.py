# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Viability - Deterministic Real Estate Development Feasibility Engine

Turns a static description of a development project (unit mix, cost items,
debt tranches, tax regime, escrow rules, equity structure) into monthly
series for revenue, cost, financing, tax, depreciation, cash, P&L, a
reconciled balance sheet, an equity waterfall and covenant ratios.

Key Entry Points:
- viability.run() - Validate inputs once and execute the full pipeline
- viability.analysis.ProjectInputs - Input schema with defaults
- viability.reporting - pandas views of the result statements

Example Usage:
    ```python
    import viability

    result = viability.run(
        {
            "project": {"start_date": "2025-01-01", "periods": 36},
            "unit_types": [...],
            "cost_items": [...],
        }
    )
    print(result.balance_sheet.tie_out_ok)
    print(result.equity.kpis.irr)
    ```
"""

import importlib
import logging

# Library logging: applications attach their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "analysis",
    "core",
    "deal",
    "debt",
    "development",
    "reporting",
    "run",
    "statements",
    "tax",
]


_LAZY_MODULES = {
    "analysis": "viability.analysis",
    "core": "viability.core",
    "deal": "viability.deal",
    "debt": "viability.debt",
    "development": "viability.development",
    "reporting": "viability.reporting",
    "statements": "viability.statements",
    "tax": "viability.tax",
}


def __getattr__(name: str):
    if name == "run":
        from .analysis.api import run

        globals()["run"] = run
        return run
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'viability' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
