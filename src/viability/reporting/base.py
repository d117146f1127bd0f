# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Base reporting classes.

Reports read a finished EngineResult and lay its series out as pandas
DataFrames indexed by the run's monthly PeriodIndex. They never compute
financial quantities of their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, Sequence

import pandas as pd

if TYPE_CHECKING:
    from ..analysis.results import EngineResult

# Line types: flows sum when aggregated, balances keep the period-end value
FLOW = "flow"
BALANCE = "balance"

_FREQUENCIES = {"M": "M", "Q": "Q", "A": "Y", "Y": "Y"}


def normalize_frequency(frequency: str) -> str:
    """Map a user frequency ('M', 'Q', 'A'/'Y') to a pandas period alias."""
    try:
        return _FREQUENCIES[frequency.upper()]
    except KeyError:
        raise ValueError(
            f"Unsupported frequency '{frequency}'. Use one of {sorted(_FREQUENCIES)}"
        ) from None


class BaseReport(ABC):
    """Abstract base class for statement reports."""

    def __init__(self, results: "EngineResult"):
        from ..analysis.results import EngineResult  # noqa: PLC0415

        if not isinstance(results, EngineResult):
            raise TypeError("Reports require an EngineResult")
        self._results = results

    @property
    def period_index(self) -> pd.PeriodIndex:
        return self._results.timeline.period_index

    @abstractmethod
    def lines(self) -> Dict[str, Sequence]:
        """Ordered mapping of line label to monthly series."""

    def line_types(self) -> Dict[str, str]:
        """Line label to FLOW or BALANCE; lines default to FLOW."""
        return {}

    def monthly(self) -> pd.DataFrame:
        """Monthly frame: one column per line, indexed by period."""
        return pd.DataFrame(
            {label: list(values) for label, values in self.lines().items()},
            index=self.period_index,
        )

    def generate(self, frequency: str = "M") -> pd.DataFrame:
        """
        Presentation-ready statement.

        Args:
            frequency: 'M' monthly, 'Q' quarterly or 'A' annual

        Returns:
            DataFrame where rows are line items and columns are periods
        """
        monthly = self.monthly()
        alias = normalize_frequency(frequency)
        if alias == "M" or monthly.empty:
            return monthly.T

        groups = monthly.groupby(monthly.index.asfreq(alias))
        types = self.line_types()
        columns = {}
        for label in monthly.columns:
            grouped = groups[label]
            columns[label] = grouped.last() if types.get(label) == BALANCE else grouped.sum()
        return pd.DataFrame(columns).T
