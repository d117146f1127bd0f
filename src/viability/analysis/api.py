# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Feasibility API

Public entry point for running a feasibility analysis.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from ..core.primitives import EngineSettings
from .orchestrator import FeasibilityCalculator
from .project import ProjectInputs
from .results import EngineResult

logger = logging.getLogger(__name__)


def run(
    inputs: Union[ProjectInputs, Mapping[str, Any]],
    settings: Optional[Union[EngineSettings, Mapping[str, Any]]] = None,
) -> EngineResult:
    """
    Run a complete feasibility analysis.

    Inputs are validated once, before any stage runs; a mapping is parsed
    into ProjectInputs with every omitted field taking its default.

    Args:
        inputs: ProjectInputs, or a mapping in the same shape.
        settings: Optional engine settings; defaults are used if omitted.

    Returns:
        EngineResult with every stage record, KPIs and diagnostics.

    Raises:
        pydantic.ValidationError: If the inputs or settings are invalid.

    Example:
        ```python
        import viability

        result = viability.run({
            "project": {"start_date": "2025-01-01", "periods": 36},
            "cost_items": [{"key": "build", "base_amount": 1_000_000,
                            "phasing": [1, 1, 1]}],
        })
        result.balance_sheet.tie_out_ok
        ```
    """
    if not isinstance(inputs, ProjectInputs):
        inputs = ProjectInputs.model_validate(inputs)
    if settings is None:
        settings = EngineSettings()
    elif not isinstance(settings, EngineSettings):
        settings = EngineSettings.model_validate(settings)

    logger.info(
        f"Feasibility run: {inputs.project.name or 'unnamed project'}, "
        f"{inputs.project.periods} periods"
    )
    return FeasibilityCalculator(inputs=inputs, settings=settings).run()
