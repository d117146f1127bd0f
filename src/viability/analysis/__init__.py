# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .api import run
from .orchestrator import FeasibilityCalculator
from .project import ProjectBlock, ProjectInputs
from .results import EngineResult

__all__ = [
    "EngineResult",
    "FeasibilityCalculator",
    "ProjectBlock",
    "ProjectInputs",
    "run",
]
