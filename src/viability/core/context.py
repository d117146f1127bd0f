# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Per-run context threaded through every pipeline stage.

The context carries only what is fixed for the whole run: the validated
inputs, the settings, the timeline and the resolved escalation indices.
Stage outputs are never stored on it; each stage receives the records it
depends on as explicit arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .primitives.growth_rates import EscalationIndex
from .primitives.settings import EngineSettings
from .primitives.timeline import Timeline

if TYPE_CHECKING:
    from ..analysis.project import ProjectInputs


@dataclass(frozen=True)
class RunContext:
    inputs: "ProjectInputs"
    settings: EngineSettings
    timeline: Timeline
    escalation: EscalationIndex

    @property
    def periods(self) -> int:
        return self.timeline.duration_months

    @classmethod
    def create(
        cls, inputs: "ProjectInputs", settings: EngineSettings
    ) -> "RunContext":
        timeline = inputs.project.timeline
        return cls(
            inputs=inputs,
            settings=settings,
            timeline=timeline,
            escalation=EscalationIndex.build(inputs.index_buckets, timeline.periods),
        )
