# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model for every input block.

    Inputs are validated once at the run boundary and are read-only for the
    rest of the pipeline, so models are frozen and slot-based. Per-run
    mutable state (balances, accruals) lives in stage-local objects.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        slots=True,
        extra="forbid",  # Surface misspelled configuration keys at validation time
    )
