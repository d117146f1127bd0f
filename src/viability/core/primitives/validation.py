# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reusable Pydantic validation utilities for common patterns across the codebase.

This module provides standardized validators for:
- Key uniqueness within a collection of keyed blocks
- Cross-references between blocks (index buckets, plots, equity classes)
- Mutual exclusivity (either/or inputs)
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Set


class ValidationMixin:
    """
    Mixin class providing reusable validation methods for Pydantic models.

    Inherit alongside Model to share the cross-field checks used by the input
    schema without repeating them in every model_validator.
    """

    @classmethod
    def validate_unique_keys(cls, items: Iterable[Any], label: str) -> Set[str]:
        """
        Validate that every item in a collection has a distinct `key`.

        Returns:
            The set of keys, for use in reference checks.

        Raises:
            ValueError: If a key appears more than once
        """
        seen: Set[str] = set()
        for item in items:
            if item.key in seen:
                raise ValueError(f"Duplicate {label} key '{item.key}'")
            seen.add(item.key)
        return seen

    @classmethod
    def validate_reference(
        cls,
        value: Optional[str],
        known: Set[str],
        field_name: str,
        owner: str,
    ) -> None:
        """
        Validate that an optional reference resolves to a known key.

        Raises:
            ValueError: If the reference is set and unknown
        """
        if value is not None and value not in known:
            raise ValueError(
                f"{owner}: {field_name} '{value}' does not match any defined key"
            )

    @classmethod
    def validate_mutually_exclusive(
        cls,
        value_a: Any,
        value_b: Any,
        field_a: str,
        field_b: str,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Validate that at most one of two inputs is provided.

        Empty collections count as not provided.

        Raises:
            ValueError: If both are provided
        """
        if value_a and value_b:
            msg = error_message or f"Cannot provide both {field_a} and {field_b}"
            raise ValueError(msg)
