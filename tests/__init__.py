# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Viability test suite.

Unit tests per sub-package under unit/, end-to-end feasibility runs under
integration/.
"""
