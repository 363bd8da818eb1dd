#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Shared constants and validation helpers

This sub-package centralises the physical constants, the radiator
crystal table and the argument checks so that the physics modules and
the generator share a single definition of each.
"""

from __future__ import annotations
