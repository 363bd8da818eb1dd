#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Typed dataclass models for radiator configuration

All models are plain ``dataclasses`` carrying scalars or NumPy arrays.
The generator owns one instance of each configuration model and the
memoized lattice tables built from them.
"""

from __future__ import annotations

from pycobrems.models.records import (
    BeamConfig,
    CollimatorConfig,
    CrystalLattice,
    TargetOrientation,
    ReciprocalTable,
    LatticeSumRecord,
)

__all__ = [
    "BeamConfig",
    "CollimatorConfig",
    "CrystalLattice",
    "TargetOrientation",
    "ReciprocalTable",
    "LatticeSumRecord",
]
