#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Shared pytest fixtures for PyCobrems tests

Provides generators in the standard 12 GeV / 9 GeV-edge diamond setup,
with and without collimation, plus the reference beamline scenario with
a broad energy spread and large emittance.
"""

from __future__ import annotations

import pytest

from pycobrems.generator import CobremsGenerator
from pycobrems.physics.lattice import crystal_lattice


@pytest.fixture
def generator() -> CobremsGenerator:
    """Default generator: 12 GeV beam, coherent edge at 9 GeV"""
    return CobremsGenerator(12.0, 9.0)


@pytest.fixture
def uncollimated_generator() -> CobremsGenerator:
    """Default generator with the collimator acceptance switched off"""
    gen = CobremsGenerator(12.0, 9.0)
    gen.setCollimatedFlux(False)
    return gen


@pytest.fixture
def scenario_generator() -> CobremsGenerator:
    """Reference beamline: 20 um diamond, 3.4 mm collimator at 76 m"""
    gen = CobremsGenerator(12.0, 9.0)
    gen.setBeamEnergy(12.0)
    gen.setBeamErms(0.01)
    gen.setBeamEmittance(1e-6)
    gen.setTargetCrystal("diamond")
    gen.setTargetThickness(20e-6)
    gen.setCollimatorDistance(76.0)
    gen.setCollimatorDiameter(0.0034)
    return gen


@pytest.fixture
def diamond():
    """Diamond crystal descriptor"""
    return crystal_lattice("diamond")
