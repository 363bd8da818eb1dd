#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Tests for photon rates, polarization and collimator acceptance

Checks the physical consistency relations between the rate methods
(totals, angular integrals, energy scaling), the behaviour at the
coherent edge for the reference beamline, and argument handling.
"""

from __future__ import annotations

import math

import numpy as np
import pytest
from scipy.integrate import quad

from pycobrems.exceptions import OutOfRangeQuery
from pycobrems.generator import CobremsGenerator

X_GRID = [0.05, 0.2, 0.4, 0.6, 0.7, 0.74, 0.75, 0.76, 0.85, 0.95]


# -----------------------------------------------------------------------
# Domain handling
# -----------------------------------------------------------------------

class TestDomain:
    """Test queries outside the physical range"""

    @pytest.mark.parametrize("x", [-0.5, 0.0, 1.0, 1.5])
    def test_zero_outside_unit_interval(self, generator: CobremsGenerator, x: float) -> None:
        generator.setPolarizedFlag(True)
        assert generator.Rate_dNcdx(x) == 0.0
        assert generator.Rate_dNcdxdp(x, 0.3) == 0.0
        assert generator.Rate_dNidx(x) == 0.0
        assert generator.Rate_dNBidx(x) == 0.0
        assert generator.Rate_dNtdx(x) == 0.0
        assert generator.Rate_dNidxdt2(x, 1.0) == 0.0
        assert generator.Rate_para(x, 1.0, 0.0) == 0.0
        assert generator.Rate_ortho(x, 1.0, 0.0) == 0.0
        assert generator.Polarization(x, 1.0) == 0.0
        assert generator.LinearPolarization(x) == 0.0

    def test_dNtdk_beyond_endpoint(self, generator: CobremsGenerator) -> None:
        assert generator.Rate_dNtdk(12.5) == 0.0
        assert generator.Rate_dNtdk(0.0) == 0.0

    @pytest.mark.parametrize(
        "method, args",
        [
            ("Rate_dNidxdt2", (0.5, -1.0)),
            ("Rate_para", (0.5, -1.0, 0.0)),
            ("Rate_ortho", (0.5, -1.0, 0.0)),
            ("Polarization", (0.5, -1.0)),
            ("Acceptance", (-0.1,)),
            ("Rate_dNidxdt2", (1.5, -1.0)),
            ("Polarization", (0.5, float("nan"))),
        ],
    )
    def test_negative_theta2(self, generator: CobremsGenerator, method: str, args) -> None:
        with pytest.raises(OutOfRangeQuery):
            getattr(generator, method)(*args)

    def test_out_of_range_is_value_error(self, generator: CobremsGenerator) -> None:
        with pytest.raises(ValueError):
            generator.Acceptance(-1.0)


# -----------------------------------------------------------------------
# Consistency relations
# -----------------------------------------------------------------------

class TestConsistency:
    """Test relations that hold for every configuration"""

    @pytest.mark.parametrize("collimated", [True, False])
    def test_total_is_sum(self, generator: CobremsGenerator, collimated: bool) -> None:
        generator.setCollimatedFlux(collimated)
        for x in X_GRID:
            total = generator.Rate_dNtdx(x)
            assert total == pytest.approx(
                generator.Rate_dNcdx(x) + generator.Rate_dNidx(x), rel=1e-12,
            )

    def test_non_negative(self, generator: CobremsGenerator) -> None:
        for collimated in (True, False):
            generator.setCollimatedFlux(collimated)
            for x in X_GRID:
                assert generator.Rate_dNcdx(x) >= 0.0
                assert generator.Rate_dNidx(x) >= 0.0
                assert generator.Rate_dNcdxdp(x, 1.0) >= 0.0

    def test_bethe_heitler(self, generator: CobremsGenerator) -> None:
        tau = 20e-6 / generator.getTargetLattice().radiation_length
        x = 0.75
        expected = tau / x * (4.0 / 3.0 * (1.0 - x) + x * x)
        assert generator.Rate_dNBidx(x) == pytest.approx(expected, rel=1e-12)
        assert expected == pytest.approx(1.97e-4, rel=0.01)

    def test_uncollimated_incoherent_is_bethe_heitler(
        self, uncollimated_generator: CobremsGenerator,
    ) -> None:
        for x in X_GRID:
            assert uncollimated_generator.Rate_dNidx(x) == uncollimated_generator.Rate_dNBidx(x)

    def test_collimation_reduces_rates(self, generator: CobremsGenerator) -> None:
        twin = generator.copy()
        twin.setCollimatedFlux(False)
        for x in X_GRID:
            assert generator.Rate_dNidx(x) < generator.Rate_dNBidx(x)
            assert generator.Rate_dNcdx(x) <= twin.Rate_dNcdx(x)

    def test_wide_collimator_accepts_everything(self, generator: CobremsGenerator) -> None:
        generator.setCollimatorDiameter(10.0)
        assert generator.Rate_dNidx(0.5) == pytest.approx(generator.Rate_dNBidx(0.5), rel=1e-4)

    @pytest.mark.parametrize("x", [0.3, 0.75])
    def test_theta2_integral(self, generator: CobremsGenerator, x: float) -> None:
        integral, _ = quad(lambda t2: generator.Rate_dNidxdt2(x, t2), 0.0, np.inf)
        assert integral == pytest.approx(generator.Rate_dNBidx(x), rel=1e-6)

    @pytest.mark.parametrize("collimated", [True, False])
    def test_azimuthal_integral(self, generator: CobremsGenerator, collimated: bool) -> None:
        generator.setCollimatedFlux(collimated)
        n = 16
        for x in (0.5, 0.74):
            phis = 2.0 * math.pi * np.arange(n) / n
            total = sum(generator.Rate_dNcdxdp(x, p) for p in phis) * 2.0 * math.pi / n
            assert total == pytest.approx(generator.Rate_dNcdx(x), rel=1e-9)

    def test_dNtdk_scaling(self, generator: CobremsGenerator) -> None:
        for k in (1.0, 6.0, 9.0, 11.0):
            assert generator.Rate_dNtdk(k) == pytest.approx(
                generator.Rate_dNtdx(k / 12.0) / 12.0, rel=1e-12,
            )

    def test_geometry_override_forces_collimation(
        self, uncollimated_generator: CobremsGenerator, generator: CobremsGenerator,
    ) -> None:
        override = uncollimated_generator.Rate_dNcdx(0.75, 76.0, 0.0034)
        assert override == pytest.approx(generator.Rate_dNcdx(0.75), rel=1e-12)
        assert uncollimated_generator.Rate_dNtdx(0.75, 76.0, 0.0034) == pytest.approx(
            generator.Rate_dNtdx(0.75), rel=1e-12,
        )

    def test_thickness_scaling(self, uncollimated_generator: CobremsGenerator) -> None:
        thin = uncollimated_generator.Rate_dNcdx(0.6)
        uncollimated_generator.setTargetThickness(40e-6)
        assert uncollimated_generator.Rate_dNcdx(0.6) == pytest.approx(2.0 * thin, rel=1e-12)


# -----------------------------------------------------------------------
# Coherent edge
# -----------------------------------------------------------------------

class TestCoherentEdge:
    """Test the spectrum shape around the coherent edge"""

    def test_reference_beamline(self, scenario_generator: CobremsGenerator) -> None:
        gen = scenario_generator
        assert gen.Rate_dNcdx(0.75) >= 3.0 * gen.Rate_dNidx(0.75)
        assert gen.Rate_dNcdx(0.1) < gen.Rate_dNidx(0.1)

    def test_uncollimated_magnitude(self, uncollimated_generator: CobremsGenerator) -> None:
        assert uncollimated_generator.Rate_dNcdx(0.75) == pytest.approx(2.3e-4, rel=0.15)

    def test_drop_above_edge(self, generator: CobremsGenerator) -> None:
        assert generator.Rate_dNcdx(0.76) < 0.5 * generator.Rate_dNcdx(0.75)

    @pytest.mark.parametrize("edge", [9.0, 6.0])
    def test_enhancement_peak(self, generator: CobremsGenerator, edge: float) -> None:
        generator.setCoherentEdge(edge)
        xs = np.linspace(edge / 12.0 - 0.15, edge / 12.0 + 0.15, 61)
        enh = [generator.CoherentEnhancement(x) for x in xs]
        assert xs[int(np.argmax(enh))] == pytest.approx(edge / 12.0, abs=0.006)
        assert max(enh) > 1.0

    def test_enhancement_is_at_least_one(self, generator: CobremsGenerator) -> None:
        for x in X_GRID:
            assert generator.CoherentEnhancement(x) >= 1.0

    def test_enhancement_zero_without_radiator(self, generator: CobremsGenerator) -> None:
        generator.setTargetThickness(0.0)
        assert generator.CoherentEnhancement(0.5) == 0.0


# -----------------------------------------------------------------------
# Polarization
# -----------------------------------------------------------------------

class TestPolarization:
    """Test the para/ortho split and polarization degree"""

    def test_zero_without_flag(self, generator: CobremsGenerator) -> None:
        assert generator.Polarization(0.75, 0.0) == 0.0
        assert generator.LinearPolarization(0.75) == 0.0

    def test_even_split_without_flag(self, generator: CobremsGenerator) -> None:
        assert generator.Rate_para(0.7, 0.3, 0.2) == generator.Rate_ortho(0.7, 0.3, 0.2)

    def test_split_preserves_sum(self, generator: CobremsGenerator) -> None:
        off = generator.Rate_para(0.7, 0.3, 0.2) + generator.Rate_ortho(0.7, 0.3, 0.2)
        generator.setPolarizedFlag(True)
        on = generator.Rate_para(0.7, 0.3, 0.2) + generator.Rate_ortho(0.7, 0.3, 0.2)
        assert on == pytest.approx(off, rel=1e-12)

    def test_polarized_near_edge(self, generator: CobremsGenerator) -> None:
        generator.setPolarizedFlag(True)
        assert generator.Polarization(0.75, 0.0) > 0.2
        assert generator.Rate_para(0.75, 0.0, 0.0) > generator.Rate_ortho(0.75, 0.0, 0.0)
        assert 0.0 < generator.LinearPolarization(0.74) <= 1.0

    def test_bounds(self, generator: CobremsGenerator) -> None:
        generator.setPolarizedFlag(True)
        for x in X_GRID:
            for t2 in (0.0, 0.5, 2.0, 10.0):
                assert -1.0 <= generator.Polarization(x, t2) <= 1.0
                for phi in (0.0, 0.7, 2.0):
                    assert generator.Rate_para(x, t2, phi) >= 0.0
                    assert generator.Rate_ortho(x, t2, phi) >= 0.0

    def test_linear_polarization_bounds(self, generator: CobremsGenerator) -> None:
        generator.setPolarizedFlag(True)
        for collimated in (True, False):
            generator.setCollimatedFlux(collimated)
            for x in X_GRID:
                assert -1.0 <= generator.LinearPolarization(x) <= 1.0

    def test_collimator_blocks_large_angles(self, generator: CobremsGenerator) -> None:
        assert generator.Rate_para(0.6, 100.0, 0.0) == 0.0
        generator.setCollimatedFlux(False)
        assert generator.Rate_para(0.6, 100.0, 0.0) > 0.0


# -----------------------------------------------------------------------
# Acceptance
# -----------------------------------------------------------------------

class TestAcceptance:
    """Test the collimator acceptance probability"""

    def test_on_axis(self, generator: CobremsGenerator) -> None:
        assert 0.9 < generator.Acceptance(0.0) < 1.0

    def test_far_outside(self, generator: CobremsGenerator) -> None:
        assert generator.Acceptance(100.0) == 0.0
        assert generator.Acceptance(0.0, 0.0, 0.01, 0.0) == 0.0

    def test_decreasing(self, generator: CobremsGenerator) -> None:
        values = np.array([generator.Acceptance(t2) for t2 in np.linspace(0.0, 5.0, 21)])
        assert np.all((values >= 0.0) & (values <= 1.0))
        assert np.all(np.diff(values) <= 1e-12)

    def test_azimuth_symmetry(self, generator: CobremsGenerator) -> None:
        assert generator.Acceptance(0.3, 0.0) == pytest.approx(generator.Acceptance(0.3, 2.0))

    def test_shifted_aperture(self, generator: CobremsGenerator) -> None:
        # photons heading towards the shifted centre are favoured
        toward = generator.Acceptance(0.3, 0.0, 5e-4, 0.0)
        away = generator.Acceptance(0.3, math.pi, 5e-4, 0.0)
        assert toward > away

    def test_sharp_edge_without_blur(self, generator: CobremsGenerator) -> None:
        generator.setCollimatorSpotrms(0.0)
        generator.setTargetThickness(0.0)
        assert generator.Acceptance(0.2) == 1.0
        assert generator.Acceptance(0.35) == 0.0
