#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Tests for multiple-scattering models and radiation-length estimators
"""

from __future__ import annotations

import math

import pytest

from pycobrems.exceptions import InvalidParameter
from pycobrems.physics.lattice import crystal_lattice
from pycobrems.physics.scattering import (
    MS_MODELS,
    coulomb_correction,
    multiple_scattering,
    radiation_length_pdg,
    radiation_length_schiff,
)

ALL_MODELS = sorted(MS_MODELS)


# -----------------------------------------------------------------------
# Multiple scattering
# -----------------------------------------------------------------------

class TestMultipleScattering:
    """Test the four projected-width models"""

    @pytest.mark.parametrize("model", ALL_MODELS)
    def test_zero_thickness(self, diamond, model: str) -> None:
        assert multiple_scattering(model, diamond, 0.0, 12.0) == 0.0

    @pytest.mark.parametrize("model", ALL_MODELS)
    def test_positive_for_thin_radiator(self, diamond, model: str) -> None:
        assert multiple_scattering(model, diamond, 10e-6, 12.0) > 0.0

    @pytest.mark.parametrize("model", ALL_MODELS)
    def test_grows_with_thickness(self, diamond, model: str) -> None:
        thin = multiple_scattering(model, diamond, 10e-6, 12.0)
        thick = multiple_scattering(model, diamond, 100e-6, 12.0)
        assert thick > thin

    @pytest.mark.parametrize("model", ALL_MODELS)
    def test_inverse_square_energy(self, diamond, model: str) -> None:
        low = multiple_scattering(model, diamond, 10e-6, 6.0)
        high = multiple_scattering(model, diamond, 10e-6, 12.0)
        assert low / high == pytest.approx(4.0, rel=1e-9)

    def test_highland_value(self, diamond) -> None:
        tau = 10e-6 / diamond.radiation_length
        expected = (0.0136 / 12.0) ** 2 * tau * (1.0 + 0.038 * math.log(tau)) ** 2
        assert multiple_scattering("pdg", diamond, 10e-6, 12.0) == pytest.approx(expected)

    def test_models_agree_in_magnitude(self, diamond) -> None:
        values = [multiple_scattering(m, diamond, 10e-6, 12.0) for m in ALL_MODELS]
        assert max(values) / min(values) < 10.0

    def test_unknown_model(self, diamond) -> None:
        with pytest.raises(InvalidParameter, match="moliere"):
            multiple_scattering("moliere", diamond, 10e-6, 12.0)

    def test_negative_thickness(self, diamond) -> None:
        with pytest.raises(InvalidParameter):
            multiple_scattering("pdg", diamond, -1e-6, 12.0)

    def test_non_positive_energy(self, diamond) -> None:
        with pytest.raises(InvalidParameter):
            multiple_scattering("pdg", diamond, 10e-6, 0.0)


class TestGeneratorScattering:
    """Test the generator-level scattering accessors"""

    def test_named_accessors(self, generator) -> None:
        crystal = generator.getTargetLattice()
        assert generator.Sigma2MS_PDG(10e-6) == multiple_scattering("pdg", crystal, 10e-6, 12.0)
        assert generator.Sigma2MS_Kaune(10e-6) == multiple_scattering("kaune", crystal, 10e-6, 12.0)
        assert generator.Sigma2MS_Geant(10e-6) == multiple_scattering("geant", crystal, 10e-6, 12.0)
        assert generator.Sigma2MS_Hanson(10e-6) == multiple_scattering("hanson", crystal, 10e-6, 12.0)

    def test_model_selection(self, generator) -> None:
        assert generator.Sigma2MS(10e-6) == generator.Sigma2MS_PDG(10e-6)
        generator.setMultipleScatteringModel("Hanson")
        assert generator.getMultipleScatteringModel() == "hanson"
        assert generator.Sigma2MS(10e-6) == generator.Sigma2MS_Hanson(10e-6)

    def test_unknown_model_keeps_selection(self, generator) -> None:
        with pytest.raises(InvalidParameter):
            generator.setMultipleScatteringModel("gaussian")
        assert generator.getMultipleScatteringModel() == "pdg"


# -----------------------------------------------------------------------
# Radiation length
# -----------------------------------------------------------------------

class TestRadiationLength:
    """Test Tsai and Schiff radiation lengths against tabulated values"""

    @pytest.mark.parametrize("name", ["diamond", "silicon", "germanium"])
    def test_pdg_matches_table(self, name: str) -> None:
        c = crystal_lattice(name)
        assert radiation_length_pdg(c.Z, c.A, c.density) == pytest.approx(
            c.radiation_length, rel=0.02,
        )

    @pytest.mark.parametrize("name", ["diamond", "silicon", "germanium"])
    def test_schiff_matches_table(self, name: str) -> None:
        c = crystal_lattice(name)
        assert radiation_length_schiff(c.Z, c.A, c.density) == pytest.approx(
            c.radiation_length, rel=0.10,
        )

    def test_light_element_table(self) -> None:
        # liquid hydrogen, 63.04 g/cm2 at 0.0708 g/cm3
        assert radiation_length_pdg(1, 1.00794, 0.0708) == pytest.approx(8.904, rel=0.01)

    def test_coulomb_correction_small_for_carbon(self) -> None:
        assert 0.0 < coulomb_correction(6) < 0.01

    def test_generator_accessors(self, generator) -> None:
        assert generator.getTargetRadiationLength_PDG() == pytest.approx(0.1208, rel=0.01)
        assert generator.getTargetRadiationLength_Schiff() > generator.getTargetRadiationLength_PDG()
