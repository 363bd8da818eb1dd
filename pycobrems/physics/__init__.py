#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Pure physics functions behind the radiator model

lattice
    Crystal descriptors, reciprocal-lattice tables and Debye-Waller damping.
bremsstrahlung
    Coherent normalization and the photon emission kernels.
collimator
    Aperture acceptance with spot and multiple-scattering blur.
scattering
    Multiple-scattering models and radiation-length estimators.
convolution
    Beam energy-spread and divergence smoothing of tabulated spectra.
"""

from __future__ import annotations
