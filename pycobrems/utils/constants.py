#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Physical constants, radiator table and numerical tunables used across PyCobrems

Physical constants follow the 2006 CODATA adjustment [1]_ as quoted by the
Particle Data Group, in the units used by the whole package: energies and
momenta in GeV, lengths in metres, temperatures in kelvin.

The radiator table :data:`CRYSTAL_TABLE` maps a lower-case crystal name to
its tabulated properties.  It is plain module data, read-only by
convention, and shared by every generator instance.

References
----------
.. [1] P. J. Mohr, B. N. Taylor, D. B. Newell, "CODATA recommended values
   of the fundamental physical constants: 2006", Rev. Mod. Phys. 80 (2008)
   633.
.. [2] Particle Data Group, "Atomic and nuclear properties of materials",
   https://pdg.lbl.gov/AtomicNuclearProperties/
"""

from __future__ import annotations

import math

# ---------------------------------------------------------------------------
# Physical constants  (CODATA 2006)
# ---------------------------------------------------------------------------

ELECTRON_MASS: float = 0.510998910e-3
"""Electron rest-mass energy m_e c² (GeV)."""

FINE_STRUCTURE: float = 7.2973525698e-3
"""Fine-structure constant α (dimensionless)."""

HBARC: float = 0.1973269718e-15
"""Reduced Planck constant times speed of light ħc (GeV·m)."""

ATOMIC_MASS_UNIT: float = 0.931494028
"""Unified atomic mass unit (GeV)."""

BOLTZMANN: float = 8.617343e-14
"""Boltzmann constant k_B (GeV/K)."""

BOHR_RADIUS: float = 0.52917720859e-10
"""Bohr radius a₀ (m)."""

AVOGADRO: float = 6.02214179e23
"""Avogadro constant N_A (1/mol)."""

CLASSICAL_ELECTRON_RADIUS: float = FINE_STRUCTURE / ELECTRON_MASS
"""Classical electron radius r_e in natural units (1/GeV)."""


# ---------------------------------------------------------------------------
# Radiator crystals
# ---------------------------------------------------------------------------

DIAMOND_CUBIC_SITES: tuple[tuple[float, float, float], ...] = (
    (0.00, 0.00, 0.00),
    (0.00, 0.50, 0.50),
    (0.50, 0.00, 0.50),
    (0.50, 0.50, 0.00),
    (0.25, 0.25, 0.25),
    (0.25, 0.75, 0.75),
    (0.75, 0.25, 0.75),
    (0.75, 0.75, 0.25),
)
"""Fractional atomic positions of the 8-atom conventional diamond-cubic cell.

Two interpenetrating fcc sub-lattices displaced by a quarter body
diagonal.  Reflections are allowed when h, k, l are all odd, or all even
with h + k + l divisible by four.
"""

CRYSTAL_TABLE: dict[str, dict] = {
    "diamond": {
        "Z": 6,
        "A": 12.01,
        "density": 3.534,
        "lattice_constant": 3.5668e-10,
        "radiation_length": 0.1213,
        "debye_temperature": 2200.0,
        "mosaic_spread": 20e-6,
        "ucell_sites": DIAMOND_CUBIC_SITES,
        "primary_hkl": (2, 2, 0),
    },
    "silicon": {
        "Z": 14,
        "A": 28.0855,
        "density": 2.329,
        "lattice_constant": 5.4310e-10,
        "radiation_length": 0.0937,
        "debye_temperature": 645.0,
        "mosaic_spread": 1e-6,
        "ucell_sites": DIAMOND_CUBIC_SITES,
        "primary_hkl": (2, 2, 0),
    },
    "germanium": {
        "Z": 32,
        "A": 72.63,
        "density": 5.323,
        "lattice_constant": 5.6579e-10,
        "radiation_length": 0.02301,
        "debye_temperature": 374.0,
        "mosaic_spread": 1e-6,
        "ucell_sites": DIAMOND_CUBIC_SITES,
        "primary_hkl": (2, 2, 0),
    },
}
"""Supported radiator crystals keyed by lower-case name.

Units: ``A`` in g/mol, ``density`` in g/cm³, ``lattice_constant`` and
``radiation_length`` in m, ``debye_temperature`` in K, ``mosaic_spread``
as an rms angle in rad.  Radiation lengths are the PDG tabulated
values [2]_ divided by density.
"""

FORM_FACTOR_SCREENING: float = 111.0
"""Screening radius coefficient: r_s = 111 Z^(-1/3) ħ/(m_e c)."""


# ---------------------------------------------------------------------------
# Generator defaults
# ---------------------------------------------------------------------------

DEFAULT_BEAM_ERMS: float = 6.0e-4
"""Default rms beam energy spread (GeV)."""

DEFAULT_BEAM_EMITTANCE: float = 2.5e-9
"""Default transverse beam emittance (m·rad)."""

DEFAULT_SPOT_RMS: float = 5.0e-4
"""Default rms beam spot size at the collimator (m)."""

DEFAULT_COLLIMATOR_DISTANCE: float = 76.0
"""Default radiator-to-collimator distance (m)."""

DEFAULT_COLLIMATOR_DIAMETER: float = 0.0034
"""Default collimator aperture diameter (m)."""

DEFAULT_TARGET_THICKNESS: float = 20e-6
"""Default radiator thickness (m)."""

DEFAULT_TARGET_TEMPERATURE: float = 300.0
"""Default radiator temperature (K)."""

DEFAULT_TARGET_THETAY: float = 0.05
"""Default large tilt angle (rad) that keeps off-plane reflections far above the edge."""

DEFAULT_CRYSTAL: str = "diamond"
"""Radiator selected by a freshly constructed generator."""


# ---------------------------------------------------------------------------
# Numerical tunables
# ---------------------------------------------------------------------------

DW_CUTOFF: float = math.log(1.0e4)
"""Reciprocal-lattice cutoff: keep vectors with g² below this multiple of q0²."""

STRUCTURE_FACTOR_FLOOR: float = 1.0e-6
"""|S(g)|² below which a reflection is treated as forbidden."""

EDGE_TOLERANCE: float = 1.0e-9
"""Relative tolerance applied to the kinematic threshold g_l >= delta."""

THETA2_SIGMA_FLOOR: float = 1.0e-4
"""Smallest mosaic smearing width in theta2."""

MOSAIC_NODES: int = 8
"""Gauss-Hermite order for averaging the acceptance over mosaic smearing."""

INCOHERENT_NODES: int = 96
"""Gauss-Legendre order per panel for the collimated incoherent integral."""

ACCEPTANCE_NSIGMA: float = 8.0
"""Spot-smearing half width beyond which the acceptance is exactly 0 or 1."""
