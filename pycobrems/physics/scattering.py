#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Multiple-scattering widths and radiation-length estimators

Electrons crossing the radiator are deflected by many small-angle
Coulomb collisions.  The resulting plane-projected angular variance is
needed to smear the photon spot on the collimator.  No single
parametrisation is universally preferred, so four are offered with the
same signature ``f(crystal, thickness, energy) -> theta0²``:

* :func:`sigma2_pdg` — Highland formula with the Lynch-Dahl log term.
* :func:`sigma2_kaune` — screened-Rutherford mean square truncated at
  the characteristic angle.
* :func:`sigma2_geant` — Lynch-Dahl Gaussian fit to the Molière
  distribution (central 98 %).
* :func:`sigma2_hanson` — Molière 1/e width.

All take the thickness in metres and the beam energy in GeV and return
rad².  A zero thickness gives exactly zero.

Molière parameters
------------------
The characteristic angle χ_c and screening angle χ_a are

.. math::

    \\chi_c^2 = 4\\pi n t Z(Z+1) \\frac{\\alpha^2 (\\hbar c)^2}{E^2}, \\qquad
    \\chi_a^2 = \\left(\\frac{\\hbar c}{E a_{TF}}\\right)^2
                \\left(1.13 + 3.76 (\\alpha Z)^2\\right),

with ``a_TF = 0.885 a0 Z^(-1/3)`` the Thomas-Fermi radius.

References
----------
.. [1] Particle Data Group, "Passage of particles through matter",
   Phys. Rev. D 98 (2018) 030001, eqs. 33.15 and 33.27.
.. [2] G. R. Lynch, O. I. Dahl, "Approximations to multiple Coulomb
   scattering", Nucl. Instrum. Meth. B 58 (1991) 6.
.. [3] A. O. Hanson et al., "Measurement of multiple scattering of
   15.7-MeV electrons", Phys. Rev. 84 (1951) 634.
.. [4] Y. S. Tsai, "Pair production and bremsstrahlung of charged
   leptons", Rev. Mod. Phys. 46 (1974) 815.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from scipy.special import lambertw

from pycobrems.exceptions import InvalidParameter
from pycobrems.models.records import CrystalLattice
from pycobrems.utils.constants import (
    AVOGADRO,
    BOHR_RADIUS,
    FINE_STRUCTURE,
    HBARC,
)
from pycobrems.utils.validation import validate_non_negative, validate_positive

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

HIGHLAND_SCALE: float = 0.0136
"""Highland momentum scale (GeV)."""

HIGHLAND_LOG: float = 0.038
"""Coefficient of the logarithmic thickness correction."""

LYNCH_DAHL_FRACTION: float = 0.98
"""Fraction F of the Molière distribution fitted by the Gaussian."""

MOLIERE_OMEGA_SCALE: float = 1.167
"""Ω = χ_c² / (1.167 χ_a²), the mean number of scatters."""

TSAI_LIGHT_ELEMENTS: dict[int, tuple[float, float]] = {
    1: (5.31, 6.144),
    2: (4.79, 5.621),
    3: (4.74, 5.805),
    4: (4.71, 5.924),
}
"""Tsai's (L_rad, L'_rad) for Z < 5 where the Thomas-Fermi forms fail."""


# ---------------------------------------------------------------------------
# Molière parameters
# ---------------------------------------------------------------------------

def atom_density(crystal: CrystalLattice) -> float:
    """Number of atoms per m³."""
    return crystal.density * AVOGADRO / crystal.A * 1.0e6


def characteristic_angle2(crystal: CrystalLattice, thickness: float, energy: float) -> float:
    """Molière characteristic angle squared χ_c² (rad²)."""
    Z = crystal.Z
    return (
        4.0 * math.pi * atom_density(crystal) * thickness * Z * (Z + 1)
        * (FINE_STRUCTURE * HBARC / energy) ** 2
    )


def screening_angle2(crystal: CrystalLattice, energy: float) -> float:
    """Molière screening angle squared χ_a² (rad²)."""
    Z = crystal.Z
    a_tf = 0.885 * BOHR_RADIUS * Z ** (-1.0 / 3.0)
    chi0 = HBARC / (energy * a_tf)
    return chi0**2 * (1.13 + 3.76 * (FINE_STRUCTURE * Z) ** 2)


# ---------------------------------------------------------------------------
# Multiple-scattering models
# ---------------------------------------------------------------------------

def sigma2_pdg(crystal: CrystalLattice, thickness: float, energy: float) -> float:
    """Highland projected variance ``(13.6 MeV / E)² τ (1 + 0.038 ln τ)²``

    τ is the thickness in radiation lengths.  The bracket is clamped at
    zero for the vanishingly thin layers where the logarithm would drive
    it negative.
    """
    if thickness == 0.0:
        return 0.0
    tau = thickness / crystal.radiation_length
    factor = max(1.0 + HIGHLAND_LOG * math.log(tau), 0.0)
    return (HIGHLAND_SCALE / energy) ** 2 * tau * factor**2


def sigma2_kaune(crystal: CrystalLattice, thickness: float, energy: float) -> float:
    """Screened-Rutherford mean square cut at χ_c: ``χ_c² (ln(χ_c/χ_a) - 1/2)``."""
    if thickness == 0.0:
        return 0.0
    chic2 = characteristic_angle2(crystal, thickness, energy)
    chia2 = screening_angle2(crystal, energy)
    return max(chic2 * (0.5 * math.log(chic2 / chia2) - 0.5), 0.0)


def sigma2_geant(crystal: CrystalLattice, thickness: float, energy: float) -> float:
    """Lynch-Dahl Gaussian width of the central Molière distribution

    .. math::

        \\theta_0^2 = \\frac{\\chi_c^2}{1 + F^2}
        \\left[\\frac{1 + v}{v} \\ln(1 + v) - 1\\right],
        \\qquad v = \\frac{\\Omega}{2 (1 - F)}.
    """
    if thickness == 0.0:
        return 0.0
    chic2 = characteristic_angle2(crystal, thickness, energy)
    omega = chic2 / (MOLIERE_OMEGA_SCALE * screening_angle2(crystal, energy))
    F = LYNCH_DAHL_FRACTION
    v = omega / (2.0 * (1.0 - F))
    return chic2 / (1.0 + F**2) * ((1.0 + v) / v * math.log1p(v) - 1.0)


def sigma2_hanson(crystal: CrystalLattice, thickness: float, energy: float) -> float:
    """Half the Molière 1/e width squared, ``χ_c² (B - 1.2) / 2``

    *B* solves ``B - ln B = ln Ω`` on its upper branch,
    ``B = -W₋₁(-1/Ω)``.  Below Ω = e the equation has no solution above
    one and *B* is pinned to 1, which the clamp then maps to zero.
    """
    if thickness == 0.0:
        return 0.0
    chic2 = characteristic_angle2(crystal, thickness, energy)
    omega = chic2 / (MOLIERE_OMEGA_SCALE * screening_angle2(crystal, energy))
    if omega > math.e:
        B = float(-lambertw(-1.0 / omega, k=-1).real)
    else:
        B = 1.0
    return max(chic2 * (B - 1.2) / 2.0, 0.0)


MS_MODELS: dict[str, Callable[[CrystalLattice, float, float], float]] = {
    "pdg": sigma2_pdg,
    "kaune": sigma2_kaune,
    "geant": sigma2_geant,
    "hanson": sigma2_hanson,
}
"""Multiple-scattering models selectable by name."""


def multiple_scattering(
    model: str,
    crystal: CrystalLattice,
    thickness: float,
    energy: float,
) -> float:
    """Dispatch to a named multiple-scattering model

    Parameters
    ----------
    model : str
        One of :data:`MS_MODELS`.
    crystal : CrystalLattice
        Radiator.
    thickness : float
        Traversed thickness (m), non-negative.
    energy : float
        Electron energy (GeV), positive.

    Returns
    -------
    float
        Plane-projected rms scattering angle squared (rad²).

    Raises
    ------
    InvalidParameter
        For an unknown model, negative thickness or non-positive energy.
    """
    if model not in MS_MODELS:
        raise InvalidParameter(
            f"Unknown multiple-scattering model {model!r}.  "
            f"Must be one of: {sorted(MS_MODELS)}"
        )
    t = validate_non_negative(thickness, "scattering thickness")
    e = validate_positive(energy, "beam energy")
    return MS_MODELS[model](crystal, t, e)


# ---------------------------------------------------------------------------
# Radiation length
# ---------------------------------------------------------------------------

def coulomb_correction(Z: int) -> float:
    """Davies-Bethe-Maximon Coulomb correction f(Z)."""
    a2 = (FINE_STRUCTURE * Z) ** 2
    return a2 * (1.0 / (1.0 + a2) + 0.20206 - 0.0369 * a2 + 0.0083 * a2**2 - 0.002 * a2**3)


def radiation_length_pdg(Z: int, A: float, density: float) -> float:
    """Tsai radiation length with Coulomb correction, in metres

    .. math::

        X_0 = \\frac{716.408\\,A}{Z^2 (L_{rad} - f(Z)) + Z L'_{rad}}
        \\;\\text{g/cm}^2

    Parameters
    ----------
    Z : int
        Atomic number.
    A : float
        Atomic mass (g/mol).
    density : float
        Density (g/cm³).
    """
    if Z in TSAI_LIGHT_ELEMENTS:
        L_rad, L_rad_prime = TSAI_LIGHT_ELEMENTS[Z]
    else:
        L_rad = math.log(184.15 * Z ** (-1.0 / 3.0))
        L_rad_prime = math.log(1194.0 * Z ** (-2.0 / 3.0))
    x0 = 716.408 * A / (Z**2 * (L_rad - coulomb_correction(Z)) + Z * L_rad_prime)
    return x0 / density * 1.0e-2


def radiation_length_schiff(Z: int, A: float, density: float) -> float:
    """Schiff's radiation length ``716.4 A / (Z(Z+1) ln(183 Z^-1/3))``, in metres."""
    x0 = 716.4 * A / (Z * (Z + 1) * math.log(183.0 * Z ** (-1.0 / 3.0)))
    return x0 / density * 1.0e-2
