#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Typed dataclass models for radiator configuration and lattice sums

Configuration models are plain mutable ``dataclasses`` holding scalar
fields; the crystal descriptor is frozen because it is built once from
the radiator table.  The reciprocal-lattice tables and the per-x lattice
sum carry parallel NumPy arrays.

Hierarchy
---------
::

    BeamConfig          — energy, rms energy spread, emittance
    CollimatorConfig    — spot size, distance, aperture diameter
    CrystalLattice      — named crystal with its physical constants
    TargetOrientation   — tilt angles and crystal-to-lab rotation matrix
    ReciprocalTable     — reciprocal vectors with their coherent strength
    LatticeSumRecord    — contributing vectors at one photon energy

Units
-----
* Energies and momenta are in **GeV**, lengths in **m**, angles in **rad**.
* ``theta2`` is the photon production angle squared in units of
  (m_e / E_beam)².
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class BeamConfig:
    """Electron beam parameters

    Parameters
    ----------
    energy : float
        Beam energy (GeV).
    erms : float
        RMS beam energy spread (GeV).  Zero disables energy smearing.
    emittance : float
        Transverse emittance (m·rad).  Zero disables divergence smearing.
    """

    energy: float
    erms: float
    emittance: float


@dataclass
class CollimatorConfig:
    """Photon collimator geometry

    Parameters
    ----------
    spotrms : float
        RMS electron beam spot size projected to the collimator (m).
    distance : float
        Distance from radiator to collimator aperture (m).
    diameter : float
        Aperture diameter (m).
    """

    spotrms: float
    distance: float
    diameter: float


@dataclass(frozen=True)
class CrystalLattice:
    """A radiator crystal with its tabulated and derived constants

    Parameters
    ----------
    name : str
        Lower-case crystal name, the key in the radiator table.
    Z : int
        Atomic number.
    A : float
        Atomic mass (g/mol).
    density : float
        Mass density (g/cm³).
    lattice_constant : float
        Cubic lattice constant (m).
    radiation_length : float
        Tabulated radiation length (m).
    debye_temperature : float
        Debye temperature (K).
    mosaic_spread : float
        RMS angular spread of the mosaic domains (rad).
    betaFF : float
        Screening parameter of the atomic form factor (1/GeV²).
    ucell_sites : tuple of tuple of float
        Fractional site positions in the conventional cell.
    primary_hkl : tuple of int
        Miller indices of the reciprocal vector that sets the coherent edge.
    """

    name: str
    Z: int
    A: float
    density: float
    lattice_constant: float
    radiation_length: float
    debye_temperature: float
    mosaic_spread: float
    betaFF: float
    ucell_sites: tuple[tuple[float, float, float], ...]
    primary_hkl: tuple[int, int, int]

    @property
    def nsites(self) -> int:
        """Number of atoms in the conventional cell."""
        return len(self.ucell_sites)


@dataclass
class TargetOrientation:
    """Crystal orientation in the beam-line frame

    ``rmatrix`` maps crystal-frame vectors into beam-line coordinates
    (z along the beam).  It equals ``rotation @ Rx(thetay) @ Ry(-thetax) @ Rz(thetaz)``,
    where ``rotation`` accumulates the increments applied by
    :meth:`~pycobrems.generator.CobremsGenerator.RotateTarget`.  The angles
    themselves are only changed by the setters.

    Parameters
    ----------
    thetax : float
        Small angle (rad).
    thetay : float
        Large angle (rad).
    thetaz : float
        Roll angle about the beam axis (rad).
    rotation : numpy.ndarray
        Composed incremental rotation, identity until RotateTarget is called.
    rmatrix : numpy.ndarray
        3×3 orthonormal rotation matrix.
    """

    thetax: float = 0.0
    thetay: float = 0.0
    thetaz: float = 0.0
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    rmatrix: np.ndarray = field(default_factory=lambda: np.eye(3))


# ---------------------------------------------------------------------------
# Lattice sums
# ---------------------------------------------------------------------------

@dataclass
class ReciprocalTable:
    """Reciprocal-lattice vectors with their coherent scattering strength

    The same type holds the crystal-frame table and its rotated,
    beam-line copy.

    Parameters
    ----------
    hkl : numpy.ndarray
        Miller indices, shape ``(N, 3)``, ``int64``.
    gvec : numpy.ndarray
        Momentum transfer vectors, shape ``(N, 3)``, GeV.
    strength : numpy.ndarray
        ``|S|² · exp(-g²/q0²) · (betaFF / (1 + betaFF g²))²``,
        shape ``(N,)``, 1/GeV⁴.
    """

    hkl: np.ndarray
    gvec: np.ndarray
    strength: np.ndarray

    def __len__(self) -> int:
        return int(self.strength.size)


@dataclass
class LatticeSumRecord:
    """Reciprocal vectors radiating at one photon energy fraction

    All arrays are aligned element-wise and ordered as in the
    beam-line :class:`ReciprocalTable`.

    Parameters
    ----------
    x : float
        Photon energy fraction k / E.
    energy : float
        Beam energy the record was computed for (GeV).
    q2theta2 : numpy.ndarray
        Production angle squared of each contributing vector.
    q2weight : numpy.ndarray
        Strength times the phase-space factor g_⊥² δ / (g_l² x), GeV⁻³.
    q2phi : numpy.ndarray
        Lab azimuth of each vector's transverse component (rad).
    q2sigma : numpy.ndarray
        Mosaic smearing width in theta2.
    """

    x: float
    energy: float
    q2theta2: np.ndarray
    q2weight: np.ndarray
    q2phi: np.ndarray
    q2sigma: np.ndarray

    def __len__(self) -> int:
        return int(self.q2weight.size)
