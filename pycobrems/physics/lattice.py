#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Crystal structure engine: reciprocal-lattice sums for coherent bremsstrahlung

Coherent radiation from an electron crossing a crystal is a sum over
reciprocal-lattice vectors **g**.  Each vector contributes with the
strength

.. math::

    |S(\\mathbf g)|^2 \\; e^{-g^2/q_0^2} \\;
    \\left(\\frac{\\beta}{1 + \\beta g^2}\\right)^2

where *S* is the structure factor of the conventional cell, the
exponential is the Debye-Waller damping of thermal vibrations, and the
last factor is the screened atomic form factor divided by g⁴.  A vector
radiates at photon energy fraction *x* only when its longitudinal
component reaches the minimum momentum transfer

.. math::

    \\delta(x) = \\frac{m_e^2}{2E} \\frac{x}{1 - x},

and then at the production angle ``theta2 = g_l / delta - 1``.

Work is split in three memoizable stages, each cheaper than the last:

1. :func:`reciprocal_table` — crystal-frame vectors and strengths, depends
   on the crystal and temperature only.
2. :func:`orient_table` — rotation into the beam-line frame.
3. :func:`lattice_sum` — selection and weighting at one *x*.

References
----------
.. [1] U. Timm, "Coherent bremsstrahlung of electrons in crystals",
   Fortschr. Phys. 17 (1969) 765.
.. [2] B. E. Warren, *X-Ray Diffraction*, Dover (1990), ch. 11 (Debye model
   of thermal vibrations).
"""

from __future__ import annotations

import logging
import math

import numpy as np
from scipy.special import spence

from pycobrems.exceptions import InvalidParameter, UnknownCrystal
from pycobrems.models.records import CrystalLattice, LatticeSumRecord, ReciprocalTable
from pycobrems.utils.constants import (
    ATOMIC_MASS_UNIT,
    BOLTZMANN,
    CRYSTAL_TABLE,
    DW_CUTOFF,
    EDGE_TOLERANCE,
    ELECTRON_MASS,
    FORM_FACTOR_SCREENING,
    HBARC,
    STRUCTURE_FACTOR_FLOOR,
    THETA2_SIGMA_FLOOR,
)
from pycobrems.utils.validation import validate_non_negative, validate_positive

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Crystal descriptors
# ---------------------------------------------------------------------------

def crystal_lattice(name: str) -> CrystalLattice:
    """Build the descriptor of a supported radiator crystal

    Parameters
    ----------
    name : str
        Crystal name, case-insensitive (``"diamond"``, ``"silicon"``,
        ``"germanium"``).

    Returns
    -------
    CrystalLattice
        Frozen descriptor including the form-factor screening parameter.

    Raises
    ------
    UnknownCrystal
        If *name* is not in :data:`~pycobrems.utils.constants.CRYSTAL_TABLE`.
    """
    key = str(name).strip().lower()
    if key not in CRYSTAL_TABLE:
        raise UnknownCrystal(
            f"Unknown radiator crystal {name!r}.  "
            f"Supported crystals: {sorted(CRYSTAL_TABLE)}"
        )
    entry = CRYSTAL_TABLE[key]
    Z = int(entry["Z"])
    screening = FORM_FACTOR_SCREENING * Z ** (-1.0 / 3.0) / ELECTRON_MASS
    return CrystalLattice(
        name=key,
        Z=Z,
        A=float(entry["A"]),
        density=float(entry["density"]),
        lattice_constant=float(entry["lattice_constant"]),
        radiation_length=float(entry["radiation_length"]),
        debye_temperature=float(entry["debye_temperature"]),
        mosaic_spread=float(entry["mosaic_spread"]),
        betaFF=screening**2,
        ucell_sites=tuple(tuple(float(c) for c in site) for site in entry["ucell_sites"]),
        primary_hkl=tuple(int(i) for i in entry["primary_hkl"]),
    )


def reciprocal_unit(crystal: CrystalLattice) -> float:
    """Length of the unit reciprocal vector 2πħc/a (GeV)."""
    return 2.0 * math.pi * HBARC / crystal.lattice_constant


def primary_vector(crystal: CrystalLattice) -> np.ndarray:
    """Primary reciprocal vector in the crystal frame (GeV)."""
    return reciprocal_unit(crystal) * np.asarray(crystal.primary_hkl, dtype="f8")


def structure_factor2(hkl: np.ndarray, sites) -> np.ndarray:
    """Squared modulus of the cell structure factor

    Parameters
    ----------
    hkl : numpy.ndarray
        Miller indices, shape ``(N, 3)``.
    sites : sequence of 3-tuples
        Fractional site positions.

    Returns
    -------
    numpy.ndarray
        ``|Σ_j exp(2πi hkl·r_j)|²``, shape ``(N,)``.

    Examples
    --------
    >>> from pycobrems.utils.constants import DIAMOND_CUBIC_SITES
    >>> structure_factor2(np.array([[2, 2, 0], [2, 0, 0]]), DIAMOND_CUBIC_SITES).round(6)
    array([64.,  0.])
    """
    phase = 2.0 * np.pi * (np.asarray(hkl, dtype="f8") @ np.asarray(sites, dtype="f8").T)
    amp = np.exp(1j * phase).sum(axis=1)
    return amp.real**2 + amp.imag**2


# ---------------------------------------------------------------------------
# Thermal vibrations
# ---------------------------------------------------------------------------

def debye_function(y: float) -> float:
    """First-order Debye function φ(y) = (1/y) ∫₀^y t / (eᵗ - 1) dt

    Evaluated in closed form through the dilogarithm,
    ``∫₀^y = π²/6 + y ln(1 - e^-y) - Li₂(e^-y)``.
    """
    if y <= 0.0:
        raise InvalidParameter(f"Debye function argument must be positive, got {y:.6g}.")
    one_minus = -math.expm1(-y)
    dilog = float(spence(one_minus))
    integral = math.pi**2 / 6.0 + y * math.log(one_minus) - dilog
    return integral / y


def debye_waller_constant(
    debye_temperature: float,
    temperature: float,
    A: float,
) -> float:
    """Momentum-transfer scale q0² of the Debye-Waller damping

    Coherent intensities are damped by ``exp(-q² / q0²)`` where
    ``1/q0²`` is the mean-square thermal displacement along **q**.  In the
    Debye model

    .. math::

        \\frac{1}{q_0^2} = \\frac{3}{M k_B \\Theta_D}
        \\left[\\frac{\\varphi(y)}{y} + \\frac{1}{4}\\right],
        \\qquad y = \\Theta_D / T,

    the ``1/4`` being the zero-point motion.

    Parameters
    ----------
    debye_temperature : float
        Debye temperature Θ_D (K), positive.
    temperature : float
        Crystal temperature T (K), non-negative.
    A : float
        Atomic mass (g/mol).

    Returns
    -------
    float
        q0² in GeV².  Decreases as the temperature rises.

    Raises
    ------
    InvalidParameter
        If either temperature is out of range.

    Examples
    --------
    >>> q_cold = debye_waller_constant(2200.0, 1.0, 12.01)
    >>> q_warm = debye_waller_constant(2200.0, 300.0, 12.01)
    >>> q_warm < q_cold
    True
    """
    theta = validate_positive(debye_temperature, "Debye temperature")
    temp = validate_non_negative(temperature, "target temperature")
    mass = validate_positive(A, "atomic mass") * ATOMIC_MASS_UNIT
    thermal = 0.0
    if temp > 0.0:
        y = theta / temp
        thermal = debye_function(y) / y
    msd = 3.0 / (mass * BOLTZMANN * theta) * (thermal + 0.25)
    return 1.0 / msd


# ---------------------------------------------------------------------------
# Orientation
# ---------------------------------------------------------------------------

def rotation_matrix(thetax: float, thetay: float, thetaz: float) -> np.ndarray:
    """Crystal-to-beam-line rotation ``Rx(thetay) @ Ry(-thetax) @ Rz(thetaz)``

    The roll *thetaz* acts first, about the crystal axis nearest the beam;
    the small angle *thetax* then tilts in the horizontal plane and the
    large angle *thetay* in the vertical plane.
    """
    cx, sx = math.cos(thetax), math.sin(thetax)
    cy, sy = math.cos(thetay), math.sin(thetay)
    cz, sz = math.cos(thetaz), math.sin(thetaz)
    rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    ry = np.array([[cx, 0.0, -sx], [0.0, 1.0, 0.0], [sx, 0.0, cx]])
    rx = np.array([[1.0, 0.0, 0.0], [0.0, cy, -sy], [0.0, sy, cy]])
    return rx @ ry @ rz


def edge_orientation(
    primary: np.ndarray,
    delta: float,
    thetay: float,
) -> tuple[float, float]:
    """Solve the small and roll angles that put the primary edge at *delta*

    The roll turns the transverse projection of the primary vector onto
    the lab x axis; the small angle then follows from

    .. math::

        g_l = \\cos\\theta_y \\left(p \\sin\\theta_x + c \\cos\\theta_x\\right) = \\delta,

    with *p* and *c* the transverse and axial crystal-frame components.

    Parameters
    ----------
    primary : numpy.ndarray
        Primary reciprocal vector in the crystal frame (GeV).
    delta : float
        Required longitudinal momentum transfer (GeV).
    thetay : float
        Large angle kept fixed (rad).

    Returns
    -------
    tuple of float
        ``(thetax, thetaz)`` in rad.

    Raises
    ------
    InvalidParameter
        If no small angle reaches *delta* at this large angle.
    """
    gx, gy, gz = (float(c) for c in primary)
    p = math.hypot(gx, gy)
    reach = math.cos(thetay) * math.hypot(p, gz)
    if reach <= 0.0 or delta >= reach:
        raise InvalidParameter(
            f"Coherent edge needs g_l = {delta:.6g} GeV but the primary vector "
            f"reaches at most {reach:.6g} GeV at thetay = {thetay:.6g} rad."
        )
    thetaz = -math.atan2(gy, gx)
    thetax = math.asin(delta / reach) - math.atan2(gz, p)
    return thetax, thetaz


# ---------------------------------------------------------------------------
# Reciprocal-lattice tables
# ---------------------------------------------------------------------------

def reciprocal_table(crystal: CrystalLattice, q0sq: float) -> ReciprocalTable:
    """Enumerate the allowed reciprocal vectors of *crystal* in its own frame

    Vectors are kept inside the sphere ``g² <= DW_CUTOFF * q0²`` where the
    Debye-Waller damping is still above 1e-4, and dropped when the
    structure factor vanishes.  The ordering is that of a nested
    (h, k, l) loop, so identical inputs give identical tables.

    Parameters
    ----------
    crystal : CrystalLattice
        Radiator descriptor.
    q0sq : float
        Debye-Waller constant (GeV²).

    Returns
    -------
    ReciprocalTable
        Crystal-frame vectors and their coherent strength.
    """
    g0 = reciprocal_unit(crystal)
    gcut2 = DW_CUTOFF * q0sq
    hmax = int(math.ceil(math.sqrt(gcut2) / g0))
    span = np.arange(-hmax, hmax + 1, dtype=np.int64)
    hkl = np.stack(np.meshgrid(span, span, span, indexing="ij"), axis=-1).reshape(-1, 3)

    g2 = (g0**2) * (hkl**2).sum(axis=1).astype("f8")
    keep = (g2 > 0.0) & (g2 <= gcut2)
    hkl, g2 = hkl[keep], g2[keep]

    s2 = structure_factor2(hkl, crystal.ucell_sites)
    allowed = s2 > STRUCTURE_FACTOR_FLOOR
    hkl, g2, s2 = hkl[allowed], g2[allowed], s2[allowed]

    beta = crystal.betaFF
    strength = s2 * np.exp(-g2 / q0sq) * (beta / (1.0 + beta * g2)) ** 2
    logger.debug(
        "Reciprocal table for %s: hmax=%d, %d allowed vectors (q0^2=%.4g GeV^2).",
        crystal.name, hmax, strength.size, q0sq,
    )
    return ReciprocalTable(hkl=hkl, gvec=g0 * hkl.astype("f8"), strength=strength)


def orient_table(table: ReciprocalTable, rmatrix: np.ndarray) -> ReciprocalTable:
    """Rotate a crystal-frame table into the beam line

    Only vectors with a positive longitudinal component are kept; of each
    ±**g** pair at most one can supply the forward momentum transfer.
    """
    gvec = table.gvec @ np.asarray(rmatrix, dtype="f8").T
    forward = gvec[:, 2] > 0.0
    return ReciprocalTable(
        hkl=table.hkl[forward],
        gvec=gvec[forward],
        strength=table.strength[forward],
    )


def min_momentum_transfer(x: float, energy: float) -> float:
    """Minimum longitudinal momentum transfer δ = m_e² x / (2E(1 - x)) (GeV)."""
    return ELECTRON_MASS**2 * x / (2.0 * energy * (1.0 - x))


def lattice_sum(
    table: ReciprocalTable,
    x: float,
    energy: float,
    mosaic_spread: float,
) -> LatticeSumRecord:
    """Select and weight the vectors radiating at photon energy fraction *x*

    Parameters
    ----------
    table : ReciprocalTable
        Beam-line table from :func:`orient_table`.
    x : float
        Photon energy fraction, strictly inside ``(0, 1)``.
    energy : float
        Beam energy (GeV).
    mosaic_spread : float
        RMS mosaic angle (rad); a tilt ε moves g_l by g_⊥ ε and hence
        theta2 by ``g_⊥ ε / δ``.

    Returns
    -------
    LatticeSumRecord
        Contributing vectors, in table order.
    """
    delta = min_momentum_transfer(x, energy)
    gl = table.gvec[:, 2]
    radiating = gl >= delta * (1.0 - EDGE_TOLERANCE)

    gvec = table.gvec[radiating]
    gl = gvec[:, 2]
    gt2 = gvec[:, 0] ** 2 + gvec[:, 1] ** 2
    theta2 = np.maximum(gl / delta - 1.0, 0.0)
    weight = table.strength[radiating] * gt2 * delta / (gl**2 * x)
    phi = np.arctan2(gvec[:, 1], gvec[:, 0])
    sigma = np.maximum(np.sqrt(gt2) * mosaic_spread / delta, THETA2_SIGMA_FLOOR)
    return LatticeSumRecord(
        x=x,
        energy=energy,
        q2theta2=theta2,
        q2weight=weight,
        q2phi=phi,
        q2sigma=sigma,
    )
