#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Bremsstrahlung kernels for coherent and incoherent photon production

Angles are expressed through ``theta2`` = (θ E / m_e)², and most kernels
through ξ = 1 / (1 + theta2).  For a single momentum transfer with
transverse component along azimuth α, a photon emitted at azimuth φ
carries, with ψ = φ - α,

.. math::

    I &= 1 + (1-x)^2 - 8 (1-x) \\xi^2 \\theta^2 \\cos^2\\psi \\\\
    Q + iU &= 2 (1-x) \\xi^2 \\left(1 - \\theta^2 e^{2i\\psi}\\right)^2

in the frame of the transverse momentum transfer.  ``I - |Q + iU| = x²``,
so the linear polarization never exceeds one.  Averaging over ψ gives the
unpolarized kernel

.. math::

    \\psi_0(x, \\theta^2) = 1 + (1-x)^2 - 4 (1-x) \\frac{\\theta^2}{(1+\\theta^2)^2}.

The incoherent (amorphous) spectrum in the complete-screening limit is
the same kernel weighted by (1 + theta2)⁻², whose theta2 integral is the
familiar ``(4/3)(1 - x) + x²``.

References
----------
.. [1] U. Timm, Fortschr. Phys. 17 (1969) 765.
.. [2] Y. S. Tsai, Rev. Mod. Phys. 46 (1974) 815, eq. 3.83.
"""

from __future__ import annotations

import math

import numpy as np

from pycobrems.models.records import CrystalLattice
from pycobrems.utils.constants import (
    CLASSICAL_ELECTRON_RADIUS,
    FINE_STRUCTURE,
    HBARC,
)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def coherent_norm(crystal: CrystalLattice, thickness: float) -> float:
    """Prefactor of the coherent lattice sum, per beam electron

    .. math::

        N = 4 \\alpha r_e^2 Z^2 (2\\pi)^2 \\frac{t}{V_c^2}

    with the thickness *t* and the conventional cell volume V_c in natural
    units.  Multiplying by the lattice-sum weights (GeV⁻³) yields photons
    per unit x.
    """
    t = thickness / HBARC
    cell = (crystal.lattice_constant / HBARC) ** 3
    return (
        4.0 * FINE_STRUCTURE * CLASSICAL_ELECTRON_RADIUS**2 * crystal.Z**2
        * (2.0 * math.pi) ** 2 * t / cell**2
    )


# ---------------------------------------------------------------------------
# Kernels
# ---------------------------------------------------------------------------

def unpolarized_kernel(x: float, theta2):
    """Azimuth-averaged intensity ψ₀(x, theta2); non-negative everywhere."""
    xi = 1.0 / (1.0 + np.asarray(theta2, dtype="f8"))
    return 1.0 + (1.0 - x) ** 2 - 4.0 * (1.0 - x) * xi * (1.0 - xi)


def polarized_kernel(x: float, theta2):
    """Azimuth-averaged Stokes Q in the transverse-momentum frame, 2(1-x)ξ²."""
    xi = 1.0 / (1.0 + np.asarray(theta2, dtype="f8"))
    return 2.0 * (1.0 - x) * xi**2


def stokes_kernels(x: float, theta2, psi):
    """Intensity and linear Stokes parameters at relative azimuth *psi*

    Parameters
    ----------
    x : float
        Photon energy fraction.
    theta2 : array_like
        Production angle squared.
    psi : array_like
        Photon azimuth relative to the transverse momentum transfer (rad).

    Returns
    -------
    tuple of numpy.ndarray
        ``(I, Q, U)`` broadcast to a common shape.
    """
    t2 = np.asarray(theta2, dtype="f8")
    psi = np.asarray(psi, dtype="f8")
    xi2 = 1.0 / (1.0 + t2) ** 2
    y = 1.0 - x
    intensity = 1.0 + y**2 - 8.0 * y * xi2 * t2 * np.cos(psi) ** 2
    q = 2.0 * y * xi2 * (1.0 - 2.0 * t2 * np.cos(2.0 * psi) + t2**2 * np.cos(4.0 * psi))
    u = 2.0 * y * xi2 * (-2.0 * t2 * np.sin(2.0 * psi) + t2**2 * np.sin(4.0 * psi))
    return intensity, q, u


# ---------------------------------------------------------------------------
# Incoherent spectrum
# ---------------------------------------------------------------------------

def bethe_heitler(x: float, tau: float) -> float:
    """Thin-target spectrum ``(tau / x) ((4/3)(1 - x) + x²)`` per unit x

    Parameters
    ----------
    x : float
        Photon energy fraction in ``(0, 1)``.
    tau : float
        Radiator thickness in radiation lengths.
    """
    return tau / x * (4.0 / 3.0 * (1.0 - x) + x * x)


def incoherent_theta2(x: float, theta2, tau: float):
    """Thin-target spectrum per unit x and theta2

    ``(tau / x) ψ₀(x, theta2) / (1 + theta2)²``; integrates over theta2
    to :func:`bethe_heitler`.
    """
    t2 = np.asarray(theta2, dtype="f8")
    return tau / x * unpolarized_kernel(x, t2) / (1.0 + t2) ** 2
