#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Collimator acceptance for photons leaving the radiator

A photon emitted at polar angle θ and azimuth φ would hit the collimator
plane at ``L θ (cos φ, sin φ)``.  The electron spot and its multiple
scattering inside the radiator blur that point into a circular Gaussian
of per-axis variance σ².  The probability of landing inside an aperture
of radius R whose centre is offset by (x_s, y_s) is then the Rice
cumulative distribution

.. math::

    P = F_{\\text{Rice}}\\left(\\frac{R}{\\sigma};\\,\\frac{\\nu}{\\sigma}\\right),
    \\qquad \\nu = \\left|L\\theta(\\cos\\phi, \\sin\\phi) - (x_s, y_s)\\right|.

Points farther than ``ACCEPTANCE_NSIGMA`` σ from the aperture rim are
resolved exactly to 0 or 1 without calling the distribution.
"""

from __future__ import annotations

import numpy as np
from numpy.polynomial.hermite_e import hermegauss
from scipy.stats import rice

from pycobrems.utils.constants import ACCEPTANCE_NSIGMA, ELECTRON_MASS, MOSAIC_NODES

_MOSAIC_NODES, _MOSAIC_WEIGHTS = hermegauss(MOSAIC_NODES)
_MOSAIC_WEIGHTS = _MOSAIC_WEIGHTS / np.sqrt(2.0 * np.pi)


def acceptance(
    theta2,
    phi,
    *,
    energy: float,
    distance: float,
    diameter: float,
    sigma: float,
    xshift: float = 0.0,
    yshift: float = 0.0,
) -> np.ndarray:
    """Probability that a photon passes the collimator aperture

    Parameters
    ----------
    theta2 : array_like
        Production angle squared in units of (m_e/E)².
    phi : array_like
        Photon azimuth (rad), broadcast against *theta2*.
    energy : float
        Beam energy (GeV).
    distance : float
        Radiator-to-collimator distance (m).
    diameter : float
        Aperture diameter (m).
    sigma : float
        Per-axis rms blur of the landing point (m).
    xshift, yshift : float, optional
        Aperture centre offset (m).

    Returns
    -------
    numpy.ndarray
        Acceptance in [0, 1] with the broadcast shape of the inputs.
    """
    theta = np.sqrt(np.asarray(theta2, dtype="f8")) * (ELECTRON_MASS / energy)
    phi = np.asarray(phi, dtype="f8")
    nu = np.hypot(distance * theta * np.cos(phi) - xshift,
                  distance * theta * np.sin(phi) - yshift)
    radius = 0.5 * diameter
    if sigma <= 0.0:
        return (nu <= radius).astype("f8")

    out = np.zeros(nu.shape, dtype="f8")
    out[radius - nu > ACCEPTANCE_NSIGMA * sigma] = 1.0
    edge = np.abs(nu - radius) <= ACCEPTANCE_NSIGMA * sigma
    if np.any(edge):
        out[edge] = rice.cdf(radius / sigma, nu[edge] / sigma)
    return np.clip(out, 0.0, 1.0)


def acceptance_limits(
    *,
    energy: float,
    distance: float,
    diameter: float,
    sigma: float,
    shift: float = 0.0,
) -> tuple[float, float]:
    """Range of theta2 over which the acceptance is neither 0 nor 1

    Returns
    -------
    tuple of float
        ``(theta2_low, theta2_high)``: photons below the first are always
        accepted, photons above the second never.
    """
    scale = distance * ELECTRON_MASS / energy
    radius = 0.5 * diameter
    low = max(radius - shift - ACCEPTANCE_NSIGMA * sigma, 0.0) / scale
    high = (radius + shift + ACCEPTANCE_NSIGMA * sigma) / scale
    return low * low, high * high


def mosaic_averaged_acceptance(theta2, sigma2, phi, **geometry) -> np.ndarray:
    """Acceptance averaged over a Gaussian spread of theta2

    Gauss-Hermite quadrature over ``theta2 + sigma2 z``, truncated at
    theta2 = 0.  *geometry* is forwarded to :func:`acceptance`.
    """
    t2 = np.asarray(theta2, dtype="f8")[..., None]
    s2 = np.asarray(sigma2, dtype="f8")[..., None]
    nodes = np.maximum(t2 + s2 * _MOSAIC_NODES, 0.0)
    acc = acceptance(nodes, np.asarray(phi, dtype="f8")[..., None], **geometry)
    return acc @ _MOSAIC_WEIGHTS
