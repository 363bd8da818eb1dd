#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Gaussian smoothing of tabulated spectra by beam energy spread and divergence

The coherent edge sits where ``x / (1 - x)`` is proportional to
``E g_l``, so a relative change of either moves it by

.. math::

    \\frac{dx}{x (1 - x)} = \\frac{dE}{E} + \\frac{dg_l}{g_l}.

An angular deviation dθ of the incoming electron changes g_l by
g_⊥ dθ, which gives the local smoothing width

.. math::

    \\sigma_x(x) = x (1 - x) \\sqrt{\\left(\\frac{E_{rms}}{E}\\right)^2
                  + \\left(\\sigma_\\theta \\frac{g_\\perp}{g_l}\\right)^2}.

The smoothing is a direct Nadaraya-Watson sum on the caller's grid, with
trapezoid bin widths so that non-uniform grids are handled.
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)


def smoothing_width(
    xvalues: np.ndarray,
    relative_spread: float,
    angular_spread: float,
    slope: float,
) -> np.ndarray:
    """Local Gaussian width σ_x at each grid point

    Parameters
    ----------
    xvalues : numpy.ndarray
        Photon energy fractions.
    relative_spread : float
        E_rms / E.
    angular_spread : float
        RMS beam divergence (rad).
    slope : float
        g_⊥ / g_l of the primary reciprocal vector in the beam line.
    """
    x = np.asarray(xvalues, dtype="f8")
    rel = np.hypot(relative_spread, angular_spread * slope)
    return np.abs(x * (1.0 - x)) * rel


def bin_widths(xvalues: np.ndarray) -> np.ndarray:
    """Trapezoid integration weights of a possibly non-uniform grid."""
    x = np.asarray(xvalues, dtype="f8")
    if x.size == 1:
        return np.ones(1)
    widths = np.empty_like(x)
    widths[1:-1] = 0.5 * np.abs(x[2:] - x[:-2])
    widths[0] = 0.5 * abs(x[1] - x[0])
    widths[-1] = 0.5 * abs(x[-1] - x[-2])
    return widths


def gaussian_smooth(
    xvalues: np.ndarray,
    yvalues: np.ndarray,
    widths: np.ndarray,
) -> np.ndarray:
    """Smooth *yvalues* with a Gaussian of per-point width *widths*

    Points with zero width, or whose kernel covers no neighbour with
    non-zero weight, keep their original value.

    Returns
    -------
    numpy.ndarray
        The smoothed samples; the inputs are not modified.
    """
    x = np.asarray(xvalues, dtype="f8")
    y = np.asarray(yvalues, dtype="f8")
    sig = np.asarray(widths, dtype="f8")
    out = y.copy()
    active = sig > 0.0
    if not np.any(active):
        return out

    dx = x[active, None] - x[None, :]
    kernel = np.exp(-0.5 * (dx / sig[active, None]) ** 2) * bin_widths(x)[None, :]
    norm = kernel.sum(axis=1)
    good = norm > 0.0
    smoothed = (kernel @ y)[good] / norm[good]
    idx = np.flatnonzero(active)[good]
    out[idx] = smoothed
    logger.debug("Smoothed %d of %d grid points.", idx.size, x.size)
    return out
