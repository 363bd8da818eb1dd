#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Argument validation routines for generator setters and rate queries

Configuration checks raise :class:`~pycobrems.exceptions.InvalidParameter`;
query checks raise :class:`~pycobrems.exceptions.OutOfRangeQuery`.  Every
check runs before any state is touched, so a rejected call leaves the
generator configuration exactly as it was.

Checked Constraints
-------------------
* Energies, distances and diameters must be strictly positive.
* Spreads, emittance, spot size, thickness and temperature must be
  non-negative.
* Angles must be finite.
* Production angle squared (theta2) must be non-negative.
* Convolution grids must declare a positive size matching both arrays.

Design Note
-----------
Validation functions accept plain scalars and NumPy arrays, not model
instances, so that ``models`` does not depend on ``utils``::

    utils ← models ← physics ← generator ← converters
"""

from __future__ import annotations

import logging
import math

import numpy as np

from pycobrems.exceptions import InvalidParameter, OutOfRangeQuery

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration checks
# ---------------------------------------------------------------------------

def validate_finite(value: float, label: str = "value") -> float:
    """Verify that *value* is a finite real number

    Parameters
    ----------
    value : float
        Value to check.
    label : str, optional
        Parameter name for error messages.

    Returns
    -------
    float
        *value* converted to ``float``.

    Raises
    ------
    InvalidParameter
        If *value* is NaN or infinite.
    """
    val = float(value)
    if not math.isfinite(val):
        raise InvalidParameter(f"Parameter '{label}' must be finite, got {val!r}.")
    return val


def validate_positive(value: float, label: str = "value") -> float:
    """Verify that *value* is finite and strictly positive

    Examples
    --------
    >>> validate_positive(12.0, "beam energy")
    12.0
    >>> validate_positive(0.0, "beam energy")  # doctest: +ELLIPSIS
    Traceback (most recent call last):
        ...
    pycobrems.exceptions.InvalidParameter: ...
    """
    val = validate_finite(value, label)
    if val <= 0.0:
        raise InvalidParameter(
            f"Parameter '{label}' must be positive, got {val:.6g}."
        )
    logger.debug("Parameter '%s' = %.6g passed positivity check.", label, val)
    return val


def validate_non_negative(value: float, label: str = "value") -> float:
    """Verify that *value* is finite and not negative

    A value of zero is accepted; it switches the corresponding broadening
    effect off.

    Raises
    ------
    InvalidParameter
        If *value* is negative, NaN or infinite.
    """
    val = validate_finite(value, label)
    if val < 0.0:
        raise InvalidParameter(
            f"Parameter '{label}' must be non-negative, got {val:.6g}."
        )
    logger.debug("Parameter '%s' = %.6g passed non-negativity check.", label, val)
    return val


def validate_edge_energy(edge: float, energy: float) -> float:
    """Verify that a coherent-edge energy lies strictly inside the beam energy

    Parameters
    ----------
    edge : float
        Requested coherent-edge photon energy (GeV).
    energy : float
        Beam energy (GeV).

    Raises
    ------
    InvalidParameter
        Unless ``0 < edge < energy``.
    """
    val = validate_positive(edge, "coherent edge energy")
    if val >= energy:
        raise InvalidParameter(
            f"Coherent edge {val:.6g} GeV must be below the beam energy "
            f"{energy:.6g} GeV."
        )
    return val


# ---------------------------------------------------------------------------
# Query checks
# ---------------------------------------------------------------------------

def validate_theta2(theta2: float) -> float:
    """Verify that a production angle squared is non-negative

    Parameters
    ----------
    theta2 : float
        Photon production angle squared in units of (m_e/E)².

    Raises
    ------
    OutOfRangeQuery
        If *theta2* is negative or NaN.
    """
    val = float(theta2)
    if not val >= 0.0:
        raise OutOfRangeQuery(
            f"Production angle squared theta2 must be non-negative, got {val!r}."
        )
    return val


def validate_grid(nbins: int, xvalues: np.ndarray, yvalues: np.ndarray) -> None:
    """Verify a caller-supplied convolution grid

    Parameters
    ----------
    nbins : int
        Declared number of grid points.
    xvalues, yvalues : numpy.ndarray
        Grid abscissae and samples.

    Raises
    ------
    OutOfRangeQuery
        If *nbins* is not positive or either array does not hold exactly
        *nbins* elements.
    """
    if int(nbins) <= 0:
        raise OutOfRangeQuery(f"Convolution grid size must be positive, got {nbins}.")
    for label, arr in (("xvalues", xvalues), ("yvalues", yvalues)):
        size = np.shape(arr)[0] if np.ndim(arr) == 1 else -1
        if size != nbins:
            raise OutOfRangeQuery(
                f"Convolution array '{label}' must be 1-D with {nbins} "
                f"elements, got shape {np.shape(arr)}."
            )
    logger.debug("Convolution grid of %d points passed validation.", nbins)
