#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Custom exception hierarchy for the PyCobrems package

All exceptions raised by PyCobrems inherit from :class:`CobremsError`, so
every library-specific error can be caught with a single ``except`` clause
while still allowing fine-grained handling when needed.  The three
configuration/query errors also derive from :class:`ValueError`, because
each of them reports a bad numeric or string argument.

Exception Hierarchy
-------------------
::

    CobremsError
    ├── InvalidParameter    # Physically impossible configuration value
    ├── UnknownCrystal      # Crystal name not in the radiator table
    ├── OutOfRangeQuery     # Negative theta2, malformed convolution grid
    └── ConversionError     # HDF5 export failures

Kinematically forbidden but otherwise valid queries (photon energy
fraction outside ``(0, 1)``, production angles beyond the kinematic
limit) are *not* errors: the rate functions return zero for them.
"""

from __future__ import annotations


class CobremsError(Exception):
    """Base exception for all PyCobrems errors

    Every exception raised by PyCobrems is a subclass of this type.
    Catching ``CobremsError`` therefore catches any library-specific failure
    while still allowing standard Python exceptions (``TypeError``,
    ``KeyError``, etc.) raised by programming mistakes to propagate normally.
    """


class InvalidParameter(CobremsError, ValueError):
    """Raised when a constructor or setter receives an impossible value

    Examples are a negative radiator thickness, a non-positive beam
    energy, a coherent-edge energy above the beam energy, or a crystal
    orientation that cannot place the coherent edge where requested.
    The configuration is left unchanged when this is raised.

    Parameters
    ----------
    message : str
        Description of the rejected value, including the parameter name,
        the constraint it violates, and the value that was supplied.
    """


class UnknownCrystal(CobremsError, ValueError):
    """Raised when a radiator crystal name is not in the supported table

    Parameters
    ----------
    message : str
        The requested name and the list of supported crystal names.
    """


class OutOfRangeQuery(CobremsError, ValueError):
    """Raised when a rate or convolution query is malformed

    Covers negative photon production angle squared and convolution
    grids whose declared size does not match the supplied arrays.

    Parameters
    ----------
    message : str
        Description of the offending argument.
    """


class ConversionError(CobremsError):
    """Raised when writing a spectrum to HDF5 fails

    This covers any error during HDF5 file creation: permission denied,
    disk full, an existing output file without ``overwrite=True``, or an
    empty tabulation grid.

    Parameters
    ----------
    message : str
        Description of the conversion failure and the target HDF5 path.
    """
