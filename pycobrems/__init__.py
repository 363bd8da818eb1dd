#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
PyCobrems - coherent bremsstrahlung radiator model

Computes photon rates, linear polarization and collimator acceptance for
a relativistic electron beam crossing an oriented crystal radiator,
followed by a photon collimator.

Workflow
--------
1. **Configure** a :class:`CobremsGenerator` with the beam energy and
   the desired coherent-edge energy, then adjust beam, radiator and
   collimator parameters through its setters.

2. **Query** rates at a photon energy fraction ``x = k / E``:
   ``Rate_dNcdx``, ``Rate_dNidx``, ``Rate_dNtdx``, ``Polarization``, ...

3. **Smooth** tabulated spectra with the beam energy spread and
   emittance: ``applyBeamCrystalConvolution``.

4. **Export** a tabulated spectrum to HDF5:
   ``python -m pycobrems.cli spectrum --output diamond.h5``

Modules
-------
generator
    The radiator model and its configuration state.
physics
    Lattice sums, emission kernels, acceptance, multiple scattering and
    beam smoothing as pure functions.
models
    Typed dataclass records for configuration and lattice sums.
converters
    HDF5 spectrum export.
utils
    Constants, radiator table and argument validation.

Examples
--------
>>> from pycobrems import CobremsGenerator
>>> gen = CobremsGenerator(12.0, 9.0)
>>> gen.setTargetThickness(50e-6)
>>> gen.CoherentEnhancement(0.75) > 1.0
True
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Melek Derman"

from pycobrems.generator import CobremsGenerator
from pycobrems.converters.hdf5 import tabulate_spectrum, write_spectrum_hdf5
from pycobrems.exceptions import (
    CobremsError,
    InvalidParameter,
    UnknownCrystal,
    OutOfRangeQuery,
    ConversionError,
)

__all__ = [
    # Version
    "__version__",
    # Model
    "CobremsGenerator",
    # Export
    "tabulate_spectrum",
    "write_spectrum_hdf5",
    # Exceptions
    "CobremsError",
    "InvalidParameter",
    "UnknownCrystal",
    "OutOfRangeQuery",
    "ConversionError",
]
