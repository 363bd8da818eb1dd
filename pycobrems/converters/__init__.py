#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
HDF5 export of radiator spectra

* :func:`~pycobrems.converters.hdf5.tabulate_spectrum`
    Evaluate rates, enhancement and polarization on an x grid.
* :func:`~pycobrems.converters.hdf5.write_spectrum_hdf5`
    Tabulate and write a self-describing HDF5 file.
"""

from __future__ import annotations

from pycobrems.converters.hdf5 import tabulate_spectrum, write_spectrum_hdf5

__all__ = ["tabulate_spectrum", "write_spectrum_hdf5"]
