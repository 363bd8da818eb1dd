#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
HDF5 export of tabulated coherent bremsstrahlung spectra

Evaluates a configured :class:`~pycobrems.generator.CobremsGenerator` on
a grid of photon energy fractions and writes a deterministic,
self-documenting HDF5 file.

HDF5 Layout
-----------
::

    /metadata/
        crystal               string   — radiator name
        Z                     int64    — atomic number
        beam_energy           float64  — GeV
        beam_erms             float64  — GeV
        beam_emittance        float64  — m rad
        collimator_spotrms    float64  — m
        collimator_distance   float64  — m
        collimator_diameter   float64  — m
        target_thickness      float64  — m
        target_temperature    float64  — K
        thetax, thetay, thetaz  float64  — rad
        collimated            bool
        polarized             bool
        ms_model              string

    /spectrum/
        x                     float64[]   units: 1
        dNcdx                 float64[]   units: 1/electron
        dNidx                 float64[]   units: 1/electron
        dNtdx                 float64[]   units: 1/electron
        enhancement           float64[]   units: 1
        polarization          float64[]   units: 1
        convolved/
            dNcdx             float64[]   units: 1/electron
            dNtdx             float64[]   units: 1/electron

Physical units are stored as HDF5 dataset attributes
(``ds.attrs["units"] = "GeV"``).  The ``convolved`` group is present only
when beam smoothing was requested.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

try:
    import h5py
except ImportError as _exc:  # pragma: no cover
    raise ImportError(
        "The 'h5py' package is required by the HDF5 exporter.  "
        "Install it with: pip install h5py"
    ) from _exc

from pycobrems import __version__
from pycobrems.exceptions import ConversionError
from pycobrems.generator import CobremsGenerator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tabulation
# ---------------------------------------------------------------------------

def tabulate_spectrum(
    generator: CobremsGenerator,
    x: np.ndarray,
    *,
    convolve: bool = True,
) -> dict[str, np.ndarray]:
    """Evaluate rates and polarization of *generator* on the grid *x*

    Parameters
    ----------
    generator : CobremsGenerator
        Configured radiator model.
    x : numpy.ndarray
        Photon energy fractions.
    convolve : bool, optional
        Also return beam-smoothed ``convolved/dNcdx`` and
        ``convolved/dNtdx``.  Default ``True``.

    Returns
    -------
    dict
        Arrays keyed by their dataset path below ``/spectrum``.
    """
    grid = np.asarray(x, dtype="f8")
    table = {
        "x": grid,
        "dNcdx": np.array([generator.rate_dNcdx(v) for v in grid]),
        "dNidx": np.array([generator.rate_dNidx(v) for v in grid]),
    }
    table["dNtdx"] = table["dNcdx"] + table["dNidx"]
    incoherent = table["dNidx"]
    table["enhancement"] = np.divide(
        table["dNtdx"], incoherent,
        out=np.zeros_like(incoherent), where=incoherent > 0.0,
    )
    table["polarization"] = np.array([generator.linear_polarization(v) for v in grid])
    if convolve:
        for key in ("dNcdx", "dNtdx"):
            smoothed = table[key].copy()
            generator.apply_beam_crystal_convolution(grid.size, grid, smoothed)
            table[f"convolved/{key}"] = smoothed
    return table


# ---------------------------------------------------------------------------
# Internal writers
# ---------------------------------------------------------------------------

def _write_metadata(h5f: h5py.File, generator: CobremsGenerator) -> None:
    """Write the ``/metadata`` group from the generator configuration."""
    meta = h5f.create_group("metadata")
    meta.attrs["pycobrems_version"] = __version__
    meta.create_dataset("crystal", data=generator.get_target_crystal())
    meta.create_dataset("Z", data=np.int64(generator.get_target_lattice().Z))
    scalars = {
        "beam_energy": (generator.get_beam_energy(), "GeV"),
        "beam_erms": (generator.get_beam_erms(), "GeV"),
        "beam_emittance": (generator.get_beam_emittance(), "m rad"),
        "collimator_spotrms": (generator.get_collimator_spotrms(), "m"),
        "collimator_distance": (generator.get_collimator_distance(), "m"),
        "collimator_diameter": (generator.get_collimator_diameter(), "m"),
        "target_thickness": (generator.get_target_thickness(), "m"),
        "target_temperature": (generator.get_target_temperature(), "K"),
        "thetax": (generator.get_target_thetax(), "rad"),
        "thetay": (generator.get_target_thetay(), "rad"),
        "thetaz": (generator.get_target_thetaz(), "rad"),
    }
    for name, (value, units) in scalars.items():
        _create_dataset(meta, name, np.float64(value), units)
    meta.create_dataset("collimated", data=np.bool_(generator.get_collimated_flux()))
    meta.create_dataset("polarized", data=np.bool_(generator.get_polarized_flux()))
    meta.create_dataset("ms_model", data=generator.get_multiple_scattering_model())


def _create_dataset(
    group: h5py.Group,
    name: str,
    data,
    units: str,
) -> h5py.Dataset:
    """Create a float64 dataset with a ``units`` attribute

    Parameters
    ----------
    group : h5py.Group
        Parent group.
    name : str
        Dataset name; may contain ``/`` to create intermediate groups.
    data : array_like
        Values.
    units : str
        Physical units string stored as ``ds.attrs["units"]``.
    """
    ds = group.create_dataset(name, data=np.asarray(data, dtype="f8"))
    ds.attrs["units"] = units
    return ds


_SPECTRUM_UNITS: dict[str, str] = {
    "x": "1",
    "dNcdx": "1/electron",
    "dNidx": "1/electron",
    "dNtdx": "1/electron",
    "enhancement": "1",
    "polarization": "1",
}


def _write_spectrum(h5f: h5py.File, table: dict[str, np.ndarray]) -> None:
    """Write the ``/spectrum`` group."""
    spec = h5f.create_group("spectrum")
    for key, values in table.items():
        units = _SPECTRUM_UNITS[key.rsplit("/", 1)[-1]]
        _create_dataset(spec, key, values, units)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def write_spectrum_hdf5(
    generator: CobremsGenerator,
    output_path: Path | str,
    x,
    *,
    convolve: bool = True,
    overwrite: bool = False,
) -> None:
    """Tabulate *generator* on *x* and write the result to HDF5

    Parameters
    ----------
    generator : CobremsGenerator
        Configured radiator model.
    output_path : Path | str
        Path for the output HDF5 file.  Parent directories are created
        automatically.
    x : array_like
        Non-empty 1-D grid of photon energy fractions.
    convolve : bool, optional
        Include beam-smoothed spectra.  Default ``True``.
    overwrite : bool, optional
        If ``True``, overwrite an existing HDF5 file.  If ``False``
        (default), raise :class:`~pycobrems.exceptions.ConversionError`
        when the output file already exists.

    Raises
    ------
    ConversionError
        If *overwrite* is ``False`` and *output_path* exists, if *x* is
        empty or not 1-D, or if any HDF5 write operation fails.

    Examples
    --------
    >>> gen = CobremsGenerator(12.0, 9.0)
    >>> write_spectrum_hdf5(gen, "spectra/diamond_9GeV.h5",
    ...                     np.linspace(0.05, 0.95, 181), overwrite=True)
    """
    out = Path(output_path)
    if out.exists() and not overwrite:
        raise ConversionError(f"Output file {out} already exists and overwrite=False.")

    grid = np.asarray(x, dtype="f8")
    if grid.ndim != 1 or grid.size == 0:
        raise ConversionError(
            f"Spectrum grid must be a non-empty 1-D array, got shape {grid.shape}."
        )

    logger.debug("Tabulating %d points for %s", grid.size, out)
    table = tabulate_spectrum(generator, grid, convolve=convolve)

    out.parent.mkdir(parents=True, exist_ok=True)
    try:
        with h5py.File(str(out), "w") as h5f:
            _write_metadata(h5f, generator)
            _write_spectrum(h5f, table)
    except Exception as exc:
        raise ConversionError(f"Failed to write HDF5 file {out}: {exc}") from exc

    logger.info("Wrote %d-point spectrum to %s", grid.size, out)
