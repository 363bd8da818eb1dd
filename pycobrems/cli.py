#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
PyCobrems command-line interface

Provides two commands on a radiator configured from the options:

1. **info**     — Print beamline, crystal and derived scattering parameters
2. **spectrum** — Tabulate rates and polarization, optionally to HDF5

Usage
-----
::

    # Default GlueX-like setup: 12 GeV beam, 9 GeV edge, 20 um diamond
    python -m pycobrems.cli info

    # Print a spectrum table
    python -m pycobrems.cli spectrum --points 41

    # Write a 50 um radiator spectrum to HDF5
    python -m pycobrems.cli --thickness 50e-6 spectrum -o diamond.h5

    # Uncollimated, silicon radiator, edge at 3 GeV
    python -m pycobrems.cli --crystal silicon --edge 3 --uncollimated spectrum
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import numpy as np

from pycobrems.exceptions import CobremsError
from pycobrems.generator import CobremsGenerator
from pycobrems.physics.scattering import MS_MODELS
from pycobrems.utils.constants import CRYSTAL_TABLE

logger = logging.getLogger("pycobrems.cli")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_generator(args) -> CobremsGenerator:
    """Create and configure a generator from parsed options."""
    gen = CobremsGenerator(args.energy, args.edge)
    gen.set_beam_erms(args.erms)
    gen.set_beam_emittance(args.emittance)
    gen.set_collimator_spotrms(args.spot)
    gen.set_collimator_distance(args.distance)
    gen.set_collimator_diameter(args.diameter)
    gen.set_target_thickness(args.thickness)
    gen.set_target_temperature(args.temperature)
    gen.set_multiple_scattering_model(args.ms_model)
    gen.set_collimated_flux(not args.uncollimated)
    gen.set_polarized_flux(args.polarized)
    if args.crystal != gen.get_target_crystal():
        gen.set_target_crystal(args.crystal)
        gen.set_coherent_edge(args.edge)
    return gen


def cmd_info(args):
    """Print the configuration and derived radiator parameters."""
    gen = _build_generator(args)
    gen.print_beamline_info()
    print()
    gen.print_target_crystal_info()
    print()
    half = gen.get_target_thickness() / 2.0
    print("Derived parameters")
    print(f"  radiation length PDG    {gen.get_target_radiation_length_pdg():.6g} m")
    print(f"  radiation length Schiff {gen.get_target_radiation_length_schiff():.6g} m")
    print(f"  Debye-Waller q0^2       {gen.get_target_debye_waller_constant():.6g} GeV^2")
    for name in sorted(MS_MODELS):
        value = getattr(gen, f"sigma2_ms_{name}")(half)
        print(f"  sigma2 MS {name:<8s}     {value:.6g} rad^2 (half thickness)")
    return 0


def cmd_spectrum(args):
    """Tabulate the photon spectrum and print it or write it to HDF5."""
    from pycobrems.converters.hdf5 import tabulate_spectrum, write_spectrum_hdf5

    gen = _build_generator(args)
    x = np.linspace(args.x_min, args.x_max, args.points)

    if args.output:
        print(f"  {gen!r} -> {args.output}", end=" ... ", flush=True)
        write_spectrum_hdf5(
            gen, args.output, x,
            convolve=not args.no_convolve,
            overwrite=args.overwrite,
        )
        print("OK")
        return 0

    table = tabulate_spectrum(gen, x, convolve=not args.no_convolve)
    columns = ["x", "dNcdx", "dNidx", "dNtdx", "enhancement", "polarization"]
    if not args.no_convolve:
        columns.append("convolved/dNtdx")
    print("  ".join(f"{c:>15s}" for c in columns))
    for i in range(x.size):
        print("  ".join(f"{table[c][i]:15.6e}" for c in columns))
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="pycobrems",
        description="PyCobrems coherent bremsstrahlung radiator model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
    python -m pycobrems.cli info                              # default setup
    python -m pycobrems.cli spectrum --points 41              # print table
    python -m pycobrems.cli --edge 8.6 spectrum -o out.h5     # HDF5 export
    python -m pycobrems.cli --crystal silicon --edge 3 info   # silicon radiator
""",
    )

    # Beam and radiator
    parser.add_argument("--energy", type=float, default=12.0,
                        help="Beam energy in GeV (default: 12)")
    parser.add_argument("--edge", type=float, default=9.0,
                        help="Coherent edge photon energy in GeV (default: 9)")
    parser.add_argument("--erms", type=float, default=6e-4,
                        help="RMS beam energy spread in GeV (default: 6e-4)")
    parser.add_argument("--emittance", type=float, default=2.5e-9,
                        help="Beam emittance in m rad (default: 2.5e-9)")
    parser.add_argument("--crystal", choices=sorted(CRYSTAL_TABLE), default="diamond",
                        help="Radiator crystal (default: diamond)")
    parser.add_argument("--thickness", type=float, default=20e-6,
                        help="Radiator thickness in m (default: 20e-6)")
    parser.add_argument("--temperature", type=float, default=300.0,
                        help="Radiator temperature in K (default: 300)")

    # Collimator
    parser.add_argument("--spot", type=float, default=5e-4,
                        help="RMS beam spot at the collimator in m (default: 5e-4)")
    parser.add_argument("--distance", type=float, default=76.0,
                        help="Radiator to collimator distance in m (default: 76)")
    parser.add_argument("--diameter", type=float, default=0.0034,
                        help="Collimator diameter in m (default: 0.0034)")
    parser.add_argument("--uncollimated", action="store_true",
                        help="Do not apply the collimator acceptance")
    parser.add_argument("--polarized", action="store_true",
                        help="Compute the polarized para/ortho split")
    parser.add_argument("--ms-model", choices=sorted(MS_MODELS), default="pdg",
                        help="Multiple-scattering model (default: pdg)")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    # Subcommands
    sub = parser.add_subparsers(dest="command", help="Action to run")

    sub.add_parser("info", help="Print radiator configuration")
    spec = sub.add_parser("spectrum", help="Tabulate the photon spectrum")
    spec.add_argument("--x-min", type=float, default=0.05,
                      help="Lowest photon energy fraction (default: 0.05)")
    spec.add_argument("--x-max", type=float, default=0.95,
                      help="Highest photon energy fraction (default: 0.95)")
    spec.add_argument("--points", type=int, default=91,
                      help="Number of grid points (default: 91)")
    spec.add_argument("--output", "-o", default=None,
                      help="Write HDF5 to this path instead of printing")
    spec.add_argument("--overwrite", action="store_true",
                      help="Overwrite an existing output file")
    spec.add_argument("--no-convolve", action="store_true",
                      help="Skip beam energy-spread and emittance smoothing")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    if args.command is None:
        parser.print_help()
        return 0

    t0 = time.time()

    commands = {
        "info": cmd_info,
        "spectrum": cmd_spectrum,
    }

    try:
        rc = commands[args.command](args)
    except CobremsError as exc:
        print(f"FAIL: {exc}")
        logger.debug("Command %s failed", args.command, exc_info=True)
        return 1
    elapsed = time.time() - t0
    print(f"\nCompleted in {elapsed:.1f}s")
    return rc


if __name__ == "__main__":
    sys.exit(main())
