#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Radiator model for coherent bremsstrahlung photon beams

:class:`CobremsGenerator` holds the beam, radiator and collimator
configuration and answers rate, polarization and acceptance queries for a
photon energy fraction ``x = k / E`` and production angle squared
``theta2`` in units of (m_e / E)².

Lattice sums are computed lazily and memoized on three levels, each
dropped by the setters that affect it:

==================================  =================================
cache                               invalidated by
==================================  =================================
crystal-frame reciprocal table      crystal, temperature
beam-line (rotated) table           the above, any orientation change
per-x lattice sum record            the above, beam energy, a new x
==================================  =================================

Every public method has a snake_case name and a mixed-case alias
(``set_beam_energy`` / ``setBeamEnergy``, ``rate_dNcdx`` / ``Rate_dNcdx``).

Examples
--------
>>> gen = CobremsGenerator(12.0, 9.0)
>>> gen.setBeamErms(0.01)
>>> gen.Rate_dNcdx(0.75) > 3 * gen.Rate_dNidx(0.75)
True
"""

from __future__ import annotations

import copy
import logging
import math
import sys

import numpy as np
from numpy.polynomial.legendre import leggauss

from pycobrems.exceptions import InvalidParameter
from pycobrems.models.records import (
    BeamConfig,
    CollimatorConfig,
    CrystalLattice,
    LatticeSumRecord,
    ReciprocalTable,
    TargetOrientation,
)
from pycobrems.physics.bremsstrahlung import (
    bethe_heitler,
    coherent_norm,
    incoherent_theta2,
    polarized_kernel,
    stokes_kernels,
    unpolarized_kernel,
)
from pycobrems.physics.collimator import (
    acceptance,
    acceptance_limits,
    mosaic_averaged_acceptance,
)
from pycobrems.physics.convolution import gaussian_smooth, smoothing_width
from pycobrems.physics.lattice import (
    crystal_lattice,
    debye_waller_constant,
    edge_orientation,
    lattice_sum,
    min_momentum_transfer,
    orient_table,
    primary_vector,
    reciprocal_table,
    rotation_matrix,
)
from pycobrems.physics.scattering import (
    MS_MODELS,
    multiple_scattering,
    radiation_length_pdg,
    radiation_length_schiff,
)
from pycobrems.utils.constants import (
    DEFAULT_BEAM_EMITTANCE,
    DEFAULT_BEAM_ERMS,
    DEFAULT_COLLIMATOR_DIAMETER,
    DEFAULT_COLLIMATOR_DISTANCE,
    DEFAULT_CRYSTAL,
    DEFAULT_SPOT_RMS,
    DEFAULT_TARGET_TEMPERATURE,
    DEFAULT_TARGET_THETAY,
    DEFAULT_TARGET_THICKNESS,
    INCOHERENT_NODES,
)
from pycobrems.utils.validation import (
    validate_edge_energy,
    validate_finite,
    validate_grid,
    validate_non_negative,
    validate_positive,
    validate_theta2,
)

logger = logging.getLogger(__name__)

_LEGENDRE_NODES, _LEGENDRE_WEIGHTS = leggauss(INCOHERENT_NODES)


def _in_range(x: float) -> bool:
    return 0.0 < x < 1.0


class CobremsGenerator:
    """Coherent bremsstrahlung rates for an oriented crystal radiator

    Parameters
    ----------
    Emax_GeV : float
        Electron beam energy (GeV).
    Epeak_GeV : float
        Photon energy of the coherent edge (GeV), ``0 < Epeak < Emax``.

    Raises
    ------
    InvalidParameter
        If either energy is non-positive or the edge is not below the
        beam energy.

    Notes
    -----
    A new generator starts from a 20 µm diamond at 300 K, a 3.4 mm
    collimator 76 m downstream, 0.6 MeV rms energy spread, 2.5 nm·rad
    emittance and a 0.5 mm spot.  The large angle is set to 50 mrad and
    the small and roll angles are solved so that the (2, 2, 0) edge lies
    at *Epeak_GeV*.  Collimation is on and the polarized split is off.
    """

    def __init__(self, Emax_GeV: float, Epeak_GeV: float) -> None:
        energy = validate_positive(Emax_GeV, "Emax")
        validate_edge_energy(Epeak_GeV, energy)

        self._beam = BeamConfig(energy, DEFAULT_BEAM_ERMS, DEFAULT_BEAM_EMITTANCE)
        self._collimator = CollimatorConfig(
            DEFAULT_SPOT_RMS, DEFAULT_COLLIMATOR_DISTANCE, DEFAULT_COLLIMATOR_DIAMETER,
        )
        self._crystal: CrystalLattice = crystal_lattice(DEFAULT_CRYSTAL)
        self._orientation = TargetOrientation()
        self._thickness = DEFAULT_TARGET_THICKNESS
        self._temperature = DEFAULT_TARGET_TEMPERATURE
        self._collimated = True
        self._polarized = False
        self._ms_model = "pdg"

        self._reciprocal: ReciprocalTable | None = None
        self._oriented: ReciprocalTable | None = None
        self._record: LatticeSumRecord | None = None

        self.set_target_thetay(DEFAULT_TARGET_THETAY)
        self.set_coherent_edge(Epeak_GeV)

    def __repr__(self) -> str:
        return (
            f"CobremsGenerator(E={self._beam.energy:g} GeV, "
            f"crystal={self._crystal.name!r}, thickness={self._thickness:g} m)"
        )

    # -------------------------------------------------------------------
    # Copying
    # -------------------------------------------------------------------

    def copy(self) -> "CobremsGenerator":
        """Independent deep copy, memoized tables included."""
        return copy.deepcopy(self)

    __copy__ = copy

    # -------------------------------------------------------------------
    # Cache management
    # -------------------------------------------------------------------

    def _invalidate(self, level: str) -> None:
        if level == "crystal":
            self._reciprocal = None
        if level in ("crystal", "orientation"):
            self._oriented = None
        self._record = None

    def _reciprocal_table(self) -> ReciprocalTable:
        if self._reciprocal is None:
            self._reciprocal = reciprocal_table(
                self._crystal, self.get_target_debye_waller_constant(),
            )
        return self._reciprocal

    def _oriented_table(self) -> ReciprocalTable:
        if self._oriented is None:
            self._oriented = orient_table(
                self._reciprocal_table(), self._orientation.rmatrix,
            )
            logger.debug("Oriented table rebuilt: %d forward vectors.", len(self._oriented))
        return self._oriented

    def _lattice_record(self, x: float) -> LatticeSumRecord:
        rec = self._record
        if rec is None or rec.x != x or rec.energy != self._beam.energy:
            rec = lattice_sum(
                self._oriented_table(), x, self._beam.energy, self._crystal.mosaic_spread,
            )
            self._record = rec
        return rec

    # -------------------------------------------------------------------
    # Beam
    # -------------------------------------------------------------------

    def set_beam_energy(self, Ebeam_GeV: float) -> None:
        """Set the electron beam energy (GeV)."""
        self._beam.energy = validate_positive(Ebeam_GeV, "beam energy")
        self._invalidate("energy")

    def set_beam_erms(self, Erms_GeV: float) -> None:
        """Set the rms beam energy spread (GeV)."""
        self._beam.erms = validate_non_negative(Erms_GeV, "beam energy spread")

    def set_beam_emittance(self, emit_mr: float) -> None:
        """Set the transverse beam emittance (m·rad)."""
        self._beam.emittance = validate_non_negative(emit_mr, "beam emittance")

    def get_beam_energy(self) -> float:
        return self._beam.energy

    def get_beam_erms(self) -> float:
        return self._beam.erms

    def get_beam_emittance(self) -> float:
        return self._beam.emittance

    # -------------------------------------------------------------------
    # Collimator
    # -------------------------------------------------------------------

    def set_collimator_spotrms(self, spotrms_m: float) -> None:
        """Set the rms beam spot size at the collimator (m)."""
        self._collimator.spotrms = validate_non_negative(spotrms_m, "collimator spot rms")

    def set_collimator_distance(self, distance_m: float) -> None:
        """Set the radiator-to-collimator distance (m)."""
        self._collimator.distance = validate_positive(distance_m, "collimator distance")

    def set_collimator_diameter(self, diameter_m: float) -> None:
        """Set the collimator aperture diameter (m)."""
        self._collimator.diameter = validate_positive(diameter_m, "collimator diameter")

    def set_collimated_flux(self, flag: bool) -> None:
        """Apply the collimator acceptance to the rates when *flag* is true."""
        self._collimated = bool(flag)

    def set_polarized_flux(self, flag: bool) -> None:
        """Split para/ortho rates by polarization when *flag* is true."""
        self._polarized = bool(flag)

    def get_collimator_spotrms(self) -> float:
        return self._collimator.spotrms

    def get_collimator_distance(self) -> float:
        return self._collimator.distance

    def get_collimator_diameter(self) -> float:
        return self._collimator.diameter

    def get_collimated_flux(self) -> bool:
        return self._collimated

    def get_polarized_flux(self) -> bool:
        return self._polarized

    # -------------------------------------------------------------------
    # Target
    # -------------------------------------------------------------------

    def set_target_thickness(self, thickness_m: float) -> None:
        """Set the radiator thickness along the beam (m)."""
        self._thickness = validate_non_negative(thickness_m, "target thickness")

    def set_target_crystal(self, crystal: str) -> None:
        """Select the radiator crystal by name

        The orientation angles are kept; the coherent edge therefore moves
        unless :meth:`set_coherent_edge` is called again.

        Raises
        ------
        UnknownCrystal
            If *crystal* is not a supported radiator.
        """
        self._crystal = crystal_lattice(crystal)
        self._invalidate("crystal")
        logger.debug("Target crystal set to %s.", self._crystal.name)

    def set_target_temperature(self, temperature_K: float) -> None:
        """Set the radiator temperature (K) used for Debye-Waller damping."""
        self._temperature = validate_non_negative(temperature_K, "target temperature")
        self._invalidate("crystal")

    def get_target_thickness(self) -> float:
        return self._thickness

    def get_target_crystal(self) -> str:
        return self._crystal.name

    def get_target_temperature(self) -> float:
        return self._temperature

    def get_target_lattice(self) -> CrystalLattice:
        """Descriptor of the selected crystal."""
        return self._crystal

    def get_target_radiation_length_pdg(self) -> float:
        """Tsai radiation length of the selected crystal (m)."""
        c = self._crystal
        return radiation_length_pdg(c.Z, c.A, c.density)

    def get_target_radiation_length_schiff(self) -> float:
        """Schiff radiation length of the selected crystal (m)."""
        c = self._crystal
        return radiation_length_schiff(c.Z, c.A, c.density)

    def get_target_debye_waller_constant(
        self,
        DebyeT_K: float | None = None,
        T_K: float | None = None,
    ) -> float:
        """Debye-Waller constant q0² (GeV²) of the selected crystal

        Parameters
        ----------
        DebyeT_K : float, optional
            Debye temperature (K); defaults to the tabulated value.
        T_K : float, optional
            Crystal temperature (K); defaults to the target temperature.
        """
        if DebyeT_K is None:
            DebyeT_K = self._crystal.debye_temperature
        if T_K is None:
            T_K = self._temperature
        return debye_waller_constant(DebyeT_K, T_K, self._crystal.A)

    # -------------------------------------------------------------------
    # Orientation
    # -------------------------------------------------------------------

    def _set_orientation(
        self, thetax: float, thetay: float, thetaz: float, rotation: np.ndarray,
    ) -> None:
        self._orientation = TargetOrientation(
            thetax=thetax,
            thetay=thetay,
            thetaz=thetaz,
            rotation=rotation,
            rmatrix=rotation @ rotation_matrix(thetax, thetay, thetaz),
        )
        self._invalidate("orientation")

    def set_target_thetax(self, thetax: float) -> None:
        """Set the small angle (rad) and rebuild the rotation matrix."""
        o = self._orientation
        self._set_orientation(validate_finite(thetax, "thetax"), o.thetay, o.thetaz, o.rotation)

    def set_target_thetay(self, thetay: float) -> None:
        """Set the large angle (rad) and rebuild the rotation matrix."""
        o = self._orientation
        self._set_orientation(o.thetax, validate_finite(thetay, "thetay"), o.thetaz, o.rotation)

    def set_target_thetaz(self, thetaz: float) -> None:
        """Set the roll angle (rad) and rebuild the rotation matrix."""
        o = self._orientation
        self._set_orientation(o.thetax, o.thetay, validate_finite(thetaz, "thetaz"), o.rotation)

    def rotate_target(self, dthetax: float, dthetay: float, dthetaz: float) -> None:
        """Compose an incremental rotation into the current orientation

        The increment ``Rx(dthetay) @ Ry(-dthetax) @ Rz(dthetaz)`` is
        applied in the beam-line frame on top of the existing matrix.  The
        reported angles are unchanged, and later angle setters keep the
        composed increment.
        """
        dx = validate_finite(dthetax, "dthetax")
        dy = validate_finite(dthetay, "dthetay")
        dz = validate_finite(dthetaz, "dthetaz")
        o = self._orientation
        self._set_orientation(
            o.thetax, o.thetay, o.thetaz, rotation_matrix(dx, dy, dz) @ o.rotation,
        )

    def reset_target_orientation(self) -> None:
        """Zero all angles, drop composed rotations and set the matrix to identity."""
        self._orientation = TargetOrientation()
        self._invalidate("orientation")

    def set_coherent_edge(self, Epeak_GeV: float) -> None:
        """Orient the crystal so the primary coherent edge falls at *Epeak_GeV*

        The large angle is kept; the roll brings the primary vector into
        the horizontal plane and the small angle is solved in closed form.
        Any rotation composed by :meth:`rotate_target` is discarded.

        Raises
        ------
        InvalidParameter
            If ``Epeak_GeV`` is not inside ``(0, E)`` or the edge cannot
            be reached at the current large angle.
        """
        energy = self._beam.energy
        edge = validate_edge_energy(Epeak_GeV, energy)
        delta = min_momentum_transfer(edge / energy, energy)
        o = self._orientation
        thetax, thetaz = edge_orientation(primary_vector(self._crystal), delta, o.thetay)
        self._set_orientation(thetax, o.thetay, thetaz, np.eye(3))
        logger.debug(
            "Coherent edge %.4g GeV: thetax=%.6g rad, thetaz=%.6g rad.",
            edge, thetax, thetaz,
        )

    def get_target_thetax(self) -> float:
        return self._orientation.thetax

    def get_target_thetay(self) -> float:
        return self._orientation.thetay

    def get_target_thetaz(self) -> float:
        return self._orientation.thetaz

    def get_target_rmatrix(self) -> np.ndarray:
        """Copy of the crystal-to-beam-line rotation matrix."""
        return self._orientation.rmatrix.copy()

    # -------------------------------------------------------------------
    # Multiple scattering
    # -------------------------------------------------------------------

    def set_multiple_scattering_model(self, model: str) -> None:
        """Select the model used by :meth:`sigma2_ms`

        Parameters
        ----------
        model : str
            ``"pdg"`` (default), ``"kaune"``, ``"geant"`` or ``"hanson"``.
        """
        key = str(model).strip().lower()
        if key not in MS_MODELS:
            raise InvalidParameter(
                f"Unknown multiple-scattering model {model!r}.  "
                f"Must be one of: {sorted(MS_MODELS)}"
            )
        self._ms_model = key

    def get_multiple_scattering_model(self) -> str:
        return self._ms_model

    def sigma2_ms(self, thickness_m: float) -> float:
        """Projected rms scattering angle² (rad²) with the selected model."""
        return multiple_scattering(self._ms_model, self._crystal, thickness_m, self._beam.energy)

    def sigma2_ms_pdg(self, thickness_m: float) -> float:
        return multiple_scattering("pdg", self._crystal, thickness_m, self._beam.energy)

    def sigma2_ms_kaune(self, thickness_m: float) -> float:
        return multiple_scattering("kaune", self._crystal, thickness_m, self._beam.energy)

    def sigma2_ms_geant(self, thickness_m: float) -> float:
        return multiple_scattering("geant", self._crystal, thickness_m, self._beam.energy)

    def sigma2_ms_hanson(self, thickness_m: float) -> float:
        return multiple_scattering("hanson", self._crystal, thickness_m, self._beam.energy)

    # -------------------------------------------------------------------
    # Acceptance
    # -------------------------------------------------------------------

    def _geometry(
        self,
        distance_m: float | None = None,
        diameter_m: float | None = None,
    ) -> dict:
        distance = self._collimator.distance if distance_m is None else \
            validate_positive(distance_m, "collimator distance")
        diameter = self._collimator.diameter if diameter_m is None else \
            validate_positive(diameter_m, "collimator diameter")
        # electrons scatter on average through half the radiator
        spread2 = self._collimator.spotrms**2 + distance**2 * self.sigma2_ms(self._thickness / 2.0)
        return {
            "energy": self._beam.energy,
            "distance": distance,
            "diameter": diameter,
            "sigma": math.sqrt(spread2),
        }

    def acceptance(
        self,
        theta2: float,
        phi: float = 0.0,
        xshift_m: float = 0.0,
        yshift_m: float = 0.0,
    ) -> float:
        """Probability that a photon at (theta2, phi) passes the collimator

        Parameters
        ----------
        theta2 : float
            Production angle squared in units of (m_e/E)².
        phi : float, optional
            Photon azimuth (rad).
        xshift_m, yshift_m : float, optional
            Offset of the aperture centre from the beam axis (m).

        Raises
        ------
        OutOfRangeQuery
            If *theta2* is negative.
        """
        t2 = validate_theta2(theta2)
        geometry = self._geometry()
        return float(acceptance(
            t2, phi,
            xshift=validate_finite(xshift_m, "xshift"),
            yshift=validate_finite(yshift_m, "yshift"),
            **geometry,
        ))

    def _coherent_acceptance(self, rec: LatticeSumRecord, geometry: dict) -> np.ndarray:
        acc = np.zeros(len(rec))
        _, high = acceptance_limits(**geometry)
        # Gauss-Hermite nodes of the mosaic average stay within 5 sigma
        near = rec.q2theta2 - 5.0 * rec.q2sigma <= high
        if np.any(near):
            acc[near] = mosaic_averaged_acceptance(
                rec.q2theta2[near], rec.q2sigma[near], 0.0, **geometry,
            )
        return acc

    # -------------------------------------------------------------------
    # Coherent rates
    # -------------------------------------------------------------------

    def _coherent_norm(self) -> float:
        return coherent_norm(self._crystal, self._thickness)

    def _coherent_rate(self, x: float, geometry: dict | None) -> float:
        rec = self._lattice_record(x)
        if len(rec) == 0:
            return 0.0
        terms = rec.q2weight * unpolarized_kernel(x, rec.q2theta2)
        if geometry is not None:
            terms = terms * self._coherent_acceptance(rec, geometry)
        return float(self._coherent_norm() * terms.sum())

    def _rate_geometry(
        self,
        distance_m: float | None,
        diameter_m: float | None,
    ) -> dict | None:
        if distance_m is None and diameter_m is None and not self._collimated:
            return None
        return self._geometry(distance_m, diameter_m)

    def rate_dNcdx(
        self,
        x: float,
        distance_m: float | None = None,
        diameter_m: float | None = None,
    ) -> float:
        """Coherent photons per electron per unit x

        Parameters
        ----------
        x : float
            Photon energy fraction k / E.
        distance_m, diameter_m : float, optional
            Collimator geometry override.  Passing either forces the
            collimated rate with that geometry, whatever the
            collimated-flux flag.

        Returns
        -------
        float
            Non-negative rate; exactly 0 outside ``0 < x < 1``.
        """
        x = float(x)
        if not _in_range(x):
            return 0.0
        return self._coherent_rate(x, self._rate_geometry(distance_m, diameter_m))

    def rate_dNcdxdp(self, x: float, phi: float) -> float:
        """Coherent photons per electron per unit x per radian of azimuth

        The integral over ``phi`` in ``[0, 2π)`` equals :meth:`rate_dNcdx`.
        """
        x = float(x)
        if not _in_range(x):
            return 0.0
        rec = self._lattice_record(x)
        if len(rec) == 0:
            return 0.0
        intensity, _, _ = stokes_kernels(x, rec.q2theta2, float(phi) - rec.q2phi)
        terms = rec.q2weight * intensity
        geometry = self._rate_geometry(None, None)
        if geometry is not None:
            terms = terms * self._coherent_acceptance(rec, geometry)
        return float(self._coherent_norm() * terms.sum() / (2.0 * math.pi))

    # -------------------------------------------------------------------
    # Incoherent rates
    # -------------------------------------------------------------------

    def _tau(self) -> float:
        return self._thickness / self._crystal.radiation_length

    def rate_dNBidx(self, x: float) -> float:
        """Bethe-Heitler (amorphous) photons per electron per unit x, uncollimated."""
        x = float(x)
        if not _in_range(x):
            return 0.0
        return bethe_heitler(x, self._tau())

    def rate_dNidxdt2(self, x: float, theta2: float) -> float:
        """Incoherent photons per electron per unit x per unit theta2

        Raises
        ------
        OutOfRangeQuery
            If *theta2* is negative.
        """
        t2 = validate_theta2(theta2)
        x = float(x)
        if not _in_range(x):
            return 0.0
        return float(incoherent_theta2(x, t2, self._tau()))

    def _incoherent_rate(self, x: float, geometry: dict | None) -> float:
        tau = self._tau()
        if geometry is None:
            return bethe_heitler(x, tau)
        # with s = 1/(1 + theta2) the spectrum becomes tau/x * psi0(s) ds
        low, high = acceptance_limits(**geometry)
        s_in, s_out = 1.0 / (1.0 + low), 1.0 / (1.0 + high)
        y = 1.0 - x
        c0, c1 = 1.0 + y * y, 4.0 * y
        inner = c0 * (1.0 - s_in) - c1 * ((1.0 - s_in**2) / 2.0 - (1.0 - s_in**3) / 3.0)
        edge = 0.0
        if s_in > s_out:
            half = 0.5 * (s_in - s_out)
            s = s_out + half * (_LEGENDRE_NODES + 1.0)
            psi0 = c0 - c1 * s * (1.0 - s)
            acc = acceptance(1.0 / s - 1.0, 0.0, **geometry)
            edge = half * float(np.dot(_LEGENDRE_WEIGHTS, psi0 * acc))
        return tau / x * (inner + edge)

    def rate_dNidx(self, x: float) -> float:
        """Incoherent photons per electron per unit x

        Equal to :meth:`rate_dNBidx` without collimation; with it, the
        angular distribution is folded with the collimator acceptance.
        """
        x = float(x)
        if not _in_range(x):
            return 0.0
        return self._incoherent_rate(x, self._rate_geometry(None, None))

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------

    def rate_dNtdx(
        self,
        x: float,
        distance_m: float | None = None,
        diameter_m: float | None = None,
    ) -> float:
        """Coherent plus incoherent photons per electron per unit x."""
        x = float(x)
        if not _in_range(x):
            return 0.0
        geometry = self._rate_geometry(distance_m, diameter_m)
        return self._coherent_rate(x, geometry) + self._incoherent_rate(x, geometry)

    def rate_dNtdk(self, k_GeV: float) -> float:
        """Total photons per electron per GeV of photon energy."""
        energy = self._beam.energy
        return self.rate_dNtdx(float(k_GeV) / energy) / energy

    def coherent_enhancement(self, x: float) -> float:
        """Ratio of total to incoherent rate; 0 where the latter vanishes."""
        incoherent = self.rate_dNidx(x)
        if incoherent <= 0.0:
            return 0.0
        return self.rate_dNtdx(x) / incoherent

    # -------------------------------------------------------------------
    # Polarization
    # -------------------------------------------------------------------

    def _stokes_density(self, x: float, theta2: float, phi: float | None):
        rec = self._lattice_record(x)
        tau = self._tau()
        if phi is None:
            incoherent = float(incoherent_theta2(x, theta2, tau))
        else:
            incoherent = float(incoherent_theta2(x, theta2, tau)) / (2.0 * math.pi)
        if len(rec) == 0:
            return incoherent, 0.0
        # mosaic spread turns each delta function in theta2 into a Gaussian
        z = (theta2 - rec.q2theta2) / rec.q2sigma
        density = np.exp(-0.5 * z * z) / (math.sqrt(2.0 * math.pi) * rec.q2sigma)
        w = self._coherent_norm() * rec.q2weight * density
        cos2a = np.cos(2.0 * rec.q2phi)
        if phi is None:
            total = float(np.dot(w, unpolarized_kernel(x, rec.q2theta2)))
            pol = float(np.dot(w, polarized_kernel(x, rec.q2theta2) * cos2a))
        else:
            intensity, q, u = stokes_kernels(x, rec.q2theta2, phi - rec.q2phi)
            w = w / (2.0 * math.pi)
            total = float(np.dot(w, intensity))
            pol = float(np.dot(w, q * cos2a - u * np.sin(2.0 * rec.q2phi)))
        return total + incoherent, pol

    def _split(self, x: float, theta2: float, phi: float, sign: float) -> float:
        t2 = validate_theta2(theta2)
        x = float(x)
        if not _in_range(x):
            return 0.0
        phi = float(phi)
        total, pol = self._stokes_density(x, t2, phi)
        rate = 0.5 * (total + sign * pol) if self._polarized else 0.5 * total
        if self._collimated:
            rate *= float(acceptance(t2, phi, **self._geometry()))
        return rate

    def rate_para(self, x: float, theta2: float, phi: float) -> float:
        """Photons polarized in the plane of the primary vector

        Rate per electron per unit x, unit theta2 and radian of photon
        azimuth *phi*.  Without the polarized-flux flag the rate is split
        evenly between the two components.
        """
        return self._split(x, theta2, phi, 1.0)

    def rate_ortho(self, x: float, theta2: float, phi: float) -> float:
        """Photons polarized perpendicular to the plane of the primary vector."""
        return self._split(x, theta2, phi, -1.0)

    def polarization(self, x: float, theta2: float) -> float:
        """Azimuth-integrated (para - ortho) / (para + ortho) at (x, theta2)

        Zero when the polarized-flux flag is off or no photons are
        produced; otherwise within ``[-1, 1]``.
        """
        t2 = validate_theta2(theta2)
        x = float(x)
        if not self._polarized or not _in_range(x):
            return 0.0
        total, pol = self._stokes_density(x, t2, None)
        if total <= 0.0:
            return 0.0
        return float(pol / total)

    def linear_polarization(self, x: float) -> float:
        """Angle-integrated degree of linear polarization of the beam at x

        Uses the same collimation as :meth:`rate_dNtdx`; zero when the
        polarized-flux flag is off.
        """
        x = float(x)
        if not self._polarized or not _in_range(x):
            return 0.0
        total = self.rate_dNtdx(x)
        rec = self._lattice_record(x)
        if total <= 0.0 or len(rec) == 0:
            return 0.0
        terms = rec.q2weight * polarized_kernel(x, rec.q2theta2) * np.cos(2.0 * rec.q2phi)
        geometry = self._rate_geometry(None, None)
        if geometry is not None:
            terms = terms * self._coherent_acceptance(rec, geometry)
        pol = self._coherent_norm() * float(terms.sum())
        return float(pol / total)

    # -------------------------------------------------------------------
    # Beam convolution
    # -------------------------------------------------------------------

    def _primary_slope(self) -> float:
        g = self._orientation.rmatrix @ primary_vector(self._crystal)
        if g[2] <= 0.0:
            logger.warning("Primary vector points backwards; divergence smearing disabled.")
            return 0.0
        return math.hypot(g[0], g[1]) / g[2]

    def apply_beam_crystal_convolution(self, nbins: int, xvalues, yvalues) -> None:
        """Smooth a tabulated spectrum with the beam energy spread and divergence

        Parameters
        ----------
        nbins : int
            Number of grid points.
        xvalues : array_like
            Photon energy fractions, any spacing.
        yvalues : numpy.ndarray or list
            Samples on *xvalues*; overwritten in place.

        Raises
        ------
        OutOfRangeQuery
            If *nbins* is not positive or an array length differs.
        """
        validate_grid(nbins, xvalues, yvalues)
        beam = self._beam
        divergence = 0.0
        if self._collimator.spotrms > 0.0:
            divergence = beam.emittance / self._collimator.spotrms
        elif beam.emittance > 0.0:
            logger.warning("Zero spot size; emittance smearing disabled.")
        slope = self._primary_slope() if divergence > 0.0 else 0.0
        widths = smoothing_width(xvalues, beam.erms / beam.energy, divergence, slope)
        if not np.any(widths > 0.0):
            return
        yvalues[:] = gaussian_smooth(xvalues, yvalues, widths)

    # -------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------

    def print_beamline_info(self, stream=None) -> None:
        """Write a summary of beam, collimator and flags to *stream*."""
        out = sys.stdout if stream is None else stream
        b, c = self._beam, self._collimator
        print("Beamline configuration", file=out)
        print(f"  beam energy         {b.energy:.6g} GeV", file=out)
        print(f"  beam energy rms     {b.erms:.6g} GeV", file=out)
        print(f"  beam emittance      {b.emittance:.6g} m rad", file=out)
        print(f"  spot rms            {c.spotrms:.6g} m", file=out)
        print(f"  collimator distance {c.distance:.6g} m", file=out)
        print(f"  collimator diameter {c.diameter:.6g} m", file=out)
        print(f"  collimated flux     {self._collimated}", file=out)
        print(f"  polarized flux      {self._polarized}", file=out)
        print(f"  scattering model    {self._ms_model}", file=out)

    def print_target_crystal_info(self, stream=None) -> None:
        """Write a summary of the radiator crystal and orientation to *stream*."""
        out = sys.stdout if stream is None else stream
        cr, o = self._crystal, self._orientation
        print(f"Target crystal: {cr.name}", file=out)
        print(f"  Z, A                {cr.Z}, {cr.A:.6g}", file=out)
        print(f"  density             {cr.density:.6g} g/cm^3", file=out)
        print(f"  lattice constant    {cr.lattice_constant:.6g} m", file=out)
        print(f"  radiation length    {cr.radiation_length:.6g} m", file=out)
        print(f"  Debye temperature   {cr.debye_temperature:.6g} K", file=out)
        print(f"  temperature         {self._temperature:.6g} K", file=out)
        print(f"  mosaic spread       {cr.mosaic_spread:.6g} rad", file=out)
        print(f"  sites per cell      {cr.nsites}", file=out)
        print(f"  primary hkl         {cr.primary_hkl}", file=out)
        print(f"  thickness           {self._thickness:.6g} m", file=out)
        print(f"  thetax, thetay, thetaz  {o.thetax:.6g}, {o.thetay:.6g}, {o.thetaz:.6g} rad", file=out)

    # -------------------------------------------------------------------
    # Mixed-case aliases
    # -------------------------------------------------------------------

    setBeamEnergy = set_beam_energy
    setBeamErms = set_beam_erms
    setBeamEmittance = set_beam_emittance
    setCollimatorSpotrms = set_collimator_spotrms
    setCollimatorDistance = set_collimator_distance
    setCollimatorDiameter = set_collimator_diameter
    setCollimatedFlag = set_collimated_flux
    setCollimatedFlux = set_collimated_flux
    setPolarizedFlag = set_polarized_flux
    setPolarizedFlux = set_polarized_flux
    setTargetThickness = set_target_thickness
    setTargetCrystal = set_target_crystal
    setTargetTemperature = set_target_temperature
    setTargetThetax = set_target_thetax
    setTargetThetay = set_target_thetay
    setTargetThetaz = set_target_thetaz
    setCoherentEdge = set_coherent_edge
    setMultipleScatteringModel = set_multiple_scattering_model
    RotateTarget = rotate_target
    resetTargetOrientation = reset_target_orientation

    getBeamEnergy = get_beam_energy
    getBeamErms = get_beam_erms
    getBeamEmittance = get_beam_emittance
    getCollimatorSpotrms = get_collimator_spotrms
    getCollimatorDistance = get_collimator_distance
    getCollimatorDiameter = get_collimator_diameter
    getCollimatedFlag = get_collimated_flux
    getCollimatedFlux = get_collimated_flux
    getPolarizedFlag = get_polarized_flux
    getPolarizedFlux = get_polarized_flux
    getTargetThickness = get_target_thickness
    getTargetCrystal = get_target_crystal
    getTargetTemperature = get_target_temperature
    getTargetThetax = get_target_thetax
    getTargetThetay = get_target_thetay
    getTargetThetaz = get_target_thetaz
    getTargetRmatrix = get_target_rmatrix
    getTargetLattice = get_target_lattice
    getTargetRadiationLength_PDG = get_target_radiation_length_pdg
    getTargetRadiationLength_Schiff = get_target_radiation_length_schiff
    getTargetDebyeWallerConstant = get_target_debye_waller_constant
    getMultipleScatteringModel = get_multiple_scattering_model

    Sigma2MS = sigma2_ms
    Sigma2MS_PDG = sigma2_ms_pdg
    Sigma2MS_Kaune = sigma2_ms_kaune
    Sigma2MS_Geant = sigma2_ms_geant
    Sigma2MS_Hanson = sigma2_ms_hanson

    Acceptance = acceptance
    Rate_dNcdx = rate_dNcdx
    Rate_dNcdxdp = rate_dNcdxdp
    Rate_dNBidx = rate_dNBidx
    Rate_dNidx = rate_dNidx
    Rate_dNidxdt2 = rate_dNidxdt2
    Rate_dNtdx = rate_dNtdx
    Rate_dNtdk = rate_dNtdk
    Rate_para = rate_para
    Rate_ortho = rate_ortho
    Polarization = polarization
    LinearPolarization = linear_polarization
    CoherentEnhancement = coherent_enhancement

    applyBeamCrystalConvolution = apply_beam_crystal_convolution
    printBeamlineInfo = print_beamline_info
    printTargetCrystalInfo = print_target_crystal_info
