# cosmology.py
from __future__ import annotations

from dataclasses import dataclass
import warnings

import numpy as np
from scipy.special import hyp2f1


@dataclass(frozen=True)
class Cosmology:
    """
    Minimal ΛCDM background, enough to normalize and evolve a linear
    power spectrum.

    Parameters
    ----------
    h : float
        Dimensionless Hubble parameter, H0 = 100 h km/s/Mpc.
    Om0 : float
        Matter density parameter at z=0.
    Ode0 : float
        Dark energy (cosmological constant) density parameter at z=0.
    ns : float
        Scalar spectral index of the primordial power spectrum.
    sigma8 : float
        RMS linear mass fluctuation in 8 Mpc/h spheres at z=0.

    Notes
    -----
    Instances are immutable and hashable, so they can key caches of
    derived objects.
    """
    h: float = 0.6777
    Om0: float = 0.307
    Ode0: float = 0.693
    ns: float = 0.9611
    sigma8: float = 0.8288

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @classmethod
    def planck13(cls) -> "Cosmology":
        """Planck 2013 (Paper XVI), Planck + lensing + WP + highL + BAO."""
        return cls(h=0.6777, Om0=0.307, Ode0=0.693, ns=0.9611, sigma8=0.8288)

    @classmethod
    def planck15(cls) -> "Cosmology":
        """Planck 2015 (Paper XIII), TT,TE,EE + lowP + lensing + ext."""
        return cls(h=0.6774, Om0=0.3089, Ode0=0.6911, ns=0.9667, sigma8=0.8159)

    @classmethod
    def planck18(cls) -> "Cosmology":
        """Planck 2018 (Paper VI), TT,TE,EE + lowE + lensing + BAO."""
        return cls(h=0.6766, Om0=0.3111, Ode0=0.6889, ns=0.9665, sigma8=0.8102)

    # ------------------------------------------------------------------
    # Background
    # ------------------------------------------------------------------

    @property
    def H0(self) -> float:
        """Hubble constant in km/s/Mpc."""
        return 100.0 * self.h

    @property
    def Ok0(self) -> float:
        return 1.0 - self.Om0 - self.Ode0

    @staticmethod
    def scale_factor(z: float) -> float:
        return 1.0 / (1.0 + z)

    def E(self, z: float) -> float:
        """
        E(z) = H(z)/H0 with

            E(z)^2 = Om0 (1+z)^3 + Ok0 (1+z)^2 + Ode0
        """
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            zp1 = 1.0 + z
            return np.sqrt(self.Om0 * np.power(zp1, 3) + self.Ok0 * np.power(zp1, 2) + self.Ode0)

    def H(self, z: float) -> float:
        """Hubble parameter H(z) in km/s/Mpc."""
        return self.H0 * self.E(z)

    # ------------------------------------------------------------------
    # Linear growth
    # ------------------------------------------------------------------

    def _growth(self, a):
        # unnormalized growing mode of a matter + Λ universe,
        # D(a) ∝ a sqrt(1 + l a^3) 2F1(3/2, 5/6; 11/6; -l a^3), l = Ode0/Om0
        l = self.Ode0 / self.Om0
        a3 = np.power(a, 3)
        return a * np.sqrt(1 + l * a3) * hyp2f1(1.5, 5. / 6., 11. / 6., -l * a3)

    def growth_factor(self, z: float) -> float:
        """Linear growth factor D(z), normalized to D(0) = 1."""
        return self._growth(self.scale_factor(z)) / self._growth(1.0)

    def growth_rate(self, z: float, dlna: float = 1e-4) -> float:
        """
        Logarithmic growth rate f(z) = d ln D / d ln a, by a central
        difference in ln a.
        """
        lna = np.log(self.scale_factor(z))
        up = np.log(self._growth(np.exp(lna + dlna)))
        down = np.log(self._growth(np.exp(lna - dlna)))
        return (up - down) / (2 * dlna)
