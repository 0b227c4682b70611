# power_spectrum.py
from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property

import numpy as np
from scipy.integrate import trapezoid
from scipy.interpolate import CubicSpline

from .cosmology import Cosmology


@dataclass
class PowerSpectrum:
    """
    Linear matter power spectrum P_L(k, z).

    Supports:
    - "bbks" P(k) generated from cosmology with the BBKS transfer function.
    - "table" P(k) from user-provided (k, Pk), optionally normalized to
      match cosmology.sigma8.

    Instances are callables, P(k) = Pk(k, z=self.z), and can be handed
    directly to the one-loop engine.

    Units convention
    ----------------
    - k       : in Mpc^{-1}
    - P(k)    : in Mpc^{3}
    - R       : in Mpc (comoving)

    Parameters
    ----------
    cosmo : Cosmology
        Cosmology providing sigma8, ns and the growth factor.
    scheme : {"table", "bbks"}, optional
        Where the stored table came from.
    kmin, kmax : float
        Bounds of the k-grid used to tabulate analytic formulas.
    nk : int, optional
        Number of k-grid points. If provided, it overrides dlnk.
    dlnk : float, optional
        Logarithmic spacing of the k-grid. Defaults to 0.01.
    z : float, optional
        Redshift at which __call__ evaluates the spectrum.
    """
    cosmo: Cosmology
    scheme: str = "table"
    kmin: float = 1e-6
    kmax: float = 1e8
    nk: int | None = None
    dlnk: float | None = None
    z: float = 0.0

    _k_table: np.ndarray | None = field(default=None, repr=False)
    _pk_table: np.ndarray | None = field(default=None, repr=False)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_table(
        cls,
        cosmo: Cosmology,
        k: np.ndarray,
        pk: np.ndarray,
        normalize_to_cosmo: bool = True,
        z: float = 0.0
    ) -> "PowerSpectrum":
        """
        Build a PowerSpectrum from a (k, Pk) table at z=0.

        Outside the table the spectrum is continued as a power law with
        the slope at the nearest end.

        Parameters
        ----------
        cosmo : Cosmology
        k, pk : array_like
            1D positive arrays, k in Mpc^{-1} and Pk in Mpc^{3}.
        normalize_to_cosmo : bool, optional
            If True, rescale Pk so that sigma8 matches cosmo.sigma8.
        z : float, optional
            Redshift used when the instance is called.
        """
        k = np.asarray(k, dtype=float)
        pk = np.asarray(pk, dtype=float)

        if k.ndim != 1 or pk.ndim != 1 or k.size != pk.size:
            raise ValueError("k and pk must be 1D arrays of the same length.")
        if k.size < 4:
            raise ValueError("at least 4 (k, Pk) points are needed for interpolation.")
        if np.any(k <= 0) or np.any(pk <= 0):
            raise ValueError("k and pk must be strictly positive.")

        idx = np.argsort(k)
        ps = cls(cosmo=cosmo, scheme="table", z=z, _k_table=k[idx], _pk_table=pk[idx])
        if normalize_to_cosmo:
            ps._normalize()
        return ps

    @classmethod
    def from_formula(
        cls,
        cosmo: Cosmology,
        model: str = "bbks",
        kmin: float | None = None,
        kmax: float | None = None,
        nk: int | None = None,
        normalize_to_cosmo: bool = True,
        z: float = 0.0
    ) -> "PowerSpectrum":
        """
        Tabulate an analytic linear spectrum on the internal k-grid.

        Parameters
        ----------
        cosmo : Cosmology
        model : {'bbks'}, optional
            Analytic shape to use.
        kmin, kmax, nk : optional
            Override the default grid of the class.
        normalize_to_cosmo : bool, optional
            If True, renormalize to match cosmo.sigma8.
        z : float, optional
            Redshift used when the instance is called.
        """
        ps = cls(
            cosmo=cosmo,
            scheme=model,
            kmin=kmin if kmin is not None else cls.kmin,
            kmax=kmax if kmax is not None else cls.kmax,
            nk=nk,
            z=z
        )
        k = ps.k_grid

        if model == "bbks":
            # BBKS uses q = k / (Gamma h) with k in Mpc^{-1} and
            # shape parameter Gamma = Om0 h (no baryon correction)
            q = k / (cosmo.Om0 * cosmo.h * cosmo.h)
            T = np.log(1.0 + 2.34 * q) / (2.34 * q) * \
                np.power(1.0 + 3.89 * q + np.power(16.1 * q, 2)
                         + np.power(5.46 * q, 3) + np.power(6.71 * q, 4), -0.25)
            pk = np.power(k, cosmo.ns) * T * T
        else:
            raise NotImplementedError(f"Formula model '{model}' not implemented.")

        ps._k_table = k
        ps._pk_table = pk
        if normalize_to_cosmo:
            ps._normalize()
        return ps

    def _normalize(self):
        sigma8 = self.sigma_R(8.0 / self.cosmo.h)
        if not sigma8 > 0:
            raise ValueError("Computed sigma8 from table is non-positive.")
        self._pk_table = self._pk_table * np.power(self.cosmo.sigma8 / sigma8, 2)
        self.__dict__.pop("_ln_pk_spline", None)

    # ------------------------------------------------------------------
    # k-grid for analytic formulas
    # ------------------------------------------------------------------

    @cached_property
    def ln_k_grid(self) -> np.ndarray:
        """
        ln(k) grid: nk points if nk is set, otherwise spaced by dlnk
        (default 0.01).
        """
        ln_kmin = np.log(self.kmin)
        ln_kmax = np.log(self.kmax)
        if self.nk is not None:
            return np.linspace(ln_kmin, ln_kmax, self.nk)

        dlnk = self.dlnk if self.dlnk is not None else 0.01
        n_intervals = max(1, int(np.round((ln_kmax - ln_kmin) / dlnk)))
        return np.linspace(ln_kmin, ln_kmax, n_intervals + 1)

    @cached_property
    def k_grid(self) -> np.ndarray:
        """k-grid in Mpc^{-1}."""
        return np.exp(self.ln_k_grid)

    # ------------------------------------------------------------------
    # P(k, z)
    # ------------------------------------------------------------------

    @cached_property
    def _ln_pk_spline(self) -> CubicSpline:
        if self._k_table is None or self._pk_table is None:
            raise RuntimeError(f"scheme='{self.scheme}' but no (k, Pk) table has been set.")
        return CubicSpline(np.log(self._k_table), np.log(self._pk_table))

    @cached_property
    def _end_slopes(self) -> tuple[float, float]:
        lo, hi = self._ln_pk_spline.x[0], self._ln_pk_spline.x[-1]
        return float(self._ln_pk_spline(lo, 1)), float(self._ln_pk_spline(hi, 1))

    @cached_property
    def _growth_sq(self) -> float:
        return float(np.power(self.cosmo.growth_factor(self.z), 2))

    def Pk(self, k: np.ndarray | float, z: float = 0.0) -> np.ndarray | float:
        """
        Linear power spectrum P(k, z) = P(k, 0) [D(z)/D(0)]^2 in Mpc^{3}.

        Log-log cubic spline inside the table, power law outside.
        """
        spline = self._ln_pk_spline
        lo, hi = spline.x[0], spline.x[-1]
        slope_lo, slope_hi = self._end_slopes

        lnk = np.log(np.asarray(k, dtype=float))
        lnk_in = np.clip(lnk, lo, hi)
        ln_pk = spline(lnk_in) + slope_lo * np.minimum(lnk - lo, 0) + slope_hi * np.maximum(lnk - hi, 0)

        if z == self.z:
            Dz2 = self._growth_sq
        else:
            Dz2 = np.power(self.cosmo.growth_factor(z), 2)

        pk = np.exp(ln_pk) * Dz2
        if np.ndim(pk) == 0:
            return float(pk)
        return pk

    def __call__(self, k: np.ndarray | float) -> np.ndarray | float:
        return self.Pk(k, self.z)

    # ------------------------------------------------------------------
    # sigma(R)
    # ------------------------------------------------------------------

    @staticmethod
    def _tophat_window(kR: np.ndarray) -> np.ndarray:
        """
        Real-space top-hat window in Fourier space:

        W(kR) = 3 [sin(kR) - kR cos(kR)] / (kR)^3
        """
        kR = np.asarray(kR, dtype=float)
        w = np.ones_like(kR)

        mask = kR != 0
        x = kR[mask]
        w[mask] = 3.0 * (np.sin(x) - x * np.cos(x)) / np.power(x, 3)
        return w

    def sigma_R(self, R: float) -> float:
        """
        RMS linear fluctuation at z=0 in a top-hat sphere of radius R,
        from the stored table:

            sigma^2(R) = 1/(2 pi^2) \\int dlnk k^3 P(k) W^2(kR)
        """
        if self._k_table is None or self._pk_table is None:
            raise RuntimeError("No (k, Pk) table has been set.")
        k, pk = self._k_table, self._pk_table
        integrand = np.power(k, 3) * pk * np.power(self._tophat_window(k * R), 2)
        sigma2 = trapezoid(integrand, np.log(k)) / (2 * np.pi**2)
        return float(np.sqrt(sigma2))
