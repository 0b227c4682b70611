# spt.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable
import warnings

import numpy as np

from .integrands import (
    P22_dd_integrand, P22_dt_integrand, P22_tt_integrand,
    P13_dd_integrand, P13_dt_integrand, P13_tt_integrand
)
from .kernels import QMIN, QMAX
from .quadrature import compute_P22_integral, compute_P13_integral


class InvalidFieldIndexWarning(UserWarning):
    """Field indices (a, b) whose product is not 1, 2 or 4."""


@dataclass(frozen=True)
class SPT:
    """
    One-loop standard perturbation theory power spectra of the density
    (index 1) and velocity divergence (index 2) fields:

        P_ab(k) = P_L(k) + P13_ab(k) + P22_ab(k)

    The velocity divergence is normalized so that its linear spectrum
    equals P_L.

    Parameters
    ----------
    cosmo : Cosmology
        Cosmology the linear spectrum belongs to. Held for reference; the
        EdS kernels used here do not depend on it.
    P_L : callable
        Linear power spectrum, P_L(k) for k > 0. Must be finite from qmin
        up to somewhat beyond qmax and safe to call from several threads
        if the engine is shared.
    epsrel : float, optional
        Relative error target of the loop integrals. Default 1e-5.
    qmin, qmax : float, optional
        IR and UV cutoffs of the loop momentum.
    limit : int, optional
        Maximum number of adaptive subdivisions per one-dimensional pass.

    Notes
    -----
    Every method is a pure function of k and the (a, b) indices, so one
    instance can serve any number of concurrent queries.
    """
    cosmo: Any
    P_L: Callable[[float], float]
    epsrel: float = 1e-5
    qmin: float = QMIN
    qmax: float = QMAX
    limit: int = 200

    def __post_init__(self):
        if not self.epsrel > 0:
            raise ValueError(f"epsrel must be positive, got {self.epsrel}")
        if not 0 < self.qmin < self.qmax:
            raise ValueError(
                f"cutoffs must satisfy 0 < qmin < qmax, got qmin={self.qmin}, qmax={self.qmax}"
            )
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

    # -----------------------------------------------------------
    # P_ab(k) and its one-loop pieces
    # -----------------------------------------------------------

    def P(self, k: float, a: int, b: int) -> float:
        """Full one-loop spectrum P_ab(k)."""
        channel = self._channel(a, b)
        if channel is None:
            return 0.
        P13 = getattr(self, "P13_" + channel)
        P22 = getattr(self, "P22_" + channel)
        return self.P_L(k) + P13(k) + P22(k)

    def P22(self, k: float, a: int, b: int) -> float:
        """Mode-coupling term P_ab^{(22)}(k)."""
        channel = self._channel(a, b)
        if channel is None:
            return 0.
        return getattr(self, "P22_" + channel)(k)

    def P13(self, k: float, a: int, b: int) -> float:
        """Propagator term P_ab^{(13)}(k)."""
        channel = self._channel(a, b)
        if channel is None:
            return 0.
        return getattr(self, "P13_" + channel)(k)

    @staticmethod
    def _channel(a: int, b: int) -> str | None:
        # 1,1 -> dd; 1,2 or 2,1 -> dt; 2,2 -> tt
        channel = {1: "dd", 2: "dt", 4: "tt"}.get(a*b)
        if channel is None:
            warnings.warn(
                f"SPT: invalid indices, a = {a}, b = {b}",
                InvalidFieldIndexWarning,
                stacklevel=3
            )
        return channel

    # -----------------------------------------------------------
    # P22
    # -----------------------------------------------------------

    def _P22(self, integrand, k):
        return compute_P22_integral(
            integrand, self.P_L, k,
            epsrel=self.epsrel, qmin=self.qmin, qmax=self.qmax, limit=self.limit
        )

    def P22_dd(self, k: float) -> float:
        return self._P22(P22_dd_integrand, k)

    def P22_dt(self, k: float) -> float:
        return self._P22(P22_dt_integrand, k)

    def P22_tt(self, k: float) -> float:
        return self._P22(P22_tt_integrand, k)

    # -----------------------------------------------------------
    # P13
    # -----------------------------------------------------------

    def _P13(self, integrand, k, norm):
        return compute_P13_integral(
            integrand, self.P_L, k, norm,
            epsrel=self.epsrel, qmin=self.qmin, qmax=self.qmax, limit=self.limit
        )

    def P13_dd(self, k: float) -> float:
        return self._P13(P13_dd_integrand, k, 252)

    def P13_dt(self, k: float) -> float:
        return self._P13(P13_dt_integrand, k, 252)

    def P13_tt(self, k: float) -> float:
        return self._P13(P13_tt_integrand, k, 84)

    # -----------------------------------------------------------
    # growth correction
    # -----------------------------------------------------------

    def G(self, k: float) -> float:
        """
        Scale-dependent correction to the linear growth,

            G(k) = 1 + P13_dd(k) / (2 P_L(k))

        P_L(k) = 0 gives inf or nan.
        """
        return 1 + 0.5*self.P13_dd(k)/np.float64(self.P_L(k))
