from __future__ import annotations

from dataclasses import replace
from functools import lru_cache
from typing import Callable, Sequence

import numpy as np

from .cosmology import Cosmology
from .kernels import QMIN, QMAX
from .power_spectrum import PowerSpectrum
from .spt import SPT


_FIELD_NAMES: dict[str, tuple[int, int]] = {
    "dd": (1, 1),
    "dt": (1, 2),
    "td": (2, 1),
    "tt": (2, 2),
}

_QUANTITIES = ("P", "P22", "P13", "G", "class")


# -------------------------------------------------------------------
# Cached BBKS spectrum per cosmology
# -------------------------------------------------------------------

@lru_cache(maxsize=32)
def _bbks_power_spectrum(cosmo: Cosmology) -> PowerSpectrum:
    """Return a cached, sigma8-normalized BBKS spectrum at z=0."""
    return PowerSpectrum.from_formula(cosmo=cosmo, model="bbks", normalize_to_cosmo=True)


# -------------------------------------------------------------------
# LinearPowerSpectrum builder for the public API
# -------------------------------------------------------------------

def _build_powerspectrum(
    cosmo: Cosmology,
    powerspec: str | PowerSpectrum | tuple[np.ndarray, np.ndarray] | Callable | None,
    z: float = 0.0
) -> Callable[[float], float]:
    """
    Turn the flexible `powerspec` argument into a callable P_L(k) at
    redshift z.

    Parameters
    ----------
    cosmo : Cosmology
    powerspec : {None, str, PowerSpectrum, (k, Pk), callable}
        - None or 'bbks': BBKS spectrum of `cosmo` (cached)
        - other str:      two-column text file, k [Mpc^-1] and P [Mpc^3]
                          at z=0, normalized to `cosmo`
        - PowerSpectrum:  used as-is, evolved to z
        - (k, Pk):        table at z=0 as a tuple, list or 2xN array,
                          normalized to `cosmo`
        - callable:       used as P_L(k) directly; z is ignored
    z : float
        Redshift of the returned spectrum.
    """
    if powerspec is None:
        powerspec = "bbks"

    if isinstance(powerspec, str):
        if powerspec.lower() == "bbks":
            return replace(_bbks_power_spectrum(cosmo), z=z)
        k, pk = np.loadtxt(powerspec, unpack=True, usecols=(0, 1))
        powerspec = (k, pk)

    if isinstance(powerspec, PowerSpectrum):
        return replace(powerspec, z=z)

    if isinstance(powerspec, (tuple, list, np.ndarray)) and len(powerspec) == 2:
        k, pk = powerspec
        return PowerSpectrum.from_table(cosmo=cosmo, k=k, pk=pk, normalize_to_cosmo=True, z=z)

    if callable(powerspec):
        return powerspec

    raise TypeError(
        "powerspec must be one of: None, str, PowerSpectrum, (k, Pk) pair, or callable"
    )


def _parse_fields(fields: str | Sequence[int]) -> tuple[int, int]:
    if isinstance(fields, str):
        try:
            return _FIELD_NAMES[fields.strip().lower()]
        except KeyError:
            available = ", ".join(sorted(_FIELD_NAMES))
            raise ValueError(f"Unknown fields '{fields}'. Available: {available}")
    a, b = fields
    return int(a), int(b)


# -------------------------------------------------------------------
# Public one-loop API
# -------------------------------------------------------------------

def one_loop(
    k: float | Sequence[float] | np.ndarray,
    z: float = 0.0,
    quantity: str = "P",
    fields: str | tuple[int, int] = (1, 1),
    cosmo: Cosmology | None = None,
    powerspec: str | PowerSpectrum | tuple[np.ndarray, np.ndarray] | Callable | None = None,
    epsrel: float = 1e-4,
    qmin: float = QMIN,
    qmax: float = QMAX
):
    """
    Parameters of one_loop
    ----------
    k : float or array_like
        Wavenumber(s) in Mpc^{-1}.
    z : float, optional
        Redshift of the linear spectrum. Default is 0.
    quantity : {'P', 'P22', 'P13', 'G', 'class'}, optional
        'P' is the full one-loop spectrum P_L + P13 + P22;
        'P22' and 'P13' are the individual loop terms;
        'G' is the growth correction 1 + P13_dd / (2 P_L) (fields ignored);
        'class' returns the SPT engine itself.
        Default is 'P'.
    fields : (a, b) or {'dd', 'dt', 'td', 'tt'}, optional
        Field indices, 1 for density and 2 for velocity divergence.
        Default is (1, 1).
    cosmo : Cosmology, optional
        If None, uses Cosmology.planck13().
    powerspec : {None, str, PowerSpectrum, (k, Pk), callable}, optional
        Linear spectrum, see _build_powerspectrum. Default is BBKS.
    epsrel : float, optional
        Relative accuracy of the loop integrals. Default is 1e-4.
    qmin, qmax : float, optional
        IR and UV cutoffs of the loop momentum.

    Returns
    -------
    float or ndarray
        One value per input k, evaluated in order. Scalar k gives a float.
    """
    if quantity not in _QUANTITIES:
        raise ValueError(f"Unknown quantity='{quantity}'")

    # 1. Cosmology
    if cosmo is None:
        cosmo = Cosmology.planck13()

    # 2. Linear power spectrum at z
    P_L = _build_powerspectrum(cosmo, powerspec, z=z)

    # 3. Engine
    engine = SPT(cosmo, P_L, epsrel=epsrel, qmin=qmin, qmax=qmax)
    if quantity == "class":
        return engine

    # 4. Evaluate
    a, b = _parse_fields(fields)
    if quantity == "G":
        func = engine.G
    else:
        method = getattr(engine, quantity)
        func = lambda kk: method(kk, a, b)

    k_arr = np.asarray(k, dtype=float)
    values = np.array([func(float(kk)) for kk in k_arr.ravel()]).reshape(k_arr.shape)
    if values.ndim == 0:
        return float(values)
    return values
