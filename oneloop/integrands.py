# integrands.py
from __future__ import annotations

from functools import partial
from typing import Callable

import numpy as np

from .kernels import QMIN, F2, G2, s13_dd, s13_dt, s13_tt


# ------------------------------------------------------------------
# P22 integrands on the (log u, v) rectangle
#
# q = (k/2)(u - v), r = (k/2)(u + v) maps the triangle
# |q - r| <= k <= q + r onto u >= 1, 0 <= v <= 1 (the v < 0 half is
# the q <-> r mirror image and is folded into the prefactor).
# ------------------------------------------------------------------

def _P22_coordinates(k, logu, v):
    u = np.exp(logu)
    return u, (k/2)*(u - v), (k/2)*(u + v)


def P22_dd_integrand(P_L, k, logu, v, qmin: float = QMIN):
    u, q, r = _P22_coordinates(k, logu, v)
    return u * q * r * P_L(q) * P_L(r) * F2(k, q, r, qmin)**2


def P22_dt_integrand(P_L, k, logu, v, qmin: float = QMIN):
    u, q, r = _P22_coordinates(k, logu, v)
    return u * q * r * P_L(q) * P_L(r) * F2(k, q, r, qmin) * G2(k, q, r, qmin)


def P22_tt_integrand(P_L, k, logu, v, qmin: float = QMIN):
    u, q, r = _P22_coordinates(k, logu, v)
    return u * q * r * P_L(q) * P_L(r) * G2(k, q, r, qmin)**2


# ------------------------------------------------------------------
# P13 integrands in log q
# ------------------------------------------------------------------

def P13_dd_integrand(P_L, k, logq):
    q = np.exp(logq)
    return q * P_L(q) * s13_dd(k, q)


def P13_dt_integrand(P_L, k, logq):
    q = np.exp(logq)
    return q * P_L(q) * s13_dt(k, q)


def P13_tt_integrand(P_L, k, logq):
    q = np.exp(logq)
    return q * P_L(q) * s13_tt(k, q)


def bind_integrand(f: Callable, P_L: Callable, k: float, **kwargs) -> Callable:
    """
    Close an integrand over the linear spectrum and the external
    wavenumber, leaving a function of the integration coordinates only.
    """
    return partial(f, P_L, k, **kwargs)
