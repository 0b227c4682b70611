# kernels.py
from __future__ import annotations

import numpy as np

# ------------------------------------------------------------------
# default IR / UV cutoffs of the loop integrals, in Mpc^{-1}
# ------------------------------------------------------------------
QMIN = 1e-5
QMAX = 1e5


# -------------------------------------------------------------
# Second-order SPT kernels
# -------------------------------------------------------------

def F2(k, q, r, qmin: float = QMIN):
    """
    Symmetrized density kernel F_2^{(s)}(q, k - q), written in terms of the
    magnitudes q = |q| and r = |k - q|:

        F2 = 5/7 + (1/14) (k^2 - q^2 - r^2)^2 / (q^2 r^2)
                 + (1/4) (k^2 - q^2 - r^2) (1/q^2 + 1/r^2)

    q and r are clamped to `qmin` so the kernel stays finite when either
    magnitude collapses onto zero.
    """
    q = np.maximum(q, qmin)
    r = np.maximum(r, qmin)
    k2, q2, r2 = k*k, q*q, r*r
    return (5/7.) + (1/14.)*(k2 - q2 - r2)**2/(q2*r2) + (1/4.)*(k2 - q2 - r2)*(1/q2 + 1/r2)


def G2(k, q, r, qmin: float = QMIN):
    """
    Symmetrized velocity-divergence kernel G_2^{(s)}(q, k - q):

        G2 = 3/7 + (1/7) (k^2 - q^2 - r^2)^2 / (q^2 r^2)
                 + (1/4) (k^2 - q^2 - r^2) (1/q^2 + 1/r^2)
    """
    q = np.maximum(q, qmin)
    r = np.maximum(r, qmin)
    k2, q2, r2 = k*k, q*q, r*r
    return (3/7.) + (1/7.)*(k2 - q2 - r2)**2/(q2*r2) + (1/4.)*(k2 - q2 - r2)*(1/q2 + 1/r2)


# -------------------------------------------------------------
# P13 shape functions s(r), r = q / k
#
# Each has four branches: a Taylor series for r < 1e-2, the finite
# limit at r = 1, an expansion in 1/r^2 for r > 100, and the exact
# closed form elsewhere. The closed form loses all precision to
# cancellation outside (1e-2, 100) and is 0 * inf at r = 1.
# -------------------------------------------------------------

def _log_ratio(r):
    return np.log((1 + r)/np.abs(1 - r))


def s13_dd(k, q):
    """Shape of the P_{\\delta\\delta}^{(13)} kernel."""
    r = q/k
    if r < 1e-2:
        return -168 + (928./5.)*r**2 - (4512./35.)*r**4 + (416./21.)*r**6
    elif abs(r - 1) < 1e-10:
        return -88 + 8*(r - 1)
    elif r > 100:
        return -488./5. + (96./5.)/r**2 - (160./21.)/r**4 - (1376./1155.)/r**6
    else:
        return 12/r**2 - 158 + 100*r**2 - 42*r**4 + 3/r**3 * (r*r - 1)**3 * (7*r*r + 2) * _log_ratio(r)


def s13_dt(k, q):
    """Shape of the P_{\\delta\\theta}^{(13)} kernel."""
    r = q/k
    if r < 1e-2:
        return -168 + (416./5.)*r**2 - (2976./35.)*r**4 + (224./15.)*r**6
    elif abs(r - 1) < 1e-10:
        return -152 - 56*(r - 1)
    elif r > 100:
        return -200 + (2208./35.)/r**2 - (1312./105.)/r**4 - (1888./1155.)/r**6
    else:
        return 24/r**2 - 202 + 56*r**2 - 30*r**4 + 3/r**3 * (r*r - 1)**3 * (5*r*r + 4) * _log_ratio(r)


def s13_tt(k, q):
    """Shape of the P_{\\theta\\theta}^{(13)} kernel."""
    r = q/k
    if r < 1e-2:
        return -56 - (32./5.)*r**2 - (96./7.)*r**4 + (352./105.)*r**6
    elif abs(r - 1) < 1e-10:
        return -72 - 40*(r - 1)
    elif r > 100:
        return -504./5. + (1248./35.)/r**2 - (608./105.)/r**4 - (160./231.)/r**6
    else:
        return 12/r**2 - 82 + 4*r**2 - 6*r**4 + 3/r**3 * (r*r - 1)**3 * (r*r + 2) * _log_ratio(r)
