# quadrature.py
from __future__ import annotations

from typing import Callable, Sequence

import numpy as np
from scipy.integrate import nquad

from .integrands import bind_integrand
from .kernels import QMIN, QMAX


def integrate(
    f: Callable,
    a: Sequence[float],
    b: Sequence[float],
    epsrel: float,
    epsabs: float,
    limit: int = 200,
    points: Sequence[Sequence[float] | None] | None = None
) -> float:
    """
    Adaptive quadrature of f over the box [a_0, b_0] x [a_1, b_1] x ...

    Parameters
    ----------
    f : callable
        Integrand, called as f(x_0, x_1, ...). x_0 is the innermost
        integration variable.
    a, b : sequence of float
        Lower and upper bound per dimension.
    epsrel, epsabs : float
        Relative and absolute error targets, passed to every QUADPACK
        call. The integration stops when either is met.
    limit : int, optional
        Maximum number of subintervals per one-dimensional pass.
    points : sequence, optional
        Per-dimension break points (None for a dimension without any).

    Returns
    -------
    float
        Estimate of the definite integral. Non-convergence is reported
        by scipy as an IntegrationWarning and is not handled here.
    """
    a = np.atleast_1d(np.asarray(a, dtype=float))
    b = np.atleast_1d(np.asarray(b, dtype=float))
    if a.ndim != 1 or a.shape != b.shape:
        raise ValueError("a and b must be 1D sequences of the same length.")

    opts = []
    for i in range(a.size):
        opt = dict(epsrel=epsrel, epsabs=epsabs, limit=limit)
        if points is not None and points[i] is not None and len(points[i]) > 0:
            opt["points"] = list(points[i])
        opts.append(opt)

    ranges = [(lo, hi) for lo, hi in zip(a, b)]
    result, _ = nquad(f, ranges, opts=opts)
    return result


# -------------------------------------------------------------------
# One-loop integrals
# -------------------------------------------------------------------

def compute_P22_integral(
    f: Callable,
    P_L: Callable,
    k: float,
    epsrel: float = 1e-5,
    qmin: float = QMIN,
    qmax: float = QMAX,
    limit: int = 200
) -> float:
    """
    Mode-coupling integral

        P22(k) = k / (2 pi^2) \\int dlog(u) \\int_0^1 dv f(k, log u, v)

    over 1 <= u <= 2 qmax / k. The absolute tolerance is epsrel P_L(k) / V,
    set by the linear spectrum at k rather than by the loop result. k <= 0
    returns 0 without evaluating anything.
    """
    if k <= 0:
        return 0.

    umin, umax = 1., 2*qmax/k
    vmin, vmax = 0., 1.
    a = [np.log(umin), vmin]
    b = [np.log(umax), vmax]
    # float64 so that P_L(k) = 0 gives inf/nan instead of raising
    P_Lk = np.float64(P_L(k))
    V = k / (2*np.pi*np.pi)
    integrand = bind_integrand(f, P_L, k, qmin=qmin)
    return V * integrate(integrand, a, b, epsrel, epsrel*P_Lk/V, limit=limit)


def compute_P13_integral(
    f: Callable,
    P_L: Callable,
    k: float,
    norm: float,
    epsrel: float = 1e-5,
    qmin: float = QMIN,
    qmax: float = QMAX,
    limit: int = 200
) -> float:
    """
    Propagator integral

        P13(k) = k^2 P_L(k) / (norm 4 pi^2) \\int dlog(q) f(k, log q)

    over qmin <= q <= qmax, with norm = 252 for the density auto and
    cross spectra and 84 for the velocity auto spectrum.
    """
    a = np.log(qmin)
    b = np.log(qmax)
    P_Lk = np.float64(P_L(k))
    V = k*k/(norm*4*np.pi*np.pi) * P_Lk

    # the shape functions have a kink at q = k
    points = None
    if a < np.log(k) < b:
        points = [[np.log(k)]]

    integrand = bind_integrand(f, P_L, k)
    return V * integrate(integrand, [a], [b], epsrel, epsrel*P_Lk/V, limit=limit, points=points)
