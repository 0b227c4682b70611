"""Shared fixtures: toy linear spectra with closed forms."""

import numpy as np
import pytest

from oneloop import SPT, Cosmology


A_TOY = 100.0


def gaussian_damped(k):
    """P_L(k) = A k exp(-k^2): IR and UV safe, so cutoffs do not matter."""
    return A_TOY * k * np.exp(-k * k)


@pytest.fixture(scope="module")
def cosmo():
    return Cosmology.planck15()


@pytest.fixture(scope="module")
def engine(cosmo):
    return SPT(cosmo, gaussian_damped, epsrel=1e-4)
