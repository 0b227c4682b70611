"""
Tests for the background cosmology.
"""

import numpy as np
import pytest

from oneloop import Cosmology


def test_presets():
    assert Cosmology.planck13() == Cosmology()
    assert Cosmology.planck15().h == 0.6774
    assert Cosmology.planck18().sigma8 == 0.8102


def test_frozen_and_hashable():
    cosmo = Cosmology.planck15()
    with pytest.raises(AttributeError):
        cosmo.h = 0.7
    assert hash(cosmo) == hash(Cosmology.planck15())


def test_flat_background():
    cosmo = Cosmology.planck18()
    assert cosmo.Ok0 == pytest.approx(0.0, abs=1e-12)
    assert cosmo.E(0.0) == pytest.approx(1.0, rel=1e-12)
    assert cosmo.H(0.0) == pytest.approx(67.66, rel=1e-12)
    assert cosmo.E(1.0) > cosmo.E(0.5) > 1.0


def test_scale_factor():
    assert Cosmology.scale_factor(0.0) == 1.0
    assert Cosmology.scale_factor(3.0) == 0.25


def test_einstein_de_sitter_growth():
    """With Om0 = 1 the growing mode is D = a and f = 1."""
    eds = Cosmology(Om0=1.0, Ode0=0.0)
    assert eds.growth_factor(1.0) == pytest.approx(0.5, rel=1e-10)
    assert eds.growth_rate(0.0) == pytest.approx(1.0, rel=1e-6)
    assert eds.growth_rate(2.0) == pytest.approx(1.0, rel=1e-6)


def test_lcdm_growth():
    cosmo = Cosmology.planck15()
    assert cosmo.growth_factor(0.0) == 1.0
    z = np.array([0.5, 1.0, 2.0])
    D = cosmo.growth_factor(z)
    assert np.all(np.diff(D) < 0)
    assert np.all(D > 1.0 / (1.0 + z))


def test_lcdm_growth_rate():
    """f(z) is close to Om(z)^0.55 and tends to 1 at high redshift."""
    cosmo = Cosmology.planck15()
    for z in [0.0, 0.5, 1.0]:
        Om_z = cosmo.Om0 * (1 + z)**3 / cosmo.E(z)**2
        assert cosmo.growth_rate(z) == pytest.approx(Om_z**0.55, abs=5e-3)
    assert cosmo.growth_rate(20.0) == pytest.approx(1.0, abs=1e-3)
