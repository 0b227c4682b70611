"""
Tests for the functional entry point.
"""

import numpy as np
import pytest

from oneloop import one_loop, Cosmology, PowerSpectrum, SPT
from conftest import gaussian_damped


def test_scalar_matches_engine(cosmo):
    engine = SPT(cosmo, gaussian_damped, epsrel=1e-4)
    value = one_loop(0.5, quantity="P13", fields="dd", cosmo=cosmo, powerspec=gaussian_damped)
    assert isinstance(value, float)
    assert value == engine.P13_dd(0.5)


def test_array_keeps_shape(cosmo):
    k = np.array([[0.2, 0.4], [0.6, 0.8]])
    values = one_loop(k, quantity="P13", fields=(2, 2), cosmo=cosmo, powerspec=gaussian_damped)
    assert values.shape == (2, 2)
    assert values[1, 0] == one_loop(0.6, quantity="P13", fields="tt", cosmo=cosmo,
                                    powerspec=gaussian_damped)


def test_field_names(cosmo):
    kwargs = dict(quantity="P13", cosmo=cosmo, powerspec=gaussian_damped)
    assert one_loop(0.3, fields="dt", **kwargs) == one_loop(0.3, fields="td", **kwargs)
    assert one_loop(0.3, fields="DT", **kwargs) == one_loop(0.3, fields=(2, 1), **kwargs)


def test_G(cosmo):
    engine = SPT(cosmo, gaussian_damped, epsrel=1e-4)
    assert one_loop(0.5, quantity="G", cosmo=cosmo, powerspec=gaussian_damped) == engine.G(0.5)


def test_class_returns_engine(cosmo):
    engine = one_loop(0.1, quantity="class", cosmo=cosmo, powerspec=gaussian_damped, epsrel=1e-3)
    assert isinstance(engine, SPT)
    assert engine.epsrel == 1e-3
    assert engine.cosmo is cosmo


def test_default_bbks_at_redshift():
    engine = one_loop(0.1, z=1.0, quantity="class")
    assert engine.cosmo == Cosmology.planck13()
    assert isinstance(engine.P_L, PowerSpectrum)
    assert engine.P_L.z == 1.0

    D1 = engine.cosmo.growth_factor(1.0)
    z0 = one_loop(0.1, quantity="class").P_L
    assert engine.P_L(0.1) == pytest.approx(z0(0.1) * D1**2, rel=1e-12)


def test_table_input(cosmo):
    k = np.logspace(-4, 2, 300)
    pk = np.power(k, 0.96) / (1 + np.power(k / 0.02, 3))
    engine = one_loop(0.1, quantity="class", cosmo=cosmo, powerspec=(k, pk))
    assert engine.P_L.sigma_R(8.0 / cosmo.h) == pytest.approx(cosmo.sigma8, rel=1e-10)


def test_file_input(cosmo, tmp_path):
    k = np.logspace(-4, 2, 300)
    pk = np.power(k, 0.96) / (1 + np.power(k / 0.02, 3))
    path = tmp_path / "plin.txt"
    np.savetxt(path, np.column_stack([k, pk]))

    from_file = one_loop(0.1, quantity="class", cosmo=cosmo, powerspec=str(path)).P_L
    from_table = one_loop(0.1, quantity="class", cosmo=cosmo, powerspec=(k, pk)).P_L
    assert from_file(0.05) == pytest.approx(from_table(0.05), rel=1e-12)


def test_invalid_inputs(cosmo):
    with pytest.raises(ValueError, match="Unknown quantity"):
        one_loop(0.1, quantity="P33", cosmo=cosmo, powerspec=gaussian_damped)
    with pytest.raises(ValueError, match="Unknown fields"):
        one_loop(0.1, quantity="P13", fields="dv", cosmo=cosmo, powerspec=gaussian_damped)
    with pytest.raises(TypeError):
        one_loop(0.1, cosmo=cosmo, powerspec=42)


def test_table_input_as_list_or_array(cosmo):
    k = np.logspace(-4, 2, 300)
    pk = np.power(k, 0.96) / (1 + np.power(k / 0.02, 3))
    from_tuple = one_loop(0.1, quantity="class", cosmo=cosmo, powerspec=(k, pk)).P_L
    from_list = one_loop(0.1, quantity="class", cosmo=cosmo, powerspec=[k, pk]).P_L
    from_array = one_loop(0.1, quantity="class", cosmo=cosmo, powerspec=np.vstack([k, pk])).P_L
    assert from_list(0.05) == from_tuple(0.05)
    assert from_array(0.05) == from_tuple(0.05)
