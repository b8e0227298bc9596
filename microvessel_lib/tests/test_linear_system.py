"""
Tests for the sparse linear system wrapper.
"""

import numpy as np
import pytest
from microvessel_lib.analysis.linear_system import LinearSystem


def test_small_system_solved_densely():
    system = LinearSystem(2, bandwidth=5)
    system.set_matrix_element(0, 0, 2.0)
    system.set_matrix_element(0, 1, 1.0)
    system.set_matrix_element(1, 1, 4.0)
    system.set_rhs_vector_element(0, 5.0)
    system.set_rhs_vector_element(1, 8.0)

    x = system.solve()

    assert x == pytest.approx([1.5, 2.0])
    assert system.residual_norm(x) == pytest.approx(0.0, abs=1e-12)


def test_large_system_solved_sparsely():
    """Systems bigger than the bandwidth go through the sparse solver."""
    n = 20
    system = LinearSystem(n, bandwidth=3)
    for i in range(n):
        system.set_matrix_element(i, i, 2.0)
        system.set_rhs_vector_element(i, float(i))

    x = system.solve()

    assert x.shape == (n,)
    np.testing.assert_allclose(x, np.arange(n) / 2.0)


def test_matrix_can_be_edited_between_solves():
    system = LinearSystem(2)
    system.set_matrix_element(0, 0, 1.0)
    system.set_matrix_element(1, 1, 1.0)
    system.set_matrix_element(1, 0, -1.0)
    system.set_rhs_vector_element(0, 0.5)

    assert system.solve() == pytest.approx([0.5, 0.5])

    system.set_matrix_element(1, 0, -0.5)
    assert system.get_matrix_element(1, 0) == -0.5
    assert system.solve() == pytest.approx([0.5, 0.25])


def test_empty_system():
    assert LinearSystem(0).solve().shape == (0,)


def test_singular_system_raises():
    system = LinearSystem(2)
    system.set_matrix_element(0, 0, 1.0)
    system.set_rhs_vector_element(0, 1.0)

    with pytest.raises(np.linalg.LinAlgError):
        system.solve()


def test_rhs_vector_is_a_copy():
    system = LinearSystem(3)
    rhs = system.get_rhs_vector()
    rhs[0] = 99.0

    assert system.get_rhs_vector()[0] == 0.0


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        LinearSystem(-1)
