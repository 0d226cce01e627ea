"""Tests for Householder reflectors and the compact WY representation."""

import numpy as np
import pytest

from bandeig.householder import (
    generate_reflector, apply_reflector, apply_reflector_right,
    wy_transform, apply_wy_left, apply_wy_right,
)


def _dense_reflector(v, tau):
    v = np.asarray(v, dtype=np.float64)
    return np.eye(len(v)) - tau * np.outer(v, v)


def _make_reflector_block(m, b, seed=0, zero_columns=()):
    """Generate b reflectors on staggered rows, like one band panel."""
    rng = np.random.default_rng(seed)
    reflectors = np.zeros((m, b), dtype=np.float32)
    taus = []
    for k in range(b):
        if k in zero_columns:
            taus.append(0.0)
            continue
        v, tau = generate_reflector(rng.standard_normal(m - k))
        reflectors[k:, k] = v
        taus.append(tau)
    return reflectors, taus


@pytest.mark.parametrize("x", [
    [3.0, 4.0],
    [-1.0, 2.0, -2.0],
    [0.0, 1.0, 0.0, 0.0],
    [0.5, -0.25, 0.125, 2.0, -1.0],
])
def test_reflector_annihilates_tail(x):
    """Test that H x = [beta, 0, ..., 0] with |beta| = ||x||."""
    x = np.array(x, dtype=np.float32)
    v, tau = generate_reflector(x)

    assert v[0] == 1.0
    hx = _dense_reflector(v, tau) @ x
    norm = np.linalg.norm(x)
    np.testing.assert_allclose(abs(hx[0]), norm, rtol=1e-6)
    np.testing.assert_allclose(hx[1:], 0.0, atol=1e-6 * norm)


def test_reflector_sign_convention():
    """beta carries the opposite sign of x[0], and x[0] = 0 counts as positive."""
    v, tau = generate_reflector(np.array([2.0, 1.0, 2.0], dtype=np.float32))
    hx = _dense_reflector(v, tau) @ np.array([2.0, 1.0, 2.0])
    assert hx[0] == pytest.approx(-3.0, rel=1e-6)

    v, tau = generate_reflector(np.array([-2.0, 1.0, 2.0], dtype=np.float32))
    hx = _dense_reflector(v, tau) @ np.array([-2.0, 1.0, 2.0])
    assert hx[0] == pytest.approx(3.0, rel=1e-6)

    v, tau = generate_reflector(np.array([0.0, 5.0], dtype=np.float32))
    hx = _dense_reflector(v, tau) @ np.array([0.0, 5.0])
    assert hx[0] == pytest.approx(-5.0, rel=1e-6)
    assert tau == pytest.approx(1.0)


def test_reflector_is_involution():
    """Test that H is symmetric and H^2 = I."""
    rng = np.random.default_rng(3)
    v, tau = generate_reflector(rng.standard_normal(6))
    h = _dense_reflector(v, tau)

    np.testing.assert_allclose(h, h.T, atol=1e-12)
    np.testing.assert_allclose(h @ h, np.eye(6), atol=1e-6)
    assert 1.0 <= tau <= 2.0


@pytest.mark.parametrize("x", [
    np.zeros(4),
    np.array([1e-39, 0.0, 0.0]),
    np.array([0.0]),
])
def test_degenerate_reflector_is_identity(x):
    """Zero or subnormal columns give the zero vector, never NaN."""
    v, tau = generate_reflector(x)

    assert tau == 0.0
    np.testing.assert_array_equal(v, 0.0)
    assert v.dtype == np.float32


@pytest.mark.parametrize("x", [
    [3e19, 3e19, 3e19],
    [-2e38, 1e38, 5e37],
    [1e-23, 2e-23, 3e-23],
    [-4e-20, 0.0, 1e-20, 2e-20],
])
def test_reflector_at_extreme_magnitudes(x):
    """Squared entries that over- or underflow float32 still give a valid reflector."""
    x = np.array(x, dtype=np.float32)
    v, tau = generate_reflector(x)

    assert np.all(np.isfinite(v))
    assert np.isfinite(tau)
    assert tau != 0.0
    assert v[0] == 1.0

    x64 = x.astype(np.float64)
    norm = np.linalg.norm(x64)
    hx = _dense_reflector(v, tau) @ x64
    np.testing.assert_allclose(abs(hx[0]), norm, rtol=1e-6)
    np.testing.assert_allclose(hx[1:], 0.0, atol=1e-6 * norm)


def test_reflector_of_already_reduced_column():
    """A column that is already [x0, 0, ...] still gets a valid reflector."""
    v, tau = generate_reflector(np.array([2.0, 0.0, 0.0], dtype=np.float32))

    assert np.all(np.isfinite(v))
    np.testing.assert_allclose(v, [1.0, 0.0, 0.0])
    assert tau == pytest.approx(2.0)


def test_empty_reflector():
    v, tau = generate_reflector(np.zeros(0))
    assert v.shape == (0,)
    assert tau == 0.0


def test_apply_reflector_matches_dense():
    """Test the rank-one update from both sides against the explicit H."""
    rng = np.random.default_rng(4)
    v, tau = generate_reflector(rng.standard_normal(5))
    h = _dense_reflector(v, tau)
    c = rng.standard_normal((5, 3)).astype(np.float32)

    left = c.copy()
    apply_reflector(v, tau, left)
    np.testing.assert_allclose(left, h @ c, atol=1e-5)

    right = c.T.copy()
    apply_reflector_right(right, v, tau)
    np.testing.assert_allclose(right, c.T @ h, atol=1e-5)

    column = c[:, 0].copy()
    apply_reflector(v, tau, column)
    np.testing.assert_allclose(column, h @ c[:, 0], atol=1e-5)


@pytest.mark.parametrize("zero_columns", [(), (1,), (0, 2)])
def test_wy_matches_sequential_product(zero_columns):
    """Test I - V T V^T = H_0 H_1 ... H_{b-1}, including identity reflectors."""
    m, b = 9, 4
    reflectors, taus = _make_reflector_block(m, b, seed=5,
                                             zero_columns=zero_columns)
    t = wy_transform(reflectors)

    expected = np.eye(m)
    for k in range(b):
        expected = expected @ _dense_reflector(reflectors[:, k], taus[k])

    wy = np.eye(m) - reflectors.astype(np.float64) @ t @ reflectors.T
    np.testing.assert_allclose(wy, expected, atol=1e-5)

    # Upper triangular, with tau on the diagonal
    np.testing.assert_array_equal(np.tril(t, -1), 0.0)
    np.testing.assert_allclose(np.diag(t), taus, rtol=1e-5)
    for k in zero_columns:
        np.testing.assert_array_equal(t[k, :], 0.0)
        np.testing.assert_array_equal(t[:, k], 0.0)


def test_wy_single_reflector():
    reflectors, taus = _make_reflector_block(4, 1, seed=6)
    t = wy_transform(reflectors)
    assert t.shape == (1, 1)
    assert t[0, 0] == pytest.approx(taus[0], rel=1e-5)


@pytest.mark.parametrize("transpose", [False, True])
def test_apply_wy_left(transpose):
    """Test the three-product update against the explicit block reflector."""
    m, b = 8, 3
    reflectors, _ = _make_reflector_block(m, b, seed=7)
    t = wy_transform(reflectors)
    q = np.eye(m) - reflectors.astype(np.float64) @ t @ reflectors.T
    if transpose:
        q = q.T

    c = np.random.default_rng(8).standard_normal((m, 5)).astype(np.float32)
    out = c.copy()
    apply_wy_left(reflectors, t, out, transpose=transpose)
    np.testing.assert_allclose(out, q @ c, atol=1e-5)


def test_apply_wy_right():
    m, b = 8, 3
    reflectors, _ = _make_reflector_block(m, b, seed=9)
    t = wy_transform(reflectors)
    q = np.eye(m) - reflectors.astype(np.float64) @ t @ reflectors.T

    c = np.random.default_rng(10).standard_normal((4, m)).astype(np.float32)
    out = c.copy()
    apply_wy_right(out, reflectors, t)
    np.testing.assert_allclose(out, c @ q, atol=1e-5)


def test_wy_block_is_orthogonal():
    reflectors, _ = _make_reflector_block(10, 4, seed=11)
    t = wy_transform(reflectors)
    q = np.eye(10) - reflectors.astype(np.float64) @ t @ reflectors.T
    np.testing.assert_allclose(q.T @ q, np.eye(10), atol=1e-5)
