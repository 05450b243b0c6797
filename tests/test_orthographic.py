import warnings

import numpy as np
import pytest

from essential3pt import (
    _orthographic_candidate,
    orthographic_residual,
    orthographic_three_point,
)


def test_two_candidates(orthographic_scene):
    Es = orthographic_three_point(orthographic_scene["x1"], orthographic_scene["x2"])
    assert len(Es) == 2
    for E in Es:
        assert E.shape == (3, 3)
        assert np.all(np.isfinite(E))


def test_layout(orthographic_scene):
    for E in orthographic_three_point(
        orthographic_scene["x1"], orthographic_scene["x2"]
    ):
        assert np.all(E[:2, :2] == 0.0)


def test_epipolar_residual(orthographic_scene):
    x1, x2 = orthographic_scene["x1"], orthographic_scene["x2"]
    for E in orthographic_three_point(x1, x2):
        res = orthographic_residual(E, x1, x2)
        np.testing.assert_allclose(res / np.linalg.norm(E), 0.0, atol=1e-8)


def test_unit_norm_constraints(orthographic_scene):
    for E in orthographic_three_point(
        orthographic_scene["x1"], orthographic_scene["x2"]
    ):
        a, b = E[:2, 2]
        c, d = E[2, :2]
        assert a * a + b * b == pytest.approx(1.0, abs=1e-8)
        assert c * c + d * d == pytest.approx(1.0, abs=1e-8)
        assert d >= 0.0


def test_recovers_groundtruth(orthographic_scene):
    E_gt = orthographic_scene["E"]
    Es = orthographic_three_point(orthographic_scene["x1"], orthographic_scene["x2"])

    # defined up to sign
    assert any(
        np.allclose(E, E_gt, atol=1e-8) or np.allclose(E, -E_gt, atol=1e-8)
        for E in Es
    )


def test_support_points(orthographic_scene):
    x1_s, x2_s = orthographic_scene["support"]
    Es = orthographic_three_point(orthographic_scene["x1"], orthographic_scene["x2"])

    # only the true model explains the remaining correspondences
    errors = [np.max(np.abs(orthographic_residual(E, x1_s, x2_s))) for E in Es]
    assert min(errors) < 1e-8


def test_appends_to_storage(orthographic_scene):
    sentinel = np.eye(3)
    Es = [sentinel]
    out = orthographic_three_point(
        orthographic_scene["x1"], orthographic_scene["x2"], Es=Es
    )
    assert out is Es
    assert len(Es) == 3
    assert Es[0] is sentinel


def test_candidate_order(orthographic_scene):
    # the (d4_2 + tmp) root has the smaller |root|, hence the smaller d
    E0, E1 = orthographic_three_point(
        orthographic_scene["x1"], orthographic_scene["x2"]
    )
    assert E0[2, 1] <= E1[2, 1]


def test_deterministic(orthographic_scene):
    x1, x2 = orthographic_scene["x1"], orthographic_scene["x2"]
    first = orthographic_three_point(x1, x2)
    second = orthographic_three_point(x1.copy(), x2.copy())
    for E0, E1 in zip(first, second):
        assert np.array_equal(E0, E1)


def test_only_first_three_columns(orthographic_scene):
    x1, x2 = orthographic_scene["x1"], orthographic_scene["x2"]
    x1_s, x2_s = orthographic_scene["support"]
    ref = orthographic_three_point(x1, x2)
    out = orthographic_three_point(np.hstack((x1, x1_s)), np.hstack((x2, x2_s)))
    for E0, E1 in zip(ref, out):
        assert np.array_equal(E0, E1)


def test_collinear_propagates_nan():
    x1 = np.array([[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]])
    x2 = np.array([[0.1, 0.8, 2.3], [-0.2, 1.4, 1.9]])

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        Es = orthographic_three_point(x1, x2)

    assert len(Es) == 2
    for E in Es:
        assert not np.all(np.isfinite(E))


def test_collinear_verbose_warns():
    x1 = np.array([[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]])
    x2 = np.array([[0.1, 0.8, 2.3], [-0.2, 1.4, 1.9]])

    with pytest.warns(RuntimeWarning, match="collinear"):
        Es = orthographic_three_point(x1, x2, verbose=True)
    assert len(Es) == 2


def _complex_root_sample():
    # denom = 1, discriminant = 20^2 - 4 * 52 * 9 < 0
    x1 = np.array([[0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    x2 = np.array([[0.0, 2.0, 0.0], [0.0, 1.0, 3.0]])
    return x1, x2


def test_negative_discriminant_propagates_nan():
    x1, x2 = _complex_root_sample()

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        Es = orthographic_three_point(x1, x2)

    assert len(Es) == 2
    for E in Es:
        assert not np.all(np.isfinite(E))


def test_negative_discriminant_verbose_warns():
    x1, x2 = _complex_root_sample()

    with pytest.warns(RuntimeWarning, match="discriminant"):
        Es = orthographic_three_point(x1, x2, verbose=True)
    assert len(Es) == 2


def test_candidate_from_coefficients():
    # a = 0.5 c + 0.5 d, b = 2 d
    aac, aad, bbc, bbd = 0.5, 0.5, 0.0, 2.0
    dd_2 = -aac * aac + aad * aad - bbc * bbc + bbd * bbd
    dd_1c = 2.0 * aac * aad + 2.0 * bbc * bbd
    dd_0 = aac * aac + bbc * bbc - 1.0
    d4_4 = dd_1c * dd_1c + dd_2 * dd_2
    d4_2 = -dd_1c * dd_1c + 2.0 * dd_0 * dd_2
    d4_0 = dd_0 * dd_0
    tmp = np.sqrt(d4_2 * d4_2 - 4.0 * d4_4 * d4_0)

    x1_0 = np.array([1.0, 2.0])
    x2_0 = np.array([3.0, 4.0])
    for root in (d4_2 + tmp, d4_2 - tmp):
        E = _orthographic_candidate(root, aac, aad, bbc, bbd, d4_4, dd_2, x1_0, x2_0)
        a, b = E[:2, 2]
        c, d, e = E[2]

        assert d >= 0.0
        assert a == pytest.approx(aac * c + aad * d)
        assert b == pytest.approx(bbc * c + bbd * d)
        assert c * c + d * d == pytest.approx(1.0)
        assert a * a + b * b == pytest.approx(1.0)
        residual = a * 1.0 + b * 2.0 + c * 3.0 + d * 4.0 + e
        assert residual == pytest.approx(0.0, abs=1e-12)
