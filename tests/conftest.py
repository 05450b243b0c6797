import numpy as np
import pytest


def aa2rm(aa):
    """Construct a rotation matrix from an axis angle representation"""
    angle = np.linalg.norm(aa)
    if angle < np.finfo(float).eps:
        return np.eye(3)

    k = aa / angle
    K = np.array([[0, -k[2], k[1]], [k[2], 0, -k[0]], [-k[1], k[0], 0]])
    return np.eye(3) + np.sin(angle) * K + (1 - np.cos(angle)) * K @ K


def skew(v):
    return np.array([[0, -v[2], v[1]], [v[2], 0, -v[0]], [-v[1], v[0], 0]])


def orthographic_essential(R, t):
    """Orthographic essential matrix of the camera pair x1 = X[:2],
    x2 = (R X)[:2] + t, normalized such that c^2 + d^2 = 1."""
    s = np.hypot(R[0, 2], R[1, 2])
    c = -R[1, 2] / s
    d = R[0, 2] / s
    a = -(c * R[0, 0] + d * R[1, 0])
    b = -(c * R[0, 1] + d * R[1, 1])
    e = -(c * t[0] + d * t[1])
    return np.array([[0.0, 0.0, a], [0.0, 0.0, b], [c, d, e]])


def project_orthographic(pts, R, t):
    """Projects 3 x n points into both orthographic views"""
    x1 = pts[:2].copy()
    x2 = (R @ pts)[:2] + t[:, None]
    return x1, x2


def project_bearings(pts, R, t):
    """Unit bearing vectors of 3 x n points in both cameras"""
    a = pts / np.linalg.norm(pts, axis=0)
    b = R @ pts + t[:, None]
    b /= np.linalg.norm(b, axis=0)
    return a, b


def rotation_y(theta):
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


@pytest.fixture
def orthographic_scene():
    pts = np.array(
        [
            [0.12, -0.31, 0.27, 0.05, -0.22, 0.18, -0.09, 0.33, -0.14, 0.21],
            [-0.25, 0.08, 0.19, -0.17, 0.29, 0.02, -0.06, -0.28, 0.23, 0.11],
            [0.31, -0.12, -0.04, 0.22, 0.09, -0.27, 0.16, 0.07, -0.19, 0.26],
        ]
    )
    R = aa2rm(np.array([0.3, -0.4, 0.2]))
    t = np.array([0.1, -0.2])
    x1, x2 = project_orthographic(pts, R, t)
    return {
        "x1": x1[:, :3],
        "x2": x2[:, :3],
        "support": (x1[:, 3:], x2[:, 3:]),
        "E": orthographic_essential(R, t),
    }


@pytest.fixture
def upright_scene():
    pts = np.array(
        [
            [0.21, -0.34, 0.12, 0.45, -0.18, 0.03, -0.41, 0.27],
            [-0.16, 0.22, 0.37, -0.09, -0.31, 0.14, 0.06, -0.24],
            [2.10, 1.85, 2.40, 1.95, 2.25, 1.70, 2.05, 2.30],
        ]
    )
    R = rotation_y(0.35)
    t = np.array([0.4, 0.0, -0.15])
    a, b = project_bearings(pts, R, t)
    return {
        "a": a[:, :3],
        "b": b[:, :3],
        "support": (a[:, 3:], b[:, 3:]),
        "E": skew(t) @ R,
    }
