from abc import ABC, abstractmethod
from typing import List, Optional
import warnings

import numpy as np
from packaging import version
import scipy
from scipy.linalg import eigh

__version__ = "1.0.0"

# preserve support for scipy < 1.5.0 (no subset_by_index in eigh)
if version.parse(scipy.__version__) < version.parse("1.5.0"):
    _EIGH_SMALLEST = dict(eigvals=(0, 0))
else:
    _EIGH_SMALLEST = dict(subset_by_index=[0, 0])


def _orthographic_candidate(
    root: float,
    aac: float,
    aad: float,
    bbc: float,
    bbd: float,
    d4_4: float,
    tmp_csol: float,
    x1_0: np.ndarray,
    x2_0: np.ndarray,
) -> np.ndarray:
    """Recover the orthographic essential matrix associated with one root of the
    quadratic in d^2.

    Arguments:
    root -- one of d4_2 +/- sqrt(discriminant)
    aac, aad, bbc, bbd -- linear coefficients mapping (c, d) to (a, b)
    d4_4 -- leading coefficient of the quartic in d
    tmp_csol -- coefficient of d^2 in the expression of c
    x1_0 -- first point of the first image
    x2_0 -- first point of the second image
    """
    dsol = np.sqrt(-root / d4_4 / 2.0)
    csol = -(tmp_csol * dsol * dsol + aac * aac + bbc * bbc - 1.0) / (
        2.0 * aac * aad * dsol + 2.0 * bbc * bbd * dsol
    )
    asol = aac * csol + aad * dsol
    bsol = bbc * csol + bbd * dsol

    # the first correspondence fixes the offset
    esol = -asol * x1_0[0] - bsol * x1_0[1] - csol * x2_0[0] - dsol * x2_0[1]

    return np.array([[0.0, 0.0, asol], [0.0, 0.0, bsol], [csol, dsol, esol]])


def orthographic_three_point(
    x1: np.ndarray,
    x2: np.ndarray,
    Es: Optional[List[np.ndarray]] = None,
    verbose: bool = False,
) -> List[np.ndarray]:
    """Computes the relative pose of two orthographic cameras from 3 correspondences.

    Based on M. Oskarsson, "Two-View Orthographic Epipolar Geometry: Minimal and
    Optimal Solvers", Journal of Mathematical Imaging and Vision, 2017.

    The two candidates are always returned, in the order (d4_2 + tmp), (d4_2 - tmp).
    Collinear samples or a negative discriminant yield inf/nan entries which are left
    for the caller's scoring stage to discard.

    Arguments:
    x1 -- 2 x 3 np.array of points in the first image. One per column.
    x2 -- 2 x 3 np.array of corresponding points in the second image.
    Es -- optional list to which the candidates are appended
    verbose -- warn about degenerate samples and complex roots
    """
    if Es is None:
        Es = []

    x1 = np.asarray(x1, dtype=float)
    x2 = np.asarray(x2, dtype=float)

    with np.errstate(divide="ignore", invalid="ignore"):

        # triangle edges in both images
        xd1 = x1[:, 1] - x1[:, 0]
        yd1 = x1[:, 2] - x1[:, 0]
        xd2 = x2[:, 1] - x2[:, 0]
        yd2 = x2[:, 2] - x2[:, 0]

        denom = xd1[0] * yd1[1] - xd1[1] * yd1[0]
        aac = (xd1[1] * yd2[0] - xd2[0] * yd1[1]) / denom
        aad = (xd1[1] * yd2[1] - xd2[1] * yd1[1]) / denom
        bbc = (xd2[0] * yd1[0] - xd1[0] * yd2[0]) / denom
        bbd = (xd2[1] * yd1[0] - xd1[0] * yd2[1]) / denom

        aac_sq = aac * aac

        # c is quadratic in d, and c^2 + d^2 = 1 yields a quartic in d with
        # only even powers
        dd_2 = -aac_sq + aad * aad - bbc * bbc + bbd * bbd
        dd_1c = 2.0 * aac * aad + 2.0 * bbc * bbd
        dd_0 = aac_sq + bbc * bbc - 1.0
        d4_4 = dd_1c * dd_1c + dd_2 * dd_2
        d4_2 = -dd_1c * dd_1c + 2.0 * dd_0 * dd_2
        d4_0 = dd_0 * dd_0

        discriminant = d4_2 * d4_2 - 4.0 * d4_4 * d4_0
        tmp = np.sqrt(discriminant)
        tmp_csol = dd_2

        for root in (d4_2 + tmp, d4_2 - tmp):
            Es.append(
                _orthographic_candidate(
                    root, aac, aad, bbc, bbd, d4_4, tmp_csol, x1[:, 0], x2[:, 0]
                )
            )

    if verbose:
        if denom == 0 or not np.isfinite(denom):
            warnings.warn(
                "Degenerate sample: the points in the first image are collinear.",
                RuntimeWarning,
            )
        elif discriminant < 0:
            warnings.warn(
                "Negative discriminant: the candidates have no real solution.",
                RuntimeWarning,
            )

    return Es


def upright_three_point(
    bearing_a: np.ndarray,
    bearing_b: np.ndarray,
    Es: Optional[List[np.ndarray]] = None,
) -> List[np.ndarray]:
    """Computes the essential matrix of two upright cameras from 3 correspondences.

    Both cameras share a known vertical (y) axis, so the rotation has a single degree
    of freedom about it and the translation lies in the horizontal plane. The
    resulting matrix only has entries at (0, 1), (1, 0), (1, 2) and (2, 1), and
    satisfies b^T E a = 0.

    Arguments:
    bearing_a -- 3 x 3 np.array of unit bearing vectors in the first camera. One
    per column.
    bearing_b -- 3 x 3 np.array of corresponding bearing vectors in the second camera.
    Es -- optional list to which the candidate is appended
    """
    if Es is None:
        Es = []

    bearing_a = np.asarray(bearing_a, dtype=float)
    bearing_b = np.asarray(bearing_b, dtype=float)

    # Build the action matrix
    ax, ay, az = bearing_a[:, :3]
    bx, by, bz = bearing_b[:, :3]
    A = np.stack((ax * by, -az * by, -bx * ay, -bz * ay), axis=1)

    # least squares nullspace
    _, vecs = eigh(A.T @ A, **_EIGH_SMALLEST)
    n0, n1, n2, n3 = vecs[:, 0]

    E = np.zeros((3, 3))
    E[0, 1] = n2
    E[1, 0] = -n0
    E[1, 2] = n1
    E[2, 1] = n3

    Es.append(E)
    return Es


def orthographic_residual(E: np.ndarray, x1: np.ndarray, x2: np.ndarray) -> np.ndarray:
    """Algebraic orthographic epipolar residual x1h^T E x2h of each correspondence.

    Arguments:
    E -- 3 x 3 orthographic essential matrix
    x1 -- 2 x n np.array of points in the first image
    x2 -- 2 x n np.array of points in the second image
    """
    n = x1.shape[1]
    x1h = np.vstack((x1, np.ones(n)))
    x2h = np.vstack((x2, np.ones(n)))
    return np.sum(x1h * (E @ x2h), axis=0)


def upright_residual(
    E: np.ndarray, bearing_a: np.ndarray, bearing_b: np.ndarray
) -> np.ndarray:
    """Algebraic epipolar residual b^T E a of each bearing correspondence."""
    return np.sum(bearing_b * (E @ bearing_a), axis=0)


def angular_error(
    E: np.ndarray, bearing_a: np.ndarray, bearing_b: np.ndarray
) -> np.ndarray:
    """Angular epipolar error |b^T (E a) / ||E a|||, i.e. the sine of the angle
    between b and the epipolar plane of a.

    Arguments:
    E -- 3 x 3 essential matrix
    bearing_a -- 3 x n np.array of unit bearing vectors in the first camera
    bearing_b -- 3 x n np.array of unit bearing vectors in the second camera
    """
    Ea = E @ bearing_a
    Ea = Ea / np.linalg.norm(Ea, axis=0)
    return np.abs(np.sum(bearing_b * Ea, axis=0))


class MinimalSolver(ABC):
    """Common interface of the minimal solvers consumed by a sampling loop.

    MINIMUM_SAMPLES -- number of correspondences a sample must hold
    MAX_MODELS -- maximum number of candidates appended by a single call
    """

    name = None
    MINIMUM_SAMPLES = 3
    MAX_MODELS = 0

    @staticmethod
    @abstractmethod
    def solve(
        x1: np.ndarray, x2: np.ndarray, Es: Optional[List[np.ndarray]] = None
    ) -> List[np.ndarray]:
        raise NotImplementedError


class OrthographicSolver(MinimalSolver):

    name = "Orthographic3Pt"
    MINIMUM_SAMPLES = 3
    MAX_MODELS = 2

    @staticmethod
    def solve(x1, x2, Es=None, verbose=False):
        return orthographic_three_point(x1, x2, Es=Es, verbose=verbose)


class UprightSolver(MinimalSolver):

    name = "Upright3Pt"
    MINIMUM_SAMPLES = 3
    MAX_MODELS = 1

    @staticmethod
    def solve(x1, x2, Es=None):
        return upright_three_point(x1, x2, Es=Es)
