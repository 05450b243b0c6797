from essential3pt import (
    OrthographicSolver,
    UprightSolver,
    angular_error,
    orthographic_residual,
)
import numpy as np


def upright_null(bearing_a, bearing_b):
    """Compute the upright essential matrix from 3 bearing correspondences.
    Variant:
    - The nullspace is taken from the SVD of A instead of the eigen
    decomposition of A^T A.

    Arguments:
    bearing_a -- 3 x 3 np.array of unit bearing vectors in the first camera
    bearing_b -- 3 x 3 np.array of unit bearing vectors in the second camera
    """
    ax, ay, az = bearing_a
    bx, by, bz = bearing_b
    A = np.stack((ax * by, -az * by, -bx * ay, -bz * ay), axis=1)

    # Pick the smallest singular vector
    n0, n1, n2, n3 = np.linalg.svd(A)[2][-1]

    E = np.zeros((3, 3))
    E[0, 1] = n2
    E[1, 0] = -n0
    E[1, 2] = n1
    E[2, 1] = n3
    return [E]


class Orthographic3Pt:

    name = "Orthographic3Pt"

    @staticmethod
    def estimate_essential(x1, x2):
        return OrthographicSolver.solve(x1, x2)

    @staticmethod
    def residual(E, x1, x2):
        return np.abs(orthographic_residual(E, x1, x2))


class Upright3Pt:

    name = "Upright3Pt"

    @staticmethod
    def estimate_essential(x1, x2):
        return UprightSolver.solve(x1, x2)

    @staticmethod
    def residual(E, x1, x2):
        return angular_error(E, x1, x2)


class Upright3PtSVD:

    name = "Upright3Pt (SVD)"

    @staticmethod
    def estimate_essential(x1, x2):
        return upright_null(x1, x2)

    @staticmethod
    def residual(E, x1, x2):
        return angular_error(E, x1, x2)
