import pickle
from time import time

import numpy as np


def compute_essential_error(groundtruth, estimate):
    """Angle in degrees between two essential matrices seen as 9-vectors.
    Insensitive to scale and sign.
    """
    e_gt = groundtruth.ravel() / np.linalg.norm(groundtruth)
    e = estimate.ravel() / np.linalg.norm(estimate)
    return np.degrees(np.arccos(np.clip(np.abs(e_gt @ e), 0.0, 1.0)))


class Suite:

    def __init__(self, methods, timed=True):
        # store simulation properties
        self.methods = methods

        # placeholder for result storage
        self.results = None

        # Are we benchmarking speed
        self.timed = timed


    @staticmethod
    def load(path):
        with open(path, "rb") as f:
            return pickle.load(f)


    def save(self, path):
        with open(path, "wb") as f:
            pickle.dump(self, f)
        print("Saved data to:", path)


    def estimate_essential(self, method, support, x1, x2):

        # time counting mechanism
        start = time()

        # run estimation method
        Es = method.estimate_essential(x1, x2)

        # elapsed time
        elapsed = time() - start

        # minimal problems admit more than one candidate.
        # we use additional support correspondences to disambiguate
        if len(Es) == 0:
            return np.full((3, 3), np.nan), np.nan
        elif len(Es) == 1:
            return Es[0], elapsed

        # disambiguate candidates
        x1_s, x2_s = support
        min_idx = 0
        min_error = float("+inf")
        for i, E in enumerate(Es):
            err = np.sum(method.residual(E, x1_s, x2_s))
            if err < min_error:
                min_error = err
                min_idx = i

        return Es[min_idx], elapsed
