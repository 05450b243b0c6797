from abc import ABC, abstractmethod
import warnings

from cycler import cycler
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.ticker import PercentFormatter

from .suite import Suite, compute_essential_error


def aa2rm(aa):
    """Construct a rotation matrix from an axis angle representation"""
    angle = np.linalg.norm(aa)

    # np.finfo(float).eps -> 2.220446049250313e-16
    if angle < 2.220446049250313e-16:
        return np.eye(3)

    k = aa / angle
    K = np.array([[0, -k[2], k[1]], [k[2], 0, -k[0]], [-k[1], k[0], 0]])
    R = np.eye(3) + np.sin(angle) * K + (1 - np.cos(angle)) * K @ K
    return R


def skew(v):
    return np.array([[0, -v[2], v[1]], [v[2], 0, -v[0]], [-v[1], v[0], 0]])


def orthographic_essential(R, t):
    """Ground truth essential matrix of the orthographic pair
    x1 = X[:2], x2 = (R X)[:2] + t
    """
    s = np.hypot(R[0, 2], R[1, 2])
    c = -R[1, 2] / s
    d = R[0, 2] / s
    a = -(c * R[0, 0] + d * R[1, 0])
    b = -(c * R[0, 1] + d * R[1, 1])
    e = -(c * t[0] + d * t[1])
    return np.array([[0.0, 0.0, a], [0.0, 0.0, b], [c, d, e]])


class SynthSuite(Suite, ABC):

    def __init__(self, methods=None, n_runs=10, timed=True):
        super().__init__(methods=methods, timed=timed)

        # store simulation properties
        self.LENGTH = 0.6
        self.N_SUPPORT = 20
        self.n_runs = n_runs
        self.noise = None


    def init_run(self, noise):

        self.noise = [0.0] if noise is None else noise

        # Initialize storage
        n_noise = len(self.noise)
        n_methods = len(self.methods)
        self.results = {"error": np.full((n_noise, n_methods, self.n_runs), np.nan)}
        if self.timed:
            self.results["time"] = np.full((n_noise, n_methods, self.n_runs), np.nan)


    @abstractmethod
    def random_pose(self):
        pass


    @abstractmethod
    def groundtruth(self, R, t):
        pass


    @abstractmethod
    def generate_correspondences(self, n_elements, R, t, noise):
        pass


    def plot(self, label, tight=False):
        """Generate plots"""

        # Creates two subplots and unpacks the output array immediately
        f, axes = plt.subplots(1, 2, figsize=(8, 4) if tight else (16, 9))

        markers_all = ["o", "v", "X", "s", "h", "D"]
        colors = plt.get_cmap("tab10")(range(len(self.methods)))
        style_cycler = cycler(color=colors, marker=markers_all[: len(self.methods)])

        # (noise, methods, runs)
        errors = self.results["error"]
        median = np.nanmedian(errors, axis=2)
        failures = np.mean(np.isnan(errors), axis=2) / 0.01

        for ax, data, y_label in zip(
            axes, (median, failures), ("Essential Error (°)", "Failures (%)")
        ):
            ax.set_prop_cycle(style_cycler)
            lineobjs = ax.plot(np.array(self.noise), data, zorder=10)
            ax.set_ylabel(y_label)
            ax.set_xlabel(label)
            ax.grid()
            ax.minorticks_on()
        axes[1].yaxis.set_major_formatter(PercentFormatter(decimals=1))

        if tight:
            plt.tight_layout()

        for ax in axes:
            # Shrink current axis's height by 10% on the bottom
            box = ax.get_position()
            comp = 0.7 if tight else 0.85
            ax.set_position(
                [box.x0, box.y0 + box.height * (1 - comp), box.width, box.height * comp]
            )

        f.legend(
            lineobjs,
            [m.name for m in self.methods],
            loc="lower center",
            bbox_to_anchor=(0.5, 0.05),
            ncol=len(self.methods),
        )
        plt.show()


    def print_timings(self):
        if not self.timed:
            warnings.warn("Timinings were not logged for this class. Doing nothing.")
            return

        mean_times = 1000 * np.nanmean(self.results["time"], axis=(0, 2))
        for i in range(len(mean_times)):
            print(self.methods[i].name + ":", str(mean_times[i]) + "ms")


    def print_errors(self):
        median = np.nanmedian(self.results["error"], axis=2)
        for j, noise in enumerate(self.noise):
            row = ", ".join(
                f"{m.name}: {median[j, k]:.4f}°" for k, m in enumerate(self.methods)
            )
            print(f"sigma={noise}:", row)


    def run(self, noise=None):

        # Allocate storage and other stuff
        self.init_run(noise)

        # Some printing aids
        print("Progress:   0%", end="", flush=True)
        n_prog = len(self.noise) * self.n_runs
        i_prog = 0

        for j, noise in enumerate(self.noise):
            for l in range(self.n_runs):

                # generate random pose
                R_gt, t_gt = self.random_pose()
                E_gt = self.groundtruth(R_gt, t_gt)

                # generate the minimal sample and the support set
                x1, x2 = self.generate_correspondences(3, R_gt, t_gt, noise)
                support = self.generate_correspondences(self.N_SUPPORT, R_gt, t_gt, noise)

                for k, method in enumerate(self.methods):

                    # estimate essential matrix
                    E, elapsed_time = self.estimate_essential(method, support, x1, x2)

                    # Sanitize results
                    if not np.all(np.isfinite(E)):
                        continue

                    self.results["error"][j, k, l] = compute_essential_error(E_gt, E)
                    if self.timed:
                        self.results["time"][j, k, l] = elapsed_time

                i_prog += 1
                print(
                    "\rProgress: {:>3d}%".format(int(i_prog * 100 / n_prog)),
                    end="",
                    flush=True,
                )

        print("\rProgress: 100%", flush=True)


class OrthographicSynth(SynthSuite):

    def random_pose(self):
        # Generate random rotation
        axis = np.random.random(3) - 0.5
        axis /= np.linalg.norm(axis)

        angle = 2 * np.pi * np.random.random(1)
        R = aa2rm(angle * axis)

        # Generate random image plane translation
        t = np.random.random(2) - 0.5
        return R, t

    def groundtruth(self, R, t):
        return orthographic_essential(R, t)

    def generate_correspondences(self, n_elements, R, t, noise):
        # create all points
        pts = self.LENGTH * (np.random.random((3, n_elements)) - 0.5)
        x1 = pts[:2].copy()
        x2 = (R @ pts)[:2] + t[:, None]

        # Add gaussian noise to both projections
        x1 += np.random.normal(scale=noise, size=x1.shape)
        x2 += np.random.normal(scale=noise, size=x2.shape)
        return x1, x2

    def plot(self, tight=False):
        super().plot(r"Noise $\sigma$", tight=tight)


class UprightSynth(SynthSuite):

    def random_pose(self):
        # Rotation about the vertical axis
        theta = 0.5 * np.pi * (np.random.random() - 0.5)
        c, s = np.cos(theta), np.sin(theta)
        R = np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])

        # Generate random horizontal translation
        t = np.random.random(3) - 0.5
        t[1] = 0.0
        return R, t

    def groundtruth(self, R, t):
        return skew(t) @ R

    def generate_correspondences(self, n_elements, R, t, noise):
        # create all points in front of the first camera
        pts = self.LENGTH * (np.random.random((3, n_elements)) - 0.5)
        pts[2] += 2.0

        bearing_a = pts + np.random.normal(scale=noise, size=pts.shape)
        bearing_a /= np.linalg.norm(bearing_a, axis=0)

        pts_b = R @ pts + t[:, None]
        bearing_b = pts_b + np.random.normal(scale=noise, size=pts.shape)
        bearing_b /= np.linalg.norm(bearing_b, axis=0)
        return bearing_a, bearing_b

    def plot(self, tight=False):
        super().plot(r"Noise $\sigma$", tight=tight)
