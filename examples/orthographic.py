import numpy as np
from essential3pt import orthographic_residual, orthographic_three_point

# fix seed to allow for reproducible results
np.random.seed(42)

# instantiate a couple of points centered around the origin
pts = 0.6 * (np.random.random((3, 3)) - 0.5)

# A rotation and an image plane translation
ca, sa = np.cos(0.3), np.sin(0.3)
cb, sb = np.cos(-0.4), np.sin(-0.4)
R_x = np.array([[1, 0, 0], [0, ca, -sa], [0, sa, ca]])
R_y = np.array([[cb, 0, sb], [0, 1, 0], [-sb, 0, cb]])
R_gt = R_x @ R_y
t_gt = np.array([0.1, -0.2])

# Orthographic projections in both views
x1 = pts[:2]
x2 = (R_gt @ pts)[:2] + t_gt[:, None]

# Ground truth, normalized such that c^2 + d^2 = 1
s = np.hypot(R_gt[0, 2], R_gt[1, 2])
c, d = -R_gt[1, 2] / s, R_gt[0, 2] / s
a, b = -(c * R_gt[0, :2] + d * R_gt[1, :2])
E_gt = np.array([[0, 0, a], [0, 0, b], [c, d, -(c * t_gt[0] + d * t_gt[1])]])

# Compute essential matrix candidates. The problem is minimal so two
# will be provided, one of them matching the ground truth up to sign
Es = orthographic_three_point(x1, x2)

print("Nr of candidates:", len(Es))
print("E (ground truth):", E_gt, sep="\n")
for i, E in enumerate(Es):
    print(f"E (candidate {i}):", E, sep="\n")
    print("Residuals:", orthographic_residual(E, x1, x2))
