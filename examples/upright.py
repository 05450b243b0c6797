import numpy as np
from essential3pt import upright_residual, upright_three_point

# fix seed to allow for reproducible results
np.random.seed(42)

# instantiate a couple of points in front of the first camera
pts = 0.6 * (np.random.random((3, 3)) - 0.5)
pts[2] += 2.0

# A rotation about the vertical axis and a horizontal translation
theta = 0.35
R_gt = np.array(
    [
        [np.cos(theta), 0, np.sin(theta)],
        [0, 1, 0],
        [-np.sin(theta), 0, np.cos(theta)],
    ]
)
t_gt = np.array([0.4, 0.0, -0.15])
E_gt = np.array(
    [[0, -t_gt[2], t_gt[1]], [t_gt[2], 0, -t_gt[0]], [-t_gt[1], t_gt[0], 0]]
) @ R_gt

# Bearing vectors in both cameras
bearing_a = pts / np.linalg.norm(pts, axis=0)
bearing_b = R_gt @ pts + t_gt[:, None]
bearing_b /= np.linalg.norm(bearing_b, axis=0)

# Compute the essential matrix. Only one candidate is provided and it
# matches the ground truth up to scale and sign
(E,) = upright_three_point(bearing_a, bearing_b)

print("E (ground truth):", E_gt / np.linalg.norm(E_gt), sep="\n")
print("E (estimate):", E, sep="\n")
print("Residuals:", upright_residual(E, bearing_a, bearing_b))
