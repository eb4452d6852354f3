"""
Inverse kinematics for the crane's planar swing/elbow pair.
"""
import numpy as np


class UnreachablePositionError(ValueError):
    """Target lies outside the annulus the two links can reach."""


def ikcalc_2rmanip(x, y, l1, l2):
    """Solve inverse kinematics for a 2R planar manipulator.

    Args:
        x, y: Target point in the manipulator plane
        l1: First link length
        l2: Second link length

    Returns:
        ((theta1, theta2), (theta1, theta2)) in degrees. The first pair is the
        elbow-down branch (theta2 >= 0), the second the elbow-up branch.

    Raises:
        UnreachablePositionError: if the point is outside [|l1 - l2|, l1 + l2]
    """
    # polar form of the target
    r_squared = x * x + y * y
    phi = np.arctan2(y, x)

    cos_theta2 = (r_squared - l1 * l1 - l2 * l2) / (2.0 * l1 * l2)
    if abs(cos_theta2) > 1.0:
        raise UnreachablePositionError("No solution: unreachable position.")

    solutions = []
    theta2_down = np.arccos(cos_theta2)
    for theta2 in (theta2_down, -theta2_down):
        k1 = l1 + l2 * np.cos(theta2)
        k2 = l2 * np.sin(theta2)
        theta1 = phi - np.arctan2(k2, k1)
        solutions.append((float(np.degrees(theta1)), float(np.degrees(theta2))))

    return solutions[0], solutions[1]
