"""
Axis calibration from three held poses.

The user holds the device
  1. in its reference ("up") pose,
  2. tilted forward by roughly 45 degrees,
  3. tilted right by roughly 45 degrees.

The rotation from pose 1 to pose 2 turns about the device axis that should
become X; the rotation from pose 1 to pose 3 turns about the (negated) axis
that should become Z. Both axes are snapped to the nearest cardinal axis, Y
is completed with a cross product, and the resulting basis becomes the
correction rotation.
"""

import logging
from typing import Optional, Sequence, Tuple
import numpy as np

from attitude.config import CalibrationConfig
from attitude.rotations import (
    basis_to_quaternion,
    normalize_quaternion,
    normalize_vector,
    project_on_basis_axis,
    relative_rotation,
    sign,
    swap_handedness,
)
from calibrators.base_calibrator import BaseCalibrator
from calibrators.calibration_data import CalibrationResult

log = logging.getLogger(__name__)


class AxisCalibrator(BaseCalibrator):
    def __init__(self, config: Optional[CalibrationConfig] = None):
        self.config = config or CalibrationConfig()

    def _check_poses(self, poses: Sequence[np.ndarray]) -> np.ndarray:
        poses = np.asarray(poses, dtype=float)
        if poses.shape != (self.config.steps_count, 4):
            raise ValueError(f"Expected {self.config.steps_count} quaternions (up, forward, right), "
                             f"got array of shape {poses.shape}")
        return poses

    def calibrate(self, poses: Sequence[np.ndarray],
                  tolerance: Optional[float] = None) -> Tuple[CalibrationResult, bool]:
        """
        Derives the correction rotation from the raw up/forward/right poses.

        Args:
            poses: three raw sensor-frame quaternions [w, x, y, z]
            tolerance: axis projection strictness; defaults to config.calib_tolerance

        Returns:
            (result, success). Geometric problems never raise: they show up as
            success=False, with every intermediate kept in the result.
        """
        poses = self._check_poses(poses)
        if tolerance is None:
            tolerance = self.config.calib_tolerance

        device_up, device_front, device_right = poses

        left_up = swap_handedness(device_up)
        left_front = swap_handedness(device_front)
        left_right = swap_handedness(device_right)

        to_front = normalize_quaternion(relative_rotation(left_up, left_front))
        to_right = normalize_quaternion(relative_rotation(left_up, left_right))

        xaxis = normalize_vector(to_front[1:]) * sign(to_front[0])
        projected_x, x_projected = project_on_basis_axis(xaxis, tolerance)
        projected_x = normalize_vector(projected_x)

        zaxis = -normalize_vector(to_right[1:]) * sign(to_right[0])
        projected_z, z_projected = project_on_basis_axis(zaxis, tolerance)
        projected_z = normalize_vector(projected_z)

        dot = float(np.dot(projected_x, projected_z))
        orthogonal = abs(dot) < self.config.orthogonality_epsilon

        yaxis = normalize_vector(np.cross(zaxis, xaxis))
        projected_y = normalize_vector(np.cross(projected_z, projected_x))

        correction = basis_to_quaternion(projected_x, projected_y, projected_z)

        result = CalibrationResult(
            up=device_up,
            front=device_front,
            right=device_right,
            left_up=left_up,
            left_front=left_front,
            left_right=left_right,
            xaxis=xaxis,
            yaxis=yaxis,
            zaxis=zaxis,
            projected_xaxis=projected_x,
            projected_yaxis=projected_y,
            projected_zaxis=projected_z,
            correction=correction,
            x_projected=x_projected,
            z_projected=z_projected,
            orthogonal=orthogonal,
        )

        if result.success:
            log.info("Calibration succeeded, correction=%s", np.round(correction, 4))
        else:
            log.warning("Calibration rejected (tolerance=%.2f, |x.z|=%.2e): %s",
                        tolerance, abs(dot), result.describe())
        return result, result.success
