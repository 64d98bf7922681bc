"""
Attitude sources: anything that can report the current raw device orientation.

The calibration session only needs get_attitude(); the concrete sensor
(phone gyroscope, IMU driver, recorded log) stays outside the calibration core.
"""

from typing import Protocol, runtime_checkable
import numpy as np

from attitude.rotations import IDENTITY


@runtime_checkable
class AttitudeSource(Protocol):
    def get_attitude(self) -> np.ndarray:
        """Most recent raw orientation [w, x, y, z] in the sensor frame."""
        ...


class StaticAttitudeSource:
    """Always reports the same orientation until told otherwise."""

    def __init__(self, attitude: np.ndarray = IDENTITY):
        self.attitude = np.array(attitude, dtype=float)

    def set_attitude(self, attitude: np.ndarray):
        self.attitude = np.array(attitude, dtype=float)

    def get_attitude(self) -> np.ndarray:
        return self.attitude.copy()


class ReplayAttitudeSource:
    """
    Replays recorded orientations, one row per read.

    Args:
        quaternions: N x 4 array of raw [w, x, y, z] readings
    """

    def __init__(self, quaternions: np.ndarray):
        quaternions = np.asarray(quaternions, dtype=float)
        if quaternions.ndim != 2 or quaternions.shape[1] != 4:
            raise ValueError(f"Expected N x 4 quaternions, got shape {quaternions.shape}")
        self.quaternions = quaternions
        self.index = 0

    def __len__(self):
        return len(self.quaternions)

    @property
    def remaining(self) -> int:
        return len(self.quaternions) - self.index

    def get_attitude(self) -> np.ndarray:
        if self.index >= len(self.quaternions):
            raise IndexError(f"Replay exhausted after {len(self.quaternions)} readings")
        q = self.quaternions[self.index].copy()
        self.index += 1
        return q
