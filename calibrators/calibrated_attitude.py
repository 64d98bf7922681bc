import logging
from typing import Optional
import numpy as np

from attitude.rotations import swap_handedness
from calibrators.calibration_data import CalibrationData, CalibrationResult

log = logging.getLogger(__name__)


class CalibratedAttitude:
    """
    Turns raw sensor readings into calibrated consumer-frame orientations.

    Starts with the default (identity) calibration so apply() is always
    usable; install() swaps in the result of a successful session.
    """
    def __init__(self, data: CalibrationData = None):
        self.data = data or CalibrationData.default()
        self.result: Optional[CalibrationResult] = None

    def install(self, result: CalibrationResult) -> bool:
        """
        Returns:
            True if the result replaced the active calibration. Failed
            calibrations are ignored.
        """
        if not result.success:
            log.warning("Ignoring failed calibration; keeping %s", self.data)
            return False
        self.data = CalibrationData.from_result(result)
        self.result = result
        log.info("Installed %s", self.data)
        return True

    def reset(self):
        self.data = CalibrationData.default()
        self.result = None

    def apply(self, raw_q: np.ndarray) -> np.ndarray:
        return self.data.calibrate(swap_handedness(raw_q))

    def apply_trajectory(self, raw_quats: np.ndarray) -> np.ndarray:
        """N x 4 raw [w, x, y, z] -> N x 4 calibrated."""
        raw_quats = np.asarray(raw_quats, dtype=float)
        if raw_quats.ndim != 2 or raw_quats.shape[1] != 4:
            raise ValueError(f"Expected N x 4 quaternions, got shape {raw_quats.shape}")
        if len(raw_quats) == 0:
            return np.empty((0, 4))
        return np.array([self.apply(q) for q in raw_quats])
