from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple
import numpy as np

from calibrators.calibration_data import CalibrationResult


class BaseCalibrator(ABC):
    @abstractmethod
    def calibrate(self, poses: Sequence[np.ndarray],
                  tolerance: Optional[float] = None) -> Tuple[CalibrationResult, bool]:
        """poses: raw [w, x, y, z] readings for up, forward, right (in that order)."""
        pass
