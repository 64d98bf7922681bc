from dataclasses import dataclass, fields
from typing import Optional
import numpy as np

from attitude.rotations import IDENTITY, quat_inverse, quat_multiply, swap_handedness


@dataclass(frozen=True, eq=False)
class CalibrationResult:
    """
    Everything computed by one calibration attempt, kept even on failure.

    Quaternions are [w, x, y, z]; arrays are read-only.
    """
    # Raw sensor-frame poses
    up: np.ndarray
    front: np.ndarray
    right: np.ndarray
    # Consumer-frame (handedness swapped) poses
    left_up: np.ndarray
    left_front: np.ndarray
    left_right: np.ndarray
    # Candidate axes before projection (yaxis = cross(zaxis, xaxis))
    xaxis: np.ndarray
    yaxis: np.ndarray
    zaxis: np.ndarray
    projected_xaxis: np.ndarray
    projected_yaxis: np.ndarray
    projected_zaxis: np.ndarray
    correction: np.ndarray
    x_projected: bool
    z_projected: bool
    orthogonal: bool

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                frozen = np.array(value, dtype=float)
                frozen.setflags(write=False)
                object.__setattr__(self, f.name, frozen)

    @property
    def success(self) -> bool:
        return self.x_projected and self.z_projected and self.orthogonal

    def describe(self) -> str:
        status = "OK" if self.success else "FAILED"
        return (f"Calibration {status}: "
                f"x_projected={self.x_projected}, z_projected={self.z_projected}, "
                f"orthogonal={self.orthogonal}, "
                f"xaxis={np.round(self.xaxis, 3)}, zaxis={np.round(self.zaxis, 3)}, "
                f"correction={np.round(self.correction, 4)}")


class CalibrationData:
    """
    Active calibration used at runtime.

    Stores the correction c and the consumer-frame reference pose U, plus the
    derived values c^-1 and c * U^-1. All four are only ever written together
    by update(), so readers never see a mix of old and new values.

    calibrate(q) = c * U^-1 * q * c^-1
    """
    def __init__(self, correction: np.ndarray = IDENTITY, reference: Optional[np.ndarray] = None):
        if reference is None:
            reference = swap_handedness(IDENTITY)
        self._correction = IDENTITY.copy()
        self._reference = IDENTITY.copy()
        self._correction_inverse = IDENTITY.copy()
        self._reference_corrected = IDENTITY.copy()
        self.update(correction=correction, reference=reference)

    @classmethod
    def default(cls) -> 'CalibrationData':
        """Identity correction with the mirrored neutral pose as reference."""
        return cls(correction=IDENTITY, reference=swap_handedness(IDENTITY))

    @classmethod
    def from_result(cls, result: CalibrationResult) -> 'CalibrationData':
        if not result.success:
            raise ValueError("Refusing to build calibration data from a failed calibration")
        return cls(correction=result.correction, reference=result.left_up)

    @property
    def correction(self) -> np.ndarray:
        return self._correction.copy()

    @property
    def reference(self) -> np.ndarray:
        return self._reference.copy()

    @property
    def correction_inverse(self) -> np.ndarray:
        return self._correction_inverse.copy()

    @property
    def reference_corrected(self) -> np.ndarray:
        return self._reference_corrected.copy()

    def update(self, correction: Optional[np.ndarray] = None, reference: Optional[np.ndarray] = None):
        """
        Replaces the correction and/or reference pose and recomputes the cache.
        Omitted arguments keep their current value.
        """
        new_correction = self._correction if correction is None else np.asarray(correction, dtype=float).copy()
        new_reference = self._reference if reference is None else np.asarray(reference, dtype=float).copy()

        new_correction_inverse = quat_inverse(new_correction)
        new_reference_corrected = quat_multiply(new_correction, quat_inverse(new_reference))

        self._correction = new_correction
        self._reference = new_reference
        self._correction_inverse = new_correction_inverse
        self._reference_corrected = new_reference_corrected

    def calibrate(self, q: np.ndarray) -> np.ndarray:
        """
        Re-expresses a live consumer-frame attitude relative to the calibrated frame.
        """
        return quat_multiply(quat_multiply(self._reference_corrected, np.asarray(q, dtype=float)),
                             self._correction_inverse)

    def __repr__(self):
        return (f"CalibrationData(correction={np.round(self._correction, 4)}, "
                f"reference={np.round(self._reference, 4)})")
