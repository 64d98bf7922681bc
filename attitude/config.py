"""
Calibration parameters.

The only user-facing knob is calib_tolerance: the fraction used by axis
projection to decide whether a measured axis is close enough to a cardinal
direction. Lower is stricter.

Rough guide for a unit axis that deviates by an angle a from a cardinal axis
(projection accepts when tan(a)^2 < tolerance):
- 0.4  -> up to ~32 deg  (default)
- 0.2  -> up to ~24 deg
- 0.6  -> up to ~38 deg
"""

from dataclasses import dataclass
from typing import Dict
import logging

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationConfig:
    """
    Parameters for one calibration attempt.
    """
    calib_tolerance: float = 0.4          # axis projection strictness, in (0, 1)
    orthogonality_epsilon: float = 1e-5   # max |dot(x, z)| of projected axes
    steps_count: int = 3                  # up, forward, right

    def __post_init__(self):
        if not 0.0 < self.calib_tolerance < 1.0:
            raise ValueError(f"calib_tolerance must be in (0, 1), got {self.calib_tolerance}")
        if self.orthogonality_epsilon <= 0.0:
            raise ValueError(f"orthogonality_epsilon must be positive, got {self.orthogonality_epsilon}")
        if self.steps_count != 3:
            raise ValueError("Axis calibration needs exactly 3 poses (up, forward, right)")


PRESETS: Dict[str, CalibrationConfig] = {
    "default": CalibrationConfig(),
    "strict": CalibrationConfig(calib_tolerance=0.2),
    "lenient": CalibrationConfig(calib_tolerance=0.6),
}


def get_config(name: str = "default") -> CalibrationConfig:
    """
    Looks up a named preset. Unknown names fall back to "default".
    """
    key = name.lower().strip()
    if key not in PRESETS:
        log.warning("Unknown calibration preset %r, using default", name)
        return PRESETS["default"]
    return PRESETS[key]
