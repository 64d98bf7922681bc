"""
Step-by-step recording of the three calibration poses.

States: idle, or recording at step 0..2. Each next_step() samples the bound
attitude source once. After the third sample the poses go to the calibrator
and the session returns to idle with exactly one outcome:
CalibrationFinished(result) or BadCalibration().

Calls that make no sense in the current state (next/previous while idle,
start while recording) are ignored.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union
import numpy as np

from attitude.config import CalibrationConfig
from attitude.sources import AttitudeSource
from calibrators.axis_calibrator import AxisCalibrator
from calibrators.base_calibrator import BaseCalibrator
from calibrators.calibration_data import CalibrationResult

log = logging.getLogger(__name__)

STEP_NAMES = ("up", "forward", "right")


@dataclass(frozen=True)
class CalibrationFinished:
    result: CalibrationResult


@dataclass(frozen=True)
class BadCalibration:
    pass


CalibrationOutcome = Union[CalibrationFinished, BadCalibration]


@dataclass(frozen=True)
class StepResult:
    """Truthy when the step just completed the session."""
    completed: bool
    outcome: Optional[CalibrationOutcome] = None

    def __bool__(self):
        return self.completed


class CalibrationSession:
    def __init__(self,
                 calibrator: Optional[BaseCalibrator] = None,
                 config: Optional[CalibrationConfig] = None,
                 on_finished: Optional[Callable[[CalibrationResult], None]] = None,
                 on_bad_calibration: Optional[Callable[[], None]] = None):
        self.config = config or CalibrationConfig()
        self.calibrator = calibrator or AxisCalibrator(self.config)
        self.on_finished = on_finished
        self.on_bad_calibration = on_bad_calibration

        self._calibrating = False
        self._source: Optional[AttitudeSource] = None
        self._step = 0
        self._recorded: List[Optional[np.ndarray]] = [None] * self.config.steps_count
        self._last_outcome: Optional[CalibrationOutcome] = None

    @property
    def is_calibrating(self) -> bool:
        return self._calibrating

    @property
    def step(self) -> int:
        return self._step

    @property
    def step_name(self) -> Optional[str]:
        if not self._calibrating:
            return None
        return STEP_NAMES[self._step]

    @property
    def last_outcome(self) -> Optional[CalibrationOutcome]:
        return self._last_outcome

    def start_calibration(self, source: AttitudeSource):
        if self._calibrating:
            log.debug("start_calibration ignored: already recording (step %d)", self._step)
            return
        self._calibrating = True
        self._source = source
        self._step = 0
        self._recorded = [None] * self.config.steps_count
        log.debug("Calibration started")

    def stop_calibration(self):
        self._calibrating = False
        self._source = None
        self._step = 0
        self._recorded = [None] * self.config.steps_count
        log.debug("Calibration stopped")

    def next_step(self) -> StepResult:
        """
        Records the current attitude for this step and advances.

        Returns:
            StepResult, truthy if this was the last step. Its outcome tells
            whether the calibration was accepted.
        """
        if not self._calibrating:
            log.debug("next_step ignored: not calibrating")
            return StepResult(completed=False)

        attitude = np.array(self._source.get_attitude(), dtype=float)
        self._recorded[self._step] = attitude
        log.debug("Recorded %s pose: %s", STEP_NAMES[self._step], np.round(attitude, 4))
        self._step += 1

        if self._step == self.config.steps_count:
            outcome = self._finish_calibration()
            return StepResult(completed=True, outcome=outcome)
        return StepResult(completed=False)

    def previous_step(self) -> bool:
        """
        Goes back one step; going back from the first step ends the session.

        Returns:
            Whether the session is still recording.
        """
        if not self._calibrating:
            log.debug("previous_step ignored: not calibrating")
            return False

        self._step -= 1
        if self._step < 0:
            self.stop_calibration()
            return False
        return True

    def _finish_calibration(self) -> CalibrationOutcome:
        poses = np.array(self._recorded)
        self.stop_calibration()

        result, success = self.calibrator.calibrate(poses, self.config.calib_tolerance)
        if success:
            outcome: CalibrationOutcome = CalibrationFinished(result)
            if self.on_finished is not None:
                self.on_finished(result)
        else:
            outcome = BadCalibration()
            if self.on_bad_calibration is not None:
                self.on_bad_calibration()

        self._last_outcome = outcome
        return outcome
