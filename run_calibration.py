import argparse
import logging
import sys

from attitude.config import get_config, CalibrationConfig
from attitude.pose_loader import PoseLoader, save_poses
from attitude.sources import ReplayAttitudeSource
from calibrators.calibrated_attitude import CalibratedAttitude
from calibrators.calibration_session import CalibrationSession, CalibrationFinished, STEP_NAMES


def build_figures(result, calibrated=None, timestamps=None) -> list:
    """Calibration view, plus the calibrated RPY plot when a trajectory was given."""
    from calibration_viewer import build_calibration_figure, build_trajectory_figure
    figures = [build_calibration_figure(result)]
    if calibrated is not None and len(calibrated) > 0:
        figures.append(build_trajectory_figure(calibrated, timestamps))
    return figures


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Handheld Device Axis Calibration")
    parser.add_argument("--poses", type=str, required=True,
                        help="CSV with the 3 raw calibration poses (up, forward, right)")
    parser.add_argument("--preset", type=str, default="default", help="default, strict or lenient")
    parser.add_argument("--tolerance", type=float, default=None, help="Override calib_tolerance (0-1)")
    parser.add_argument("--trajectory", type=str, default=None, help="CSV of raw attitudes to calibrate")
    parser.add_argument("--output", type=str, default=None, help="Where to write the calibrated trajectory")
    parser.add_argument("--show", action="store_true", help="Open the plotly calibration view")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    config = get_config(args.preset)
    if args.tolerance is not None:
        try:
            config = CalibrationConfig(calib_tolerance=args.tolerance,
                                       orthogonality_epsilon=config.orthogonality_epsilon)
        except ValueError as e:
            parser.error(str(e))
    print(f"Calibration tolerance: {config.calib_tolerance}")

    loader = PoseLoader()
    print(f"Loading calibration poses from {args.poses}...")
    poses = loader.load_calibration_poses(args.poses)

    session = CalibrationSession(config=config)
    session.start_calibration(ReplayAttitudeSource(poses))
    step = None
    for name in STEP_NAMES:
        print(f"Recording '{name}' pose...")
        step = session.next_step()

    if not isinstance(step.outcome, CalibrationFinished):
        print("Bad calibration: measured axes are not close enough to the device axes. Try again.")
        return 1

    result = step.outcome.result
    print(result.describe())

    attitude = CalibratedAttitude()
    attitude.install(result)

    calibrated, timestamps = None, None
    if args.trajectory:
        print(f"Calibrating trajectory {args.trajectory}...")
        raw = loader.load_poses(args.trajectory)
        timestamps = loader.load_timestamps(args.trajectory)
        calibrated = attitude.apply_trajectory(raw)
        print(f"Calibrated {len(calibrated)} samples.")
        if args.output:
            save_poses(args.output, calibrated, timestamps)
            print(f"Saved to {args.output}")

    if args.show:
        for fig in build_figures(result, calibrated, timestamps):
            fig.show()

    return 0


if __name__ == "__main__":
    sys.exit(main())
