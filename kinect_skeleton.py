import logging
from dataclasses import replace

from kinect_sensor import KinectSensor
from skeleton_cli import build_parser, config_from_args, run_main, setup_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = build_parser("Skeleton keypoints with 3D positions from an Azure Kinect.")
    parser.add_argument("--index", type=int, default=None, help="kinect device index (default: 0)")
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    device_index = args.index if args.index is not None else config.sensor.device_index
    config = replace(
        config,
        sensor=replace(config.sensor, device_index=device_index),
        viewer=replace(config.viewer, window_name=f"skeleton (kinect {device_index})"),
    )

    def sensor_factory():
        return KinectSensor(device_index)

    return run_main(sensor_factory, config)


if __name__ == "__main__":
    raise SystemExit(main())
