import logging
from dataclasses import replace

import pyrealsense2 as rs

from realsense_sensor import RealSenseSensor
from skeleton_cli import build_parser, config_from_args, run_main, setup_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = build_parser("Skeleton keypoints with 3D positions from a RealSense camera.")
    parser.add_argument("--align", action="store_true", help="align depth to the color stream")
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
    except ValueError as e:
        logger.error("%s", e)
        return 1
    if args.align:
        config = replace(config, sensor=replace(config.sensor, align_depth=True))

    def sensor_factory():
        s = config.sensor
        return RealSenseSensor(s.width, s.height, s.fps, s.align_depth)

    return run_main(sensor_factory, config, errors=(RuntimeError, ValueError, OSError, rs.error))


if __name__ == "__main__":
    raise SystemExit(main())
