import logging

from sensors import WebcamSensor
from skeleton_cli import build_parser, config_from_args, run_main, setup_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = build_parser("Skeleton keypoints on a webcam stream.")
    parser.add_argument("--index", type=int, default=None, help="camera index (default: 0)")
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    def sensor_factory():
        index = args.index if args.index is not None else config.sensor.device_index
        return WebcamSensor(index, config.sensor.width, config.sensor.height)

    return run_main(sensor_factory, config)


if __name__ == "__main__":
    raise SystemExit(main())
