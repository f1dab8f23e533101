import argparse
import logging
from dataclasses import replace

from pose_estimator import create_estimator
from skeleton_config import check_input_size, load_config
from skeleton_viewer import SkeletonViewer
from tracker import SkeletonTracker

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser(description):
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", help="JSON config file (default: $SKELETON_CONFIG)")
    parser.add_argument("--backend", choices=["yolo", "mediapipe"], help="pose inference engine")
    parser.add_argument("--model", help="model weights, a path or a name in the model directory")
    parser.add_argument("--device", help="inference device, e.g. cpu, cuda:0")
    parser.add_argument("--half", action="store_true", default=None, help="use FP16 inference")
    parser.add_argument("--input-size", type=int, help="network input height, a multiple of 16")
    parser.add_argument("--threshold", type=float, help="minimum keypoint confidence to draw")
    parser.add_argument("--show-depth", action="store_true", default=None, help="also show a colorized depth window")
    parser.add_argument("--log-level", default="INFO", help="logging level (default: INFO)")
    return parser


def config_from_args(args):
    config = load_config(args.config)

    pose_overrides = {}
    if args.backend is not None:
        pose_overrides["backend"] = args.backend
        if args.model is None and args.backend != config.pose.backend:
            pose_overrides["model"] = ""
    if args.model is not None:
        pose_overrides["model"] = args.model
    if args.device is not None:
        pose_overrides["device"] = args.device
    if args.half is not None:
        pose_overrides["half"] = args.half
    if args.input_size is not None:
        pose_overrides["input_size"] = check_input_size(args.input_size)
    if pose_overrides:
        config = replace(config, pose=replace(config.pose, **pose_overrides))

    if args.threshold is not None:
        config = replace(config, draw=replace(config.draw, confidence_threshold=args.threshold))
    if args.show_depth is not None:
        config = replace(config, viewer=replace(config.viewer, show_depth=args.show_depth))
    return config


def setup_logging(level):
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def run_viewer(sensor_factory, config):
    sensor = sensor_factory()
    try:
        estimator = create_estimator(config.pose)
    except Exception:
        sensor.stop()
        raise

    tracker = SkeletonTracker(threshold=config.draw.confidence_threshold)
    try:
        viewer = SkeletonViewer(sensor, estimator, tracker, config)
    except Exception:
        estimator.close()
        sensor.stop()
        raise

    with viewer:
        viewer.run()


def run_main(sensor_factory, config, errors=(RuntimeError, ValueError, OSError)):
    try:
        run_viewer(sensor_factory, config)
    except KeyboardInterrupt:
        logger.info("interrupted")
    except errors as e:
        logger.error("%s", e)
        return 1
    return 0
