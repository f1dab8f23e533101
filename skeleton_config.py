import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

logger = logging.getLogger(__name__)

# Network input height must be a multiple of this.
MULTIPLE = 16

DEFAULT_MODELS = {
    "yolo": "yolov8n-pose.pt",
    "mediapipe": "pose_landmarker_full.task",
}


@dataclass(frozen=True)
class SensorConfig:
    width: int = 1280
    height: int = 720
    fps: int = 30
    device_index: int = 0
    align_depth: bool = False


@dataclass(frozen=True)
class PoseConfig:
    backend: str = "yolo"  # yolo / mediapipe
    model: str = ""  # empty selects DEFAULT_MODELS[backend]
    device: str = "cpu"
    half: bool = False  # FP16 weights
    input_size: int = MULTIPLE * 12
    max_people: int = 6
    timeout_ms: int = 1000


@dataclass(frozen=True)
class DrawConfig:
    confidence_threshold: float = 0.5
    radius: int = 5
    label_offset: int = 20
    font_scale: float = 0.5


@dataclass(frozen=True)
class ViewerConfig:
    window_name: str = "skeleton"
    wait_key_delay: int = 10
    quit_key: str = "q"
    show_depth: bool = False


@dataclass(frozen=True)
class AppConfig:
    sensor: SensorConfig = field(default_factory=SensorConfig)
    pose: PoseConfig = field(default_factory=PoseConfig)
    draw: DrawConfig = field(default_factory=DrawConfig)
    viewer: ViewerConfig = field(default_factory=ViewerConfig)


def check_input_size(size):
    size = int(size)
    if size <= 0 or size % MULTIPLE != 0:
        raise ValueError(f"input size must be a positive multiple of {MULTIPLE}, got {size}")
    return size


def default_model_dir():
    env_dir = os.environ.get("SKELETON_MODEL_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        return Path(local_app_data) / "SkeletonTracking" / "models"
    return Path.home() / ".local" / "share" / "skeleton-tracking" / "models"


def resolve_model_path(model):
    """Look a bare model name up in the model directory.

    Names that are not found there are returned as given so that
    ultralytics can fetch its published weights by name.
    """
    path = Path(model).expanduser()
    if path.is_absolute() or path.exists():
        return str(path)
    candidate = default_model_dir() / path
    if candidate.exists():
        return str(candidate)
    return model


def _section(raw, name):
    value = raw.get(name)
    return value if isinstance(value, dict) else {}


def _as_int(v, default):
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_float(v, default):
    try:
        return float(v)
    except (TypeError, ValueError):
        return float(default)


def _as_bool(v, default):
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on")
    return bool(default)


def _as_str(v, default):
    return str(v) if v is not None else str(default)


def _parse(raw):
    s = _section(raw, "sensor")
    p = _section(raw, "pose")
    d = _section(raw, "draw")
    v = _section(raw, "viewer")

    sensor_defaults = SensorConfig()
    pose_defaults = PoseConfig()
    draw_defaults = DrawConfig()
    viewer_defaults = ViewerConfig()

    sensor = SensorConfig(
        width=_as_int(s.get("width"), sensor_defaults.width),
        height=_as_int(s.get("height"), sensor_defaults.height),
        fps=_as_int(s.get("fps"), sensor_defaults.fps),
        device_index=_as_int(s.get("device_index"), sensor_defaults.device_index),
        align_depth=_as_bool(s.get("align_depth"), sensor_defaults.align_depth),
    )
    pose = PoseConfig(
        backend=_as_str(p.get("backend"), pose_defaults.backend).strip().lower(),
        model=_as_str(p.get("model"), pose_defaults.model),
        device=_as_str(p.get("device"), pose_defaults.device),
        half=_as_bool(p.get("half"), pose_defaults.half),
        input_size=check_input_size(_as_int(p.get("input_size"), pose_defaults.input_size)),
        max_people=max(1, _as_int(p.get("max_people"), pose_defaults.max_people)),
        timeout_ms=max(0, _as_int(p.get("timeout_ms"), pose_defaults.timeout_ms)),
    )
    draw = DrawConfig(
        confidence_threshold=_as_float(d.get("confidence_threshold"), draw_defaults.confidence_threshold),
        radius=_as_int(d.get("radius"), draw_defaults.radius),
        label_offset=_as_int(d.get("label_offset"), draw_defaults.label_offset),
        font_scale=_as_float(d.get("font_scale"), draw_defaults.font_scale),
    )
    quit_key = _as_str(v.get("quit_key"), viewer_defaults.quit_key)
    viewer = ViewerConfig(
        window_name=_as_str(v.get("window_name"), viewer_defaults.window_name),
        wait_key_delay=max(1, _as_int(v.get("wait_key_delay"), viewer_defaults.wait_key_delay)),
        quit_key=quit_key[:1] or viewer_defaults.quit_key,
        show_depth=_as_bool(v.get("show_depth"), viewer_defaults.show_depth),
    )
    return AppConfig(sensor=sensor, pose=pose, draw=draw, viewer=viewer)


def _apply_env(config):
    overrides = {}
    if os.environ.get("SKELETON_MODEL"):
        overrides["model"] = os.environ["SKELETON_MODEL"]
    if os.environ.get("SKELETON_BACKEND"):
        overrides["backend"] = os.environ["SKELETON_BACKEND"].strip().lower()
    if os.environ.get("SKELETON_DEVICE"):
        overrides["device"] = os.environ["SKELETON_DEVICE"]
    if not overrides:
        return config
    return replace(config, pose=replace(config.pose, **overrides))


def load_config(path=None):
    if path is None:
        path = os.environ.get("SKELETON_CONFIG")

    raw = {}
    if path:
        p = Path(path).expanduser()
        if p.exists():
            try:
                loaded = json.loads(p.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("ignoring unreadable config %s: %s", p, e)
                loaded = {}
            if isinstance(loaded, dict):
                raw = loaded
            logger.info("loaded config from %s", p)
        else:
            logger.warning("config file %s not found, using defaults", p)

    return _apply_env(_parse(raw))
