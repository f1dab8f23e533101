"""
Tests for config loading and model path resolution.
"""

import json

import pytest

from skeleton_config import (
    DEFAULT_MODELS,
    AppConfig,
    check_input_size,
    default_model_dir,
    load_config,
    resolve_model_path,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SKELETON_CONFIG", "SKELETON_MODEL", "SKELETON_BACKEND", "SKELETON_DEVICE",
                 "SKELETON_MODEL_DIR", "LOCALAPPDATA"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file():
    config = load_config()

    assert config == AppConfig()
    assert config.sensor.width == 1280
    assert config.sensor.height == 720
    assert config.sensor.fps == 30
    assert config.pose.input_size == 192
    assert config.pose.timeout_ms == 1000
    assert config.draw.confidence_threshold == 0.5
    assert config.viewer.wait_key_delay == 10
    assert config.viewer.quit_key == "q"


def test_missing_file_falls_back_to_defaults(tmp_path):
    assert load_config(tmp_path / "nope.json") == AppConfig()


def test_malformed_json_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_config(path) == AppConfig()


def test_directory_config_falls_back_to_defaults(tmp_path, caplog):
    with caplog.at_level("WARNING"):
        assert load_config(tmp_path) == AppConfig()

    assert "ignoring unreadable config" in caplog.text


def test_file_values_are_parsed(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "sensor": {"width": 640, "height": 480, "fps": 15, "align_depth": "yes"},
        "pose": {"backend": "MediaPipe", "input_size": 256, "half": True},
        "draw": {"confidence_threshold": 0.3},
        "viewer": {"window_name": "demo", "quit_key": "escape"},
    }), encoding="utf-8")

    config = load_config(path)

    assert (config.sensor.width, config.sensor.height, config.sensor.fps) == (640, 480, 15)
    assert config.sensor.align_depth is True
    assert config.pose.backend == "mediapipe"
    assert config.pose.input_size == 256
    assert config.pose.half is True
    assert config.draw.confidence_threshold == pytest.approx(0.3)
    assert config.viewer.window_name == "demo"
    assert config.viewer.quit_key == "e"


def test_bad_values_use_field_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"sensor": {"width": "wide"}, "draw": {"radius": None}}), encoding="utf-8")

    config = load_config(path)

    assert config.sensor.width == 1280
    assert config.draw.radius == 5


def test_invalid_input_size_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"pose": {"input_size": 100}}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)


@pytest.mark.parametrize("size", [16, 192, 640])
def test_check_input_size_accepts_multiples_of_16(size):
    assert check_input_size(size) == size


@pytest.mark.parametrize("size", [0, -16, 100])
def test_check_input_size_rejects_others(size):
    with pytest.raises(ValueError):
        check_input_size(size)


def test_env_overrides(monkeypatch, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"pose": {"model": "from-file.pt"}}), encoding="utf-8")
    monkeypatch.setenv("SKELETON_CONFIG", str(path))
    monkeypatch.setenv("SKELETON_MODEL", "from-env.pt")
    monkeypatch.setenv("SKELETON_DEVICE", "cuda:0")

    config = load_config()

    assert config.pose.model == "from-env.pt"
    assert config.pose.device == "cuda:0"
    assert config.pose.backend == "yolo"


def test_default_model_dir_prefers_explicit_env(monkeypatch, tmp_path):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "appdata"))
    assert default_model_dir() == tmp_path / "appdata" / "SkeletonTracking" / "models"

    monkeypatch.setenv("SKELETON_MODEL_DIR", str(tmp_path / "models"))
    assert default_model_dir() == tmp_path / "models"


def test_resolve_model_path(monkeypatch, tmp_path):
    monkeypatch.setenv("SKELETON_MODEL_DIR", str(tmp_path))
    (tmp_path / "fp16").mkdir()
    weights = tmp_path / "fp16" / "pose.pt"
    weights.write_bytes(b"")

    assert resolve_model_path("fp16/pose.pt") == str(weights)
    # unknown names pass through for the inference library to fetch
    assert resolve_model_path(DEFAULT_MODELS["yolo"]) == DEFAULT_MODELS["yolo"]
