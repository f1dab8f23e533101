import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass

import numpy as np

from skeleton_config import DEFAULT_MODELS, check_input_size, resolve_model_path

logger = logging.getLogger(__name__)


class PoseEstimationError(RuntimeError):
    def __init__(self, operation, detail=""):
        self.operation = operation
        self.detail = detail
        message = f"failed to {operation}"
        if detail:
            message += f" ({detail})"
        super().__init__(message + "!")


@dataclass(eq=False)
class Skeleton:
    keypoints: np.ndarray  # (N, 2) pixel coordinates, (-1, -1) when missing
    confidences: np.ndarray  # (N,)
    id: int = -1

    def __post_init__(self):
        self.keypoints = np.asarray(self.keypoints, dtype=np.float32).reshape(-1, 2)
        self.confidences = np.asarray(self.confidences, dtype=np.float32).reshape(-1)
        if len(self.keypoints) != len(self.confidences):
            raise ValueError("keypoints and confidences must have the same length")

    @property
    def num_keypoints(self):
        return len(self.keypoints)

    def visible(self, threshold):
        return self.confidences >= threshold


def check_image(image):
    if image is None or getattr(image, "size", 0) == 0:
        raise PoseEstimationError("estimate keypoints", "empty image")
    if image.dtype != np.uint8:
        raise PoseEstimationError("estimate keypoints", f"unsupported dtype {image.dtype}")
    if image.ndim != 3 or image.shape[2] != 3:
        raise PoseEstimationError("estimate keypoints", f"expected HxWx3 image, got shape {image.shape}")


class PoseEstimator:
    """Runs a pose backend with a start/wait request pair.

    Only one request may be in flight at a time, mirroring a single
    async request handle.
    """

    def __init__(self, backend):
        self.backend = backend
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pose")
        self._pending = None

    def estimate_keypoints(self, image, input_size):
        check_image(image)
        input_size = check_input_size(input_size)
        try:
            return self.backend.infer(image, input_size)
        except Exception as e:
            raise PoseEstimationError("estimate keypoints", str(e)) from e

    def estimate_keypoints_start_async(self, image, input_size):
        if self._pending is not None:
            raise PoseEstimationError("start async request", "a request is already pending")
        check_image(image)
        input_size = check_input_size(input_size)
        self._pending = self._executor.submit(self.backend.infer, image.copy(), input_size)

    @property
    def pending(self):
        return self._pending is not None

    def wait_for_keypoints(self, timeout_ms):
        if self._pending is None:
            return None
        try:
            skeletons = self._pending.result(timeout=timeout_ms / 1000.0)
        except FutureTimeoutError:
            logger.debug("keypoint request timed out after %d ms", timeout_ms)
            return None
        except Exception as e:
            self._pending = None
            raise PoseEstimationError("wait for keypoints", str(e)) from e
        self._pending = None
        return skeletons

    def close(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._executor.shutdown(wait=True)
        self.backend.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def create_estimator(pose_config):
    backend_name = pose_config.backend
    if backend_name not in DEFAULT_MODELS:
        raise ValueError(f"unknown pose backend: {backend_name!r} (expected 'yolo' or 'mediapipe')")
    model = resolve_model_path(pose_config.model or DEFAULT_MODELS[backend_name])
    if backend_name == "yolo":
        from yolo_pose import YoloPoseBackend

        backend = YoloPoseBackend(
            model,
            device=pose_config.device,
            half=pose_config.half,
            max_people=pose_config.max_people,
        )
    else:
        from mediapipe_pose import MediaPipePoseBackend

        backend = MediaPipePoseBackend(model, max_people=pose_config.max_people)

    logger.info("loaded %s pose model %s", backend_name, model)
    return PoseEstimator(backend)
