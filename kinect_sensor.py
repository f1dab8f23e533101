import logging

from image_utils import k4a_to_mat
from sensors import SensorFrame

logger = logging.getLogger(__name__)


class KinectSensor:
    """Azure Kinect color + depth, with depth transformed into the color camera.

    pyk4a needs the Azure Kinect Sensor SDK runtime, so it is imported
    when the sensor is created rather than at module import.
    """

    name = "kinect"
    color_format = "COLOR_BGRA32"

    def __init__(self, device_index=0):
        try:
            import pyk4a
        except Exception as e:
            raise RuntimeError(
                "pyk4a is not available. Install the Azure Kinect Sensor SDK and `pip install pyk4a`."
            ) from e

        self._pyk4a = pyk4a
        self.device_index = device_index

        device_count = pyk4a.connected_device_count()
        if device_count == 0:
            raise RuntimeError("Failed to found device!")
        if device_index >= device_count:
            raise RuntimeError(f"Kinect device {device_index} not found ({device_count} connected)")

        self.device = pyk4a.PyK4A(
            config=pyk4a.Config(
                color_format=pyk4a.ImageFormat.COLOR_BGRA32,
                color_resolution=pyk4a.ColorResolution.RES_720P,
                depth_mode=pyk4a.DepthMode.NFOV_UNBINNED,
                synchronized_images_only=True,
                wired_sync_mode=pyk4a.WiredSyncMode.STANDALONE,
            ),
            device_id=device_index,
        )
        self.started = False

    def start(self):
        try:
            self.device.start()
        except self._pyk4a.K4AException as e:
            raise RuntimeError(f"failed to start kinect {self.device_index}: {e}") from e
        self.started = True
        logger.info("opened kinect %d (serial %s)", self.device_index, self.device.serial)

    def update(self):
        try:
            capture = self.device.get_capture(timeout=-1)
        except self._pyk4a.K4AException as e:
            raise RuntimeError(f"failed to get capture from kinect {self.device_index}: {e}") from e

        if capture.color is None:
            return None

        raw = capture.color
        color = k4a_to_mat(raw, self.color_format, raw.shape[1], raw.shape[0])

        depth = capture.transformed_depth
        if depth is None:
            return SensorFrame(color=color)

        return SensorFrame(color=color, deproject=self.deprojector(depth), depth=depth)

    def deprojector(self, transformed_depth):
        calibration = self.device.calibration
        color_camera = self._pyk4a.CalibrationType.COLOR
        height, width = transformed_depth.shape[:2]

        def deproject(x, y):
            if not (0 <= x < width and 0 <= y < height):
                return None
            depth_mm = float(transformed_depth[y, x])
            if depth_mm <= 0:
                return None
            try:
                return calibration.convert_2d_to_3d((float(x), float(y)), depth_mm, color_camera, color_camera)
            except ValueError:
                return None

        return deproject

    def stop(self):
        if self.started:
            self.device.stop()
            self.started = False
