import logging

import numpy as np
import pyrealsense2 as rs

from image_utils import realsense_to_mat
from sensors import SensorFrame

logger = logging.getLogger(__name__)

COLOR_FORMATS = {
    rs.format.bgr8: "bgr8",
    rs.format.rgba8: "rgba8",
}


class PixeltoPcl:
    """Deprojects color pixels through a depth frame, in meters."""

    def __init__(self, depth_frame):
        self.depth_frame = depth_frame
        self.intrinsics = depth_frame.get_profile().as_video_stream_profile().get_intrinsics()
        self.width = depth_frame.get_width()
        self.height = depth_frame.get_height()

    def convert_pixel_to_3d(self, x, y):
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        upixel = [float(x), float(y)]
        distance = self.depth_frame.get_distance(int(x), int(y))
        pcd = rs.rs2_deproject_pixel_to_point(self.intrinsics, upixel, distance)
        return pcd[0], pcd[1], pcd[2]


class RealSenseSensor:
    name = "realsense"

    def __init__(self, width=1280, height=720, fps=30, align_depth=False):
        self.check_camera_connection()

        self.pipeline = rs.pipeline()
        self.config = rs.config()
        self.config.enable_stream(rs.stream.color, width, height, rs.format.bgr8, fps)
        self.config.enable_stream(rs.stream.depth, width, height, rs.format.z16, fps)
        self.align = rs.align(rs.stream.color) if align_depth else None
        self.started = False

    def check_camera_connection(self):
        ctx = rs.context()
        devices = ctx.query_devices()
        if not devices:
            raise RuntimeError("No RealSense devices found. Connect a RealSense camera and try again.")
        for dev in devices:
            logger.info("found %s (serial %s)",
                        dev.get_info(rs.camera_info.name),
                        dev.get_info(rs.camera_info.serial_number))

    def start(self):
        profile = self.pipeline.start(self.config)
        self.started = True
        intrinsics = profile.get_stream(rs.stream.depth).as_video_stream_profile().get_intrinsics()
        logger.info("depth intrinsics %dx%d fx=%.1f fy=%.1f",
                    intrinsics.width, intrinsics.height, intrinsics.fx, intrinsics.fy)

    def update(self):
        frames = self.pipeline.wait_for_frames()
        if self.align is not None:
            frames = self.align.process(frames)

        color_frame = frames.get_color_frame()
        depth_frame = frames.get_depth_frame()
        if not color_frame:
            return None

        fmt = COLOR_FORMATS.get(color_frame.get_profile().format())
        if fmt is None:
            raise ValueError("this format not support!")
        color = realsense_to_mat(color_frame.get_data(), fmt,
                                 color_frame.get_width(), color_frame.get_height())

        if not depth_frame:
            return SensorFrame(color=color)

        pcl = PixeltoPcl(depth_frame)
        depth = np.asanyarray(depth_frame.get_data()).copy()
        return SensorFrame(color=color, deproject=pcl.convert_pixel_to_3d, depth=depth)

    def stop(self):
        if self.started:
            self.pipeline.stop()
            self.started = False
