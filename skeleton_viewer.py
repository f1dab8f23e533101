import logging

import cv2

from draw_utils import draw_skeletons
from image_utils import colorize_depth, to_bgr
from skeleton_config import AppConfig

logger = logging.getLogger(__name__)


class SkeletonViewer:
    """Capture -> async pose inference -> overlay -> imshow, until the quit key."""

    def __init__(self, sensor, estimator, tracker, config=None):
        self.sensor = sensor
        self.estimator = estimator
        self.tracker = tracker
        self.config = config or AppConfig()

        self.frame = None
        self.color = None
        self.skeletons = []
        self.previous_skeletons = []
        self.end_of_stream = False
        self.frame_count = 0

        cv2.setUseOptimized(True)
        self.sensor.start()

    @property
    def window_name(self):
        return self.config.viewer.window_name

    def run(self):
        quit_key = ord(self.config.viewer.quit_key)
        while True:
            self.update()
            if self.end_of_stream:
                logger.info("%s stream ended after %d frames", self.sensor.name, self.frame_count)
                cv2.waitKey(0)
                break

            self.draw()
            self.show()

            key = cv2.waitKey(self.config.viewer.wait_key_delay)
            if key & 0xFF == quit_key:
                break

    def update(self):
        self.frame = self.sensor.update()
        if self.frame is None:
            self.color = None
            self.end_of_stream = getattr(self.sensor, "stops_on_empty", False)
            return

        self.frame_count += 1
        if self.estimator.pending:
            logger.debug("previous request still running, frame %d not submitted", self.frame_count)
            return
        self.estimator.estimate_keypoints_start_async(to_bgr(self.frame.color), self.config.pose.input_size)

    def draw(self):
        if self.frame is None:
            return
        self.color = self.frame.color

        skeletons = self.estimator.wait_for_keypoints(self.config.pose.timeout_ms)
        if skeletons is None:
            return

        self.skeletons = self.tracker.update_tracking_id(self.previous_skeletons, skeletons)
        draw_skeletons(self.color, self.skeletons, self.frame.deproject, self.config.draw)
        self.previous_skeletons = self.skeletons

    def show(self):
        if self.color is None:
            return
        cv2.imshow(self.window_name, self.color)

        if self.config.viewer.show_depth and self.frame.depth is not None:
            cv2.imshow(self.window_name + " depth", colorize_depth(self.frame.depth))

    def close(self):
        try:
            self.estimator.close()
        finally:
            self.sensor.stop()
            cv2.destroyAllWindows()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
