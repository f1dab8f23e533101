import logging
from dataclasses import dataclass
from typing import Callable, Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class SensorFrame:
    color: np.ndarray  # BGR or BGRA
    # (x, y) pixel in the color image -> (x, y, z) or None
    deproject: Optional[Callable] = None
    depth: Optional[np.ndarray] = None


class WebcamSensor:
    name = "camera"
    stops_on_empty = True

    def __init__(self, index=0, width=1280, height=720):
        self.index = index
        self.width = width
        self.height = height
        self.cap = None

    def start(self):
        self.cap = cv2.VideoCapture(self.index)
        if not self.cap.isOpened():
            raise RuntimeError("failed to open!")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        logger.info("opened camera %d", self.index)

    def update(self):
        ret, frame = self.cap.read()
        if not ret or frame is None or frame.size == 0:
            return None
        return SensorFrame(color=frame)

    def stop(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
