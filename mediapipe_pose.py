import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from pose_estimator import Skeleton


class MediaPipePoseBackend:
    """MediaPipe Pose Landmarker in single image mode.

    Landmarks come back normalized to [0, 1]; they are scaled to the
    frame size and `visibility` is used as the keypoint confidence.
    The input size is fixed by the landmarker model and is ignored.
    """

    def __init__(self, model='pose_landmarker_full.task', max_people=6):
        options = vision.PoseLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=model),
            running_mode=vision.RunningMode.IMAGE,
            num_poses=max_people,
        )
        self.landmarker = vision.PoseLandmarker.create_from_options(options)

    def infer(self, image, input_size):
        h, w, _ = image.shape
        rgb_frame = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        result = self.landmarker.detect(mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame))
        return self.skeletons_from_landmarks(result.pose_landmarks, w, h)

    @staticmethod
    def skeletons_from_landmarks(pose_landmarks, width, height):
        skeletons = []
        for landmarks in pose_landmarks or []:
            points = np.full((len(landmarks), 2), -1.0, dtype=np.float32)
            confidences = np.zeros(len(landmarks), dtype=np.float32)
            for j, landmark in enumerate(landmarks):
                cx, cy = landmark.x * width, landmark.y * height
                if not (0 <= cx < width and 0 <= cy < height):
                    continue
                points[j] = (cx, cy)
                confidences[j] = landmark.visibility if landmark.visibility is not None else 0.0
            skeletons.append(Skeleton(points, confidences))
        return skeletons

    def close(self):
        self.landmarker.close()
