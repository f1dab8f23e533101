import numpy as np
from ultralytics import YOLO

from pose_estimator import Skeleton


class YoloPoseBackend:
    def __init__(self, model='yolov8n-pose.pt', device='cpu', half=False, max_people=6, min_person_conf=0.25):
        self.model = YOLO(model)
        self.device = device
        self.half = half
        self.max_people = max_people
        self.min_person_conf = min_person_conf

    def infer(self, image, input_size):
        results = self.model.predict(
            image,
            imgsz=input_size,
            device=self.device,
            half=self.half,
            classes=[0],
            conf=self.min_person_conf,
            max_det=self.max_people,
            verbose=False,
        )
        return self.skeletons_from_results(results)

    @staticmethod
    def skeletons_from_results(results):
        if not results or results[0].keypoints is None:
            return []

        keypoints_tensor = results[0].keypoints.data.tolist()
        skeletons = []
        for kps in keypoints_tensor:
            points = np.full((len(kps), 2), -1.0, dtype=np.float32)
            confidences = np.zeros(len(kps), dtype=np.float32)
            for j, kp in enumerate(kps):
                x, y = kp[0], kp[1]
                conf = kp[2] if len(kp) > 2 else 1.0
                # ultralytics reports undetected joints at the origin
                if x == 0.0 and y == 0.0:
                    continue
                points[j] = (x, y)
                confidences[j] = conf
            skeletons.append(Skeleton(points, confidences))
        return skeletons

    def close(self):
        pass
