import logging

import numpy as np

from pose_estimator import Skeleton

logger = logging.getLogger(__name__)


def skeleton_distance(a, b, threshold=0.5):
    """Mean pixel distance over the keypoints both skeletons observe.

    Returns None when the skeletons share no visible keypoint.
    """
    n = min(a.num_keypoints, b.num_keypoints)
    common = a.visible(threshold)[:n] & b.visible(threshold)[:n]
    if not common.any():
        return None
    diff = a.keypoints[:n][common] - b.keypoints[:n][common]
    return float(np.mean(np.hypot(diff[:, 0], diff[:, 1])))


class SkeletonTracker:
    def __init__(self, max_distance=100.0, threshold=0.5):
        self.max_distance = max_distance
        self.threshold = threshold
        self.next_id = 0

    def reset(self):
        self.next_id = 0

    def _new_id(self):
        track_id = self.next_id
        self.next_id += 1
        return track_id

    def update_tracking_id(self, previous, current):
        candidates = []
        for i, cur in enumerate(current):
            for prev in previous:
                if prev.id < 0:
                    continue
                d = skeleton_distance(cur, prev, self.threshold)
                if d is not None and d <= self.max_distance:
                    candidates.append((d, i, prev.id))

        assigned = {}
        used_ids = set()
        for d, i, prev_id in sorted(candidates, key=lambda c: c[0]):
            if i in assigned or prev_id in used_ids:
                continue
            assigned[i] = prev_id
            used_ids.add(prev_id)

        # keep fresh ids clear of ids still carried over
        if used_ids:
            self.next_id = max(self.next_id, max(used_ids) + 1)

        tracked = []
        for i, cur in enumerate(current):
            track_id = assigned[i] if i in assigned else self._new_id()
            tracked.append(Skeleton(cur.keypoints.copy(), cur.confidences.copy(), track_id))

        logger.debug("tracked %d skeletons, %d carried over", len(tracked), len(assigned))
        return tracked
