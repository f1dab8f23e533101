import cv2

from skeleton_config import DrawConfig

# BGR, indexed by tracking id
COLORS = [
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
    (255, 255, 0),
    (0, 255, 255),
    (255, 0, 255),
]


def color_for(track_id):
    return COLORS[track_id % len(COLORS)]


def format_position(point_3d):
    x, y, z = point_3d
    return "( {:8.2f}, {:8.2f}, {:8.2f} )".format(x, y, z)


def draw_skeletons(image, skeletons, deproject=None, draw_config=None):
    """Draw every confident keypoint, labelled with its 3D position when
    `deproject` can resolve one. Returns the number of keypoints drawn."""
    if draw_config is None:
        draw_config = DrawConfig()

    drawn = 0
    for skeleton in skeletons:
        color = color_for(skeleton.id)
        for j in range(skeleton.num_keypoints):
            if skeleton.confidences[j] < draw_config.confidence_threshold:
                continue

            x = int(round(float(skeleton.keypoints[j][0])))
            y = int(round(float(skeleton.keypoints[j][1])))
            cv2.circle(image, (x, y), draw_config.radius, color, -1, lineType=cv2.LINE_AA)
            drawn += 1

            if deproject is None:
                continue
            point_3d = deproject(x, y)
            if point_3d is None:
                continue

            offset = draw_config.label_offset
            cv2.putText(image, format_position(point_3d), (x - offset, y - offset),
                        cv2.FONT_HERSHEY_COMPLEX, draw_config.font_scale, color)
    return drawn
