import cv2
import numpy as np


def to_bgr(image):
    if image is None or image.ndim != 3:
        raise ValueError("expected a color image")
    channels = image.shape[2]
    if channels == 3:
        return image
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    raise ValueError(f"unsupported channel count: {channels}")


def k4a_to_mat(buffer, fmt, width, height, deep_copy=True):
    """Convert an Azure Kinect image buffer to an OpenCV image.

    `fmt` is the image format name as used by the sensor SDK
    (e.g. "COLOR_BGRA32", "DEPTH16"). Color formats come back as BGRA,
    depth and IR as 16-bit single channel, and CUSTOM as an XYZ float
    point cloud.
    """
    raw = np.frombuffer(np.ascontiguousarray(buffer).tobytes() if deep_copy else buffer, dtype=np.uint8)

    if fmt == "COLOR_MJPG":
        # slower than the uncompressed formats
        mat = cv2.imdecode(raw, cv2.IMREAD_ANYCOLOR)
        if mat is None:
            raise ValueError("Failed to decode MJPG image!")
        return cv2.cvtColor(mat, cv2.COLOR_BGR2BGRA)
    if fmt == "COLOR_NV12":
        nv12 = raw[: width * (height + height // 2)].reshape(height + height // 2, width)
        return cv2.cvtColor(nv12, cv2.COLOR_YUV2BGRA_NV12)
    if fmt == "COLOR_YUY2":
        yuy2 = raw[: width * height * 2].reshape(height, width, 2)
        return cv2.cvtColor(yuy2, cv2.COLOR_YUV2BGRA_YUY2)
    if fmt == "COLOR_BGRA32":
        mat = raw[: width * height * 4].reshape(height, width, 4)
        return mat.copy() if deep_copy else mat
    if fmt in ("DEPTH16", "IR16"):
        mat = raw[: width * height * 2].view(np.uint16).reshape(height, width)
        return mat.copy() if deep_copy else mat
    if fmt == "CUSTOM8":
        return raw[: width * height].reshape(height, width).copy()
    if fmt == "CUSTOM":
        points = raw[: width * height * 6].view(np.int16).reshape(height, width, 3)
        return points.astype(np.float32)
    raise ValueError("Failed to convert this format!")


def realsense_to_mat(data, fmt, width, height):
    """Copy a RealSense color frame into a BGR image.

    `fmt` is the stream format name, "bgr8" or "rgba8".
    """
    raw = np.asanyarray(data)
    if fmt == "bgr8":
        return raw.reshape(height, width, 3).copy()
    if fmt == "rgba8":
        rgba = raw.reshape(height, width, 4)
        return cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)
    raise ValueError("this format not support!")


def colorize_depth(depth_image, depth_min=500, depth_max=3000):
    depth_image_clipped = np.clip(depth_image, depth_min, depth_max)
    depth_image_normalized = (depth_image_clipped - depth_min) / (depth_max - depth_min) * 255
    depth_image_normalized = depth_image_normalized.astype(np.uint8)
    return cv2.applyColorMap(depth_image_normalized, cv2.COLORMAP_JET)
