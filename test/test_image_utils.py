"""
Tests for sensor buffer to OpenCV image conversion.
"""

import cv2
import numpy as np
import pytest

from image_utils import colorize_depth, k4a_to_mat, realsense_to_mat, to_bgr


def test_to_bgr_drops_alpha():
    bgra = np.zeros((2, 3, 4), dtype=np.uint8)
    bgra[..., 0] = 10
    bgra[..., 1] = 20
    bgra[..., 2] = 30
    bgra[..., 3] = 255

    bgr = to_bgr(bgra)

    assert bgr.shape == (2, 3, 3)
    assert tuple(bgr[0, 0]) == (10, 20, 30)


def test_to_bgr_passes_three_channels_through():
    bgr = np.ones((2, 2, 3), dtype=np.uint8)
    assert to_bgr(bgr) is bgr


def test_to_bgr_rejects_grayscale():
    with pytest.raises(ValueError):
        to_bgr(np.zeros((2, 2), dtype=np.uint8))


def test_k4a_bgra32():
    bgra = np.arange(4 * 2 * 4, dtype=np.uint8).reshape(4, 2, 4)

    mat = k4a_to_mat(bgra, "COLOR_BGRA32", width=2, height=4)

    assert mat.shape == (4, 2, 4)
    np.testing.assert_array_equal(mat, bgra)
    assert not np.shares_memory(mat, bgra)


def test_k4a_depth16():
    depth = np.array([[0, 500], [1000, 65535]], dtype=np.uint16)

    mat = k4a_to_mat(depth, "DEPTH16", width=2, height=2)

    assert mat.dtype == np.uint16
    np.testing.assert_array_equal(mat, depth)


def test_k4a_nv12_to_bgra():
    width, height = 4, 2
    nv12 = np.full((height * 3 // 2, width), 128, dtype=np.uint8)

    mat = k4a_to_mat(nv12, "COLOR_NV12", width, height)

    assert mat.shape == (height, width, 4)
    assert mat.dtype == np.uint8


def test_k4a_yuy2_to_bgra():
    width, height = 4, 2
    yuy2 = np.full((height, width, 2), 128, dtype=np.uint8)

    mat = k4a_to_mat(yuy2, "COLOR_YUY2", width, height)

    assert mat.shape == (height, width, 4)


def test_k4a_mjpg_is_decoded():
    image = np.zeros((8, 8, 3), dtype=np.uint8)
    ok, jpg = cv2.imencode(".jpg", image)
    assert ok

    mat = k4a_to_mat(jpg.ravel(), "COLOR_MJPG", 8, 8)

    assert mat.shape == (8, 8, 4)


def test_k4a_custom_point_cloud():
    points = np.array([[[1, -2, 3], [4, 5, -6]]], dtype=np.int16)

    mat = k4a_to_mat(points, "CUSTOM", width=2, height=1)

    assert mat.dtype == np.float32
    np.testing.assert_array_equal(mat, points.astype(np.float32))


def test_k4a_unknown_format():
    with pytest.raises(ValueError, match="Failed to convert this format!"):
        k4a_to_mat(np.zeros(4, dtype=np.uint8), "CUSTOM16", 2, 1)


def test_realsense_bgr8_copies():
    data = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)

    mat = realsense_to_mat(data, "bgr8", width=3, height=2)

    np.testing.assert_array_equal(mat, data)
    assert not np.shares_memory(mat, data)


def test_realsense_rgba8_is_converted_to_bgr():
    rgba = np.zeros((1, 1, 4), dtype=np.uint8)
    rgba[0, 0] = (200, 100, 50, 255)

    mat = realsense_to_mat(rgba, "rgba8", width=1, height=1)

    assert tuple(mat[0, 0]) == (50, 100, 200)


def test_realsense_unsupported_format():
    with pytest.raises(ValueError, match="this format not support!"):
        realsense_to_mat(np.zeros((1, 1, 2), dtype=np.uint8), "yuyv", 1, 1)


def test_colorize_depth_shape():
    depth = np.array([[0, 1000], [2000, 5000]], dtype=np.uint16)

    colored = colorize_depth(depth)

    assert colored.shape == (2, 2, 3)
    assert colored.dtype == np.uint8
