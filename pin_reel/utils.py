"""Array helpers shared by the compositor and the overlay engine."""
from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np


def gaussian_blur(img: np.ndarray, sigma: float) -> np.ndarray:
    """Blur *img* with a Gaussian of standard deviation *sigma* pixels.

    The kernel spans three sigmas on each side, capped to the smaller image
    side so tiny frames and masks stay valid for OpenCV.
    """
    if sigma <= 0:
        raise ValueError("sigma must be > 0")
    k = min(2 * int(np.ceil(3 * sigma)) + 1, min(img.shape[:2]))
    if k % 2 == 0:
        k -= 1
    if k < 3:
        return img.copy()
    return cv2.GaussianBlur(img, (k, k), sigma, borderType=cv2.BORDER_REFLECT)


def resize(img: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Resize *img* to ``(width, height)``; area filter when shrinking."""
    w, h = max(1, size[0]), max(1, size[1])
    if (w, h) == (img.shape[1], img.shape[0]):
        return img
    shrinking = w < img.shape[1] and h < img.shape[0]
    interp = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC
    return cv2.resize(img, (w, h), interpolation=interp)


def clip_rect(
    dst_shape: Tuple[int, ...], src_shape: Tuple[int, ...], x: int, y: int
) -> Tuple[slice, slice, slice, slice] | None:
    """Return ``(dst_rows, dst_cols, src_rows, src_cols)`` of the overlap.

    *src* is placed with its top-left corner at ``(x, y)`` and may extend
    beyond the destination on any side. ``None`` when nothing overlaps.
    """
    H, W = dst_shape[:2]
    h, w = src_shape[:2]
    dst_x0 = max(0, x)
    dst_y0 = max(0, y)
    dst_x1 = min(W, x + w)
    dst_y1 = min(H, y + h)
    if dst_x1 <= dst_x0 or dst_y1 <= dst_y0:
        return None
    src_x0 = dst_x0 - x
    src_y0 = dst_y0 - y
    return (
        slice(dst_y0, dst_y1),
        slice(dst_x0, dst_x1),
        slice(src_y0, src_y0 + (dst_y1 - dst_y0)),
        slice(src_x0, src_x0 + (dst_x1 - dst_x0)),
    )
