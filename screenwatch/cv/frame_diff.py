"""Pixel-exact comparison of masked frames."""

import cv2
import numpy as np

# Returned when frames cannot be compared, so a geometry change reads as activity.
SIZE_MISMATCH_DIFF = 1


def changed_pixel_mask(img_a: np.ndarray, img_b: np.ndarray) -> np.ndarray:
    """Boolean (H, W) mask of pixels where any channel differs."""
    diff = cv2.absdiff(img_a, img_b)
    if diff.ndim == 3:
        return np.any(diff != 0, axis=2)
    return diff != 0


def diff_frames(img_a: np.ndarray, img_b: np.ndarray) -> int:
    """
    Count differing pixels between two masked frames.

    Any byte-level difference in any channel marks the pixel as changed.
    Frames of different shape (width, height or channel count) or dtype are
    reported as changed with a count of 1 instead of raising.

    Args:
        img_a: First masked frame
        img_b: Second masked frame

    Returns:
        Number of changed pixels (0 means no visible change)
    """
    if img_a.shape != img_b.shape:
        return SIZE_MISMATCH_DIFF
    if img_a.dtype != img_b.dtype:
        return SIZE_MISMATCH_DIFF
    if np.array_equal(img_a, img_b):
        return 0
    return int(np.count_nonzero(changed_pixel_mask(img_a, img_b)))
