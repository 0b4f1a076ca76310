"""Top-right region masking for captured screen frames."""

import numpy as np

from ..errors import MaskError

# Menu-bar clock / status area excluded from comparison.
TRIM_WIDTH = 170
TRIM_HEIGHT = 30


def mask_frame(
    frame: np.ndarray,
    trim_width: int = TRIM_WIDTH,
    trim_height: int = TRIM_HEIGHT,
) -> np.ndarray:
    """
    Cut the top-right corner out of a frame so it can be compared.

    The rightmost ``trim_width`` columns are dropped first, then the top
    ``trim_height`` rows of the remaining strip. The result is the rectangle
    whose origin in the source frame is ``(0, trim_height)``.

    Args:
        frame: Source image, shape (H, W) or (H, W, C)
        trim_width: Columns to discard from the right edge
        trim_height: Rows to discard from the top edge

    Returns:
        Contiguous copy of shape (H - trim_height, W - trim_width[, C])

    Raises:
        MaskError: If the frame is not an image or the trim covers it
    """
    if frame is None or not isinstance(frame, np.ndarray) or frame.ndim not in (2, 3):
        raise MaskError("Invalid input frame")
    if trim_width < 0 or trim_height < 0:
        raise MaskError(f"Negative trim: width={trim_width} height={trim_height}")

    height, width = frame.shape[:2]
    if trim_width >= width or trim_height >= height:
        raise MaskError(
            f"Trim {trim_width}x{trim_height} does not fit frame {width}x{height}"
        )

    strip = frame[:, : width - trim_width]
    region = strip[trim_height:, :]
    return np.ascontiguousarray(region).copy()
