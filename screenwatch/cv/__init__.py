"""Image helpers: region masking and frame differencing."""

from .frame_diff import diff_frames
from .region_mask import TRIM_HEIGHT, TRIM_WIDTH, mask_frame

__all__ = ["diff_frames", "mask_frame", "TRIM_WIDTH", "TRIM_HEIGHT"]
