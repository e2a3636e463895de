import logging
from typing import Any, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


def ensure_bgr_image(image: Any) -> np.ndarray:
    """
    Check that `image` is a non-empty 3-channel uint8 array.

    Raises:
        TypeError: if image is not a NumPy ndarray.
        ValueError: if it is empty or not H x W x 3 uint8.
    """
    if not isinstance(image, np.ndarray):
        raise TypeError("image must be a NumPy ndarray (BGR image)")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"image must be H x W x 3, got shape {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError("image is empty")
    if image.dtype != np.uint8:
        raise ValueError(f"image must be uint8, got {image.dtype}")
    return image


def crop_image(image: np.ndarray, box: Sequence[int]) -> Optional[np.ndarray]:
    """
    Crop (x1, y1, x2, y2) out of `image`, clamped to its bounds.

    Returns a copy of the region, or None when nothing is left after clamping.
    """
    h, w = image.shape[:2]
    x1, y1, x2, y2 = (int(v) for v in box)

    x1 = max(0, min(x1, w))
    y1 = max(0, min(y1, h))
    x2 = max(0, min(x2, w))
    y2 = max(0, min(y2, h))

    if x2 <= x1 or y2 <= y1:
        logger.warning("Crop %s is empty inside %dx%d image", tuple(box), w, h)
        return None

    return image[y1:y2, x1:x2].copy()
