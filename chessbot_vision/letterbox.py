import logging
from dataclasses import dataclass
from typing import Tuple

import cv2  # type: ignore
import numpy as np

logger = logging.getLogger(__name__)

# Fill colour used for the padded border (BGR)
PAD_COLOR = (114, 114, 114)


@dataclass(frozen=True)
class LetterboxTransform:
    """
    Aspect-preserving resize + centred pad between a source image and a
    fixed model canvas.

    pad_x / pad_y are the leading (left / top) pads. The trailing edge
    absorbs any odd remainder.
    """
    scale: float
    pad_x: int
    pad_y: int
    new_width: int
    new_height: int
    target_width: int
    target_height: int

    @property
    def trailing_pad_x(self) -> int:
        return self.target_width - self.new_width - self.pad_x

    @property
    def trailing_pad_y(self) -> int:
        return self.target_height - self.new_height - self.pad_y

    def to_model(self, x: float, y: float) -> Tuple[float, float]:
        """Map an original-image point into model-input pixel space."""
        return x * self.scale + self.pad_x, y * self.scale + self.pad_y

    def to_image(self, x: float, y: float) -> Tuple[float, float]:
        """Map a model-input point back into original-image pixel space."""
        return (x - self.pad_x) / self.scale, (y - self.pad_y) / self.scale


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def compute_letterbox(
    src_width: int,
    src_height: int,
    target_width: int,
    target_height: int,
) -> LetterboxTransform:
    """
    Compute the letterbox mapping for a (src_width, src_height) image
    placed into a (target_width, target_height) canvas.

    Raises:
        ValueError: if any dimension is not positive.
    """
    if src_width <= 0 or src_height <= 0:
        raise ValueError(f"source size must be positive, got {src_width}x{src_height}")
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"target size must be positive, got {target_width}x{target_height}")

    scale = min(target_width / float(src_width), target_height / float(src_height))

    new_width = max(1, _round_half_up(src_width * scale))
    new_height = max(1, _round_half_up(src_height * scale))

    pad_x = (target_width - new_width) // 2
    pad_y = (target_height - new_height) // 2

    return LetterboxTransform(
        scale=scale,
        pad_x=pad_x,
        pad_y=pad_y,
        new_width=new_width,
        new_height=new_height,
        target_width=target_width,
        target_height=target_height,
    )


def letterbox_image(
    image: np.ndarray,
    transform: LetterboxTransform,
    color: Tuple[int, int, int] = PAD_COLOR,
) -> np.ndarray:
    """
    Resize `image` by the transform's scale and pad it to the target canvas.
    Returns a new array; the input is never modified.
    """
    resized = cv2.resize(image, (transform.new_width, transform.new_height), interpolation=cv2.INTER_LINEAR)
    out = cv2.copyMakeBorder(
        resized,
        transform.pad_y,
        transform.trailing_pad_y,
        transform.pad_x,
        transform.trailing_pad_x,
        cv2.BORDER_CONSTANT,
        value=color,
    )
    logger.debug(
        "letterbox %dx%d -> %dx%d scale=%.4f pad=(%d,%d)",
        image.shape[1], image.shape[0],
        transform.target_width, transform.target_height,
        transform.scale, transform.pad_x, transform.pad_y,
    )
    return out
