import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

import cv2  # type: ignore
import numpy as np

from .letterbox import LetterboxTransform, letterbox_image

logger = logging.getLogger(__name__)

# Attribute rows: cx, cy, w, h, objectness, class scores...
BOX_ATTRS = 4
OBJECTNESS_ROW = 4
MIN_ATTRS = 5


@dataclass(frozen=True)
class RawOutputTensor:
    """Flat float32 model output plus its [batch, attributes, predictions] shape."""
    data: np.ndarray
    shape: Tuple[int, ...]

    @classmethod
    def from_buffer(cls, data: Sequence[float], shape: Sequence[int]) -> "RawOutputTensor":
        flat = np.asarray(data, dtype=np.float32).reshape(-1)
        return cls(data=flat, shape=tuple(int(d) for d in shape))


@dataclass(frozen=True)
class Candidates:
    """
    Detections that passed the confidence gate, before suppression.

    boxes are (x1, y1, x2, y2) in original-image pixels, one row per candidate,
    kept in prediction-index order.
    """
    boxes: np.ndarray
    scores: np.ndarray
    class_ids: np.ndarray

    def __len__(self) -> int:
        return int(self.scores.shape[0])

    @classmethod
    def empty(cls) -> "Candidates":
        return cls(
            boxes=np.zeros((0, 4), dtype=np.int32),
            scores=np.zeros((0,), dtype=np.float32),
            class_ids=np.zeros((0,), dtype=np.int64),
        )


def encode_image(image: np.ndarray, transform: LetterboxTransform) -> np.ndarray:
    """
    Build the model input for a BGR uint8 image.

    The image is letterboxed into the model canvas, reordered BGR -> RGB,
    scaled to [0, 1] and laid out channel-planar.

    Returns:
        float32 array of shape (3, target_height, target_width).
    """
    boxed = letterbox_image(image, transform)
    rgb = cv2.cvtColor(boxed, cv2.COLOR_BGR2RGB)
    img = rgb.astype(np.float32) / np.float32(255.0)
    chw = np.transpose(img, (2, 0, 1))
    assert chw.shape == (3, transform.target_height, transform.target_width), f"Unexpected tensor shape: {chw.shape}"
    return np.ascontiguousarray(chw)


def _prediction_grid(raw: RawOutputTensor) -> np.ndarray:
    """Return the first batch as an (attributes, predictions) view, or an empty array if malformed."""
    shape = raw.shape
    if len(shape) < 3:
        logger.warning("Model output has rank %d, expected [batch, attributes, predictions]", len(shape))
        return np.zeros((0, 0), dtype=np.float32)

    num_attrs, num_preds = int(shape[1]), int(shape[2])
    if shape[0] <= 0 or num_attrs < MIN_ATTRS or num_preds <= 0:
        logger.warning("Malformed model output shape %s; no candidates decoded", list(shape))
        return np.zeros((0, 0), dtype=np.float32)

    needed = num_attrs * num_preds
    if raw.data.size < needed:
        logger.warning(
            "Model output holds %d values but shape %s needs %d; no candidates decoded",
            raw.data.size, list(shape), needed,
        )
        return np.zeros((0, 0), dtype=np.float32)

    return raw.data[:needed].reshape(num_attrs, num_preds)


def decode_outputs(
    raw: RawOutputTensor,
    transform: LetterboxTransform,
    conf_threshold: float,
) -> Candidates:
    """
    Decode a raw detection tensor into candidate boxes in original-image space.

    A prediction is dropped early when its objectness is below the threshold.
    With class rows present the score is objectness times the best class
    score and the class id is that class; otherwise the score is the
    objectness and the class id is 0. The final score must be strictly
    greater than the threshold.
    """
    grid = _prediction_grid(raw)
    if grid.size == 0:
        return Candidates.empty()

    num_classes = grid.shape[0] - MIN_ATTRS

    objectness = grid[OBJECTNESS_ROW]
    selected = np.nonzero(objectness >= conf_threshold)[0]
    if selected.size == 0:
        return Candidates.empty()

    obj = objectness[selected]
    if num_classes > 0:
        weighted = grid[MIN_ATTRS:, selected] * obj  # (classes, kept)
        class_ids = weighted.argmax(axis=0).astype(np.int64)
        scores = weighted[class_ids, np.arange(selected.size)]
    else:
        class_ids = np.zeros(selected.size, dtype=np.int64)
        scores = obj

    passed = scores > conf_threshold
    selected = selected[passed]
    scores = scores[passed].astype(np.float32)
    class_ids = class_ids[passed]
    if selected.size == 0:
        return Candidates.empty()

    cx, cy, w, h = (grid[i, selected] for i in range(BOX_ATTRS))

    # Model space -> image space, truncated toward zero
    x1 = np.trunc((cx - w / 2 - transform.pad_x) / transform.scale)
    y1 = np.trunc((cy - h / 2 - transform.pad_y) / transform.scale)
    x2 = np.trunc((cx + w / 2 - transform.pad_x) / transform.scale)
    y2 = np.trunc((cy + h / 2 - transform.pad_y) / transform.scale)

    boxes = np.stack([
        np.minimum(x1, x2),
        np.minimum(y1, y2),
        np.maximum(x1, x2),
        np.maximum(y1, y2),
    ], axis=1).astype(np.int32)

    logger.debug("decoded %d candidates from %d predictions", selected.size, grid.shape[1])
    return Candidates(boxes=boxes, scores=scores, class_ids=class_ids)
