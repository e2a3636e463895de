from typing import List, Optional, Sequence, Tuple

import numpy as np
import pytest

NUM_PIECE_CLASSES = 12


class FakeSession:
    """
    In-memory stand-in for an inference runtime.
    Each prediction row is (cx, cy, w, h, objectness, *class_scores) in model pixels.
    """

    def __init__(
        self,
        predictions: Sequence[Sequence[float]] = (),
        num_attrs: int = 5,
        shape: Optional[Tuple[int, ...]] = None,
    ):
        if predictions:
            self.output = np.asarray(predictions, dtype=np.float32).T[np.newaxis, ...]
        else:
            self.output = np.zeros((1, num_attrs, 0), dtype=np.float32)
        self.shape = tuple(shape) if shape is not None else tuple(self.output.shape)
        self.inputs: List[np.ndarray] = []

    def run(self, input_tensor: np.ndarray) -> np.ndarray:
        self.inputs.append(input_tensor)
        return self.output.reshape(-1)

    def output_shape(self) -> Tuple[int, ...]:
        return self.shape


def piece_row(cx, cy, w, h, objectness, class_id, class_score=1.0, num_classes=NUM_PIECE_CLASSES):
    row = [cx, cy, w, h, objectness] + [0.0] * num_classes
    row[5 + class_id] = class_score
    return row


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def make_piece_row():
    return piece_row


@pytest.fixture
def blank_image():
    def _make(width: int, height: int, value: int = 0) -> np.ndarray:
        return np.full((height, width, 3), value, dtype=np.uint8)
    return _make
