import logging
import os
import threading
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np
import onnxruntime as ort

from .config import DetectorConfig
from .image_utils import ensure_bgr_image
from .letterbox import compute_letterbox
from .nms import non_max_suppression
from .tensor_codec import RawOutputTensor, decode_outputs, encode_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Detection:
    """A single detection in original-image pixels."""
    box: Tuple[int, int, int, int]  # x1, y1, x2, y2
    score: float
    class_id: int

    @property
    def area(self) -> int:
        x1, y1, x2, y2 = self.box
        return max(0, x2 - x1) * max(0, y2 - y1)

    @property
    def center(self) -> Tuple[int, int]:
        """Integer centre, halves rounded to even."""
        x1, y1, x2, y2 = self.box
        return int(np.rint((x1 + x2) * 0.5)), int(np.rint((y1 + y2) * 0.5))


class InferenceSession(Protocol):
    """What a pipeline needs from an inference runtime."""

    def run(self, input_tensor: np.ndarray) -> np.ndarray:
        """Execute one forward pass on a [1, 3, H, W] float32 tensor."""
        ...

    def output_shape(self) -> Tuple[int, ...]:
        """Shape of the detection output, queried from model metadata."""
        ...


class OnnxSession:
    """
    onnxruntime-backed inference session.
    Loads the model once and feeds the first input / reads the first output.
    """

    def __init__(self, model_path: str, providers: Sequence[str] = ("CPUExecutionProvider",)):
        if not os.path.exists(model_path):
            raise FileNotFoundError(f"Model not found: {model_path}")

        self.model_path = model_path
        self._session = ort.InferenceSession(str(model_path), providers=list(providers))
        self._input_name = self._session.get_inputs()[0].name
        self._output_names = [o.name for o in self._session.get_outputs()]
        # Output shape of the most recent run, per calling thread
        self._local = threading.local()
        logger.info("Loaded ONNX model %s input=%s outputs=%s", model_path, self._input_name, self._output_names)

    def run(self, input_tensor: np.ndarray) -> np.ndarray:
        outputs = self._session.run(self._output_names[:1], {self._input_name: input_tensor})
        output = np.asarray(outputs[0], dtype=np.float32)
        self._local.last_shape = tuple(int(d) for d in output.shape)
        return output.reshape(-1)

    def output_shape(self) -> Tuple[int, ...]:
        declared = self._session.get_outputs()[0].shape
        last_shape: Optional[Tuple[int, ...]] = getattr(self._local, "last_shape", None)
        shape = []
        for i, dim in enumerate(declared):
            if isinstance(dim, int) and dim > 0:
                shape.append(dim)
            elif last_shape is not None and i < len(last_shape):
                # Dynamic axis: take the size the runtime actually produced
                shape.append(last_shape[i])
            else:
                shape.append(0)
        return tuple(shape)


class DetectionPipeline:
    """
    Letterbox -> encode -> inference -> decode -> NMS for one detection model.

    The same class serves both the board detector and the piece detector;
    only the session and thresholds differ.
    """

    def __init__(
        self,
        session: InferenceSession,
        input_width: int,
        input_height: int,
        confidence_threshold: float = 0.5,
        nms_threshold: float = 0.45,
    ):
        if input_width <= 0 or input_height <= 0:
            raise ValueError(f"model input size must be positive, got {input_width}x{input_height}")
        if not (0.0 < confidence_threshold < 1.0):
            raise ValueError("confidence_threshold must be in (0, 1)")
        if not (0.0 < nms_threshold < 1.0):
            raise ValueError("nms_threshold must be in (0, 1)")

        self.session = session
        self.input_width = input_width
        self.input_height = input_height
        self.confidence_threshold = confidence_threshold
        self.nms_threshold = nms_threshold

    @classmethod
    def from_config(cls, config: DetectorConfig) -> "DetectionPipeline":
        return cls(
            OnnxSession(config.model_path),
            input_width=config.input_width,
            input_height=config.input_height,
            confidence_threshold=config.confidence_threshold,
            nms_threshold=config.nms_threshold,
        )

    def detect(self, image: np.ndarray) -> List[Detection]:
        """
        Detect objects in a BGR image.

        Returns:
            Detections in NMS acceptance order (highest score first).
        """
        image = ensure_bgr_image(image)
        h, w = image.shape[:2]

        transform = compute_letterbox(w, h, self.input_width, self.input_height)
        tensor = encode_image(image, transform)

        output = self.session.run(tensor[np.newaxis, ...])
        raw = RawOutputTensor.from_buffer(output, self.session.output_shape())

        candidates = decode_outputs(raw, transform, self.confidence_threshold)
        if len(candidates) == 0:
            return []

        keep = non_max_suppression(candidates.boxes, candidates.scores, self.nms_threshold)
        logger.debug("NMS kept %d of %d candidates", len(keep), len(candidates))

        return [
            Detection(
                box=tuple(int(v) for v in candidates.boxes[i]),  # type: ignore[arg-type]
                score=float(candidates.scores[i]),
                class_id=int(candidates.class_ids[i]),
            )
            for i in keep
        ]
