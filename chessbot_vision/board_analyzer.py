import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import DEFAULT_PIECE_LABELS, AnalyzerConfig
from .detector import Detection, DetectionPipeline
from .grid import grid_position, square_notation
from .image_utils import crop_image, ensure_bgr_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PieceInfo:
    """A detected piece placed on the board grid."""
    label: str                   # e.g. 'wp', 'bk'
    square: str                  # e.g. 'e4'
    grid_pos: Tuple[int, int]    # (col, row), row 0 = rank 8


@dataclass
class AnalysisResult:
    """
    Outcome of one analyze() call.
    board_image is None when no board was found; pieces is then empty.
    """
    board_image: Optional[np.ndarray] = None
    pieces: List[PieceInfo] = field(default_factory=list)

    @property
    def has_board(self) -> bool:
        return self.board_image is not None


def largest_detection(detections: Sequence[Detection]) -> Optional[Detection]:
    """Return the detection with the largest box area; the first one wins ties. None if all are empty."""
    best: Optional[Detection] = None
    max_area = 0
    for det in detections:
        if det.area > max_area:
            max_area = det.area
            best = det
    return best


class BoardAnalyzer:
    """
    Board detection -> crop -> piece detection -> 8x8 grid mapping.

    Usage:
      analyzer = BoardAnalyzer(board_pipeline, piece_pipeline)
      result = analyzer.analyze(image)
      if result.has_board:
          for piece in result.pieces: ...
    """

    def __init__(
        self,
        board_detector: DetectionPipeline,
        piece_detector: DetectionPipeline,
        labels: Sequence[str] = DEFAULT_PIECE_LABELS,
    ):
        self.board_detector = board_detector
        self.piece_detector = piece_detector
        self.labels = tuple(labels)

    @classmethod
    def from_config(cls, config: AnalyzerConfig) -> "BoardAnalyzer":
        return cls(
            DetectionPipeline.from_config(config.board),
            DetectionPipeline.from_config(config.pieces),
            labels=config.labels,
        )

    def analyze(self, image: np.ndarray) -> AnalysisResult:
        """
        Find the board in a BGR image and locate the pieces on it.

        "No board" and "no pieces" are normal outcomes reported through the
        result, not exceptions.
        """
        image = ensure_bgr_image(image)

        board_image = self.detect_board(image)
        if board_image is None:
            return AnalysisResult()

        return AnalysisResult(board_image=board_image, pieces=self.detect_pieces(board_image))

    def detect_board(self, image: np.ndarray) -> Optional[np.ndarray]:
        """Crop of the largest board detection, or None."""
        detections = self.board_detector.detect(image)
        if not detections:
            logger.debug("No board detected")
            return None

        board = largest_detection(detections)
        if board is None:
            logger.debug("Board detections all have zero area")
            return None

        return crop_image(image, board.box)

    def detect_pieces(self, board_image: np.ndarray) -> List[PieceInfo]:
        """Map piece detections on a cropped board image onto squares."""
        detections = self.piece_detector.detect(board_image)
        if not detections:
            return []

        board_h, board_w = board_image.shape[:2]
        pieces: List[PieceInfo] = []

        for det in detections:
            if not (0 <= det.class_id < len(self.labels)):
                logger.warning(
                    "Dropping detection with class id %d (label table has %d entries)",
                    det.class_id, len(self.labels),
                )
                continue

            cx, cy = det.center
            col, row = grid_position(cx, cy, board_w, board_h)
            pieces.append(PieceInfo(
                label=self.labels[det.class_id],
                square=square_notation(col, row),
                grid_pos=(col, row),
            ))

        return pieces
