import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Tuple, Union

# Ordered label table: six white kinds then six black kinds,
# pawn / knight / bishop / rook / queen / king.
DEFAULT_PIECE_LABELS: Tuple[str, ...] = (
    "wp", "wn", "wb", "wr", "wq", "wk",
    "bp", "bn", "bb", "br", "bq", "bk",
)

DEFAULT_INPUT_SIZE = 640
DEFAULT_CONF_THRESHOLD = 0.5
DEFAULT_NMS_THRESHOLD = 0.45

BOARD_MODEL_PATH = "models/best.onnx"
PIECE_MODEL_PATH = "models/piece_detector.onnx"


@dataclass(frozen=True)
class DetectorConfig:
    """Settings for one detection pipeline."""
    model_path: str = BOARD_MODEL_PATH
    input_width: int = DEFAULT_INPUT_SIZE
    input_height: int = DEFAULT_INPUT_SIZE
    confidence_threshold: float = DEFAULT_CONF_THRESHOLD
    nms_threshold: float = DEFAULT_NMS_THRESHOLD

    def __post_init__(self) -> None:
        if self.input_width <= 0 or self.input_height <= 0:
            raise ValueError(f"model input size must be positive, got {self.input_width}x{self.input_height}")
        if not (0.0 < self.confidence_threshold < 1.0):
            raise ValueError("confidence_threshold must be in (0, 1)")
        if not (0.0 < self.nms_threshold < 1.0):
            raise ValueError("nms_threshold must be in (0, 1)")

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: "DetectorConfig") -> "DetectorConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown detector settings: {sorted(unknown)}")
        merged = {name: getattr(base, name) for name in known}
        merged.update(data)
        return cls(**merged)


def _default_board() -> DetectorConfig:
    return DetectorConfig(model_path=BOARD_MODEL_PATH, nms_threshold=0.5)


def _default_pieces() -> DetectorConfig:
    return DetectorConfig(model_path=PIECE_MODEL_PATH, nms_threshold=0.5)


@dataclass(frozen=True)
class AnalyzerConfig:
    """Board detector, piece detector and the label table for piece class ids."""
    board: DetectorConfig = field(default_factory=_default_board)
    pieces: DetectorConfig = field(default_factory=_default_pieces)
    labels: Tuple[str, ...] = DEFAULT_PIECE_LABELS

    def __post_init__(self) -> None:
        if not self.labels:
            raise ValueError("labels must not be empty")


def load_config(path: Union[str, Path]) -> AnalyzerConfig:
    """
    Load an AnalyzerConfig from a JSON file.

    Example:
        {"board": {"model_path": "models/board.onnx", "confidence_threshold": 0.4},
         "pieces": {"input_width": 480, "input_height": 480},
         "labels": ["wp", "wn", ...]}

    Missing keys keep their defaults.
    """
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a JSON object: {path}")

    defaults = AnalyzerConfig()
    board = DetectorConfig.from_dict(data.get("board", {}), defaults.board)
    pieces = DetectorConfig.from_dict(data.get("pieces", {}), defaults.pieces)
    labels = tuple(data.get("labels", defaults.labels))
    return AnalyzerConfig(board=board, pieces=pieces, labels=labels)
