"""
Chessboard vision core: find a board in an image with one detection model,
find the pieces on it with a second one, and place them on the 8x8 grid.
"""

from .board_analyzer import AnalysisResult, BoardAnalyzer, PieceInfo
from .config import AnalyzerConfig, DetectorConfig, load_config
from .detector import Detection, DetectionPipeline, OnnxSession

__version__ = "0.1.0"

__all__ = [
    "AnalysisResult",
    "AnalyzerConfig",
    "BoardAnalyzer",
    "Detection",
    "DetectionPipeline",
    "DetectorConfig",
    "OnnxSession",
    "PieceInfo",
    "load_config",
]
