import json

import pytest

from chessbot_vision.config import (
    BOARD_MODEL_PATH,
    DEFAULT_PIECE_LABELS,
    PIECE_MODEL_PATH,
    AnalyzerConfig,
    DetectorConfig,
    load_config,
)


def test_defaults():
    config = AnalyzerConfig()

    assert config.board.model_path == BOARD_MODEL_PATH
    assert config.pieces.model_path == PIECE_MODEL_PATH
    assert config.board.confidence_threshold == 0.5
    assert config.board.nms_threshold == 0.5
    assert len(config.labels) == 12
    assert config.labels[6] == "bp"


@pytest.mark.parametrize("kwargs", [
    {"input_width": 0},
    {"input_height": -1},
    {"confidence_threshold": 0.0},
    {"confidence_threshold": 1.0},
    {"nms_threshold": 1.5},
])
def test_detector_config_validation(kwargs):
    with pytest.raises(ValueError):
        DetectorConfig(**kwargs)


def test_load_config_merges_with_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "board": {"model_path": "models/board_v2.onnx", "confidence_threshold": 0.35},
        "pieces": {"input_width": 480, "input_height": 480},
    }))

    config = load_config(path)

    assert config.board.model_path == "models/board_v2.onnx"
    assert config.board.confidence_threshold == 0.35
    assert config.board.input_width == 640
    assert config.pieces.input_width == 480
    assert config.pieces.model_path == PIECE_MODEL_PATH
    assert config.labels == DEFAULT_PIECE_LABELS


def test_load_config_custom_labels(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"labels": ["board"]}))

    assert load_config(path).labels == ("board",)


def test_load_config_rejects_unknown_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"board": {"threshold": 0.2}}))

    with pytest.raises(ValueError):
        load_config(path)
