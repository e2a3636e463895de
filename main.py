import argparse
import logging
import sys
from dataclasses import replace

import cv2  # type: ignore

from chessbot_vision.board_analyzer import BoardAnalyzer
from chessbot_vision.config import AnalyzerConfig, load_config
from chessbot_vision.fen_builder import build_full_fen, is_plausible_position

logger = logging.getLogger("main")

EXIT_NO_BOARD = 1
EXIT_BAD_IMAGE = 2


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Locate a chessboard in an image and list the pieces on it."
    )
    parser.add_argument("--image", "-i", required=True, help="Path to input image")
    parser.add_argument("--config", "-c", help="JSON file with detector settings and label table")
    parser.add_argument("--board-model", help="Override the board detector ONNX model path")
    parser.add_argument("--piece-model", help="Override the piece detector ONNX model path")
    parser.add_argument("--save-board", help="Write the cropped board image to this path")
    parser.add_argument("--fen", action="store_true", help="Print the position as FEN")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AnalyzerConfig:
    config = load_config(args.config) if args.config else AnalyzerConfig()
    if args.board_model:
        config = replace(config, board=replace(config.board, model_path=args.board_model))
    if args.piece_model:
        config = replace(config, pieces=replace(config.pieces, model_path=args.piece_model))
    return config


def main(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    image = cv2.imread(args.image, cv2.IMREAD_COLOR)
    if image is None:
        print(f"Error: could not read image {args.image}", file=sys.stderr)
        return EXIT_BAD_IMAGE

    analyzer = BoardAnalyzer.from_config(build_config(args))
    result = analyzer.analyze(image)

    if not result.has_board:
        print("No board found")
        return EXIT_NO_BOARD

    logger.info("Board %dx%d, %d pieces", result.board_image.shape[1], result.board_image.shape[0], len(result.pieces))

    if args.save_board:
        cv2.imwrite(args.save_board, result.board_image)
        logger.info("Saved board image to %s", args.save_board)

    for piece in result.pieces:
        col, row = piece.grid_pos
        print(f"{piece.label} {piece.square} {col},{row}")

    if args.fen:
        fen = build_full_fen(result.pieces)
        print(fen)
        if not is_plausible_position(fen):
            logger.warning("Position is not a legal chess position: %s", fen)

    return 0


if __name__ == "__main__":
    sys.exit(main(parse_args()))
