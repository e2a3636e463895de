import logging
from typing import Dict, Sequence

import chess

from .board_analyzer import PieceInfo
from .grid import FILES

logger = logging.getLogger(__name__)

# Mapping from piece labels to FEN characters
PIECE_TO_FEN = {
    "wp": "P",
    "wn": "N",
    "wb": "B",
    "wr": "R",
    "wq": "Q",
    "wk": "K",
    "bp": "p",
    "bn": "n",
    "bb": "b",
    "br": "r",
    "bq": "q",
    "bk": "k",
}

# Castling and en-passant state cannot be read from a still image
_IGNORED_STATUS = (
    chess.STATUS_BAD_CASTLING_RIGHTS
    | chess.STATUS_INVALID_EP_SQUARE
)


def build_fen_board(pieces: Sequence[PieceInfo]) -> str:
    """
    Build the board portion of FEN from analyzed pieces.
    If two pieces share a square, the later one wins.
    """
    occupied: Dict[str, str] = {}
    for piece in pieces:
        fen_char = PIECE_TO_FEN.get(piece.label)
        if fen_char is None:
            logger.warning("No FEN symbol for label %r on %s; skipped", piece.label, piece.square)
            continue
        occupied[piece.square] = fen_char

    rows = []

    # FEN ranks go from 8 -> 1
    for rank in range(8, 0, -1):
        empty = 0
        row = ""

        for file in FILES:
            square = f"{file}{rank}"
            if square in occupied:
                if empty > 0:
                    row += str(empty)
                    empty = 0
                row += occupied[square]
            else:
                empty += 1

        if empty > 0:
            row += str(empty)

        rows.append(row)

    return "/".join(rows)


def build_full_fen(pieces: Sequence[PieceInfo], side_to_move: str = "w") -> str:
    """
    Build a full FEN string.
    Castling, en-passant and clocks are defaulted.
    """
    if side_to_move not in ("w", "b"):
        raise ValueError(f"side_to_move must be 'w' or 'b', got {side_to_move!r}")
    return f"{build_fen_board(pieces)} {side_to_move} - - 0 1"


def is_plausible_position(fen: str) -> bool:
    """
    True if python-chess accepts the position (king counts, pawn ranks,
    side not to move not in check, ...).
    """
    try:
        board = chess.Board(fen)
    except ValueError:
        return False
    return (board.status() & ~_IGNORED_STATUS) == chess.STATUS_VALID
