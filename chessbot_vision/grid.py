import math
from typing import Tuple

BOARD_SQUARES = 8
FILES = "abcdefgh"


def square_size(board_width: int, board_height: int) -> Tuple[int, int]:
    """Width and height of one square on a uniform 8x8 grid (integer division, at least 1)."""
    return max(1, board_width // BOARD_SQUARES), max(1, board_height // BOARD_SQUARES)


def grid_position(x: float, y: float, board_width: int, board_height: int) -> Tuple[int, int]:
    """
    Convert a pixel coordinate on the board image to (col, row).
    col 0 is the a-file on the left, row 0 is rank 8 at the top.
    Points on or past the board edge are clamped onto the outer squares.
    """
    square_w, square_h = square_size(board_width, board_height)
    col = int(math.floor(x / square_w))
    row = int(math.floor(y / square_h))

    col = max(0, min(BOARD_SQUARES - 1, col))
    row = max(0, min(BOARD_SQUARES - 1, row))
    return col, row


def square_notation(col: int, row: int) -> str:
    """(col, row) -> algebraic square, e.g. (4, 4) -> 'e4'."""
    if not (0 <= col < BOARD_SQUARES and 0 <= row < BOARD_SQUARES):
        raise ValueError(f"grid position out of range: ({col}, {row})")
    return f"{FILES[col]}{BOARD_SQUARES - row}"

