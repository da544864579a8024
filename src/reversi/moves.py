"""
Legality and flipping rules

Key idea: raycasting. From the target square we walk every compass direction. A direction "qualifies" when it starts with
a run of one or more opponent stones that is closed off by one of our own stones. Only qualifying runs get flipped.

A run that hits the edge of the board or an empty square is left untouched.
"""

from src.core.exceptions import IllegalMoveError
from src.core.shared_types import Color
from src.reversi.board import Board
from src.reversi.cell import Cell
from src.reversi.square import DIRECTIONS, Square, Vector


# --- RAYCASTING ---
def flips_in_direction(
    board: Board, color: Color, row: int, col: int, direction: Vector
) -> list[Square]:
    """The opponent run that would flip in this direction, or an empty list if the direction does not qualify"""
    own = Cell.from_color(color)
    opponent = own.opponent()

    run: list[Square] = []
    for square in board.ray(row, col, *direction):
        cell = board.cell(square)
        if cell == opponent:
            run.append(square)
            continue
        # the run needs to be closed off by one of our own stones. (an empty square ends the run without capture)
        return run if cell == own else []
    # ran off the edge of the board
    return []


def flipped_squares(board: Board, color: Color, row: int, col: int) -> list[Square]:
    """All opponent stones captured by placing a stone of `color` on (row, col)"""
    flips: list[Square] = []
    for direction in DIRECTIONS:
        flips.extend(flips_in_direction(board, color, row, col, direction))
    return flips


# --- LEGALITY ---
def is_legal(board: Board, color: Color, row: int, col: int) -> bool:
    if board.get(row, col) != Cell.EMPTY:
        return False
    return any(
        flips_in_direction(board, color, row, col, direction)
        for direction in DIRECTIONS
    )


def legal_moves(board: Board, color: Color) -> list[Square]:
    return [
        square
        for square in board.empty_squares()
        if is_legal(board, color, square.row, square.col)
    ]


def has_legal_move(board: Board, color: Color) -> bool:
    return any(
        is_legal(board, color, square.row, square.col)
        for square in board.empty_squares()
    )


def must_pass(board: Board, color: Color) -> bool:
    """
    A player without any legal placement has to pass.

    NOTE the remote service decides when a pass actually happens. This is only used to recognize the situation.
    """
    return not has_legal_move(board, color)


# --- APPLYING ---
def apply_move(board: Board, color: Color, row: int, col: int) -> Board:
    """Place a stone and flip the captured runs. Returns a new board, the given board is never modified."""
    if not is_legal(board, color, row, col):
        raise IllegalMoveError(
            f"{color} cannot play ({row}, {col}) on this board:\n{board.to_string()}"
        )
    return place_stone(board, color, row, col)


def place_stone(board: Board, color: Color, row: int, col: int) -> Board:
    """
    Place a stone WITHOUT checking legality.

    Used to replay the authoritative move log, which is trusted as-is. Still flips whatever the placement captures.
    """
    flips = flipped_squares(board, color, row, col)
    new_board = board.copy()
    own = Cell.from_color(color)
    new_board.set(row, col, own)
    for square in flips:
        new_board.set(square.row, square.col, own)
    return new_board
