"""Rebuild a board from a complete, ordered move log"""

from dataclasses import dataclass
from typing import Sequence

from src.core.models import PASS_MOVE, MoveIndex
from src.core.exceptions import OutOfBoundsError
from src.core.shared_types import Color
from src.reversi.board import Board
from src.reversi.moves import place_stone
from src.reversi.square import Square


def color_of_slot(slot: int) -> Color:
    """Black makes the even moves of the log, White the odd ones (passes included)"""
    return Color.BLACK if slot % 2 == 0 else Color.WHITE


def decode_move(move: MoveIndex, dimension: int) -> Square | None:
    """Linear index to a square. Returns None for a pass."""
    if move == PASS_MOVE:
        return None
    square = Square.from_index(move, dimension)
    if move < 0 or not square.is_within_bounds(dimension):
        raise OutOfBoundsError(
            f"Move index {move} does not fit a {dimension}x{dimension} board."
        )
    return square


@dataclass
class ReplayResult:
    board: Board
    # snapshots[k] is the board after k moves. snapshots[0] is the starting position, snapshots[-1] equals board
    snapshots: list[Board]
    # the square played to reach snapshots[k] (None for the starting position and for passes)
    played: list[Square | None]


def replay(dimension: int, moves: Sequence[MoveIndex]) -> ReplayResult:
    """
    Replay the log from the starting position.
    ---

    * The acting color alternates by slot, starting with Black.
    * A pass does not touch the board, but still occupies a slot (and a snapshot).
    * The log is trusted: placements are not re-validated.
    """
    board = Board.empty(dimension)
    snapshots = [board]
    played: list[Square | None] = [None]
    for slot, move in enumerate(moves):
        square = decode_move(move, dimension)
        if square is not None:
            board = place_stone(board, color_of_slot(slot), square.row, square.col)
        snapshots.append(board)
        played.append(square)
    return ReplayResult(board, snapshots, played)
