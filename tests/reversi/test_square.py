"""Unit tests for /src/reversi/square.py and /src/reversi/cell.py"""

import pytest

from src.core.shared_types import Color
from src.reversi.cell import Cell
from src.reversi.square import DIRECTIONS, Square


@pytest.mark.parametrize(
    "index, dimension, row, col",
    [
        (0, 6, 0, 0),
        (5, 6, 0, 5),
        (6, 6, 1, 0),
        (19, 6, 3, 1),
        (29, 6, 4, 5),
        (35, 6, 5, 5),
        (63, 8, 7, 7),
        (26, 8, 3, 2),
        (143, 12, 11, 11),
    ],
)
def test_linear_index_roundtrip(index: int, dimension: int, row: int, col: int) -> None:
    """The remote service encodes squares as row * N + col"""
    square = Square.from_index(index, dimension)
    assert square == Square(row, col)
    assert square.to_index(dimension) == index


def test_square_within_bounds() -> None:
    for row in range(6):
        for col in range(6):
            assert Square(row, col).is_within_bounds(6)


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (6, 0), (0, 6), (6, 6)])
def test_square_out_of_bounds(row: int, col: int) -> None:
    assert not Square(row, col).is_within_bounds(6)


def test_there_are_eight_distinct_directions() -> None:
    assert len(set(DIRECTIONS)) == 8
    assert (0, 0) not in DIRECTIONS


def test_cell_serialization_characters() -> None:
    assert Cell.from_char(".") == Cell.EMPTY
    assert Cell.from_char("*") == Cell.BLACK
    assert Cell.from_char("O") == Cell.WHITE
    assert "".join(cell.to_char() for cell in Cell) == ".*O"


def test_cell_colors() -> None:
    assert Cell.from_color(Color.BLACK) == Cell.BLACK
    assert Cell.from_color(Color.WHITE) == Cell.WHITE
    assert Cell.BLACK.to_color() == Color.BLACK
    assert Cell.WHITE.opponent() == Cell.BLACK
    assert Cell.EMPTY.opponent() == Cell.EMPTY
    with pytest.raises(ValueError):
        Cell.EMPTY.to_color()


def test_color_opponent() -> None:
    assert Color.BLACK.opponent() == Color.WHITE
    assert Color.WHITE.opponent() == Color.BLACK
