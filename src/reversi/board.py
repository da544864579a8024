"""The board holds the cells and the primitives to walk over them. Rules live in moves.py"""

from dataclasses import dataclass
from typing import Iterator, Self

from src.core.config import MIN_DIMENSION
from src.core.exceptions import InvalidDimensionError, OutOfBoundsError
from src.reversi.cell import Cell
from src.reversi.square import DIRECTIONS, Square


def validate_dimension(dimension: int) -> None:
    if dimension < MIN_DIMENSION or dimension % 2 != 0:
        raise InvalidDimensionError(
            f"Board dimension must be even and at least {MIN_DIMENSION}. Got {dimension}."
        )


@dataclass
class Board:
    dimension: int
    cells: list[Cell]

    def __post_init__(self) -> None:
        validate_dimension(self.dimension)
        if len(self.cells) != self.dimension**2:
            raise InvalidDimensionError(
                f"A {self.dimension}x{self.dimension} board needs {self.dimension**2} cells, got {len(self.cells)}."
            )

    @classmethod
    def empty(cls, dimension: int) -> Self:
        """
        Standard starting position: four stones in the center.

        ex) N=6
        ......
        ......
        ..O*..
        ..*O..
        ......
        ......
        """
        validate_dimension(dimension)
        board = cls(dimension, [Cell.EMPTY] * dimension**2)
        mid = dimension // 2
        board.set(mid - 1, mid - 1, Cell.WHITE)
        board.set(mid, mid, Cell.WHITE)
        board.set(mid - 1, mid, Cell.BLACK)
        board.set(mid, mid - 1, Cell.BLACK)
        return board

    @classmethod
    def from_string(cls, dimension: int, board_str: str) -> Self:
        """Parse the canonical serialization: row by row, one character per cell"""
        return cls(dimension, [Cell.from_char(character) for character in board_str])

    def to_string(self) -> str:
        return "".join(cell.to_char() for cell in self.cells)

    def copy(self) -> Self:
        return type(self)(self.dimension, list(self.cells))

    # --- ACCESS ---
    def get(self, row: int, col: int) -> Cell:
        return self.cells[self._index(row, col)]

    def set(self, row: int, col: int, cell: Cell) -> None:
        self.cells[self._index(row, col)] = cell

    def cell(self, square: Square) -> Cell:
        return self.get(square.row, square.col)

    def contains(self, row: int, col: int) -> bool:
        return Square(row, col).is_within_bounds(self.dimension)

    # --- SCANNING ---
    def ray(self, row: int, col: int, d_row: int, d_col: int) -> Iterator[Square]:
        """Squares from the neighbour of (row, col) in the given direction up to the edge of the board"""
        if (d_row, d_col) not in DIRECTIONS:
            raise ValueError(f"Not a compass direction: {(d_row, d_col)}")
        self._index(row, col)
        square = Square(row + d_row, col + d_col)
        while square.is_within_bounds(self.dimension):
            yield square
            square = square.step((d_row, d_col))

    def scan_direction(self, row: int, col: int, d_row: int, d_col: int) -> Iterator[Cell]:
        """Same walk as `ray`, but yields what is on the squares. Every call starts a fresh walk."""
        for square in self.ray(row, col, d_row, d_col):
            yield self.cell(square)

    # --- COUNTING ---
    def count(self, cell: Cell) -> int:
        return self.cells.count(cell)

    def locate(self, cell: Cell) -> list[Square]:
        return [
            Square.from_index(index, self.dimension)
            for index, value in enumerate(self.cells)
            if value == cell
        ]

    def empty_squares(self) -> list[Square]:
        return self.locate(Cell.EMPTY)

    def is_full(self) -> bool:
        return Cell.EMPTY not in self.cells

    def _index(self, row: int, col: int) -> int:
        if not self.contains(row, col):
            raise OutOfBoundsError(
                f"({row}, {col}) is outside of the {self.dimension}x{self.dimension} board."
            )
        return row * self.dimension + col


def empty_board(dimension: int) -> Board:
    return Board.empty(dimension)
