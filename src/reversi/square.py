"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

Vector = tuple[int, int]

# The 8 compass directions, as (d_row, d_col)
DIRECTIONS: tuple[Vector, ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    @classmethod
    def from_index(cls, index: int, dimension: int) -> Square:
        """The remote service encodes a square as a single linear index: row * N + col"""
        return cls(index // dimension, index % dimension)

    def to_index(self, dimension: int) -> int:
        return self.row * dimension + self.col

    def is_within_bounds(self, dimension: int) -> bool:
        return (0 <= self.row < dimension) and (0 <= self.col < dimension)

    def step(self, direction: Vector) -> Square:
        d_row, d_col = direction
        return Square(self.row + d_row, self.col + d_col)
