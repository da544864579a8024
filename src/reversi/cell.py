"""Defines what can occupy a cell of the board"""

from enum import Enum
from typing import Self

from src.core.shared_types import Color


class Cell(Enum):
    """Values are the characters used in the canonical board serialization."""

    EMPTY = "."
    BLACK = "*"
    WHITE = "O"

    @classmethod
    def from_char(cls, character: str) -> Self:
        return cls(character)

    @classmethod
    def from_color(cls, color: Color) -> Self:
        return cls.BLACK if color == Color.BLACK else cls.WHITE

    def to_char(self) -> str:
        return self.value

    def to_color(self) -> Color:
        if self == Cell.EMPTY:
            raise ValueError("An empty cell has no color.")
        return Color.BLACK if self == Cell.BLACK else Color.WHITE

    def opponent(self) -> Self:
        """Empty stays empty: there is nothing to flip."""
        if self == Cell.BLACK:
            return Cell.WHITE
        if self == Cell.WHITE:
            return Cell.BLACK
        return Cell.EMPTY
