"""
Boundary layer data model(s).

These objects are what the Service hands to the domain layer (and back).
The API layer parses the remote service's payloads into them, so the session state machine never has to know how the
remote service spells things on the wire.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.core.shared_types import Color

# Type aliases to make GameModel easier to read
PlayerName = str
MoveIndex = int

# Sentinel in the move log: the player to act had no legal placement.
PASS_MOVE: MoveIndex = -1


@dataclass(frozen=True)
class Seat:
    """One side of the board. An empty name means the seat is not (or no longer) occupied."""

    principal: str
    name: PlayerName

    @property
    def is_empty(self) -> bool:
        return self.name == ""


@dataclass(frozen=True)
class GameResult:
    """Final piece count per color, filled in by the remote service once the game is over."""

    black: int
    white: int

    @property
    def winner(self) -> Optional[Color]:
        if self.black == self.white:
            return None
        return Color.BLACK if self.black > self.white else Color.WHITE


@dataclass
class GameModel:
    """Transport-safe snapshot of an authoritative game."""

    dimension: int
    black: Seat
    white: Seat
    moves: list[MoveIndex] = field(default_factory=list)
    next: Color = Color.BLACK
    result: Optional[GameResult] = None
    # canonical serialization of the authoritative board. Empty when the service did not send one.
    board: str = ""

    def seat(self, color: Color) -> Seat:
        return self.black if color == Color.BLACK else self.white

    def names(self) -> tuple[PlayerName, PlayerName]:
        return self.black.name, self.white.name

    @property
    def is_finished(self) -> bool:
        return self.result is not None
