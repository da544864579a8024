"""
Type definitions used across layers
"""

from enum import StrEnum
from typing import Self


class Color(StrEnum):
    """Seat colors. Black always moves first."""

    BLACK = "black"
    WHITE = "white"

    def opponent(self) -> Self:
        return Color.WHITE if self == Color.BLACK else Color.BLACK


class SessionStatus(StrEnum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class MoveOutcome(StrEnum):
    """What the remote service reports after accepting a move. Advisory only."""

    ACCEPTED = "OK"
    AUTO_PASSED = "Pass"
    GAME_OVER = "GameOver"


# --- Error codes as the remote service spells them. Anything else is kept verbatim on the exception.
class StartErrorCode(StrEnum):
    OPPONENT_NOT_FOUND = "PlayerNotFound"
    OPPONENT_BUSY = "OpponentInAnotherGame"
    OTHER = "StartGameError"


class RegisterErrorCode(StrEnum):
    NAME_ALREADY_EXISTS = "NameAlreadyExists"
    INVALID_NAME = "InvalidName"
    OTHER = "RegisterError"


class MoveErrorCode(StrEnum):
    GAME_NOT_FOUND = "GameNotFound"
    GAME_NOT_STARTED = "GameNotStarted"
    GAME_OVER = "GameOver"
    NOT_YOUR_TURN = "WrongPlayer"
    ILLEGAL_MOVE = "IllegalMove"
    OTHER = "MoveError"
