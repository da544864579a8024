"""Requests to and payloads from the remote game service"""

from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from src.core.config import MIN_DIMENSION
from src.core.exceptions import InvalidRequestError
from src.core.models import PASS_MOVE, GameModel, GameResult, Seat
from src.core.shared_types import Color, RegisterErrorCode

PlayerName = str
Principal = str


def _clean_name(value: str) -> str:
    return value.strip()


# --- REQUEST MODELS ---
class RegisterRequest(BaseModel):
    """An empty name asks the service for the caller's existing registration."""

    name: PlayerName = ""

    @field_validator("name")
    @classmethod
    def trim_name(cls, value: str) -> str:
        return _clean_name(value)


class StartGameRequest(BaseModel):
    player_name: PlayerName
    # empty: open a game anyone can join
    opponent_name: PlayerName = ""
    dimension: int

    @field_validator("player_name")
    @classmethod
    def validate_player_name(cls, value: str) -> str:
        value = _clean_name(value)
        if not value:
            raise InvalidRequestError(RegisterErrorCode.INVALID_NAME)
        return value

    @field_validator("opponent_name")
    @classmethod
    def validate_opponent_name(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("dimension")
    @classmethod
    def validate_dimension(cls, value: int) -> int:
        if value < MIN_DIMENSION or value % 2 != 0:
            raise InvalidRequestError(
                f"Board dimension must be even and at least {MIN_DIMENSION}, got {value}."
            )
        return value


class MoveRequest(BaseModel):
    row: int
    col: int

    @field_validator("row", "col")
    @classmethod
    def validate_coordinate(cls, value: int) -> int:
        if value < 0:
            raise InvalidRequestError(f"Coordinates cannot be negative, got {value}.")
        return value


# --- PAYLOAD MODELS ---
class SeatPayload(BaseModel):
    principal: Principal = ""
    name: PlayerName = ""


class ResultPayload(BaseModel):
    black: int
    white: int


class GamePayload(BaseModel):
    """The authoritative game snapshot as the remote service sends it."""

    dimension: int
    black: SeatPayload
    white: SeatPayload
    moves: list[int] = []
    next: Color = Color.BLACK
    result: Optional[ResultPayload] = None
    board: str = ""

    @field_validator("dimension")
    @classmethod
    def validate_dimension(cls, value: int) -> int:
        if value < MIN_DIMENSION or value % 2 != 0:
            raise InvalidRequestError(f"Invalid board dimension: {value}")
        return value

    @model_validator(mode="after")
    def validate_moves_and_board(self) -> "GamePayload":
        cells = self.dimension**2
        for move in self.moves:
            if move != PASS_MOVE and not 0 <= move < cells:
                raise InvalidRequestError(
                    f"Move {move} does not fit a {self.dimension}x{self.dimension} board."
                )
        if self.board and len(self.board) != cells:
            raise InvalidRequestError(
                f"Board string has {len(self.board)} cells, expected {cells}."
            )
        return self

    def to_model(self) -> GameModel:
        return GameModel(
            dimension=self.dimension,
            black=Seat(self.black.principal, self.black.name),
            white=Seat(self.white.principal, self.white.name),
            moves=list(self.moves),
            next=self.next,
            result=(
                GameResult(black=self.result.black, white=self.result.white)
                if self.result is not None
                else None
            ),
            board=self.board,
        )


class ParticipantInfo(BaseModel):
    name: PlayerName
    score: int = 0
    games_played: int = 0


class PlayerSummary(BaseModel):
    name: PlayerName
    score: int = 0


class PlayerLists(BaseModel):
    """Lobby charts: best players, players seen recently, players not in a game right now."""

    top: list[PlayerSummary] = []
    recent: list[PlayerSummary] = []
    available: list[PlayerSummary] = []
