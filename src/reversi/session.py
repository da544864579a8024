"""
The GameSession is the client-side state of one game (the "local view").
It is the entrypoint into the domain layer for the service layer: the reconciliation loop and the move submitter only
ever change the local view through the transitions defined here.

Status flow
---
UNINITIALIZED --activate--> ACTIVE --finish--> FINISHED
                              |
                              +--cancel--> CANCELLED

FINISHED and CANCELLED are terminal: no transition leaves them and no move is applied in them.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from src.core.exceptions import GameStateError, NotYourTurnError
from src.core.models import GameModel, GameResult, MoveIndex
from src.core.shared_types import Color, SessionStatus
from src.reversi.board import Board
from src.reversi.cell import Cell
from src.reversi.moves import apply_move
from src.reversi.replay import color_of_slot, decode_move, replay
from src.reversi.square import Square

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardSnapshot:
    """Board after a number of moves, plus the square that was played to get there (None: start position or a pass)."""

    board: Board
    square: Optional[Square] = None


@dataclass(frozen=True)
class GameView:
    """Read-only projection of the session for the UI layer."""

    status: SessionStatus
    player_name: str
    player_color: Optional[Color]
    next_color: Optional[Color]
    is_my_turn: bool
    dimension: Optional[int]
    black_name: str
    white_name: str
    board: Optional[str]
    last_move: Optional[Square]
    move_count: int
    score: dict[Color, int]
    result: Optional[GameResult]
    cancel_reason: Optional[str]


@dataclass
class GameSession:
    player_name: str
    status: SessionStatus = SessionStatus.UNINITIALIZED
    game: Optional[GameModel] = None
    boards: list[BoardSnapshot] = field(default_factory=list)
    applied_moves: int = 0
    player_color: Optional[Color] = None
    next_color: Optional[Color] = None
    cancel_reason: Optional[str] = None
    # bookkeeping for moves that were applied locally but not yet answered by the remote service
    pending_submissions: int = 0
    submission_epoch: int = 0
    # move count at which the authoritative board was found not to match its own move log
    board_conflict_at: Optional[int] = None

    # --- TRANSITIONS ---
    def activate(self, game: GameModel) -> None:
        """UNINITIALIZED -> ACTIVE: build the local view from the authoritative snapshot."""
        self._assert_status(SessionStatus.UNINITIALIZED)
        self._rebuild(game)
        self._change_status(SessionStatus.ACTIVE)

    def reset(self, game: GameModel) -> None:
        """Throw away the local boards and replay the authoritative log from scratch."""
        self._assert_status(SessionStatus.ACTIVE)
        self._rebuild(game)

    def observe(self, game: GameModel) -> None:
        """Remember the latest authoritative snapshot (names, result, ...) without touching the boards."""
        self.game = game

    def apply_authoritative_move(self, move: MoveIndex) -> BoardSnapshot:
        """
        Catch up with one move of the authoritative log.

        The acting color follows from the position of the move in the log. Raises IllegalMoveError when the move does
        not fit the local board, which means the local view has diverged.
        """
        self._assert_status(SessionStatus.ACTIVE)
        assert self.game is not None

        color = color_of_slot(self.applied_moves)
        square = decode_move(move, self.game.dimension)
        if square is None:
            snapshot = BoardSnapshot(self.latest_board)
        else:
            board = apply_move(self.latest_board, color, square.row, square.col)
            snapshot = BoardSnapshot(board, square)
        self._push(snapshot)
        return snapshot

    def apply_local_move(self, row: int, col: int) -> BoardSnapshot:
        """
        Apply the local player's move optimistically.
        ---

        1. it must be your turn
        2. the move must be legal on the latest local board (apply_move raises IllegalMoveError otherwise)
        3. the opponent is expected to move next
        """
        self._assert_status(SessionStatus.ACTIVE)
        if not self.is_my_turn:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {self.next_color} to move."
            )
        assert self.player_color is not None

        board = apply_move(self.latest_board, self.player_color, row, col)
        snapshot = BoardSnapshot(board, Square(row, col))
        self._push(snapshot)
        self.next_color = self.player_color.opponent()
        return snapshot

    def adopt_next(self, color: Color) -> None:
        self.next_color = color

    def finish(self) -> None:
        self._assert_status(SessionStatus.ACTIVE)
        self._change_status(SessionStatus.FINISHED)

    def cancel(self, reason: str) -> None:
        if self.is_terminal:
            raise GameStateError(f"Cannot cancel a session that is already {self.status}.")
        self.cancel_reason = reason
        self._change_status(SessionStatus.CANCELLED)

    # --- SUBMISSION BOOKKEEPING ---
    def begin_submission(self) -> int:
        self.pending_submissions += 1
        self.submission_epoch += 1
        return self.submission_epoch

    def end_submission(self) -> None:
        self.pending_submissions = max(0, self.pending_submissions - 1)

    # --- QUERIES ---
    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def is_terminal(self) -> bool:
        return self.status in (SessionStatus.FINISHED, SessionStatus.CANCELLED)

    @property
    def latest_board(self) -> Board:
        if not self.boards:
            raise GameStateError("The session has no board yet.")
        return self.boards[-1].board

    @property
    def is_my_turn(self) -> bool:
        return (
            self.is_active
            and self.player_color is not None
            and self.player_color == self.next_color
        )

    def score(self) -> dict[Color, int]:
        if not self.boards:
            return {Color.BLACK: 0, Color.WHITE: 0}
        board = self.latest_board
        return {color: board.count(Cell.from_color(color)) for color in Color}

    def view(self) -> GameView:
        game = self.game
        return GameView(
            status=self.status,
            player_name=self.player_name,
            player_color=self.player_color,
            next_color=self.next_color,
            is_my_turn=self.is_my_turn,
            dimension=game.dimension if game else None,
            black_name=game.black.name if game else "",
            white_name=game.white.name if game else "",
            board=self.latest_board.to_string() if self.boards else None,
            last_move=self.boards[-1].square if self.boards else None,
            move_count=self.applied_moves,
            score=self.score(),
            result=game.result if game else None,
            cancel_reason=self.cancel_reason,
        )

    # -- PRIVATE HELPERS ---
    def _rebuild(self, game: GameModel) -> None:
        replayed = replay(game.dimension, game.moves)
        self.game = game
        self.boards = [
            BoardSnapshot(board, square)
            for board, square in zip(replayed.snapshots, replayed.played)
        ]
        self.applied_moves = len(game.moves)
        self.player_color = self._determine_player_color(game)
        self.next_color = game.next
        self.board_conflict_at = None

    def _determine_player_color(self, game: GameModel) -> Color:
        """The player sitting on the white seat plays white, anybody else black (the first to join a game plays black)."""
        if game.white.name == self.player_name:
            return Color.WHITE
        if game.black.name != self.player_name:
            logger.warning(
                "Player %r not seated in this game (black=%r, white=%r). Assuming black.",
                self.player_name,
                game.black.name,
                game.white.name,
            )
        return Color.BLACK

    def _push(self, snapshot: BoardSnapshot) -> None:
        self.boards.append(snapshot)
        self.applied_moves += 1

    def _assert_status(self, expected: SessionStatus) -> None:
        if self.status != expected:
            raise GameStateError(
                f"Session must be {expected} for this transition, but is {self.status}."
            )

    def _change_status(self, new_status: SessionStatus) -> None:
        logger.info("Session of %r: %s -> %s", self.player_name, self.status, new_status)
        self.status = new_status
