"""
Keeps the local view in line with the remote service.

`reconcile` decides what one poll means for the session. `RefreshLoop` polls on a timer and feeds the snapshots to it.
The authority always wins: the local view is only ever moved towards the authoritative move log.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Optional

from src.core.config import SessionConfig
from src.core.exceptions import IllegalMoveError, TransientFetchError
from src.core.models import GameModel
from src.core.shared_types import Color
from src.reversi.session import GameSession
from src.services.remote import GameServiceClient

logger = logging.getLogger(__name__)

GAME_VANISHED = "GameCancelled: the game no longer exists"


class ReconcileAction(StrEnum):
    UNCHANGED = "unchanged"
    CAUGHT_UP = "caught up"
    RESYNCED = "resynced"
    TURN_CHANGED = "turn changed"
    RESET = "reset"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class FaultKind(StrEnum):
    BOARD_MISMATCH = "board mismatch"  # replayed the new moves, but ended up with a different board
    REJECTED_MOVE = "rejected move"  # an authoritative move is illegal on the local board
    SPECULATION_LOST = "speculation lost"  # a locally applied move never made it into the authoritative log


@dataclass(frozen=True)
class ConsistencyFault:
    """The local view disagreed with the authority."""

    kind: FaultKind
    move_count: int
    authoritative_board: str
    local_board: str
    detail: str = ""


@dataclass(frozen=True)
class ReconcileResult:
    action: ReconcileAction
    applied: int = 0  # number of authoritative moves applied during this reconciliation
    fault: Optional[ConsistencyFault] = None


def reconcile(
    session: GameSession,
    game: Optional[GameModel],
    fetch_epoch: Optional[int] = None,
    fetch_pending: int = 0,
    resync_on_fault: bool = True,
) -> ReconcileResult:
    """
    Apply one authoritative snapshot to the session.
    ---

    `fetch_epoch` is the session's submission epoch at the moment the snapshot was requested. A snapshot requested
    before the latest local submission cannot tell whether that submission arrived, so it never rolls it back.
    `fetch_pending` is the number of submissions that were still unanswered when the snapshot was requested. The same
    goes for those: the service may have answered them after it produced the snapshot.

    Checks, first match wins:
    1. no game at all --> cancelled
    2. a seated player left (name became empty) --> cancelled
    3. new moves --> catch up, then verify the board
    4. result present --> finished
    5. same moves, other player to act (the peer passed) --> adopt the turn
    6. other names on the seats --> rebuild from the log
    7. authority is behind and no submission can still arrive --> the local move got lost, rebuild from the log
    8. same moves but another board --> rebuild from the log
    """
    if not session.is_active:
        return ReconcileResult(ReconcileAction.UNCHANGED)

    if game is None:
        session.cancel(GAME_VANISHED)
        return ReconcileResult(ReconcileAction.CANCELLED)

    previous = session.game
    departed = _departed_colors(previous, game)
    if departed:
        session.observe(game)
        session.cancel(
            f"GameCancelled: {' and '.join(color.value for color in departed)} left the game"
        )
        return ReconcileResult(ReconcileAction.CANCELLED)

    authoritative_count = len(game.moves)
    if authoritative_count > session.applied_moves:
        return _catch_up(session, game, resync_on_fault)

    if game.is_finished:
        session.observe(game)
        session.finish()
        return ReconcileResult(ReconcileAction.FINISHED)

    if (
        authoritative_count == session.applied_moves
        and game.next != session.next_color
    ):
        session.observe(game)
        session.adopt_next(game.next)
        return ReconcileResult(ReconcileAction.TURN_CHANGED)

    if previous is not None and previous.names() != game.names():
        logger.info(
            "Players changed from %s to %s. Rebuilding the board from the move log.",
            previous.names(),
            game.names(),
        )
        session.reset(game)
        return ReconcileResult(ReconcileAction.RESET)

    if authoritative_count < session.applied_moves and _speculation_settled(
        session, fetch_epoch, fetch_pending
    ):
        fault = ConsistencyFault(
            kind=FaultKind.SPECULATION_LOST,
            move_count=authoritative_count,
            authoritative_board=game.board,
            local_board=session.latest_board.to_string(),
            detail=f"{session.applied_moves - authoritative_count} local move(s) missing from the authoritative log",
        )
        return _handle_fault(session, game, fault, resync_on_fault, applied=0)

    local_board = session.latest_board.to_string()
    if (
        authoritative_count == session.applied_moves
        and game.board
        and local_board != game.board
        and session.board_conflict_at != authoritative_count
        and _speculation_settled(session, fetch_epoch, fetch_pending)
    ):
        # same number of moves, different stones: the authority recorded another move than the one applied locally
        fault = ConsistencyFault(
            kind=FaultKind.BOARD_MISMATCH,
            move_count=authoritative_count,
            authoritative_board=game.board,
            local_board=local_board,
        )
        return _handle_fault(session, game, fault, resync_on_fault, applied=0)

    session.observe(game)
    return ReconcileResult(ReconcileAction.UNCHANGED)


def _catch_up(
    session: GameSession, game: GameModel, resync_on_fault: bool
) -> ReconcileResult:
    """Apply the moves the local view has not seen yet, in order, then compare with the authoritative board."""
    applied = 0
    fault: Optional[ConsistencyFault] = None
    try:
        while session.applied_moves < len(game.moves):
            session.apply_authoritative_move(game.moves[session.applied_moves])
            applied += 1
    except IllegalMoveError as exc:
        fault = ConsistencyFault(
            kind=FaultKind.REJECTED_MOVE,
            move_count=session.applied_moves,
            authoritative_board=game.board,
            local_board=session.latest_board.to_string(),
            detail=str(exc),
        )

    session.observe(game)
    session.adopt_next(game.next)

    local_board = session.latest_board.to_string()
    if fault is None and game.board and local_board != game.board:
        fault = ConsistencyFault(
            kind=FaultKind.BOARD_MISMATCH,
            move_count=session.applied_moves,
            authoritative_board=game.board,
            local_board=local_board,
        )

    if fault is not None:
        return _handle_fault(session, game, fault, resync_on_fault, applied)
    return ReconcileResult(ReconcileAction.CAUGHT_UP, applied=applied)


def _handle_fault(
    session: GameSession,
    game: GameModel,
    fault: ConsistencyFault,
    resync_on_fault: bool,
    applied: int,
) -> ReconcileResult:
    logger.error(
        "Consistency fault (%s) after %d moves. authority=%r local=%r %s",
        fault.kind,
        fault.move_count,
        fault.authoritative_board,
        fault.local_board,
        fault.detail,
    )
    if not resync_on_fault:
        session.observe(game)
        # reported once per move count, the local board stays as it is
        session.board_conflict_at = len(game.moves)
        action = ReconcileAction.CAUGHT_UP if applied else ReconcileAction.UNCHANGED
        return ReconcileResult(action, applied=applied, fault=fault)

    session.reset(game)
    resynced_board = session.latest_board.to_string()
    if game.board and resynced_board != game.board:
        # the authoritative log and the authoritative board disagree with each other. Nothing left to fix locally.
        logger.error(
            "Replaying the authoritative log does not reproduce the authoritative board. authority=%r replayed=%r",
            game.board,
            resynced_board,
        )
        session.board_conflict_at = len(game.moves)
    return ReconcileResult(ReconcileAction.RESYNCED, applied=applied, fault=fault)


def _departed_colors(previous: Optional[GameModel], game: GameModel) -> list[Color]:
    """Seats that had a player on the previous snapshot and are empty now"""
    if previous is None:
        return []
    return [
        color
        for color in Color
        if not previous.seat(color).is_empty and game.seat(color).is_empty
    ]


def _speculation_settled(
    session: GameSession, fetch_epoch: Optional[int], fetch_pending: int
) -> bool:
    """True when every local submission has been answered, and all of them were answered before the fetch started."""
    if session.pending_submissions > 0 or fetch_pending > 0:
        return False
    return fetch_epoch is None or fetch_epoch == session.submission_epoch


class RefreshLoop:
    """
    Polls the remote service while the session is active.

    Owned by the component that created it and cancelled by it. A failed poll is logged and retried after
    `retry_interval`, it never ends the loop.
    """

    def __init__(
        self,
        session: GameSession,
        client: GameServiceClient,
        config: Optional[SessionConfig] = None,
        on_change: Optional[Callable[[ReconcileResult], None]] = None,
    ) -> None:
        self.session = session
        self.client = client
        self.config = config or SessionConfig()
        self._on_change = on_change
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the pending poll. Once this returns, no more ticks happen."""
        task = self._task
        self._task = None
        if task is None:
            return
        if task.done():
            if not task.cancelled() and task.exception() is not None:
                logger.error("Refresh loop had failed", exc_info=task.exception())
            return
        task.cancel()
        if task is asyncio.current_task():
            # stopped from inside a tick (ex. an on_change callback). The cancellation lands at the next await.
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def tick(self) -> ReconcileResult:
        """One poll: fetch the authoritative snapshot and reconcile the session with it."""
        fetch_epoch = self.session.submission_epoch
        fetch_pending = self.session.pending_submissions
        try:
            payload = await self.client.view()
        except Exception as exc:
            raise TransientFetchError(f"Fetching the game failed: {exc!r}") from exc

        game = payload.to_model() if payload is not None else None
        result = reconcile(
            self.session,
            game,
            fetch_epoch=fetch_epoch,
            fetch_pending=fetch_pending,
            resync_on_fault=self.config.resync_on_fault,
        )
        if result.action != ReconcileAction.UNCHANGED or result.fault is not None:
            logger.debug("Tick: %s (%d new moves)", result.action, result.applied)
            self._notify(result)
        return result

    def _notify(self, result: ReconcileResult) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(result)
        except Exception:
            logger.exception("Change listener failed on %s, ignored", result.action)

    async def _run(self) -> None:
        while self.session.is_active:
            try:
                await self.tick()
                delay = self.config.refresh_interval
            except TransientFetchError as exc:
                logger.warning("%s Will try again.", exc)
                delay = self.config.retry_interval
            except Exception:
                logger.exception("Refresh failed, will try again.")
                delay = self.config.retry_interval
            if not self.session.is_active:
                break
            await asyncio.sleep(delay)
        logger.info("Refresh loop ended, session is %s", self.session.status)
