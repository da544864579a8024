"""Applies the local player's moves right away and tells the remote service in the background"""

import asyncio
import logging

from src.core.exceptions import (
    IllegalMoveError,
    MoveRejectedError,
    NotYourTurnError,
    TransientSubmitError,
)
from src.reversi.session import GameSession
from src.services.remote import GameServiceClient

logger = logging.getLogger(__name__)


class OptimisticSubmitter:
    """
    The local move is applied before the remote service has seen it.
    ---

    The answer of the service is advisory: it is logged, nothing more. Whatever the authority actually recorded
    reaches the session through the next reconciliation. A failed submission is not rolled back here either.
    """

    def __init__(self, session: GameSession, client: GameServiceClient) -> None:
        self.session = session
        self.client = client
        self._in_flight: set[asyncio.Task[None]] = set()

    def request_move(self, row: int, col: int) -> bool:
        """Returns True when the move was applied locally (and a submission scheduled)."""
        loop = asyncio.get_running_loop()

        if not self.session.is_active:
            logger.debug("Ignoring move (%d, %d): session is %s", row, col, self.session.status)
            return False
        try:
            self.session.apply_local_move(row, col)
        except (NotYourTurnError, IllegalMoveError) as exc:
            logger.debug("Ignoring move (%d, %d): %s", row, col, exc)
            return False

        logger.info("%s plays (%d, %d)", self.session.player_color, row, col)
        self.session.begin_submission()
        task = loop.create_task(self._submit(row, col))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return True

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def drain(self) -> None:
        """Wait for all submissions that are still on their way."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    async def _submit(self, row: int, col: int) -> None:
        try:
            outcome = await self.client.move(row, col)
            logger.debug("Move (%d, %d) answered with %s", row, col, outcome)
        except MoveRejectedError as exc:
            logger.warning(
                "Remote service rejected move (%d, %d): %s. Reconciliation will correct the board.",
                row,
                col,
                exc.code,
            )
        except Exception as exc:
            error = TransientSubmitError(f"Submitting move ({row}, {col}) failed: {exc!r}")
            logger.warning("%s Ignored, reconciliation will correct the board.", error)
        finally:
            self.session.end_submission()
