"""Orchestration between the UI layer, the local game session and the remote game service."""

import logging
from typing import Callable, Optional, Self

from src.api.models import (
    MoveRequest,
    ParticipantInfo,
    PlayerLists,
    RegisterRequest,
    StartGameRequest,
)
from src.core.config import SessionConfig
from src.core.exceptions import (
    GameStateError,
    RegisterError,
    SessionCancelledError,
    StartGameError,
)
from src.core.log import configure_logging
from src.core.shared_types import RegisterErrorCode, SessionStatus, StartErrorCode
from src.reversi.session import GameSession, GameView
from src.services.reconciliation import ReconcileResult, RefreshLoop
from src.services.remote import GameServiceClient
from src.services.submitter import OptimisticSubmitter

logger = logging.getLogger(__name__)


class ReversiService:
    """Entry points for the UI layer. One instance per game view."""

    def __init__(
        self,
        client: GameServiceClient,
        config: Optional[SessionConfig] = None,
        on_change: Optional[Callable[[ReconcileResult], None]] = None,
    ) -> None:
        self.client = client
        self.config = config or SessionConfig()
        self._on_change = on_change
        self.session: Optional[GameSession] = None
        self._submitter: Optional[OptimisticSubmitter] = None
        self._refresh: Optional[RefreshLoop] = None

    @classmethod
    def from_env(cls, client: GameServiceClient) -> Self:
        """Read the settings from the environment and set up logging accordingly."""
        config = SessionConfig.from_env()
        configure_logging(config.log_level)
        return cls(client, config)

    # -- UI ENTRY POINTS ---
    async def register(self, request: RegisterRequest) -> ParticipantInfo | None:
        """Register the player. With an empty name: look up an earlier registration of this caller."""
        try:
            return await self.client.register(request.name)
        except RegisterError:
            raise
        except Exception as exc:
            logger.warning("Register error: %r", exc)
            raise RegisterError(RegisterErrorCode.OTHER, str(exc)) from exc

    async def start_game(self, request: StartGameRequest) -> GameView:
        """
        Start (or join) a game and begin polling it.
        ---

        * PlayerNotFound: maybe the names were swapped. The error suggests to retry the other way around.
        * OpponentInAnotherGame: the error carries the opponent's name.
        * Anything unexpected surfaces as a StartGameError as well.
        """
        await self.unmount()
        logger.info(
            "Start %r against %r on %dx%d",
            request.player_name,
            request.opponent_name,
            request.dimension,
            request.dimension,
        )
        try:
            payload = await self.client.start(request.opponent_name, request.dimension)
        except StartGameError as exc:
            if exc.code == StartErrorCode.OPPONENT_NOT_FOUND and request.opponent_name:
                raise StartGameError(
                    exc.code,
                    exc.detail,
                    retry_as=(request.opponent_name, request.player_name),
                ) from exc
            if exc.code == StartErrorCode.OPPONENT_BUSY:
                raise StartGameError(exc.code, request.opponent_name) from exc
            raise
        except Exception as exc:
            logger.warning("Start error: %r", exc)
            raise StartGameError(StartErrorCode.OTHER, str(exc)) from exc

        session = GameSession(request.player_name)
        session.activate(payload.to_model())
        self.session = session
        self._submitter = OptimisticSubmitter(session, self.client)
        self._refresh = RefreshLoop(session, self.client, self.config, self._on_change)
        self.mount()
        return session.view()

    def request_move(self, request: MoveRequest) -> bool:
        """The local player clicked a cell. False when the move is not (or not yet) yours to make."""
        if self._submitter is None:
            return False
        return self._submitter.request_move(request.row, request.col)

    def view(self) -> GameView:
        if self.session is None:
            return GameSession(player_name="").view()
        return self.session.view()

    def require_active(self) -> GameSession:
        """Session to play in. Raises when there is none, or when it got cancelled (back to the lobby)."""
        if self.session is None:
            raise GameStateError("No game started.")
        if self.session.status == SessionStatus.CANCELLED:
            raise SessionCancelledError(self.session.cancel_reason or "GameCancelled")
        if not self.session.is_active:
            raise GameStateError(f"Game is not in progress. status: {self.session.status}")
        return self.session

    async def refresh(self) -> ReconcileResult:
        """Poll once, outside of the timer. Fetch failures propagate as TransientFetchError."""
        if self._refresh is None:
            raise GameStateError("No game started.")
        return await self._refresh.tick()

    async def list_players(self) -> PlayerLists:
        """Lobby charts. Failures are logged and answered with empty lists."""
        try:
            return await self.client.list_players()
        except Exception as exc:
            logger.warning("Refresh list error, ignored: %r", exc)
            return PlayerLists()

    # -- LIFECYCLE HOOKS ---
    def mount(self) -> None:
        """Game view is shown: keep the session in sync."""
        if self._refresh is not None and self.session is not None and self.session.is_active:
            self._refresh.start()

    async def unmount(self) -> None:
        """Game view is gone: stop polling. Submissions in flight finish on their own."""
        if self._refresh is not None:
            await self._refresh.stop()

    @property
    def polling(self) -> bool:
        return self._refresh is not None and self._refresh.running

    async def drain_submissions(self) -> None:
        if self._submitter is not None:
            await self._submitter.drain()
