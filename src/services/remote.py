"""Protocol for the remote game service (the authority). Transport is up to the implementation."""

from typing import Protocol

from src.api.models import GamePayload, ParticipantInfo, PlayerLists
from src.core.shared_types import MoveOutcome


class GameServiceClient(Protocol):
    """
    Everything the client core needs from the remote service.

    Implementations raise StartGameError / RegisterError / MoveRejectedError for answers the service gives on purpose.
    Any other exception is treated as a transient failure by the callers.
    """

    async def view(self) -> GamePayload | None:
        """Authoritative snapshot of the caller's current game, None if there is none (anymore)."""
        ...

    async def start(self, opponent: str, dimension: int) -> GamePayload:
        """Start a game against `opponent` (empty: anyone), or join the open game `opponent` started."""
        ...

    async def move(self, row: int, col: int) -> MoveOutcome:
        """Submit a move for the caller."""
        ...

    async def register(self, name: str) -> ParticipantInfo | None:
        """Register (or look up, when `name` is empty) the caller."""
        ...

    async def list_players(self) -> PlayerLists:
        ...
