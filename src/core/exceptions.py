"""
Custom exceptions shared by all layers.

Engine-level errors (BoardError and subclasses) are contract violations and are left to propagate.
Everything else is recoverable at the session level.
"""

from typing import Optional


class GameError(Exception):
    """Top-level exception of this project."""


# --- BOARD / ENGINE ---
class BoardError(GameError):
    pass


class InvalidDimensionError(BoardError):
    pass


class OutOfBoundsError(BoardError):
    pass


class IllegalMoveError(GameError):
    pass


class NotYourTurnError(GameError):
    pass


class GameStateError(GameError):
    """Requested transition is not allowed from the current session status."""


class InvalidRequestError(GameError):
    pass


class SessionCancelledError(GameError):
    pass


# --- REMOTE SERVICE ---
class RemoteServiceError(GameError):
    """The remote game service could not be reached or answered with garbage."""


class TransientFetchError(RemoteServiceError):
    pass


class TransientSubmitError(RemoteServiceError):
    pass


class CodedError(GameError):
    """Error with a named code the UI layer can render."""

    def __init__(self, code: str, detail: Optional[str] = None) -> None:
        self.code = code
        self.detail = detail
        message = f"{code}: {detail}" if detail else code
        super().__init__(message)


class StartGameError(CodedError):
    def __init__(
        self,
        code: str,
        detail: Optional[str] = None,
        retry_as: Optional[tuple[str, str]] = None,
    ) -> None:
        super().__init__(code, detail)
        # (player, opponent) to try again with, when the names were probably entered the wrong way around
        self.retry_as = retry_as


class RegisterError(CodedError):
    pass


class MoveRejectedError(CodedError):
    pass
