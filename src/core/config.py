"""Settings of a game session. Values can be overridden through environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Self

from src.core.exceptions import InvalidRequestError

# Smallest board that still has room around the four starting stones
MIN_DIMENSION = 4
# The sizes the lobby offers
BOARD_SIZE_OPTIONS: tuple[int, ...] = (6, 8, 12)
DEFAULT_DIMENSION = BOARD_SIZE_OPTIONS[0]

ENV_PREFIX = "REVERSI_"


@dataclass(frozen=True)
class SessionConfig:
    refresh_interval: float = 1.0  # seconds between two polls of the remote service
    retry_interval: float = 1.0  # seconds to wait after a failed poll
    resync_on_fault: bool = True  # rebuild from the authoritative move log when the local board diverged
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.refresh_interval <= 0 or self.retry_interval <= 0:
            raise InvalidRequestError(
                f"Intervals must be positive. Got {self.refresh_interval=}, {self.retry_interval=}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Read REVERSI_REFRESH_INTERVAL, REVERSI_RETRY_INTERVAL, REVERSI_RESYNC_ON_FAULT and REVERSI_LOG_LEVEL"""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            refresh_interval=_float_setting(
                env, "REFRESH_INTERVAL", defaults.refresh_interval
            ),
            retry_interval=_float_setting(
                env, "RETRY_INTERVAL", defaults.retry_interval
            ),
            resync_on_fault=_bool_setting(
                env, "RESYNC_ON_FAULT", defaults.resync_on_fault
            ),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
        )


def _float_setting(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidRequestError(
            f"{ENV_PREFIX}{name} should be a number of seconds, got {raw!r}"
        ) from None


def _bool_setting(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise InvalidRequestError(f"{ENV_PREFIX}{name} should be a boolean, got {raw!r}")
