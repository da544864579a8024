"""Logging setup for whoever embeds the client (CLI, UI process, tests)."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Attach a single stream handler to the `src` logger tree. Calling it again only changes the level."""
    root = logging.getLogger("src")
    root.setLevel(level)
    if not any(getattr(h, "_reversi_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._reversi_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
