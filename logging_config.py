import logging
import os
import sys


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for the bmi-util CLI and its scripts.

    Every user-facing line (report, confirmation, error) is printed to
    stdout, so log records are kept off it: they go to stderr and only
    show up at WARNING unless LOG_LEVEL (or `level`) asks for more, e.g.
    LOG_LEVEL=DEBUG to trace connection strings and inserted ids. When a
    handler is already installed (pytest, an embedding app) only the level
    is adjusted.
    """
    chosen = (os.getenv("LOG_LEVEL") or level or "WARNING").upper()
    lvl = getattr(logging, chosen, logging.WARNING)
    root = logging.getLogger()

    if root.handlers:
        root.setLevel(lvl)
        return
    logging.basicConfig(
        format='%(levelname)s %(name)s: %(message)s',
        level=lvl,
        stream=sys.stderr,
    )
