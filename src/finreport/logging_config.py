"""Logging setup for the CLI."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str = "INFO") -> None:
    """Send log records to stderr at the given level.

    User-facing output goes through click.echo; logging carries diagnostics.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        force=True,
    )

    for name in ("urllib3", "reportlab"):
        logging.getLogger(name).setLevel(logging.WARNING)
