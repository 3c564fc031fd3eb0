"""Logging setup for the CLI.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the command-line entry point.  Agent logs go to a
file so they never interleave with the rich console output.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_ROOT_LOGGER = "bba"


def configure_logging(level: str = "INFO", log_file: Path | None = None, *, verbose: bool = False) -> bool:
    """Attach a file handler (and a stderr handler when *verbose*) to the ``bba`` logger.

    Returns ``False`` when the log file cannot be opened; the CLI keeps
    running without file logging in that case.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    numeric = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    logger.setLevel(logging.DEBUG if verbose else numeric)
    formatter = logging.Formatter(LOG_FORMAT)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if verbose:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_file is None:
        return True

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as exc:
        logger.warning("File logging disabled, cannot open %s: %s", log_file, exc)
        return False

    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    return True
