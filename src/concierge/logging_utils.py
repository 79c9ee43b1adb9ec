# src/concierge/logging_utils.py
"""
Logging utilities for concierge.

Provides a single entry point to configure root logging for CLI and library use.
Log records go to stderr by default so that command output on stdout stays
machine-readable.
"""

import logging
import sys
from typing import IO, Optional


_VERBOSITY_LEVELS = {
    0: logging.INFO,
    1: logging.DEBUG,  # any value >= 1 maps to DEBUG
}

# Third-party loggers that log every request at INFO; kept at WARNING
# unless debugging.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    verbosity: int = 0, stream: Optional[IO[str]] = None
) -> logging.Logger:
    """
    Configure application-wide logging.

    Parameters
    ----------
    verbosity : int, default=0
        Verbosity level:
        - 0 -> INFO
        - 1 or higher -> DEBUG, including HTTP client internals
        Must be a non-negative integer.
    stream : IO[str] or None, default=None
        Target stream for the StreamHandler. Defaults to sys.stderr if None.

    Returns
    -------
    logging.Logger
        The configured root logger.

    Raises
    ------
    TypeError
        If verbosity is not an int, or if a stream is provided that does not
        have a write method.
    ValueError
        If verbosity is negative.
    """
    if isinstance(verbosity, bool) or not isinstance(verbosity, int):
        raise TypeError(f"verbosity must be int, got {type(verbosity).__name__}")
    if verbosity < 0:
        raise ValueError(f"verbosity must be non-negative, got {verbosity}")

    level = _VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)

    if stream is None:
        stream = sys.stderr
    elif not hasattr(stream, "write"):
        raise TypeError("stream must be file-like (support .write(...))")

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))

    root = logging.getLogger()
    # Replace only plain StreamHandlers; FileHandler subclasses stay attached.
    root.handlers = [h for h in root.handlers if type(h) is not logging.StreamHandler]
    root.addHandler(handler)
    root.setLevel(level)

    http_level = logging.DEBUG if verbosity >= 1 else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    return root
