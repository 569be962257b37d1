"""
Logging configuration.

Sets up standard library logging for the client and renders the
structured ``extra={...}`` fields passed at call sites.
"""

import logging
import sys

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_initialized = False


class ExtraFieldsFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not extras:
            return message
        rendered = " ".join(f"{key}={value!r}" for key, value in sorted(extras.items()))
        return f"{message} | {rendered}"


def init_logging(level: str | int = "INFO") -> None:
    """
    Initialize logging for the ``gather_client`` logger tree.

    Safe to call more than once; later calls only adjust the level.

    Args:
        level: Log level name or number.
    """
    global _initialized

    root = logging.getLogger("gather_client")
    root.setLevel(level.upper() if isinstance(level, str) else level)

    if _initialized:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ExtraFieldsFormatter(_LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False
    _initialized = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger, defaulting to the package logger."""
    return logging.getLogger(name or "gather_client")
