"""Logger object for the Flockwave OSC library."""

import colorlog
import logging
import sys

from typing import Optional

__all__ = ("install", "log")

log = logging.getLogger("flockwave.osc")

#: Format string of the log records when the "fancy" style is used
FANCY_FORMAT = (
    "%(log_color)s%(levelname)-8s%(reset)s %(cyan)s%(name)s%(reset)s %(message)s"
)

#: Format string of the log records when the "plain" style is used
PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"

#: The handler installed by `install()`; reused when it is called again
_handler: Optional[logging.StreamHandler] = None


def install(level: int = logging.INFO, style: str = "fancy") -> None:
    """Installs a log handler on the root logger that prints log records to
    the standard error stream.

    Parameters:
        level: the minimum level of the log records to print
        style: the style of the log output; ``fancy`` uses coloured output,
            ``plain`` prints timestamped records without colours

    Calling the function again reconfigures the handler that it installed
    earlier instead of adding another one.
    """
    global _handler

    if style == "fancy":
        formatter = colorlog.ColoredFormatter(FANCY_FORMAT)
    elif style == "plain":
        formatter = logging.Formatter(PLAIN_FORMAT)
    else:
        raise ValueError(f"unknown log style: {style!r}")

    root = logging.getLogger()
    if _handler is None or _handler not in root.handlers:
        _handler = logging.StreamHandler()
        root.addHandler(_handler)
    else:
        _handler.setStream(sys.stderr)

    _handler.setFormatter(formatter)
    root.setLevel(level)
