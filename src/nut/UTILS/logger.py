"""
Logging setup for the command line.
"""
import logging
import os
import sys

import colorlog

PLAIN_FORMAT = '[%(levelname).4s] %(message)s'


def use_colors(stream=None) -> bool:
    """Colors only on a terminal, and never when NO_COLOR is set."""
    stream = stream or sys.stderr
    return stream.isatty() and not os.environ.get("NO_COLOR")


def make_formatter(colored: bool) -> logging.Formatter:
    if colored:
        return colorlog.ColoredFormatter(
            '%(log_color)s[%(levelname).4s]%(reset)s %(message)s',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            },
            reset=True,
            style='%'
        )
    return logging.Formatter(PLAIN_FORMAT)


def setup_logger(debug: bool = False, level: str = "INFO"):
    """
    Configures the root logger for the application.

    :param debug: Force DEBUG level.
    :param level: Level name used when ``debug`` is not set.
    """
    logger = logging.getLogger()
    resolved = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(resolved)

    # Prevent duplicate handlers if this function is called multiple times
    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(make_formatter(use_colors(sys.stderr)))
    logger.addHandler(handler)
