"""Logging setup for the command line."""

import logging
import sys


def configure_logging(level: int | str = logging.WARNING) -> None:
    # stdout is reserved for command output
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
