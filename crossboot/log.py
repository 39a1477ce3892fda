"""Logging setup for the command line.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
CLI calls setup_logging() once to decide what reaches the terminal.
"""

import logging

FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATEFMT = "%H:%M:%S"


def setup_logging(verbose: int = 0) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=FORMAT, datefmt=DATEFMT, force=True)
    # urllib3 connection chatter is only useful at -vv
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose > 1 else logging.WARNING)
