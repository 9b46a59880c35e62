"""Console logging shared by the run scripts."""

import logging
import sys


def configure_logging(verbose: bool = False, very_verbose: bool = False) -> None:
    """Attach a stream handler to the dhg logger at the requested verbosity."""
    if very_verbose:
        level, stream = logging.DEBUG, sys.stdout
    elif verbose:
        level, stream = logging.INFO, sys.stdout
    else:
        level, stream = logging.WARNING, sys.stderr

    ch = logging.StreamHandler(stream=stream)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    logger = logging.getLogger('dhg')
    logger.setLevel(level)
    logger.addHandler(ch)


def add_verbosity_arguments(parser) -> None:
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose output")
    parser.add_argument("-vv", "--very-verbose", action="store_true", help="enable very verbose output")
