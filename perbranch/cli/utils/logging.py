import logging
import sys


logger = logging.getLogger("perbranch")

# library loggers that are only interesting with --debug
_LIBRARY_LOGGERS = ("git", "filelock", "dulwich")


def configure_logging(debug: bool):
    """
    Send perbranch messages to stdout, with library output only in debug mode.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
