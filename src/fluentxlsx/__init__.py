import logging
import logging.handlers
import os
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

try:
    __version__ = version("fluentxlsx")
except PackageNotFoundError:  # pragma: no cover
    # package is not installed
    __version__ = "0.0.0"

# Configuration is built at application startup, so the records of all
# fluentxlsx modules are routed through this package logger.
logger = logging.getLogger(__name__)

LOGLEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
CONSOLE_FORMAT = "%(levelname)-8s|%(message)s"
FILE_FORMAT = "%(asctime)s|%(name)-24s|%(levelname)-8s|%(message)s"


def _file_handler_for(logfile: Path) -> logging.Handler | None:
    target = os.path.abspath(logfile)
    for handler in logger.handlers:
        if (
            isinstance(handler, logging.handlers.RotatingFileHandler)
            and handler.baseFilename == target
        ):
            return handler
    return None


def setup_logging(
    loglevel: int = logging.INFO, logfile: Path | None = None
) -> logging.Handler | None:
    """
    Setup logging of the fluentxlsx modules to console and optionally a file.

    The default loglevel is INFO; the ``LOGLEVEL`` environment variable
    overrides it. The level is set on the package logger, so it also applies
    when the root logger is already configured by the application.

    Returns the rotating file handler for ``logfile`` or None.
    """
    loglevel_name = os.getenv("LOGLEVEL", "").strip().upper()
    if loglevel_name in LOGLEVEL_NAMES:
        loglevel = getattr(logging, loglevel_name)

    # Apply constraints. CRITICAL=FATAL=50 is the maximum, NOTSET=0 the minimum.
    loglevel = min(logging.FATAL, max(loglevel, logging.NOTSET))

    # No-op if the application has set up console logging already
    logging.basicConfig(level=loglevel, format=CONSOLE_FORMAT)
    logger.setLevel(loglevel)

    if logfile is None:
        return None

    fh = _file_handler_for(logfile)
    if fh is None:
        fh = logging.handlers.RotatingFileHandler(
            logfile, maxBytes=100000, backupCount=5, encoding="utf-8"
        )
        fh.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(fh)
    fh.setLevel(loglevel)
    return fh
