"""
Root logger setup for the API process.

``setup_logging`` installs a console handler and, when ``LOG_FILE`` is
set, a file handler on the root logger.  Handlers installed here are
tagged so a later call replaces them instead of stacking new ones;
``create_app`` runs once per application and tests build many
applications in one process.  Handlers added by anything else (for
example pytest's log capture) are left alone.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .config import normalize_log_level

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_TAG = "_products_api_handler"


def installed_handlers(logger: Optional[logging.Logger] = None) -> List[logging.Handler]:
    """Handlers on ``logger`` (root by default) that ``setup_logging`` installed."""
    logger = logger or logging.getLogger()
    return [handler for handler in logger.handlers if getattr(handler, _HANDLER_TAG, False)]


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"warn"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path to a file to log messages to.  If omitted, no file
        handler is added.
    """
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, normalize_log_level(level)))

    for handler in installed_handlers(logger):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_TAG, True)
        logger.addHandler(handler)
