"""Logger construction. Call :func:`create_logger` once, at startup."""

import logging
import sys

from pythonjsonlogger import jsonlogger

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def create_logger(name: str = 'identity', level: str = 'INFO',
                  json_format: bool = True) -> logging.Logger:
    """
    Build the application logger.

    The returned logger is handed to every component that logs; none of them
    configure logging on their own.

    Parameters
    ----------
    name : str
    level : str
        Any standard level name; unknown names fall back to ``INFO``.
    json_format : bool
        Emit one JSON object per record instead of plain text.

    Returns
    -------
    :class:`logging.Logger`

    """
    logger = logging.getLogger(name)
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            LOG_FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
    else:
        formatter = logging.Formatter(LOG_FORMAT)
    handler.setFormatter(formatter)
    logger.handlers = [handler]
    level_no = logging.getLevelName(level.upper())
    logger.setLevel(level_no if isinstance(level_no, int) else logging.INFO)
    logger.propagate = False
    return logger
