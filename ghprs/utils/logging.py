# The MIT License (MIT)
# Copyright © 2025 Entrius

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

DEFAULT_LOG_LEVEL = 'WARNING'
DEFAULT_LOG_BACKUP_COUNT = 10
DEFAULT_LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_NAME = 'ghprs.log'
LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(log_level: str = DEFAULT_LOG_LEVEL, log_dir: Optional[str] = None) -> logging.Logger:
    """Configure the ``ghprs`` logger hierarchy.

    Console output goes to stderr so it never mixes with query results on
    stdout. When ``log_dir`` is given, everything at DEBUG and above is also
    written to a rotating ``ghprs.log`` there.
    """
    level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING

    logger = logging.getLogger('ghprs')
    logger.setLevel(logging.DEBUG if log_dir else level)

    # calling twice (e.g. from tests) must not duplicate handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(level)
    logger.addHandler(stream_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME),
            maxBytes=DEFAULT_LOG_MAX_BYTES,
            backupCount=DEFAULT_LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    return logger
