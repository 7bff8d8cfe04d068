# Licensed under the Apache License, Version 2.0
import logging
import os

from .config import LOG_LEVEL_ENV


def setup_logging() -> None:
    level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt)
