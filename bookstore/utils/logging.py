# bookstore/utils/logging.py
import logging
import sys

from bookstore.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure_root():
    root = logging.getLogger("bookstore")
    if root.handlers:
        return root
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    root.setLevel(LOG_LEVEL)
    return root


def get_logger(name: str) -> logging.Logger:
    _configure_root()
    return logging.getLogger(name)
