#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .driver import WebDAVStorageDriver
from .driver import get_driver

# Silence notification of no default logging handler
log = logging.getLogger("davstorage")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = ["__version__", "WebDAVStorageDriver", "get_driver"]
