#!/usr/bin/env python
import logging
import os
from typing import Optional

from davstorage import __version__

debug_dump_communication = False
try:
    ## Environmental variables prepended with "PYTHON_DAVSTORAGE" are used for debug purposes,
    ## environmental variables prepended with "DAVSTORAGE_" are for connection parameters
    debug_dump_communication = os.environ.get("PYTHON_DAVSTORAGE_COMMDUMP", False)
    ## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
    debugmode = os.environ["PYTHON_DAVSTORAGE_DEBUGMODE"]
except KeyError:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("davstorage")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def errmsg(r) -> str:
    """Utility for formatting an error response to a short error string"""
    return "HTTP %s %s" % (r.status, r.reason)


def weirdness(*reasons):
    from davstorage.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"
    status: Optional[int] = None

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason
        if status is not None:
            self.status = status

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class TransportError(DAVError):
    """
    The request never produced an HTTP response: DNS failure, refused
    connection, TLS trouble or a timeout.  Never retried by this library.
    """

    timed_out: bool = False

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        timed_out: bool = False,
    ) -> None:
        super(TransportError, self).__init__(url=url, reason=reason)
        self.timed_out = timed_out


class NotFoundError(DAVError):
    status = 404


class ConflictError(DAVError):
    status = 409


class UnsupportedError(DAVError):
    """
    The operation belongs to a capability the WebDAV backend does not
    offer (presigned URLs, multipart uploads, ...).
    """

    pass


class InternalError(DAVError):
    status = 500


class InsufficientStorageError(InternalError):
    status = 507
