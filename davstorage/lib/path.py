#!/usr/bin/env python
"""
Virtual paths as seen by users of the driver.

A virtual path is always rooted ("/docs/a.txt").  Collections carry a
trailing slash ("/docs/"), plain resources don't.  These helpers work on
*decoded* paths; ``encode`` is applied once on the way out to the server
and ``decode`` once on hrefs coming back.  Applying ``encode`` twice will
double-encode the percent signs, so don't.
"""
import re
from urllib.parse import quote
from urllib.parse import unquote

SEPARATOR = "/"
ROOT = "/"

_repeated_separators = re.compile(r"/+")


def normalize(path: str, is_collection: bool = False) -> str:
    """
    Canonicalize ``path``: rooted, no repeated separators, and a trailing
    slash if and only if it denotes a collection.  The root is always "/".
    """
    if not path:
        return ROOT

    normalized = path if path.startswith(SEPARATOR) else SEPARATOR + path
    normalized = _repeated_separators.sub(SEPARATOR, normalized)

    if normalized == ROOT:
        return ROOT
    if is_collection and not normalized.endswith(SEPARATOR):
        normalized += SEPARATOR
    elif not is_collection and normalized.endswith(SEPARATOR):
        normalized = normalized.rstrip(SEPARATOR) or ROOT
    return normalized


def join(*segments: str) -> str:
    """
    join("/docs/", "/sub", "a.txt") -> "/docs/sub/a.txt"
    """
    parts = [s.strip(SEPARATOR) for s in segments if s]
    return SEPARATOR + SEPARATOR.join(p for p in parts if p)


def parent(path: str) -> str:
    normalized = normalize(path, False)
    if normalized == ROOT:
        return ROOT
    idx = normalized.rfind(SEPARATOR)
    if idx == 0:
        return ROOT
    return normalized[:idx]


def file_name(path: str) -> str:
    normalized = normalize(path, False)
    if normalized == ROOT:
        return ""
    return normalized[normalized.rfind(SEPARATOR) + 1 :]


def is_root(path: str) -> bool:
    return normalize(path, True) == ROOT


def encode(path: str) -> str:
    """Percent-encode every segment, keeping the separators"""
    return SEPARATOR.join(quote(segment, safe="") for segment in path.split(SEPARATOR))


def decode(path: str) -> str:
    return SEPARATOR.join(unquote(segment) for segment in path.split(SEPARATOR))


def strip_prefix(path: str, prefix: str) -> str:
    """
    Remove the server base path from a decoded href.

    Nextcloud answers a PROPFIND on /docs/ with hrefs like
    /remote.php/dav/files/alice/docs/ when the driver was configured with
    https://cloud.example/remote.php/dav/files/alice as base url.
    """
    prefix = prefix.rstrip(SEPARATOR)
    if not prefix:
        return path
    if path == prefix:
        return ROOT
    if path.startswith(prefix + SEPARATOR):
        return path[len(prefix) :]
    return path
