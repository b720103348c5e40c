"""
Base utilities for the operations layer.

The operation classes talk to the server through a ``DAVClient``; the
functions in this module are the pure part: turning an HTTP status into
one of the error kinds of ``davstorage.lib.error``, and classifying
listed entries for display.

Design principles:
- One error kind per failure, with the path in the message
- The status mapping of an operation is given explicitly, as a dict
- Anything unmapped is an InternalError
"""
from typing import Dict
from typing import Optional
from typing import Tuple
from typing import Type

from davstorage.lib import error
from davstorage.protocol.types import FileType
from davstorage.protocol.xml_parsers import parse_error_message

## status -> (exception class, path reported, reason)
StatusMap = Dict[int, Tuple[Type[error.DAVError], str, str]]

_extensions: Dict[FileType, Tuple[str, ...]] = {
    FileType.IMAGE: ("jpg", "jpeg", "png", "gif", "bmp", "webp", "svg"),
    FileType.VIDEO: ("mp4", "avi", "mkv", "mov", "wmv", "flv", "webm"),
    FileType.AUDIO: ("mp3", "wav", "flac", "aac", "ogg", "wma"),
    FileType.TEXT: (
        "txt", "md", "json", "xml", "html", "css", "js", "py", "java", "cpp", "c",
    ),
    FileType.OFFICE: ("doc", "docx", "xls", "xlsx", "ppt", "pptx"),
    FileType.DOCUMENT: ("pdf", "rtf", "odt", "ods", "odp"),
}

_type_by_extension: Dict[str, FileType] = {
    ext: file_type for file_type, exts in _extensions.items() for ext in exts
}


def classify_file_type(name: str, is_directory: bool = False) -> FileType:
    """
    Display classification from the file name extension.  This is
    independent of the content type the server reports.
    """
    if is_directory:
        return FileType.FOLDER
    if "." not in name:
        return FileType.UNKNOWN
    extension = name.rsplit(".", 1)[1].lower()
    return _type_by_extension.get(extension, FileType.UNKNOWN)


def describe_failure(response) -> str:
    """
    "HTTP 500 Internal Server Error", with the server's own explanation
    appended when the body carries one.
    """
    msg = error.errmsg(response)
    detail = None
    content_type = response.headers.get("Content-Type", "")
    if "xml" in content_type:
        detail = parse_error_message(response.content)
    if detail:
        msg += ": " + detail
    return msg


def raise_for_status(
    response,
    path: str,
    action: str,
    status_map: Optional[StatusMap] = None,
) -> None:
    """
    Raise the error kind matching the status of a non-2xx response.

    Args:
        response: DAVResponse
        path: the path the failure is reported against
        action: what was attempted, for the generic message ("list directory")
        status_map: special cases for this operation
    """
    if response.ok:
        return
    status_map = status_map or {}
    if response.status in status_map:
        exc_class, url, reason = status_map[response.status]
        raise exc_class(url=url, reason=reason, status=response.status)
    raise error.InternalError(
        url=path,
        reason="%s failed: %s" % (action, describe_failure(response)),
        status=response.status,
    )
