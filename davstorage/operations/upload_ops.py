"""
Upload operations.

``upload_file`` accepts the payload representations a caller is likely
to have at hand:

* ``bytes``, ``bytearray`` or ``memoryview`` - sent as is
* ``str`` - UTF-8 encoded, sent as text/plain
* a binary file object (anything with ``read``) - streamed; size from the
  file descriptor or by seeking, content type guessed from its name

An explicit ``content_type`` always wins over the guess.
"""
import io
import json
import mimetypes
import os
from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple

from davstorage.davclient import DAVClient
from davstorage.lib import error
from davstorage.lib import path as pathutil
from davstorage.lib.error import log
from davstorage.protocol.types import OperationResult

from .base import raise_for_status

DEFAULT_CONTENT_TYPE = "application/octet-stream"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def prepare_payload(data: Any) -> Tuple[Any, int, str, Optional[str]]:
    """
    Figure out body, size in bytes, inferred content type and (for file
    objects) file name of an upload payload.

    Raises:
        InternalError: for payload types that can't be uploaded
    """
    if isinstance(data, str):
        body = data.encode("utf-8")
        return body, len(body), TEXT_CONTENT_TYPE, None
    if isinstance(data, (bytes, bytearray)):
        return data, len(data), DEFAULT_CONTENT_TYPE, None
    if isinstance(data, memoryview):
        return data.tobytes(), data.nbytes, DEFAULT_CONTENT_TYPE, None
    if hasattr(data, "read"):
        if isinstance(data, io.TextIOBase):
            raise error.InternalError(
                reason="text mode file objects can't be uploaded, open the file in binary mode"
            )
        name = getattr(data, "name", None)
        if not isinstance(name, str):
            name = None
        content_type = DEFAULT_CONTENT_TYPE
        if name:
            content_type = mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE
            name = os.path.basename(name)
        return data, _remaining_size(data), content_type, name
    raise error.InternalError(
        reason="unsupported payload type: %s" % type(data).__name__
    )


def _remaining_size(fileobj) -> int:
    """Number of bytes between the current position and the end"""
    try:
        fileno = fileobj.fileno()
    except (AttributeError, OSError, io.UnsupportedOperation):
        fileno = None
    if fileno is not None:
        return os.fstat(fileno).st_size - fileobj.tell()
    position = fileobj.tell()
    end = fileobj.seek(0, io.SEEK_END)
    fileobj.seek(position)
    return end - position


class UploadOperations:
    def __init__(self, client: DAVClient) -> None:
        self.client = client

    def upload_file(
        self,
        path: str,
        data: Any,
        content_type: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> OperationResult:
        """
        PUT a payload at ``path``.

        Raises:
            ConflictError: 409, the parent collection is missing or in the way
            InsufficientStorageError: 507
            InternalError: any other failure status, or an unsupported payload
        """
        try:
            body, size, inferred_type, file_name = prepare_payload(data)
        except error.InternalError as e:
            e.url = path
            raise
        content_type = content_type or inferred_type
        file_name = file_name or pathutil.file_name(path)

        request_headers = {
            "Content-Type": content_type,
            "Content-Length": str(size),
        }
        request_headers.update(headers or {})

        response = self.client.put(pathutil.encode(path), body, request_headers)
        raise_for_status(
            response,
            path,
            "upload file",
            {
                409: (
                    error.ConflictError,
                    path,
                    "parent directory does not exist or path conflict: %s" % path,
                ),
                507: (error.InsufficientStorageError, path, "insufficient storage"),
            },
        )
        log.debug("uploaded %i bytes to %s" % (size, path))

        return OperationResult(
            success=True,
            message="file uploaded successfully",
            path=path,
            file_name=file_name,
            size=size,
            content_type=content_type,
            etag=response.headers.get("ETag"),
            last_modified=datetime.now(timezone.utc),
        )

    def upload_text(
        self, path: str, content: str, content_type: Optional[str] = None
    ) -> OperationResult:
        return self.upload_file(path, content, content_type or TEXT_CONTENT_TYPE)

    def upload_json(self, path: str, data: Any) -> OperationResult:
        return self.upload_file(
            path, json.dumps(data, indent=2, ensure_ascii=False), JSON_CONTENT_TYPE
        )

    def check_upload_conditions(self, path: str, overwrite: bool = True) -> Dict[str, Any]:
        """
        Check whether an upload to ``path`` may go ahead.  Network trouble
        does not block the upload; the answer then says it could not check.
        """
        try:
            response = self.client.head(pathutil.encode(path))
        except error.TransportError as e:
            log.warning("could not check upload conditions for %s: %s" % (path, e))
            return {
                "can_upload": True,
                "file_exists": False,
                "message": "could not check the file state, the upload may be attempted",
            }

        file_exists = response.ok
        if file_exists and not overwrite:
            return {
                "can_upload": False,
                "file_exists": True,
                "reason": "file exists and overwriting is not allowed",
            }
        return {
            "can_upload": True,
            "file_exists": file_exists,
            "message": "file will be overwritten" if file_exists else "file can be uploaded",
        }
