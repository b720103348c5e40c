"""
Operations of the WebDAV storage driver, grouped by concern.

Each operation class wraps a ``DAVClient`` and turns HTTP responses into
results or error kinds of ``davstorage.lib.error``.
"""
from .base import classify_file_type
from .base import raise_for_status
from .batch_ops import BatchOperations
from .directory_ops import DirectoryOperations
from .file_ops import FileOperations
from .upload_ops import UploadOperations

__all__ = [
    "BatchOperations",
    "DirectoryOperations",
    "FileOperations",
    "UploadOperations",
    "classify_file_type",
    "raise_for_status",
]
