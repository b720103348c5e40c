"""
Domain types for the WebDAV storage driver.

These dataclasses are what the operations layer hands back to callers.
None of them does any I/O.
"""
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from enum import Enum
from typing import Any
from typing import Dict
from typing import List
from typing import Optional


class FileType(Enum):
    """Display classification of a listed entry, derived from its name."""

    UNKNOWN = 0
    FOLDER = 1
    VIDEO = 2
    AUDIO = 3
    TEXT = 4
    IMAGE = 5
    OFFICE = 6
    DOCUMENT = 7


@dataclass(frozen=True)
class Credentials:
    """
    Already decrypted connection secrets for one driver instance.

    Attributes:
        url: Server base URL, stored without trailing slash
        username: Username for Basic authentication
        password: Password for Basic authentication
    """

    url: str
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", (self.url or "").rstrip("/"))


@dataclass
class ResourceDescriptor:
    """
    One resource parsed out of a multi-status response.

    Attributes:
        href: Decoded path of the resource as sent by the server
        name: Last path segment, or the displayname when the server gave one
        is_collection: True for directories
        size: Content length; 0 for collections, None when a file has none
        last_modified: Modification time (now if the server gave nothing usable)
        creation_date: Creation time, defaults to last_modified
        content_type: MIME type, with directory/octet-stream fallbacks
        etag: Entity tag without surrounding quotes
        display_name: The server-side displayname, if it differs from name
    """

    href: str
    name: str
    is_collection: bool = False
    size: Optional[int] = None
    last_modified: Optional[datetime] = None
    creation_date: Optional[datetime] = None
    content_type: Optional[str] = None
    etag: Optional[str] = None
    display_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.is_collection:
            self.size = 0


@dataclass
class DirectoryEntry:
    name: str
    path: str
    size: int
    is_dir: bool
    modified: Optional[datetime]
    created: Optional[datetime]
    type: FileType
    etag: Optional[str] = None
    content_type: Optional[str] = None


@dataclass
class DirectoryListing:
    path: str
    entries: List[DirectoryEntry] = field(default_factory=list)
    writable: bool = True
    provider: str = "WebDAV"


@dataclass
class FileInfo:
    """What get_info() and stat() return for a single resource."""

    name: str
    path: str
    type: str
    size: int
    last_modified: Optional[datetime]
    etag: Optional[str]
    content_type: str
    is_directory: bool


@dataclass
class OperationResult:
    """
    Outcome of a successful single-item write or atomic operation.

    Only the fields relevant to the operation are filled in; failures are
    raised, not returned.
    """

    success: bool
    message: str
    path: Optional[str] = None
    source_path: Optional[str] = None
    target_path: Optional[str] = None
    kind: Optional[str] = None
    file_name: Optional[str] = None
    size: Optional[int] = None
    content_type: Optional[str] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None


@dataclass
class BatchItemResult:
    success: bool
    message: str
    path: Optional[str] = None
    source_path: Optional[str] = None
    target_path: Optional[str] = None
    status: Optional[int] = None


@dataclass
class BatchResult:
    """
    Aggregate outcome of a batch operation.

    Attributes:
        results: Successful items, in input order
        errors: Failed items, in input order
        total: Number of items handed in
        message: Human readable summary
    """

    results: List[BatchItemResult] = field(default_factory=list)
    errors: List[BatchItemResult] = field(default_factory=list)
    total: int = 0
    message: str = ""

    @property
    def success_count(self) -> int:
        return len(self.results)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        return not self.errors


class DiagnosticOutcome(Enum):
    FULL_SUCCESS = "full success"
    PARTIAL_WRITE_UNAVAILABLE = "partial success (write unavailable)"
    PARTIAL_READ_UNAVAILABLE = "partial success (read unavailable)"
    AUTH_FAILURE = "authentication failure"
    CONNECT_FAILURE = "connection failure"


@dataclass
class StageResult:
    """
    Result of one diagnostic stage.

    Attributes:
        name: connect, auth, read or write
        success: Whether the stage passed
        status_code: HTTP status, if a response was received
        error: Error description for failed stages
        note: Informational text
        timed_out: The request was aborted by the stage timeout
        latency_ms: Round trip time of the stage request
        file_count: Read stage only - entries in the default folder
        test_file: Write stage only - path of the probe file
        cleaned: Write stage only - whether the probe file was deleted again
        cleanup_error: Write stage only - why cleanup failed
    """

    name: str
    success: bool = False
    status_code: Optional[int] = None
    error: Optional[str] = None
    note: str = ""
    timed_out: bool = False
    latency_ms: Optional[int] = None
    file_count: Optional[int] = None
    test_file: Optional[str] = None
    cleaned: Optional[bool] = None
    cleanup_error: Optional[str] = None


@dataclass
class DiagnosticReport:
    connect: StageResult
    auth: StageResult
    read: StageResult
    write: StageResult
    connection_info: Dict[str, Any] = field(default_factory=dict)
    outcome: DiagnosticOutcome = DiagnosticOutcome.CONNECT_FAILURE
    message: str = ""

    @property
    def success(self) -> bool:
        ## write is reported, but a read-only configuration is still valid
        return self.connect.success and self.auth.success and self.read.success

    @property
    def orphaned_probe(self) -> bool:
        return self.write.success and not self.write.cleaned

    @property
    def stages(self) -> List[StageResult]:
        return [self.connect, self.auth, self.read, self.write]
