"""
The WebDAV storage driver.

``WebDAVStorageDriver`` is what callers use; it offers the reader,
writer and atomic capabilities on top of the operation classes in
``davstorage.operations``, and normalizes every path it is given before
handing it on.

    from davstorage import get_driver

    with get_driver(url="https://cloud.example.com/remote.php/dav/files/alice",
                    username="alice", password="secret") as driver:
        for entry in driver.list("/docs").entries:
            print(entry.path, entry.size)
        driver.put("/docs/hello.txt", "Hello, world")
"""
from types import TracebackType
from typing import Any
from typing import Dict
from typing import FrozenSet
from typing import Iterable
from typing import Optional
from typing import Tuple
from typing import Type
from typing import Union

from davstorage import config as davconfig
from davstorage.capabilities import Capability
from davstorage.config import DriverConfig
from davstorage.davclient import DAVClient
from davstorage.davclient import DAVResponse
from davstorage.diagnostics import run_diagnostics
from davstorage.lib import error
from davstorage.lib import path as pathutil
from davstorage.lib.error import log
from davstorage.operations import BatchOperations
from davstorage.operations import DirectoryOperations
from davstorage.operations import FileOperations
from davstorage.operations import UploadOperations
from davstorage.protocol.types import BatchResult
from davstorage.protocol.types import DiagnosticReport
from davstorage.protocol.types import DirectoryListing
from davstorage.protocol.types import FileInfo
from davstorage.protocol.types import OperationResult


class WebDAVStorageDriver:
    """
    Storage driver for one WebDAV account.

    A driver owns one HTTP session, and is not meant to be reconfigured;
    build a new driver for new credentials.
    """

    type = "WebDAV"
    capabilities: FrozenSet[Capability] = frozenset(
        {Capability.READER, Capability.WRITER, Capability.ATOMIC}
    )

    def __init__(self, config: DriverConfig) -> None:
        self.config = config
        self.client = DAVClient(
            config.credentials,
            timeout=config.timeout,
            ssl_verify_cert=config.ssl_verify_cert,
            headers=config.headers,
        )
        self.file_ops = FileOperations(self.client, huge_tree=config.huge_tree)
        self.directory_ops = DirectoryOperations(self.client, huge_tree=config.huge_tree)
        self.upload_ops = UploadOperations(self.client)
        self.batch_ops = BatchOperations(self.file_ops)
        log.debug("WebDAV storage driver %s ready for %s" % (config.name, self.client.url))

    def __enter__(self) -> "WebDAVStorageDriver":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    ## Reader

    def list(self, path: str) -> DirectoryListing:
        return self.directory_ops.list_directory(pathutil.normalize(path, True))

    def get(self, path: str) -> DAVResponse:
        """
        Download a file.  The returned response is streamed, close it
        after use.
        """
        return self.file_ops.download_file(pathutil.normalize(path, False))

    def get_info(self, path: str) -> FileInfo:
        return self.file_ops.get_file_info(pathutil.normalize(path, False))

    stat = get_info

    def exists(self, path: str) -> bool:
        """
        Whether the resource exists.  A network failure gives False as
        well, use ``get_info`` to tell the two apart.
        """
        return self.file_ops.exists(pathutil.normalize(path, False))

    ## Writer

    def put(
        self,
        path: str,
        data: Any,
        content_type: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> OperationResult:
        return self.upload_ops.upload_file(
            pathutil.normalize(path, False), data, content_type, headers
        )

    def mkdir(self, path: str) -> OperationResult:
        return self.directory_ops.create_directory(pathutil.normalize(path, True))

    def remove(self, path: str) -> OperationResult:
        return self.file_ops.remove_item(pathutil.normalize(path, False))

    def update_file(
        self,
        path: str,
        content: Union[str, bytes],
        content_type: Optional[str] = None,
    ) -> OperationResult:
        return self.file_ops.update_file(
            pathutil.normalize(path, False), content, content_type
        )

    def upload_text(
        self, path: str, content: str, content_type: Optional[str] = None
    ) -> OperationResult:
        return self.upload_ops.upload_text(
            pathutil.normalize(path, False), content, content_type
        )

    def upload_json(self, path: str, data: Any) -> OperationResult:
        return self.upload_ops.upload_json(pathutil.normalize(path, False), data)

    def check_upload_conditions(
        self, path: str, overwrite: bool = True
    ) -> Dict[str, Any]:
        return self.upload_ops.check_upload_conditions(
            pathutil.normalize(path, False), overwrite
        )

    def batch_delete(self, paths: Iterable[str]) -> BatchResult:
        return self.batch_ops.batch_delete(paths)

    ## Atomic

    def rename(
        self, old_path: str, new_path: str, overwrite: bool = True
    ) -> OperationResult:
        return self.file_ops.rename_item(
            pathutil.normalize(old_path, False),
            pathutil.normalize(new_path, False),
            overwrite=overwrite,
        )

    move = rename

    def copy(
        self,
        source_path: str,
        target_path: str,
        overwrite: bool = True,
        depth: Union[int, str] = "infinity",
    ) -> OperationResult:
        return self.file_ops.copy_item(
            pathutil.normalize(source_path, False),
            pathutil.normalize(target_path, False),
            overwrite=overwrite,
            depth=depth,
        )

    def batch_copy(
        self,
        items: Iterable[Tuple[str, str]],
        overwrite: bool = True,
        depth: Union[int, str] = "infinity",
    ) -> BatchResult:
        return self.batch_ops.batch_copy(
            items, overwrite=overwrite, depth=depth
        )

    def batch_move(
        self, items: Iterable[Tuple[str, str]], overwrite: bool = True
    ) -> BatchResult:
        return self.batch_ops.batch_move(
            items, overwrite=overwrite
        )

    ## Not offered by WebDAV

    def generate_presigned_url(self, path: str, **kwargs) -> None:
        raise error.UnsupportedError(
            url=path, reason="WebDAV storage does not support presigned URLs"
        )

    def abort_multipart_upload(self, path: str, **kwargs) -> None:
        raise error.UnsupportedError(
            url=path, reason="WebDAV storage does not support multipart uploads"
        )

    def cross_storage_copy(self, source_path: str, target_path: str, **kwargs) -> None:
        raise error.UnsupportedError(
            url=source_path,
            reason="WebDAV storage does not support copying across storages",
        )

    ## Other

    def get_stats(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.config.name,
            "url": self.config.credentials.url,
            "capabilities": sorted(c.value for c in self.capabilities),
        }

    def test_connection(self) -> DiagnosticReport:
        """Run the connection diagnostics with this driver's configuration."""
        return run_diagnostics(self.config, client=self.client)


def get_driver(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    **config_data,
) -> Optional[WebDAVStorageDriver]:
    """
    This function will yield a WebDAVStorageDriver object.  It will not
    try to connect (see ``test_connection`` for that).  It will read
    configuration from various sources, in this order:

    * Data from the parameters given
    * Environment variables prepended with ``DAVSTORAGE_``, like
      ``DAVSTORAGE_URL``, ``DAVSTORAGE_USERNAME``, ``DAVSTORAGE_PASSWORD``
    * Configuration file, see ``davstorage.config``

    Returns None if no configuration was found.
    """
    params = davconfig.resolve_params(
        check_config_file=check_config_file,
        config_file=config_file,
        config_section_name=config_section,
        environment=environment,
        **config_data,
    )
    if not params:
        return None
    return WebDAVStorageDriver(DriverConfig.from_dict(params))
