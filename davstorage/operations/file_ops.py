"""
Single resource operations: info, download, rename, copy, overwrite,
delete and existence checks.

Paths handed to these methods are normalized virtual paths (see
``davstorage.lib.path.normalize``); they are encoded here, once, before
they go to the client.
"""
from typing import Optional
from typing import Union

from davstorage.davclient import DAVClient
from davstorage.davclient import DAVResponse
from davstorage.lib import error
from davstorage.lib import path as pathutil
from davstorage.lib.error import log
from davstorage.protocol.types import FileInfo
from davstorage.protocol.types import OperationResult
from davstorage.protocol.types import ResourceDescriptor
from davstorage.protocol.xml_parsers import parse_multistatus

from .base import raise_for_status


class FileOperations:
    def __init__(self, client: DAVClient, huge_tree: bool = False) -> None:
        self.client = client
        self.huge_tree = huge_tree

    def get_file_info(self, path: str) -> FileInfo:
        """
        PROPFIND with depth 0 on the resource.

        Raises:
            NotFoundError: the server says 404, or the multistatus holds no usable entry
            InternalError: any other failure status
        """
        response = self.client.propfind(pathutil.encode(path), depth=0)
        raise_for_status(
            response,
            path,
            "get file info",
            {404: (error.NotFoundError, path, "file does not exist: %s" % path)},
        )

        descriptors = parse_multistatus(response.content, huge_tree=self.huge_tree)
        if not descriptors:
            raise error.NotFoundError(
                url=path, reason="file does not exist: %s" % path, status=response.status
            )
        return self._format_file_info(descriptors[0], path)

    def download_file(self, path: str) -> DAVResponse:
        """
        GET the resource.  The response is streamed; read it with
        ``iter_content()`` or ``content``, and close it when done.
        """
        response = self.client.get(pathutil.encode(path), stream=True)
        if not response.ok:
            try:
                raise_for_status(
                    response,
                    path,
                    "download file",
                    {404: (error.NotFoundError, path, "file does not exist: %s" % path)},
                )
            finally:
                response.close()
        return response

    def rename_item(
        self, old_path: str, new_path: str, overwrite: bool = True
    ) -> OperationResult:
        response = self.client.move(
            pathutil.encode(old_path), pathutil.encode(new_path), overwrite=overwrite
        )
        raise_for_status(
            response, old_path, "rename", self._transfer_status_map(old_path, new_path)
        )
        return OperationResult(
            success=True,
            message="renamed successfully",
            source_path=old_path,
            target_path=new_path,
        )

    def copy_item(
        self,
        source_path: str,
        target_path: str,
        overwrite: bool = True,
        depth: Union[int, str] = "infinity",
    ) -> OperationResult:
        response = self.client.copy(
            pathutil.encode(source_path),
            pathutil.encode(target_path),
            overwrite=overwrite,
            depth=depth,
        )
        raise_for_status(
            response,
            source_path,
            "copy",
            self._transfer_status_map(source_path, target_path),
        )
        return OperationResult(
            success=True,
            message="copied successfully",
            source_path=source_path,
            target_path=target_path,
        )

    def update_file(
        self,
        path: str,
        content: Union[str, bytes],
        content_type: Optional[str] = None,
    ) -> OperationResult:
        """
        Overwrite a resource with new content.  The reported size is the
        number of bytes written, not the number of characters.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        response = self.client.put(
            pathutil.encode(path),
            content,
            {"Content-Type": content_type or "text/plain"},
        )
        raise_for_status(response, path, "update file")
        return OperationResult(
            success=True,
            message="file updated successfully",
            path=path,
            size=len(content),
        )

    def remove_item(self, path: str) -> OperationResult:
        response = self.client.delete(pathutil.encode(path))
        raise_for_status(
            response,
            path,
            "delete",
            {404: (error.NotFoundError, path, "file does not exist: %s" % path)},
        )
        return OperationResult(success=True, message="deleted successfully", path=path)

    def exists(self, path: str) -> bool:
        """
        HEAD on the resource.  A network failure counts as "does not
        exist"; it is logged, but not raised.
        """
        try:
            response = self.client.head(pathutil.encode(path))
        except error.TransportError as e:
            log.warning("could not check existence of %s: %s" % (path, e))
            return False
        return response.ok

    @staticmethod
    def _transfer_status_map(source: str, target: str):
        return {
            404: (error.NotFoundError, source, "source does not exist: %s" % source),
            409: (error.ConflictError, target, "target already exists: %s" % target),
        }

    @staticmethod
    def _format_file_info(descriptor: ResourceDescriptor, path: str) -> FileInfo:
        return FileInfo(
            name=descriptor.name or pathutil.file_name(path),
            path=path,
            type="directory" if descriptor.is_collection else "file",
            size=descriptor.size or 0,
            last_modified=descriptor.last_modified,
            etag=descriptor.etag,
            content_type=descriptor.content_type or "application/octet-stream",
            is_directory=descriptor.is_collection,
        )
