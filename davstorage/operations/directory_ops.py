"""
Collection operations: listing and creating directories.
"""
from typing import List
from urllib.parse import urlsplit

from davstorage.davclient import DAVClient
from davstorage.lib import error
from davstorage.lib import path as pathutil
from davstorage.protocol.types import DirectoryEntry
from davstorage.protocol.types import DirectoryListing
from davstorage.protocol.types import OperationResult
from davstorage.protocol.types import ResourceDescriptor
from davstorage.protocol.xml_parsers import parse_multistatus

from .base import classify_file_type
from .base import raise_for_status


class DirectoryOperations:
    def __init__(self, client: DAVClient, huge_tree: bool = False) -> None:
        self.client = client
        self.huge_tree = huge_tree
        ## hrefs from the server include the path part of the base url
        self.base_path = pathutil.decode(urlsplit(client.url).path)

    def list_directory(self, path: str) -> DirectoryListing:
        """
        PROPFIND with depth 1 on a collection.  The collection itself,
        which is always part of a depth 1 answer, is left out.

        Raises:
            NotFoundError: on 404
            InternalError: on any other failure status
        """
        response = self.client.propfind(pathutil.encode(path), depth=1)
        raise_for_status(
            response,
            path,
            "list directory",
            {404: (error.NotFoundError, path, "directory does not exist: %s" % path)},
        )

        current = pathutil.normalize(path, True)
        entries: List[DirectoryEntry] = []
        for descriptor in parse_multistatus(response.content, huge_tree=self.huge_tree):
            entry_path = self.virtual_path(descriptor)
            if pathutil.normalize(entry_path, True) == current:
                continue
            entries.append(self._format_directory_entry(descriptor, entry_path))

        return DirectoryListing(path=current, entries=entries, writable=True)

    def create_directory(self, path: str) -> OperationResult:
        response = self.client.mkcol(pathutil.encode(path))
        raise_for_status(
            response,
            path,
            "create directory",
            {
                405: (error.ConflictError, path, "directory already exists: %s" % path),
                409: (error.ConflictError, path, "parent directory does not exist: %s" % path),
            },
        )
        return OperationResult(
            success=True,
            message="directory created successfully",
            path=path,
            kind="directory",
        )

    def virtual_path(self, descriptor: ResourceDescriptor) -> str:
        """The href of a descriptor as a normalized path below the base url"""
        return pathutil.normalize(
            pathutil.strip_prefix(descriptor.href, self.base_path),
            descriptor.is_collection,
        )

    @staticmethod
    def _format_directory_entry(
        descriptor: ResourceDescriptor, entry_path: str
    ) -> DirectoryEntry:
        name = descriptor.name or pathutil.file_name(entry_path)
        return DirectoryEntry(
            name=name,
            path=entry_path,
            size=descriptor.size or 0,
            is_dir=descriptor.is_collection,
            modified=descriptor.last_modified,
            ## WebDAV servers rarely know the creation time
            created=descriptor.creation_date or descriptor.last_modified,
            type=classify_file_type(name, descriptor.is_collection),
            etag=descriptor.etag,
            content_type=descriptor.content_type,
        )
