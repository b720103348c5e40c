"""
Tests for the single resource operations and their status mapping.
"""
from unittest import mock

import pytest
import requests

from davstorage.davclient import DAVClient
from davstorage.lib import error
from davstorage.operations import FileOperations
from davstorage.protocol.types import Credentials

from .fixture_helpers import BASE_URL
from .fixture_helpers import FakeServer
from .fixture_helpers import dav_response
from .fixture_helpers import make_response
from .fixture_helpers import multistatus_response


@pytest.fixture
def server():
    server = FakeServer()
    with mock.patch("davstorage.davclient.requests.Session.request", side_effect=server):
        yield server


@pytest.fixture
def ops(server):
    return FileOperations(DAVClient(Credentials(url=BASE_URL, username="u", password="p")))


class TestGetFileInfo:
    def test_missing_file(self, server, ops):
        server.on("PROPFIND", "/missing.txt", status=404)
        with pytest.raises(error.NotFoundError) as excinfo:
            ops.get_file_info("/missing.txt")
        assert excinfo.value.url == "/missing.txt"
        assert excinfo.value.status == 404

    def test_file(self, server, ops):
        server.on(
            "PROPFIND",
            "/docs/a.txt",
            response=multistatus_response(
                dav_response("/docs/a.txt", size=120, contenttype="text/plain", etag='"e1"')
            ),
        )
        info = ops.get_file_info("/docs/a.txt")
        assert info.name == "a.txt"
        assert info.path == "/docs/a.txt"
        assert info.type == "file"
        assert info.size == 120
        assert info.etag == "e1"
        assert info.content_type == "text/plain"
        assert not info.is_directory
        assert server.last.kwargs["headers"]["Depth"] == "0"

    def test_directory(self, server, ops):
        server.on(
            "PROPFIND",
            "/docs",
            response=multistatus_response(dav_response("/docs/", collection=True)),
        )
        info = ops.get_file_info("/docs")
        assert info.is_directory
        assert info.type == "directory"
        assert info.size == 0

    def test_empty_multistatus(self, server, ops):
        server.on("PROPFIND", "/a.txt", response=multistatus_response())
        with pytest.raises(error.NotFoundError):
            ops.get_file_info("/a.txt")

    def test_server_error(self, server, ops):
        server.on(
            "PROPFIND",
            "/a.txt",
            status=503,
            content=b'<d:error xmlns:d="DAV:" xmlns:s="http://sabredav.org/ns">'
            b"<s:message>Maintenance mode</s:message></d:error>",
            headers={"Content-Type": "application/xml"},
        )
        with pytest.raises(error.InternalError) as excinfo:
            ops.get_file_info("/a.txt")
        assert excinfo.value.status == 503
        assert "Maintenance mode" in str(excinfo.value)
        assert "get file info failed" in str(excinfo.value)

    def test_encoded_once(self, server, ops):
        server.on(
            "PROPFIND",
            "/my%20docs/a%231.txt",
            response=multistatus_response(dav_response("/my%20docs/a%231.txt")),
        )
        info = ops.get_file_info("/my docs/a#1.txt")
        assert info.name == "a#1.txt"

    def test_network_failure_passes_through(self, server, ops):
        server.on("PROPFIND", "/a.txt", response=requests.exceptions.ConnectionError("down"))
        with pytest.raises(error.TransportError):
            ops.get_file_info("/a.txt")


class TestDownload:
    def test_download(self, server, ops):
        server.on("GET", "/a.bin", response=make_response(200, b"\x00\x01" * 100))
        response = ops.download_file("/a.bin")
        assert b"".join(response.iter_content()) == b"\x00\x01" * 100
        assert server.last.kwargs["stream"] is True

    def test_missing(self, server, ops):
        with pytest.raises(error.NotFoundError):
            ops.download_file("/nope.txt")

    def test_forbidden(self, server, ops):
        server.on("GET", "/secret.txt", status=403)
        with pytest.raises(error.InternalError) as excinfo:
            ops.download_file("/secret.txt")
        assert excinfo.value.status == 403


class TestRenameCopy:
    def test_rename_conflict(self, server, ops):
        server.on("MOVE", "/x.txt", status=409)
        with pytest.raises(error.ConflictError) as excinfo:
            ops.rename_item("/x.txt", "/y.txt")
        assert excinfo.value.url == "/y.txt"
        assert "/y.txt" in str(excinfo.value)

    def test_rename_missing_source(self, server, ops):
        server.on("MOVE", "/x.txt", status=404)
        with pytest.raises(error.NotFoundError) as excinfo:
            ops.rename_item("/x.txt", "/y.txt")
        assert excinfo.value.url == "/x.txt"

    def test_rename(self, server, ops):
        server.on("MOVE", "/x.txt", status=201)
        result = ops.rename_item("/x.txt", "/y.txt", overwrite=False)
        assert result.success
        assert result.source_path == "/x.txt"
        assert result.target_path == "/y.txt"
        assert server.last.kwargs["headers"]["Overwrite"] == "F"

    def test_rename_other_failure(self, server, ops):
        server.on("MOVE", "/x.txt", status=502)
        with pytest.raises(error.InternalError):
            ops.rename_item("/x.txt", "/y.txt")

    def test_copy(self, server, ops):
        server.on("COPY", "/dir/", status=201)
        result = ops.copy_item("/dir/", "/dir2/")
        assert result.success
        headers = server.last.kwargs["headers"]
        assert headers["Depth"] == "infinity"
        assert headers["Overwrite"] == "T"
        assert headers["Destination"] == BASE_URL + "/dir2/"

    def test_copy_conflict(self, server, ops):
        server.on("COPY", "/a.txt", status=409)
        with pytest.raises(error.ConflictError) as excinfo:
            ops.copy_item("/a.txt", "/b.txt")
        assert excinfo.value.url == "/b.txt"


class TestUpdateRemoveExists:
    def test_update_reports_bytes(self, server, ops):
        server.on("PUT", "/notes.txt", status=204)
        result = ops.update_file("/notes.txt", "smørbrød")
        assert result.size == len("smørbrød".encode("utf-8"))
        assert result.size != len("smørbrød")
        assert server.last.kwargs["headers"]["Content-Type"] == "text/plain"

    def test_update_content_type(self, server, ops):
        server.on("PUT", "/a.md", status=204)
        ops.update_file("/a.md", b"# hi", content_type="text/markdown")
        assert server.last.kwargs["headers"]["Content-Type"] == "text/markdown"

    def test_update_failure(self, server, ops):
        server.on("PUT", "/a.txt", status=423)
        with pytest.raises(error.InternalError) as excinfo:
            ops.update_file("/a.txt", "x")
        assert excinfo.value.status == 423

    def test_remove(self, server, ops):
        server.on("DELETE", "/a.txt", status=204)
        assert ops.remove_item("/a.txt").success

    def test_remove_missing(self, server, ops):
        with pytest.raises(error.NotFoundError):
            ops.remove_item("/missing.txt")

    def test_exists(self, server, ops):
        server.on("HEAD", "/a.txt", status=200)
        assert ops.exists("/a.txt")
        assert not ops.exists("/b.txt")

    def test_exists_network_failure(self, server, ops, caplog):
        server.on("HEAD", "/a.txt", response=requests.exceptions.ReadTimeout("slow"))
        assert ops.exists("/a.txt") is False
        assert "could not check existence" in caplog.text
