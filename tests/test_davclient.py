"""
Tests for DAVClient: headers, verbs and the translation of network
failures.  requests.Session.request is patched in all tests.
"""
import base64
from unittest import mock

import pytest
import requests

from davstorage.davclient import DAVClient
from davstorage.davclient import DAVResponse
from davstorage.lib import error
from davstorage.protocol.types import Credentials

from .fixture_helpers import BASE_URL
from .fixture_helpers import FakeServer
from .fixture_helpers import make_response


def new_client(**kwargs) -> DAVClient:
    credentials = Credentials(url=BASE_URL + "/", username="alice", password="hunter2")
    return DAVClient(credentials, **kwargs)


class TestDAVClient:
    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_basic_auth_header(self, mocked):
        server = FakeServer().on("GET", "/a.txt", status=200)
        mocked.side_effect = server
        new_client().get("/a.txt")

        expected = base64.b64encode(b"alice:hunter2").decode("ascii")
        headers = server.last.kwargs["headers"]
        assert headers["Authorization"] == "Basic " + expected
        assert headers["User-Agent"].startswith("python-davstorage/")

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_no_auth_header_without_credentials(self, mocked):
        server = FakeServer().on("GET", "/a.txt", status=200)
        mocked.side_effect = server
        DAVClient(Credentials(url=BASE_URL)).get("/a.txt")
        assert "Authorization" not in server.last.kwargs["headers"]

    def test_url_trailing_slash_stripped(self):
        assert new_client().url == BASE_URL

    def test_password_not_in_repr(self):
        credentials = Credentials(url=BASE_URL, username="alice", password="hunter2")
        assert "hunter2" not in repr(credentials)

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_propfind_headers(self, mocked):
        server = FakeServer().on("PROPFIND", "/docs/", status=207)
        mocked.side_effect = server
        new_client().propfind("/docs/", depth=0)

        call = server.last
        assert call.method == "PROPFIND"
        assert call.kwargs["headers"]["Depth"] == "0"
        assert call.kwargs["headers"]["Content-Type"].startswith("application/xml")
        assert b"allprop" in call.kwargs["data"]

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_move_headers(self, mocked):
        server = FakeServer().on("MOVE", "/x.txt", status=201)
        mocked.side_effect = server
        new_client().move("/x.txt", "/y%20z.txt", overwrite=False)

        headers = server.last.kwargs["headers"]
        assert headers["Destination"] == BASE_URL + "/y%20z.txt"
        assert headers["Overwrite"] == "F"

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_copy_headers(self, mocked):
        server = FakeServer().on("COPY", "/dir/", status=201)
        mocked.side_effect = server
        new_client().copy("/dir/", "/dir2/", depth=0)

        headers = server.last.kwargs["headers"]
        assert headers["Destination"] == BASE_URL + "/dir2/"
        assert headers["Overwrite"] == "T"
        assert headers["Depth"] == "0"

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_error_status_is_returned_not_raised(self, mocked):
        mocked.side_effect = FakeServer().on("DELETE", "/a.txt", status=500)
        response = new_client().delete("/a.txt")
        assert isinstance(response, DAVResponse)
        assert response.status == 500
        assert not response.ok

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_timeouts(self, mocked):
        server = FakeServer().on("OPTIONS", "/", status=200)
        mocked.side_effect = server
        client = new_client(timeout=(30, 60))

        client.options("/")
        assert server.last.kwargs["timeout"] == (30, 60)
        client.options("/", timeout=5)
        assert server.last.kwargs["timeout"] == 5

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_every_verb_takes_a_timeout(self, mocked):
        server = FakeServer()
        mocked.side_effect = server
        client = new_client(timeout=(30, 60))
        calls = [
            lambda: client.get("/a", timeout=7),
            lambda: client.head("/a", timeout=7),
            lambda: client.delete("/a", timeout=7),
            lambda: client.put("/a", b"x", timeout=7),
            lambda: client.propfind("/a", timeout=7),
            lambda: client.mkcol("/a/", timeout=7),
            lambda: client.move("/a", "/b", timeout=7),
            lambda: client.copy("/a", "/b", timeout=7),
            lambda: client.options("/", timeout=7),
        ]
        for call in calls:
            call()
        assert [c.kwargs["timeout"] for c in server.calls] == [7] * len(calls)
        client.move("/a", "/b")
        assert server.last.kwargs["timeout"] == (30, 60)

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_timeout_raises_transport_error(self, mocked):
        mocked.side_effect = requests.exceptions.ConnectTimeout("too slow")
        with pytest.raises(error.TransportError) as excinfo:
            new_client().head("/a.txt")
        assert excinfo.value.timed_out

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_connection_error_raises_transport_error(self, mocked):
        mocked.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(error.TransportError) as excinfo:
            new_client().head("/a.txt")
        assert not excinfo.value.timed_out
        assert excinfo.value.url == BASE_URL + "/a.txt"

    @mock.patch("davstorage.davclient.requests.Session.request")
    def test_extra_headers(self, mocked):
        server = FakeServer().on("PUT", "/a.txt", status=201)
        mocked.side_effect = server
        client = new_client(headers={"X-Requested-With": "davstorage"})
        client.put("/a.txt", b"data", {"Content-Type": "text/plain"})

        headers = server.last.kwargs["headers"]
        assert headers["X-Requested-With"] == "davstorage"
        assert headers["Content-Type"] == "text/plain"
        assert server.last.kwargs["data"] == b"data"

    def test_streamed_response(self):
        response = DAVResponse(make_response(200, b"x" * 10))
        assert b"".join(response.iter_content(chunk_size=4)) == b"x" * 10
        response.close()

    def test_context_manager_closes_session(self):
        client = new_client()
        with mock.patch.object(client.session, "close") as close:
            with client:
                pass
        close.assert_called_once_with()
