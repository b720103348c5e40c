#!/usr/bin/env python
"""
The ``DAVClient`` class handles the basic communication with a WebDAV
server.  It knows the WebDAV verbs and headers, but it does not
interpret HTTP status codes - every response, 4xx and 5xx included, is
handed back to the caller as a ``DAVResponse``.  Only a failure to get a
response at all raises, as ``TransportError``.

Paths given to the client must already be encoded, see
``davstorage.lib.path.encode``.
"""
import base64
from types import TracebackType
from typing import Dict
from typing import Iterator
from typing import Optional
from typing import Tuple
from typing import Type
from typing import Union

import requests
from requests.models import Response
from requests.structures import CaseInsensitiveDict

from davstorage import __version__
from davstorage.lib import error
from davstorage.lib.debug import redact_headers
from davstorage.lib.error import log
from davstorage.protocol.types import Credentials
from davstorage.protocol.xml_builders import build_propfind_body

Timeout = Union[None, float, Tuple[float, float]]


class DAVResponse:
    """
    A response from a DAV request.  Wraps the ``requests`` response; the
    body is only read when ``content`` or ``text`` is accessed, so a
    streamed GET can be passed on with ``iter_content``.
    """

    reason: str = ""
    status: int = 0
    headers: CaseInsensitiveDict = None

    def __init__(self, response: Response) -> None:
        self._response = response
        self.status = response.status_code
        ## incidents with a response without a reason has been observed
        self.reason = getattr(response, "reason", None) or ""
        self.headers = CaseInsensitiveDict(response.headers or {})
        log.debug("response status: %s %s" % (self.status, self.reason))
        log.debug("response headers: " + str(dict(self.headers)))

    @property
    def ok(self) -> bool:
        """True if status indicates success (2xx)."""
        return 200 <= self.status < 300

    @property
    def content(self) -> bytes:
        return self._response.content or b""

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def iter_content(self, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        return self._response.iter_content(chunk_size=chunk_size)

    def close(self) -> None:
        self._response.close()

    def __repr__(self) -> str:
        return "DAVResponse(%s %s)" % (self.status, self.reason)


class DAVClient:
    """
    Basic client for WebDAV, uses the requests lib; gives access to
    low-level operations towards the WebDAV server.

    One client is built per set of credentials and lives as long as the
    driver owning it.
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: Timeout = None,
        ssl_verify_cert: Union[bool, str] = True,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Args:
          credentials: server url, username and password.  The url may contain a
            path, i.e. https://cloud.example.com/remote.php/dav/files/alice
          timeout: passed to requests, either seconds or a (connect, read) tuple
          ssl_verify_cert: passed to requests as ``verify``, can be the path of a CA-bundle or False
          headers: extra headers sent with every request
        """
        self.session = requests.Session()
        self.url = credentials.url
        self.username = credentials.username
        self.timeout = timeout
        self.ssl_verify_cert = ssl_verify_cert
        log.debug("url: " + self.url)

        self.headers = CaseInsensitiveDict(
            {
                "User-Agent": "python-davstorage/" + __version__,
            }
        )
        self.headers.update(headers or {})
        self._auth_header = self._build_auth_header(
            credentials.username, credentials.password
        )

    def _build_auth_header(
        self,
        username: Optional[str],
        password: Optional[str],
    ) -> Dict[str, str]:
        """Build Basic auth header if credentials provided."""
        if username and password:
            credentials = f"{username}:{password}"
            encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {encoded}"}
        return {}

    def __enter__(self) -> "DAVClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def close(self) -> None:
        """
        Closes the DAVClient's session object
        """
        self.session.close()

    def propfind(
        self,
        path: str,
        depth: Union[int, str] = 1,
        body: Optional[bytes] = None,
        timeout: Timeout = None,
    ) -> DAVResponse:
        """
        Send a propfind request.

        Args:
            path: encoded path of the resource
            depth: 0, 1 or "infinity"
            body: XML propfind request, defaults to <allprop/>
            timeout: overrides the client timeout for this request
        """
        if body is None:
            body = build_propfind_body()
        headers = {
            "Depth": str(depth),
            "Content-Type": "application/xml; charset=utf-8",
        }
        return self.request(path, "PROPFIND", body, headers, timeout=timeout)

    def get(
        self, path: str, stream: bool = False, timeout: Timeout = None
    ) -> DAVResponse:
        return self.request(path, "GET", timeout=timeout, stream=stream)

    def head(self, path: str, timeout: Timeout = None) -> DAVResponse:
        return self.request(path, "HEAD", timeout=timeout)

    def delete(self, path: str, timeout: Timeout = None) -> DAVResponse:
        return self.request(path, "DELETE", timeout=timeout)

    def options(self, path: str = "/", timeout: Timeout = None) -> DAVResponse:
        return self.request(path, "OPTIONS", timeout=timeout)

    def put(
        self,
        path: str,
        body,
        headers: Optional[Dict[str, str]] = None,
        timeout: Timeout = None,
    ) -> DAVResponse:
        """
        Send a put request.  Content-Type and Content-Length are the
        business of the caller.
        """
        return self.request(path, "PUT", body, headers or {}, timeout=timeout)

    def mkcol(self, path: str, timeout: Timeout = None) -> DAVResponse:
        return self.request(path, "MKCOL", timeout=timeout)

    def move(
        self,
        source: str,
        target: str,
        overwrite: bool = True,
        timeout: Timeout = None,
    ) -> DAVResponse:
        headers = {
            "Destination": self.url + target,
            "Overwrite": "T" if overwrite else "F",
        }
        return self.request(source, "MOVE", headers=headers, timeout=timeout)

    def copy(
        self,
        source: str,
        target: str,
        overwrite: bool = True,
        depth: Union[int, str] = "infinity",
        timeout: Timeout = None,
    ) -> DAVResponse:
        headers = {
            "Destination": self.url + target,
            "Overwrite": "T" if overwrite else "F",
            "Depth": str(depth),
        }
        return self.request(source, "COPY", headers=headers, timeout=timeout)

    def request(
        self,
        path: str,
        method: str = "GET",
        body=None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Timeout = None,
        stream: bool = False,
    ) -> DAVResponse:
        """
        Actually sends the request.  Does not retry and does not look at
        the status code.

        Raises:
            TransportError: if no HTTP response was received
        """
        url = self.url + path
        combined_headers = CaseInsensitiveDict(self.headers)
        combined_headers.update(self._auth_header)
        combined_headers.update(headers or {})

        log.debug(
            "sending request - method={0}, url={1}, headers={2}".format(
                method,
                url,
                redact_headers(combined_headers),
            )
        )

        try:
            r = self.session.request(
                method,
                url,
                data=body,
                headers=combined_headers,
                timeout=timeout if timeout is not None else self.timeout,
                verify=self.ssl_verify_cert,
                stream=stream,
            )
        except requests.exceptions.Timeout as e:
            log.debug("%s %s timed out: %s" % (method, url, e))
            raise error.TransportError(url=url, reason=str(e), timed_out=True) from e
        except requests.exceptions.RequestException as e:
            log.debug("%s %s failed: %s" % (method, url, e))
            raise error.TransportError(url=url, reason=str(e)) from e

        log.debug("server responded with %i %s" % (r.status_code, r.reason))
        response = DAVResponse(r)

        if error.debug_dump_communication and not stream:
            self._dump_communication(method, url, combined_headers, body, response)

        return response

    def _dump_communication(self, method, url, headers, body, response) -> None:
        import datetime
        from tempfile import NamedTemporaryFile

        def to_wire(text):
            if text is None:
                return b""
            if isinstance(text, str):
                return text.encode("utf-8")
            if isinstance(text, (bytes, bytearray)):
                return bytes(text)
            return repr(text).encode("utf-8")

        with NamedTemporaryFile(prefix="davstoragecomm", delete=False) as commlog:
            commlog.write(b"=" * 80 + b"\n")
            commlog.write(f"{datetime.datetime.now():%FT%H:%M:%S}".encode("utf-8"))
            commlog.write(b"\n====>\n")
            commlog.write(f"{method} {url}\n".encode("utf-8"))
            commlog.write(
                b"\n".join(
                    to_wire(f"{x}: {v}") for x, v in redact_headers(headers).items()
                )
            )
            commlog.write(b"\n\n")
            commlog.write(to_wire(body))
            commlog.write(b"<====\n")
            commlog.write(f"{response.status} {response.reason}\n".encode("utf-8"))
            commlog.write(
                b"\n".join(
                    to_wire(f"{x}: {response.headers[x]}") for x in response.headers
                )
            )
            commlog.write(b"\n\n")
            commlog.write(response.content)
            commlog.write(b"\n")
