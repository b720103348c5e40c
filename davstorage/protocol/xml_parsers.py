"""
Pure functions for parsing WebDAV XML response bodies.

All functions in this module are pure - they take XML bytes in and return
structured data out, with no side effects or I/O.

WebDAV servers are not very consistent.  Some use the ``D:`` prefix, some
``d:``, some a default namespace, a few forget the DAV: namespace
altogether.  Elements are therefore matched on their local name.  The
parser is fail-soft: a broken <response> is dropped (and logged), a broken
document gives an empty list, and nothing in here raises on bad input.
"""
import logging
from datetime import datetime
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import List
from typing import Optional
from typing import Union
from urllib.parse import urlsplit

from lxml import etree
from lxml.etree import _Element

from davstorage.lib import error
from davstorage.lib import path as pathutil
from davstorage.lib.namespace import localname

from .types import ResourceDescriptor

log = logging.getLogger(__name__)

DIRECTORY_CONTENT_TYPE = "httpd/unix-directory"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class MalformedEntry(ValueError):
    pass


def parse_multistatus(
    body: Union[bytes, str, None],
    huge_tree: bool = False,
) -> List[ResourceDescriptor]:
    """
    Parse a 207 Multi-Status response body into resource descriptors.

    Args:
        body: Raw XML response
        huge_tree: Allow parsing very large XML documents

    Returns:
        One ResourceDescriptor per usable <response>, in document order.
        Responses without a 200 propstat, and malformed responses, are
        left out.
    """
    tree = _parse_xml(body, huge_tree=huge_tree)
    if tree is None:
        return []

    descriptors: List[ResourceDescriptor] = []
    for elem in _strip_to_multistatus(tree):
        if localname(elem) != "response":
            continue
        try:
            descriptor = _parse_response_element(elem)
        except MalformedEntry as e:
            error.weirdness("dropping malformed response: %s" % e, elem)
            continue
        except Exception as e:
            error.weirdness("dropping response that could not be parsed: %r" % e, elem)
            continue
        if descriptor is not None:
            descriptors.append(descriptor)
    return descriptors


def count_responses(body: Union[bytes, str, None], huge_tree: bool = False) -> Optional[int]:
    """
    Number of <response> elements in a multistatus body, whether usable
    or not.  None if the body is not XML at all.
    """
    tree = _parse_xml(body, huge_tree=huge_tree)
    if tree is None:
        return None
    return sum(1 for elem in _strip_to_multistatus(tree) if localname(elem) == "response")


def parse_error_message(body: Union[bytes, str, None]) -> Optional[str]:
    """
    Find the human readable message in a <d:error> body, if any.

    SabreDAV based servers (Nextcloud, ownCloud) send
    <d:error><s:exception>...</s:exception><s:message>...</s:message></d:error>,
    RFC 4918 has <d:responsedescription>.
    """
    tree = _parse_xml(body)
    if tree is None:
        return None
    for elem in tree.iter():
        if localname(elem) in ("message", "human-readable", "responsedescription"):
            if elem.text and elem.text.strip():
                return elem.text.strip()
    return None


# Helper functions


def _parse_xml(body: Union[bytes, str, None], huge_tree: bool = False) -> Optional[_Element]:
    if not body:
        return None
    if isinstance(body, str):
        body = body.encode("utf-8")
    parser = etree.XMLParser(
        huge_tree=huge_tree,
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
    )
    try:
        return etree.fromstring(body, parser)
    except (etree.XMLSyntaxError, ValueError):
        log.debug("could not parse body as XML: %r", body[:200], exc_info=True)
        return None


def _strip_to_multistatus(tree: _Element) -> Union[_Element, List[_Element]]:
    """
    The general format is:
        <xml><multistatus>
            <response>...</response>
            <response>...</response>
        </multistatus></xml>

    But sometimes multistatus and/or xml element is missing.
    Returns the element(s) containing responses.
    """
    if localname(tree) == "multistatus":
        return tree
    for child in tree:
        if localname(child) == "multistatus":
            return child
    return [tree]


def _parse_response_element(response: _Element) -> Optional[ResourceDescriptor]:
    href: Optional[str] = None
    propstats: List[_Element] = []

    for elem in response:
        tag = localname(elem)
        if tag == "href":
            if href is None:
                href = _decode_href(elem.text or "")
        elif tag == "propstat":
            propstats.append(elem)

    if not href:
        raise MalformedEntry("response without href")

    prop = _find_ok_prop(propstats)
    if prop is None:
        return None

    return _build_descriptor(href, prop)


def _decode_href(text: str) -> str:
    text = text.strip()
    # Confluence and some proxies quote the @ of an email address twice
    if "%2540" in text:
        text = text.replace("%2540", "%40")
    parts = urlsplit(text)
    if parts.scheme and parts.netloc:
        text = parts.path or "/"
    return pathutil.decode(text)


def _find_ok_prop(propstats: List[_Element]) -> Optional[_Element]:
    """
    The first <prop> of a propstat with status 200.  A propstat without a
    status line is taken to be fine.
    """
    for propstat in propstats:
        status = None
        prop = None
        for elem in propstat:
            tag = localname(elem)
            if tag == "status":
                status = elem.text
            elif tag == "prop" and prop is None:
                prop = elem
        if prop is None:
            continue
        if status is None or _status_to_code(status) == 200:
            return prop
    return None


def _status_to_code(status: Optional[str]) -> Optional[int]:
    """
    Extract status code from status string like "HTTP/1.1 200 OK".
    """
    if not status:
        return None
    parts = status.split()
    if len(parts) >= 2:
        try:
            return int(parts[1])
        except ValueError:
            pass
    return None


def _build_descriptor(href: str, prop: _Element) -> ResourceDescriptor:
    values = {}
    is_collection = False
    for child in prop:
        tag = localname(child)
        if tag == "resourcetype":
            is_collection = any(localname(rt) == "collection" for rt in child)
        else:
            values[tag] = (child.text or "").strip()

    segments = [s for s in href.split("/") if s]
    name = segments[-1] if segments else ""

    size: Optional[int] = None
    if values.get("getcontentlength"):
        try:
            size = int(values["getcontentlength"])
        except ValueError:
            log.debug("unparsable getcontentlength %r on %s", values["getcontentlength"], href)
    if size is None and is_collection:
        size = 0

    last_modified = _parse_timestamp(values.get("getlastmodified"))
    if last_modified is None:
        last_modified = datetime.now(timezone.utc)
    creation_date = _parse_timestamp(values.get("creationdate")) or last_modified

    content_type = values.get("getcontenttype") or (
        DIRECTORY_CONTENT_TYPE if is_collection else DEFAULT_CONTENT_TYPE
    )

    etag = values.get("getetag") or None
    if etag:
        etag = etag.replace('"', "")

    display_name = None
    if values.get("displayname") and values["displayname"] != name:
        display_name = values["displayname"]
        name = display_name

    return ResourceDescriptor(
        href=href,
        name=name,
        is_collection=is_collection,
        size=size,
        last_modified=last_modified,
        creation_date=creation_date,
        content_type=content_type,
        etag=etag,
        display_name=display_name,
    )


def _parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    """
    getlastmodified is an RFC 1123 date, creationdate is ISO 8601 (RFC
    3339).  Servers mix them up, so both formats are tried for both.
    """
    if not text:
        return None
    try:
        ts = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError, OverflowError):
        ts = None
    if ts is None:
        iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
        try:
            ts = datetime.fromisoformat(iso)
        except ValueError:
            return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ## 9999-12-31 in a negative offset, or 0001-01-01 in a positive one,
    ## falls outside of what datetime can hold in UTC
    try:
        return ts.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None
