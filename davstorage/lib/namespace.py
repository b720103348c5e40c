#!/usr/bin/env python
from typing import Dict
from typing import Optional

from lxml import etree

nsmap: Dict[str, str] = {
    "D": "DAV:",
}


def ns(prefix: str, tag: Optional[str] = None) -> str:
    name = "{%s}" % nsmap[prefix]
    if tag is not None:
        name = "%s%s" % (name, tag)
    return name


def localname(element) -> str:
    """
    The tag of an element without its namespace, lowercased.

    Servers disagree on namespace prefixes, and some deliver documents
    without the DAV: namespace at all, so inbound elements are matched on
    their local name only.
    """
    tag = element.tag
    if not isinstance(tag, str):
        ## comments and processing instructions
        return ""
    return etree.QName(tag).localname.lower()
