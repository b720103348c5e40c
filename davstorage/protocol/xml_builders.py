"""
Pure functions for building WebDAV XML request bodies.
"""
from typing import List
from typing import Optional

from lxml import etree

from davstorage.elements import dav


def build_propfind_body(props: Optional[List[str]] = None) -> bytes:
    """
    Build PROPFIND request body XML.

    Args:
        props: Property names in the DAV: namespace.  If empty or None,
               all properties are requested with <allprop/>.

    Returns:
        UTF-8 encoded XML bytes
    """
    if not props:
        propfind = dav.Propfind() + dav.Allprop()
    else:
        propfind = dav.Propfind() + (dav.Prop() + [_prop_element(p) for p in props])

    return etree.tostring(propfind.xmlelement(), encoding="utf-8", xml_declaration=True)


def _prop_element(name: str) -> dav.BaseElement:
    cls = dav.properties.get(name)
    if cls is not None:
        return cls()
    ## Arbitrary DAV: property, i.e. quota-available-bytes
    element = dav.BaseElement()
    element.tag = "{DAV:}%s" % name
    return element
