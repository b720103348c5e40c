from typing import Dict
from typing import Mapping

from lxml import etree

## never written to logs or communication dumps
SECRET_HEADERS = ("authorization", "cookie")


def xmlstring(root) -> str:
    """Pretty printed XML for log messages; anything else as str()"""
    if isinstance(root, str):
        return root
    if hasattr(root, "xmlelement"):
        root = root.xmlelement()
    try:
        return etree.tostring(root, pretty_print=True).decode("utf-8")
    except TypeError:
        return str(root)


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in SECRET_HEADERS}
