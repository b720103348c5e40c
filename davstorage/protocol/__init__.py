"""
Sans-I/O WebDAV protocol pieces.

The protocol layer is organized into:
- types: Domain data structures (descriptors, listings, results)
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Pure functions to parse XML response bodies

Example usage:

    from davstorage.protocol import build_propfind_body, parse_multistatus

    body = build_propfind_body(["resourcetype", "getcontentlength"])
    response = client.propfind("/docs/", depth=1, body=body)
    for descriptor in parse_multistatus(response.content):
        print(descriptor.href, descriptor.size)
"""
from .types import (
    # Enums
    DiagnosticOutcome,
    FileType,
    # Data model
    BatchItemResult,
    BatchResult,
    Credentials,
    DiagnosticReport,
    DirectoryEntry,
    DirectoryListing,
    FileInfo,
    OperationResult,
    ResourceDescriptor,
    StageResult,
)
from .xml_builders import build_propfind_body
from .xml_parsers import count_responses
from .xml_parsers import parse_error_message
from .xml_parsers import parse_multistatus

__all__ = [
    # Enums
    "DiagnosticOutcome",
    "FileType",
    # Data model
    "BatchItemResult",
    "BatchResult",
    "Credentials",
    "DiagnosticReport",
    "DirectoryEntry",
    "DirectoryListing",
    "FileInfo",
    "OperationResult",
    "ResourceDescriptor",
    "StageResult",
    # XML
    "build_propfind_body",
    "count_responses",
    "parse_error_message",
    "parse_multistatus",
]
