"""
WebDAV without I/O: request bodies are built and multistatus responses
parsed as pure data transformations.

- types: requests, responses and parse results
- xml_builders: request bodies
- xml_parsers: the multistatus grammar
- resources: from parsed responses to ChildResource objects
- operations: DAVProtocol, tying the above together per DAV method

    protocol = DAVProtocol(base_url="https://dav.example.com")
    request = protocol.propfind_request("/config/", props=["getetag"], depth=1)
    response = transport.execute(request)
    children = protocol.parse_list_children(response, "/config/")
"""

from .types import (
    # Enums
    DAVMethod,
    Depth,
    # Request/Response
    DAVRequest,
    DAVResponse,
    # Structural results
    MultistatusDocument,
    ParseOutcome,
    PropstatElement,
    ResponseElement,
    # Resource model
    ChildResource,
    MultistatusResult,
    PropertyValue,
)
from .xml_builders import (
    build_mkcol_body,
    build_propfind_body,
    build_proppatch_body,
    build_sync_collection_body,
)
from .xml_parsers import (
    parse_error,
    parse_mkcol_response,
    parse_multistatus,
    parse_status_line,
    try_parse_multistatus,
)
from .resources import (
    build_child_resource,
    build_multistatus_result,
    exclude_self,
)
from .operations import DAVProtocol

__all__ = [
    # Enums
    "DAVMethod",
    "Depth",
    # Request/Response
    "DAVRequest",
    "DAVResponse",
    # Structural results
    "MultistatusDocument",
    "ParseOutcome",
    "PropstatElement",
    "ResponseElement",
    # Resource model
    "ChildResource",
    "MultistatusResult",
    "PropertyValue",
    # XML Builders
    "build_mkcol_body",
    "build_propfind_body",
    "build_proppatch_body",
    "build_sync_collection_body",
    # XML Parsers
    "parse_error",
    "parse_mkcol_response",
    "parse_multistatus",
    "parse_status_line",
    "try_parse_multistatus",
    # Resource model builders
    "build_child_resource",
    "build_multistatus_result",
    "exclude_self",
    # Protocol
    "DAVProtocol",
]
