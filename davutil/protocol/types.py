"""
Data types shared by the protocol layer and the transport.

Requests and responses are plain immutable values; so are the results
parsed out of multistatus bodies, created fresh for every response.
"""

from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import Dict, Iterator, Optional, Tuple, Union

from lxml.etree import _Element

from davutil.lib.error import MultistatusError
from davutil.lib.namespace import qname


class DAVMethod(Enum):
    GET = "GET"
    PUT = "PUT"
    DELETE = "DELETE"
    PROPFIND = "PROPFIND"
    PROPPATCH = "PROPPATCH"
    REPORT = "REPORT"
    MKCOL = "MKCOL"
    OPTIONS = "OPTIONS"


class Depth(str, Enum):
    """Values of the Depth header"""

    ZERO = "0"
    ONE = "1"
    INFINITY = "infinity"


@dataclass(frozen=True)
class DAVRequest:
    """
    A request to be sent.  url is absolute, body is the encoded
    request body, if there is one.
    """

    method: DAVMethod
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def with_header(self, name: str, value: str) -> "DAVRequest":
        """A copy with one more header"""
        return DAVRequest(
            method=self.method,
            url=self.url,
            headers={**self.headers, name: value},
            body=self.body,
        )


@dataclass(frozen=True)
class DAVResponse:
    """The status, headers and raw body the server answered with"""

    status: int
    headers: Dict[str, str]
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_multistatus(self) -> bool:
        return self.status == 207

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return "Unknown"


# Structural layer: what the multistatus grammar says, nothing more


@dataclass(frozen=True)
class PropstatElement:
    """
    A partially parsed propstat element.

    Attributes:
        props: children of the prop element, as returned by the server
        status: HTTP status code shared by all of the props
        error: DAV:error element, if any
        response_description: text of responsedescription, if any
    """

    props: Tuple[_Element, ...]
    status: int
    error: Optional[_Element] = None
    response_description: Optional[str] = None


@dataclass(frozen=True)
class ResponseElement:
    """
    A partially parsed multistatus response element.  If we have an
    href and status there will be no propstats and the status is set.
    Otherwise the status is in the propstats.
    """

    href: str
    status: Optional[int] = None
    hrefs: Tuple[str, ...] = ()
    propstats: Tuple[PropstatElement, ...] = ()
    error: Optional[_Element] = None
    response_description: Optional[str] = None


@dataclass(frozen=True)
class MultistatusDocument:
    """A partially parsed multistatus (or mkcol-response) document"""

    responses: Tuple[ResponseElement, ...] = ()
    response_description: Optional[str] = None
    sync_token: Optional[str] = None


# Resource model


@dataclass(frozen=True)
class PropertyValue:
    """
    One property of a resource.

    Attributes:
        name: qualified name in Clark notation, i.e. "{DAV:}getetag"
        element: the property element as returned by the server; it's
            up to the consumer to interpret it
        status: HTTP status from the propstat the property came in
    """

    name: str
    element: _Element
    status: int

    @property
    def text(self) -> Optional[str]:
        return self.element.text


@dataclass(frozen=True)
class ChildResource:
    """
    One DAV resource, typically a member of a collection.

    Attributes:
        uri: URL-decoded href, absolute or server-relative
        display_name: DAV:displayname, if returned
        is_collection: resourcetype contained DAV:collection
        resource_types: all children of resourcetype, in order
        properties: all other properties, in the order of the response
        status: status for the whole resource (href+status form only)
    """

    uri: str
    display_name: Optional[str] = None
    is_collection: bool = False
    resource_types: Tuple[_Element, ...] = ()
    properties: Tuple[PropertyValue, ...] = ()
    status: Optional[int] = None
    error: Optional[_Element] = None
    response_description: Optional[str] = None

    def find_property(self, name) -> Optional[PropertyValue]:
        """Property by qualified name (bare names are taken as DAV:)"""
        name = qname(name)
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def has_resource_type(self, name) -> bool:
        name = qname(name)
        return any(rt.tag == name for rt in self.resource_types)

    def _sort_key(self) -> tuple:
        ## Non-collections first, then by name, with nameless ones first
        return (
            self.is_collection,
            self.display_name is not None,
            self.display_name or "",
        )

    def __lt__(self, other: "ChildResource") -> bool:
        if not isinstance(other, ChildResource):
            return NotImplemented
        return self._sort_key() < other._sort_key()


@dataclass(frozen=True)
class MultistatusResult:
    """
    Parsed 207 Multi-Status response.

    Attributes:
        responses: one ChildResource per response element, document order
        response_description: top level responsedescription, if any
        sync_token: new sync token (sync-collection reports only)
    """

    responses: Tuple[ChildResource, ...] = ()
    response_description: Optional[str] = None
    sync_token: Optional[str] = None

    def __iter__(self) -> Iterator[ChildResource]:
        return iter(self.responses)

    def __len__(self) -> int:
        return len(self.responses)


@dataclass(frozen=True)
class ParseOutcome:
    """
    Tagged result of a parse: either value or error is set.

    Lets callers branch on the outcome without a try/except::

        outcome = try_parse_multistatus(body)
        if outcome.ok:
            ...
        else:
            log.error(outcome.error)
    """

    value: Union[MultistatusDocument, None] = None
    error: Optional[MultistatusError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> MultistatusDocument:
        if self.error is not None:
            raise self.error
        return self.value
