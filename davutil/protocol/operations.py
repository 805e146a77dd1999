"""
The DAV operations: for each, a request builder and a response parser.

DAVProtocol does no I/O at all; the caller executes the DAVRequest
and feeds the DAVResponse back in.
"""

import base64
import logging
from typing import Dict, Iterable, List, Optional, Union
from urllib.parse import urljoin

from lxml.etree import _Element

from davutil.lib import error

from .resources import build_multistatus_result, exclude_self
from .types import (
    ChildResource,
    DAVMethod,
    DAVRequest,
    DAVResponse,
    Depth,
    MultistatusResult,
)
from .xml_builders import (
    build_mkcol_body,
    build_propfind_body,
    build_proppatch_body,
    build_sync_collection_body,
)
from .xml_parsers import parse_error, parse_mkcol_response, parse_multistatus

log = logging.getLogger(__name__)

MULTI_STATUS = 207
CREATED = 201
XML_CONTENT_TYPE = "application/xml; charset=utf-8"

DepthValue = Union[int, str, Depth]


class DAVProtocol:
    """
    Request building and response interpretation for a DAV server.

    The parse_* methods give None when the server did not answer with
    the status the operation expects, as for a resource which does not
    exist.  A 207 body breaking the multistatus grammar always raises
    a MultistatusError.

    Example:
        protocol = DAVProtocol(base_url="https://dav.example.com/")
        request = protocol.propfind_request("/config/", depth=1)
        response = io.execute(request)
        children = protocol.parse_list_children(response, "/config/")
    """

    def __init__(
        self,
        base_url: str = "",
        username: Optional[str] = None,
        password: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        namespaces: Iterable[str] = (),
        huge_tree: bool = False,
    ):
        """
        Args:
            base_url: Paths are resolved against this URL
            username: Username for Basic authentication
            password: Password for Basic authentication
            extra_headers: Headers sent with every request
            namespaces: Namespaces declared on every request body
            huge_tree: Lift the lxml limits on document size
        """
        self.base_url = base_url.rstrip("/") if base_url else ""
        self.username = username
        self.password = password
        self.extra_headers = dict(extra_headers or {})
        self.huge_tree = huge_tree
        self.namespaces: List[str] = []
        for uri in namespaces:
            self.add_namespace(uri)
        self._auth_header = None
        if username and password:
            token = base64.b64encode(("%s:%s" % (username, password)).encode())
            self._auth_header = "Basic " + token.decode()

    def add_namespace(self, uri: str) -> None:
        """Declare uri on the root element of all request bodies"""
        if uri not in self.namespaces:
            self.namespaces.append(uri)

    def url_for(self, path: str) -> str:
        """
        The full URL for path.  Relative paths are taken relative to
        base_url, absolute ones replace its path, and full URLs are
        kept as they are.
        """
        if not path:
            return self.base_url
        if not self.base_url:
            return path
        return urljoin(self.base_url + "/", path)

    def _request(
        self,
        method: DAVMethod,
        path: str,
        body: Optional[bytes] = None,
        depth: Optional[DepthValue] = None,
        content_type: Optional[str] = XML_CONTENT_TYPE,
        headers: Optional[Dict[str, str]] = None,
    ) -> DAVRequest:
        req_headers: Dict[str, str] = {}
        if content_type:
            req_headers["Content-Type"] = content_type
        req_headers.update(self.extra_headers)
        if self._auth_header:
            req_headers["Authorization"] = self._auth_header
        if depth is not None:
            req_headers["Depth"] = _depth(depth)
        if headers:
            req_headers.update(headers)
        return DAVRequest(
            method=method, url=self.url_for(path), headers=req_headers, body=body
        )

    ## Requests

    def propfind_request(
        self,
        path: str,
        props: Optional[Iterable] = None,
        depth: DepthValue = Depth.ZERO,
    ) -> DAVRequest:
        """PROPFIND for displayname, resourcetype and props"""
        body = build_propfind_body(props, namespaces=self.namespaces)
        return self._request(DAVMethod.PROPFIND, path, body, depth=depth)

    def sync_collection_request(
        self,
        path: str,
        sync_token: Optional[str] = None,
        props: Optional[Iterable] = None,
    ) -> DAVRequest:
        """
        sync-collection REPORT for getetag and props.  Leave out the
        sync_token for the initial sync.
        """
        body = build_sync_collection_body(
            sync_token, props, namespaces=self.namespaces
        )
        return self.report_request(path, body, depth=Depth.ZERO)

    def report_request(
        self, path: str, body: bytes, depth: DepthValue = Depth.ZERO
    ) -> DAVRequest:
        return self._request(DAVMethod.REPORT, path, body, depth=depth)

    def proppatch_request(
        self,
        path: str,
        set_props: Optional[Dict] = None,
        remove_props: Optional[Iterable] = None,
    ) -> DAVRequest:
        body = build_proppatch_body(
            set_props, remove_props, namespaces=self.namespaces
        )
        return self._request(DAVMethod.PROPPATCH, path, body)

    def mkcol_request(
        self,
        path: str,
        displayname: Optional[str] = None,
        resource_types: Optional[Iterable] = None,
    ) -> DAVRequest:
        """
        Extended MKCOL (RFC 5689) when a displayname or resource types
        are given, otherwise a plain MKCOL without body.
        """
        if not (displayname or resource_types):
            return self._request(DAVMethod.MKCOL, path, content_type=None)
        body = build_mkcol_body(displayname, resource_types, namespaces=self.namespaces)
        return self._request(DAVMethod.MKCOL, path, body)

    def get_request(
        self, path: str, headers: Optional[Dict[str, str]] = None
    ) -> DAVRequest:
        return self._request(DAVMethod.GET, path, content_type=None, headers=headers)

    def put_request(
        self,
        path: str,
        data: bytes,
        content_type: str = XML_CONTENT_TYPE,
        etag: Optional[str] = None,
    ) -> DAVRequest:
        """PUT data to path, only if it still has etag when that is given"""
        headers = {"If-Match": etag} if etag else None
        return self._request(
            DAVMethod.PUT, path, data, content_type=content_type, headers=headers
        )

    def delete_request(self, path: str, etag: Optional[str] = None) -> DAVRequest:
        headers = {"If-Match": etag} if etag else None
        return self._request(DAVMethod.DELETE, path, content_type=None, headers=headers)

    ## Responses

    def parse_multistatus(self, response: DAVResponse) -> Optional[MultistatusResult]:
        """The MultistatusResult of a 207 response, else None"""
        if response.status != MULTI_STATUS:
            log.debug(
                "expected %i, got %i %s", MULTI_STATUS, response.status, response.reason
            )
            return None
        if not response.body:
            log.info("empty body in %i response", response.status)
            return None
        document = parse_multistatus(response.body, huge_tree=self.huge_tree)
        return build_multistatus_result(document)

    def parse_get_properties(self, response: DAVResponse) -> Optional[ChildResource]:
        """
        The resource from a depth 0 PROPFIND, None if it was not found.

        Raises:
            MultipleResponsesForSingleResource: The server reported on
                more than one resource
        """
        result = self.parse_multistatus(response)
        if not result:
            return None
        if len(result) > 1:
            raise error.MultipleResponsesForSingleResource(
                reason="expected only 1 response, got %i" % len(result),
                element=result.responses[1].uri,
            )
        return result.responses[0]

    def parse_list_children(
        self, response: DAVResponse, parent: Optional[str]
    ) -> Optional[List[ChildResource]]:
        """
        The members from a depth 1 PROPFIND on parent, without parent
        itself.  [] for an empty collection, None if it was not found.
        """
        result = self.parse_multistatus(response)
        if result is None:
            return None
        if parent is not None:
            parent = self.url_for(parent)
        return exclude_self(result, parent)

    def parse_sync_collection(
        self, response: DAVResponse
    ) -> Optional[MultistatusResult]:
        """The changes from a sync-collection REPORT, with the new sync_token"""
        result = self.parse_multistatus(response)
        if result is not None and result.sync_token is None:
            error.weirdness("sync-collection response without a sync-token")
        return result

    def parse_proppatch(self, response: DAVResponse) -> Optional[ChildResource]:
        """
        The PROPPATCH outcome: every property carries its own status,
        the update was only done if all of them are 200.
        """
        return self.parse_get_properties(response)

    def parse_mkcol(
        self, response: DAVResponse, path: str = ""
    ) -> Optional[MultistatusResult]:
        """
        On 201, the mkcol-response (an empty result if there is no
        body).  None on any other status.
        """
        if response.status != CREATED:
            log.debug("MKCOL %s: %i %s", path, response.status, response.reason)
            return None
        if not response.body:
            return MultistatusResult()
        document = parse_mkcol_response(
            response.body, href=path, huge_tree=self.huge_tree
        )
        return build_multistatus_result(document)

    def parse_error(self, response: DAVResponse) -> Optional[_Element]:
        """The condition from a DAV:error body, or None.  Never raises."""
        return parse_error(response.body)


def _depth(depth: DepthValue) -> str:
    if isinstance(depth, Depth):
        return depth.value
    value = str(depth).lower()
    if value not in ("0", "1", "infinity"):
        raise ValueError("invalid depth %r" % depth)
    return value
