"""
Pure functions for parsing DAV XML responses.

All functions in this module are pure - they take XML bytes in and return
structured data out, with no side effects or I/O.

The multistatus grammar (RFC 4918 section 14.16, RFC 6578 section 6.4) is
enforced while walking the document::

    multistatus := response*, responsedescription?, sync-token?
    response    := href, ((href*, status) | propstat+), error?,
                   responsedescription?, location?
    propstat    := prop, status, error?, responsedescription?

Any deviation raises one of the MultistatusError subclasses from
davutil.lib.error, naming the offending element.  The sync-token is
recognised by name wherever it appears among the root children.
"""

import logging
from typing import IO, List, Optional, Union
from urllib.parse import unquote

from lxml import etree
from lxml.etree import _Element

from davutil.elements import dav
from davutil.lib import error
from davutil.lib.namespace import ns

from .types import (
    MultistatusDocument,
    ParseOutcome,
    PropstatElement,
    ResponseElement,
)

log = logging.getLogger(__name__)

Body = Union[bytes, str, IO[bytes]]

LOCATION_TAG = ns("D", "location")


def parse_multistatus(
    body: Body,
    root: str = dav.MultiStatus.tag,
    huge_tree: bool = False,
) -> MultistatusDocument:
    """
    Parse a 207 Multi-Status response body.

    Args:
        body: Raw XML response (bytes, str or a binary file object)
        root: The root element the caller expects
        huge_tree: Allow parsing very large XML documents

    Returns:
        Structured MultistatusDocument

    Raises:
        UnexpectedRootElement: If the document root is not ``root``
        MultistatusError: If the document does not follow the grammar
    """
    tree = _load(body, huge_tree=huge_tree)
    _expect(tree, root)
    return _parse_root(tree)


def parse_mkcol_response(
    body: Body,
    href: str = "",
    huge_tree: bool = False,
) -> MultistatusDocument:
    """
    Parse the body of an extended MKCOL response (RFC 5689).

    The RFC has the propstat elements directly below mkcol-response.
    Those are collected into one response for ``href``.  Servers
    sending response elements instead are handled like a multistatus.
    """
    tree = _load(body, huge_tree=huge_tree)
    _expect(tree, dav.MkcolResponse.tag)
    children = _children(tree)
    if children and all(c.tag == dav.PropStat.tag for c in children):
        propstats = tuple(_parse_propstat(c) for c in children)
        return MultistatusDocument(
            responses=(ResponseElement(href=href, propstats=propstats),)
        )
    return _parse_root(tree)


def try_parse_multistatus(
    body: Body,
    root: str = dav.MultiStatus.tag,
    huge_tree: bool = False,
) -> ParseOutcome:
    """
    Like parse_multistatus, but protocol violations are returned in
    the outcome rather than raised.
    """
    try:
        return ParseOutcome(value=parse_multistatus(body, root, huge_tree))
    except error.MultistatusError as e:
        return ParseOutcome(error=e)


def parse_error(body: Optional[Body]) -> Optional[_Element]:
    """
    Extract the condition from a DAV:error response body.

    This is used for enriching error messages only, so it never
    raises.  Anything but a DAV:error root with exactly one child
    element gives None.
    """
    if not body:
        return None
    try:
        tree = _load(body)
    except (error.MalformedMultistatus, ValueError, TypeError) as e:
        log.debug("Unable to parse error body: %s", e)
        return None
    if tree.tag != dav.Error.tag:
        return None
    children = _children(tree)
    if len(children) != 1:
        return None
    return children[0]


def parse_status_line(status: Optional[str], element: Optional[_Element] = None) -> int:
    """
    Extract the status code from a status line like "HTTP/1.1 404 Not Found".

    Raises:
        BadHttpStatusLine: If the text isn't a status line
    """
    if status is None:
        raise error.BadHttpStatusLine(reason="empty status", element=element)
    parts = status.split()
    if (
        len(parts) < 2
        or not parts[0].upper().startswith("HTTP/")
        or len(parts[1]) != 3
        or not parts[1].isdigit()
    ):
        raise error.BadHttpStatusLine(
            reason="bad http status line %r" % status, element=element
        )
    return int(parts[1])


# Helper functions


def _load(body: Body, huge_tree: bool = False) -> _Element:
    parser = etree.XMLParser(
        huge_tree=huge_tree,
        resolve_entities=False,
        remove_comments=True,
        remove_pis=True,
    )
    try:
        if hasattr(body, "read"):
            return etree.parse(body, parser).getroot()
        if isinstance(body, str):
            body = body.encode("utf-8")
        return etree.fromstring(body, parser)
    except etree.XMLSyntaxError as e:
        raise error.MalformedMultistatus(
            reason="response is not well-formed XML: %s" % e
        ) from e


def _expect(tree: _Element, tag: str) -> None:
    if tree.tag != tag:
        raise error.UnexpectedRootElement(
            reason="expected %s, found %s" % (tag, tree.tag), element=tree
        )


def _children(elem: _Element) -> List[_Element]:
    return [c for c in elem if isinstance(c.tag, str)]


def _text(elem: _Element) -> str:
    return "".join(elem.itertext()).strip()


def _href(elem: _Element) -> str:
    text = _text(elem)
    if not text:
        raise error.MalformedMultistatus(reason="empty href", element=elem)
    ## hrefs are sent escaped
    return unquote(text)


def _parse_root(tree: _Element) -> MultistatusDocument:
    responses: List[ResponseElement] = []
    description: Optional[str] = None
    sync_token: Optional[str] = None

    for elem in _children(tree):
        if elem.tag == dav.SyncToken.tag:
            if sync_token is not None:
                raise error.MalformedMultistatus(
                    reason="more than one sync-token", element=elem
                )
            sync_token = _text(elem)
            continue

        ## nothing but a sync-token may follow the responsedescription
        if description is not None:
            raise error.MalformedMultistatus(
                reason="expected (response*, responsedescription?, sync-token?), "
                "found %s after responsedescription" % elem.tag,
                element=elem,
            )

        if elem.tag == dav.ResponseDescription.tag:
            description = _text(elem)
            continue

        if elem.tag != dav.Response.tag:
            raise error.MalformedMultistatus(
                reason="expected (response*, responsedescription?, sync-token?), "
                "found %s" % elem.tag,
                element=elem,
            )

        responses.append(_parse_response(elem))

    log.debug(
        "parsed %s with %i responses, sync-token %s",
        tree.tag,
        len(responses),
        sync_token,
    )
    return MultistatusDocument(
        responses=tuple(responses),
        response_description=description,
        sync_token=sync_token,
    )


def _parse_response(response: _Element) -> ResponseElement:
    children = _children(response)
    if not children or children[0].tag != dav.Href.tag:
        raise error.MalformedMultistatus(
            reason="expected href as first child of response",
            element=children[0] if children else response,
        )
    href = _href(children[0])

    hrefs: List[str] = []
    status: Optional[int] = None
    propstats: List[PropstatElement] = []
    err: Optional[_Element] = None
    description: Optional[str] = None

    for elem in children[1:]:
        if elem.tag == dav.Status.tag:
            if propstats:
                raise error.ConflictingResponseForm(
                    reason="response for %s has both status and propstat" % href,
                    element=elem,
                )
            if status is not None:
                raise error.MalformedMultistatus(
                    reason="more than one status in response for %s" % href,
                    element=elem,
                )
            status = parse_status_line(_text(elem), elem)
        elif elem.tag == dav.PropStat.tag:
            if status is not None:
                raise error.ConflictingResponseForm(
                    reason="response for %s has both status and propstat" % href,
                    element=elem,
                )
            if hrefs:
                raise error.MalformedMultistatus(
                    reason="multiple hrefs are only allowed with a status",
                    element=elem,
                )
            propstats.append(_parse_propstat(elem))
        elif elem.tag == dav.Href.tag:
            if status is not None or propstats:
                raise error.MalformedMultistatus(
                    reason="unexpected href after status in response for %s" % href,
                    element=elem,
                )
            hrefs.append(_href(elem))
        elif elem.tag == dav.Error.tag:
            if err is not None:
                raise error.DuplicateError(
                    reason="multiple error elements in response for %s" % href,
                    element=elem,
                )
            err = elem
        elif elem.tag == dav.ResponseDescription.tag:
            if description is not None:
                raise error.MalformedMultistatus(
                    reason="multiple responsedescription elements in response for %s"
                    % href,
                    element=elem,
                )
            description = _text(elem)
        elif elem.tag == LOCATION_TAG:
            ## only meaningful together with a 3xx status
            continue
        else:
            raise error.MalformedMultistatus(
                reason="expected status or propstat, found %s" % elem.tag,
                element=elem,
            )

    if status is None and not propstats:
        raise error.MalformedMultistatus(
            reason="response for %s has neither status nor propstat" % href,
            element=response,
        )

    return ResponseElement(
        href=href,
        status=status,
        hrefs=tuple(hrefs),
        propstats=tuple(propstats),
        error=err,
        response_description=description,
    )


def _parse_propstat(propstat: _Element) -> PropstatElement:
    children = _children(propstat)
    if not children or children[0].tag != dav.Prop.tag:
        raise error.MalformedMultistatus(
            reason="expected prop as first child of propstat",
            element=children[0] if children else propstat,
        )
    if len(children) < 2 or children[1].tag != dav.Status.tag:
        raise error.MalformedMultistatus(
            reason="expected status after prop in propstat",
            element=children[1] if len(children) > 1 else propstat,
        )
    status = parse_status_line(_text(children[1]), children[1])

    err: Optional[_Element] = None
    description: Optional[str] = None
    for elem in children[2:]:
        if elem.tag == dav.Error.tag:
            if err is not None:
                raise error.DuplicateError(
                    reason="multiple error elements in propstat", element=elem
                )
            if description is not None:
                raise error.MalformedMultistatus(
                    reason="error after responsedescription in propstat",
                    element=elem,
                )
            err = elem
        elif elem.tag == dav.ResponseDescription.tag and description is None:
            description = _text(elem)
        else:
            raise error.MalformedMultistatus(
                reason="expected error or responsedescription after status, "
                "found %s" % elem.tag,
                element=elem,
            )

    return PropstatElement(
        props=tuple(_children(children[0])),
        status=status,
        error=err,
        response_description=description,
    )
