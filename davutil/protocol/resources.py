"""
Turns the structural multistatus representation into the resource model.
"""

import logging
from typing import Iterable, List, Optional

from lxml import etree

from davutil.elements import dav
from davutil.lib.url import URL

from .types import (
    ChildResource,
    MultistatusDocument,
    MultistatusResult,
    PropertyValue,
    ResponseElement,
)

log = logging.getLogger(__name__)


def build_child_resource(response: ResponseElement) -> ChildResource:
    """
    Build the ChildResource for one response element.

    Every element inside a prop becomes a PropertyValue carrying the
    status of its propstat, except resourcetype: its children end up
    in resource_types, and DAV:collection among them marks the
    resource as a collection.
    """
    display_name: Optional[str] = None
    is_collection = False
    resource_types: List[etree._Element] = []
    properties: List[PropertyValue] = []

    for propstat in response.propstats:
        for prop in propstat.props:
            if prop.tag == dav.ResourceType.tag:
                for rtype in prop:
                    if not isinstance(rtype.tag, str):
                        continue
                    if rtype.tag == dav.Collection.tag:
                        is_collection = True
                    resource_types.append(rtype)
                continue

            properties.append(
                PropertyValue(name=prop.tag, element=prop, status=propstat.status)
            )
            if prop.tag == dav.DisplayName.tag:
                display_name = prop.text

    return ChildResource(
        uri=response.href,
        display_name=display_name,
        is_collection=is_collection,
        resource_types=tuple(resource_types),
        properties=tuple(properties),
        status=response.status,
        error=response.error,
        response_description=response.response_description,
    )


def build_multistatus_result(document: MultistatusDocument) -> MultistatusResult:
    return MultistatusResult(
        responses=tuple(build_child_resource(r) for r in document.responses),
        response_description=document.response_description,
        sync_token=document.sync_token,
    )


def exclude_self(
    children: Iterable[ChildResource], parent: Optional[str]
) -> List[ChildResource]:
    """
    Drop the collection itself from a depth 1 listing.

    The collection is reported along with its members; it is
    recognised by its path, so an absolute href matches a
    server-relative parent and vice versa.
    """
    children = list(children)
    if parent is None:
        return children
    parent_url = URL.objectify(parent)
    ret = [c for c in children if not parent_url.same_path(c.uri)]
    if len(ret) == len(children):
        log.debug("no self-reference to %s found in listing", parent)
    return ret
