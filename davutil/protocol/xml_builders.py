"""
Pure functions for building DAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.  Each body gets its own namespace registry,
so namespaces of caller supplied properties are declared on the root
element of that body only.
"""
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional

from davutil.elements import dav
from davutil.elements.base import AnyElement
from davutil.elements.base import BaseElement
from davutil.lib.namespace import NamespaceRegistry
from davutil.lib.namespace import qname
from davutil.lib.xmlemit import XmlEmitter

## Always asked for by PROPFIND
DEFAULT_PROPFIND_PROPS = (dav.DisplayName.tag, dav.ResourceType.tag)

## Always asked for by sync-collection
DEFAULT_SYNC_PROPS = (dav.GetEtag.tag,)


def build_propfind_body(
    props: Optional[Iterable] = None,
    namespaces: Iterable[str] = (),
) -> bytes:
    """
    Build PROPFIND request body XML.

    displayname and resourcetype are always requested, the given
    properties are added after them.

    Args:
        props: Property names (Clark notation, QName, or bare DAV: names)
        namespaces: Extra namespaces to declare on the root element

    Returns:
        UTF-8 encoded XML bytes
    """
    names = _prop_names(DEFAULT_PROPFIND_PROPS, props)
    propfind = dav.Propfind() + (dav.Prop() + [AnyElement(n) for n in names])
    return _render(propfind, namespaces)


def build_sync_collection_body(
    sync_token: Optional[str] = None,
    props: Optional[Iterable] = None,
    sync_level: str = "1",
    namespaces: Iterable[str] = (),
) -> bytes:
    """
    Build sync-collection REPORT request body (RFC 6578).

    Args:
        sync_token: Token from the previous report, None for initial sync
        props: Property names to include in response, getetag is always there
        sync_level: Sync level (usually "1")
        namespaces: Extra namespaces to declare on the root element

    Returns:
        UTF-8 encoded XML bytes
    """
    names = _prop_names(DEFAULT_SYNC_PROPS, props)

    sync_collection = dav.SyncCollection() + [
        dav.SyncToken(sync_token),
        dav.SyncLevel(sync_level),
        dav.Prop() + [AnyElement(n) for n in names],
    ]
    return _render(sync_collection, namespaces)


def build_proppatch_body(
    set_props: Optional[Dict] = None,
    remove_props: Optional[Iterable] = None,
    namespaces: Iterable[str] = (),
) -> bytes:
    """
    Build PROPPATCH request body.

    Args:
        set_props: Properties to set (name -> text value)
        remove_props: Names of properties to remove

    Returns:
        UTF-8 encoded XML bytes
    """
    propertyupdate = dav.PropertyUpdate()

    if set_props:
        propertyupdate += dav.Set() + (
            dav.Prop() + [AnyElement(name, value) for name, value in set_props.items()]
        )
    if remove_props:
        propertyupdate += dav.Remove() + (
            dav.Prop() + [AnyElement(name) for name in remove_props]
        )

    return _render(propertyupdate, namespaces)


def build_mkcol_body(
    displayname: Optional[str] = None,
    resource_types: Optional[Iterable] = None,
    namespaces: Iterable[str] = (),
) -> bytes:
    """
    Build extended MKCOL request body (RFC 5689).

    Args:
        displayname: Collection display name
        resource_types: Names of resource type markers, DAV:collection
            is always included

    Returns:
        UTF-8 encoded XML bytes
    """
    prop = dav.Prop()

    if displayname:
        prop += dav.DisplayName(displayname)

    prop += dav.ResourceType() + [
        AnyElement(n) for n in _prop_names((dav.Collection.tag,), resource_types)
    ]

    mkcol = dav.Mkcol() + (dav.Set() + prop)
    return _render(mkcol, namespaces)


def _prop_names(defaults: Iterable[str], props: Optional[Iterable]) -> List[str]:
    """defaults followed by props, without duplicates, in order"""
    names: List[str] = []
    for name in list(defaults) + list(props or []):
        name = qname(name)
        if name not in names:
            names.append(name)
    return names


def _render(root: BaseElement, namespaces: Iterable[str] = ()) -> bytes:
    xml = XmlEmitter(NamespaceRegistry(*namespaces))
    root.emit(xml)
    return xml.tostring()
