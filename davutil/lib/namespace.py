#!/usr/bin/env python
from typing import Dict
from typing import Iterator
from typing import Optional
from typing import Union

from lxml import etree

nsmap: Dict[str, str] = {
    "D": "DAV:",
    "C": "urn:ietf:params:xml:ns:caldav",
    "CR": "urn:ietf:params:xml:ns:carddav",
    "CS": "http://calendarserver.org/ns/",
    "I": "http://apple.com/ns/ical/",
}

## Reverse lookup, used when a registry meets a namespace it has
## a conventional prefix for
prefix_by_uri: Dict[str, str] = {v: k for k, v in nsmap.items()}


def ns(prefix: str, tag: Optional[str] = None) -> str:
    name = "{%s}" % nsmap[prefix]
    if tag is not None:
        name = "%s%s" % (name, tag)
    return name


def qname(name: Union[str, etree.QName]) -> str:
    """
    Normalise a property name to Clark notation, ``{namespace}local``.

    Accepts an ``lxml.etree.QName``, a Clark string, or a bare local
    name which is taken to be in the ``DAV:`` namespace.
    ``"getetag"`` and ``"{DAV:}getetag"`` are the same property.
    """
    if isinstance(name, etree.QName):
        return name.text
    if not name:
        raise ValueError("empty property name")
    if name.startswith("{"):
        return etree.QName(name).text
    return ns("D", name)


def namespace_of(name: Union[str, etree.QName]) -> Optional[str]:
    return etree.QName(qname(name)).namespace


class NamespaceRegistry:
    """
    Namespace table for one outgoing XML document.

    Every namespace gets a prefix the first time it is added, and is
    only added once.  Well known namespaces get their conventional
    prefix, everything else gets ``ns0``, ``ns1``, ...

    A registry should never be shared between requests.
    """

    def __init__(self, *uris: str) -> None:
        self._prefixes: Dict[str, str] = {}
        self._counter = 0
        self.add("DAV:")
        for uri in uris:
            self.add(uri)

    def add(self, uri: Optional[str]) -> Optional[str]:
        """Register ``uri`` and return its prefix"""
        if not uri:
            return None
        if uri in self._prefixes:
            return self._prefixes[uri]
        prefix = prefix_by_uri.get(uri)
        if prefix is None or prefix in self._prefixes.values():
            prefix = self._next_prefix()
        self._prefixes[uri] = prefix
        return prefix

    def _next_prefix(self) -> str:
        while True:
            prefix = "ns%i" % self._counter
            self._counter += 1
            if prefix not in self._prefixes.values():
                return prefix

    def prefix(self, uri: str) -> Optional[str]:
        return self._prefixes.get(uri)

    def nsmap(self) -> Dict[str, str]:
        """prefix -> uri mapping, as lxml wants it"""
        return {p: u for u, p in self._prefixes.items()}

    def __contains__(self, uri: object) -> bool:
        return uri in self._prefixes

    def __iter__(self) -> Iterator[str]:
        return iter(self._prefixes)

    def __len__(self) -> int:
        return len(self._prefixes)
