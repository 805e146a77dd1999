#!/usr/bin/env python
"""
Streaming style XML emitter for request bodies.

The caller emits a document tag by tag::

    xml = XmlEmitter()
    xml.open_tag(dav.Propfind.tag)
    xml.open_tag(dav.Prop.tag)
    xml.empty_tag(dav.DisplayName.tag)
    xml.close_tag(dav.Prop.tag)
    xml.close_tag(dav.Propfind.tag)
    body = xml.tostring()

Namespaces are collected in a NamespaceRegistry while emitting, and
all of them are declared once, on the root element, when the document
is rendered.  That's why rendering is deferred until tostring().
"""
import logging
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

from lxml import etree
from lxml.etree import _Element

from davutil.lib import error
from davutil.lib.namespace import NamespaceRegistry
from davutil.lib.namespace import qname

log = logging.getLogger(__name__)

Name = Union[str, etree.QName]


class _Node:
    __slots__ = ("tag", "attrs", "text", "children")

    def __init__(
        self, tag: str, attrs: Optional[Dict[str, str]] = None, text: Optional[str] = None
    ) -> None:
        self.tag = tag
        self.attrs = attrs or {}
        self.text = text
        self.children: List["_Node"] = []

    def fill(self, el: _Element) -> None:
        for k, v in self.attrs.items():
            el.set(k, v)
        if self.text is not None:
            el.text = self.text
        for child in self.children:
            child.fill(etree.SubElement(el, child.tag))


class XmlEmitter:
    def __init__(self, registry: Optional[NamespaceRegistry] = None) -> None:
        if registry is None:
            registry = NamespaceRegistry()
        self.registry = registry
        self._root: Optional[_Node] = None
        self._stack: List[_Node] = []

    def add_namespace(self, uri: str) -> Optional[str]:
        return self.registry.add(uri)

    def _name(self, name: Name) -> str:
        name = qname(name)
        self.registry.add(etree.QName(name).namespace)
        return name

    def _append(self, node: _Node) -> None:
        if self._stack:
            self._stack[-1].children.append(node)
        elif self._root is None:
            self._root = node
        else:
            raise error.XmlEmitError(
                reason="%s emitted after the root element %s was closed"
                % (node.tag, self._root.tag)
            )

    def open_tag(self, name: Name, attrs: Optional[Dict[str, str]] = None) -> "XmlEmitter":
        node = _Node(self._name(name), attrs)
        self._append(node)
        self._stack.append(node)
        return self

    def empty_tag(self, name: Name, attrs: Optional[Dict[str, str]] = None) -> "XmlEmitter":
        self._append(_Node(self._name(name), attrs))
        return self

    def property(
        self, name: Name, text: Optional[str], attrs: Optional[Dict[str, str]] = None
    ) -> "XmlEmitter":
        self._append(_Node(self._name(name), attrs, text or ""))
        return self

    def close_tag(self, name: Name) -> "XmlEmitter":
        name = qname(name)
        if not self._stack:
            raise error.XmlEmitError(reason="close_tag(%s) with no open tag" % name)
        if self._stack[-1].tag != name:
            raise error.XmlEmitError(
                reason="close_tag(%s) does not match open tag %s"
                % (name, self._stack[-1].tag)
            )
        self._stack.pop()
        return self

    def element(self) -> _Element:
        if self._root is None:
            raise error.XmlEmitError(reason="nothing was emitted")
        if self._stack:
            raise error.XmlEmitError(
                reason="unclosed tags: %s" % ", ".join(n.tag for n in self._stack)
            )
        root = etree.Element(self._root.tag, nsmap=self.registry.nsmap())
        self._root.fill(root)
        return root

    def tostring(self, pretty_print: bool = False) -> bytes:
        return etree.tostring(
            self.element(),
            encoding="utf-8",
            xml_declaration=True,
            pretty_print=pretty_print,
        )
