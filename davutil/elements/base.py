#!/usr/bin/env python
"""
Declarative request bodies.  Elements are composed with ``+``::

    dav.Propfind() + (dav.Prop() + [dav.DisplayName(), dav.GetEtag()])

and written out through an XmlEmitter.
"""
import sys
from collections.abc import Iterable
from typing import ClassVar
from typing import List
from typing import Optional
from typing import Union

from lxml import etree

from davutil.lib.namespace import qname
from davutil.lib.xmlemit import XmlEmitter

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

Children = Union["BaseElement", Iterable]


class BaseElement:
    tag: ClassVar[Optional[str]] = None

    def __init__(self, value: Union[str, bytes, None] = None) -> None:
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        self.value: Optional[str] = value
        self.children: List[BaseElement] = []
        self.attributes: dict = {}

    def __add__(self, other: Children) -> Self:
        return self.append(other)

    def append(self, element: Children) -> Self:
        """Add one element or a list of them as children"""
        if isinstance(element, BaseElement):
            self.children.append(element)
        else:
            self.children.extend(element)
        return self

    def emit(self, xml: XmlEmitter) -> None:
        """Write this element and everything below it to xml"""
        if self.tag is None:
            raise ValueError("%s has no tag" % self.__class__.__name__)
        attrs = self.attributes or None
        if self.children:
            xml.open_tag(self.tag, attrs)
            for child in self.children:
                child.emit(xml)
            xml.close_tag(self.tag)
        elif self.value is None:
            xml.empty_tag(self.tag, attrs)
        else:
            xml.property(self.tag, self.value, attrs)

    def tostring(self, pretty_print: bool = False) -> bytes:
        xml = XmlEmitter()
        self.emit(xml)
        return xml.tostring(pretty_print=pretty_print)

    def __str__(self) -> str:
        return self.tostring(pretty_print=True).decode("utf-8")


class ValuedBaseElement(BaseElement):
    """An element carrying text, like displayname"""

    pass


class AnyElement(BaseElement):
    """
    An element in any namespace, for properties there is no class for.
    """

    def __init__(
        self, name: Union[str, etree.QName], value: Union[str, bytes, None] = None
    ) -> None:
        super().__init__(value=value)
        self.tag = qname(name)
