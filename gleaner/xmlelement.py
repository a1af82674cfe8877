"""An HTML or XML element matched during a crawl, queried with XPath."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from lxml import etree

_XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


def _local_name(key: str) -> str:
    return key.rsplit("}", 1)[-1] if key.startswith("{") else key


def _rooted(query: str) -> str:
    """Make a leading ``/`` refer to the element itself, not its document."""
    stripped = query.lstrip()
    if stripped.startswith("/"):
        return "." + stripped
    return stripped


def _inner_text(item: Any) -> str:
    if isinstance(item, str):
        return str(item)
    return str(item.xpath("string()"))


def _is_element(item: Any) -> bool:
    return not isinstance(item, str) and isinstance(getattr(item, "tag", None), str)


def _html_attributes(node: Any) -> Iterator[tuple[str, str]]:
    yield from node.attrib.items()


def _xml_attributes(node: Any) -> Iterator[tuple[str, str]]:
    parent = node.getparent()
    inherited = parent.nsmap if parent is not None else {}
    for prefix, uri in node.nsmap.items():
        if inherited.get(prefix) != uri:
            yield ("xmlns" if prefix is None else prefix), uri
    for key, value in node.attrib.items():
        yield _local_name(key), value


@dataclass
class XMLElement:
    """A matched tag together with the request and response it came from."""

    name: str = ""
    text: str = ""
    request: Any = None
    response: Any = None
    dom: Any = None
    is_html: bool = field(default=False)

    @classmethod
    def from_html_node(cls, response: Any, node: Any) -> XMLElement:
        """Create an element from a node of a parsed HTML document."""
        return cls(
            name=str(node.tag),
            text=_inner_text(node),
            request=getattr(response, "request", None),
            response=response,
            dom=node,
            is_html=True,
        )

    @classmethod
    def from_xml_node(cls, response: Any, node: Any) -> XMLElement:
        """Create an element from a node of a parsed XML document."""
        return cls(
            name=etree.QName(node).localname,
            text=_inner_text(node),
            request=getattr(response, "request", None),
            response=response,
            dom=node,
            is_html=False,
        )

    def _attributes(self, node: Any) -> Iterator[tuple[str, str]]:
        return _html_attributes(node) if self.is_html else _xml_attributes(node)

    def _find(self, xpath_query: str) -> list[Any]:
        result = self.dom.xpath(_rooted(xpath_query))
        return result if isinstance(result, list) else []

    def attr(self, key: str) -> str:
        """Return an attribute of the element, or an empty string."""
        for name, value in self._attributes(self.dom):
            if name == key:
                return value
        if self.is_html and key.startswith("xml:"):
            return self.dom.get(f"{{{_XML_NAMESPACE}}}{key[4:]}", "")
        return ""

    def child_text(self, xpath_query: str) -> str:
        """Return the stripped text of the first node matching the query."""
        found = self._find(xpath_query)
        if not found:
            return ""
        return _inner_text(found[0]).strip()

    def child_texts(self, xpath_query: str) -> list[str]:
        """Return the stripped text of every node matching the query."""
        return [_inner_text(item).strip() for item in self._find(xpath_query)]

    def child_attr(self, xpath_query: str, attr_name: str) -> str:
        """Return the stripped attribute of the first node matching the query."""
        found = self._find(xpath_query)
        if found and _is_element(found[0]):
            for name, value in self._attributes(found[0]):
                if name == attr_name:
                    return value.strip()
        return ""

    def child_attrs(self, xpath_query: str, attr_name: str) -> list[str]:
        """Return the stripped attribute of every matching node that has it."""
        return [
            value.strip()
            for item in self._find(xpath_query)
            if _is_element(item)
            for name, value in self._attributes(item)
            if name == attr_name
        ]