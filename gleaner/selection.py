"""A small document-ordered set of HTML nodes queried with CSS selectors."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from bs4 import BeautifulSoup, Tag


def _attribute(node: Tag, name: str) -> str | None:
    value = node.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return value


class Selection:
    """An ordered, duplicate-free set of parsed HTML nodes."""

    __slots__ = ("nodes",)

    def __init__(self, nodes: Iterable[Tag] = ()) -> None:
        self.nodes: tuple[Tag, ...] = tuple(nodes)

    @classmethod
    def from_html(cls, markup: str | bytes) -> Selection:
        """Parse a document and return a selection holding its root."""
        return cls([BeautifulSoup(markup, "lxml", multi_valued_attributes=None)])

    def find(self, selector: str) -> Selection:
        """Return the descendants of every node that match a CSS selector.

        An empty selector matches nothing.
        """
        if not selector.strip():
            return Selection()
        seen: set[int] = set()
        found: list[Tag] = []
        for node in self.nodes:
            for match in node.select(selector):
                if id(match) not in seen:
                    seen.add(id(match))
                    found.append(match)
        return Selection(found)

    def first(self) -> Selection:
        """Return a selection of the first node only, or an empty one."""
        return Selection(self.nodes[:1])

    def text(self) -> str:
        """Return the combined text content of all nodes."""
        return "".join(node.get_text() for node in self.nodes)

    def attr(self, name: str) -> str | None:
        """Return an attribute of the first node, or None if it is absent."""
        if not self.nodes:
            return None
        return _attribute(self.nodes[0], name)

    def __iter__(self) -> Iterator[Selection]:
        for node in self.nodes:
            yield Selection((node,))

    def __len__(self) -> int:
        return len(self.nodes)

    def __bool__(self) -> bool:
        return bool(self.nodes)

    def __repr__(self) -> str:
        names = ", ".join(node.name or "?" for node in self.nodes)
        return f"Selection([{names}])"