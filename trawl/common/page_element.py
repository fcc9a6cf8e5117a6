"""PageElement: a read-only node inside a parsed Document.

PageElement is always backed by static parsed HTML (lxml). The fetcher is
responsible for obtaining the HTML, whether via HTTP or by serializing a
rendered Playwright DOM, so a PageElement never touches a live browser page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urljoin

from lxml import html
from lxml.html import HtmlElement

from trawl.common.selector import Selector, normalize_whitespace

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class Link:
    """Represents an HTML <a> element with its resolved URL and text.

    Attributes:
        url: Resolved absolute URL from the href attribute.
        text: Normalized visible text of the link.
    """

    url: str
    text: str


class PageElement:
    """Wrapper around one lxml element of a Document.

    Attributes:
        _element: The underlying lxml HtmlElement.
        _url: The base URL for resolving relative URLs.
    """

    __slots__ = ("_element", "_url")

    def __init__(self, element: HtmlElement, url: str = "") -> None:
        self._element = element
        self._url = url

    def __repr__(self) -> str:
        return f"<PageElement {self.tag_name()} at {self._url or '?'}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PageElement):
            return NotImplemented
        return self._element is other._element

    def __hash__(self) -> int:
        return id(self._element)

    def query(self, selector: str | Selector) -> list[PageElement]:
        """Query descendant elements by CSS selector.

        Args:
            selector: CSS selector text or Selector.

        Returns:
            Matching elements in document order, after applying the
            selector's nth-match policy.
        """
        selector = Selector.coerce(selector)
        matches = [
            PageElement(result, self._url)
            for result in self._element.xpath(selector.xpath)
            if isinstance(result, HtmlElement)
        ]
        return selector.pick(matches)

    def query_first(self, selector: str | Selector) -> PageElement | None:
        """Return the first match for ``selector``, or None."""
        matches = self.query(selector)
        return matches[0] if matches else None

    def text_content(self) -> str:
        """Visible text of the element and its descendants, whitespace-normalized."""
        return normalize_whitespace(self._element.text_content())

    def get_attribute(self, name: str) -> str | None:
        """Return the attribute value, or None if it doesn't exist."""
        return self._element.get(name)

    def inner_html(self) -> str:
        """Serialized HTML of the element's children."""
        inner = self._element.text or ""
        inner += "".join(
            html.tostring(child, encoding="unicode") for child in self._element
        )
        return inner

    def tag_name(self) -> str:
        """Tag name as a lowercase string (e.g., "div", "a", "table")."""
        return str(self._element.tag).lower()

    def children(self) -> Iterator[PageElement]:
        """Iterate over direct child elements, skipping comments."""
        for child in self._element:
            if isinstance(child, HtmlElement):
                yield PageElement(child, self._url)

    def links(self) -> list[Link]:
        """Discover all links beneath the element that carry an href."""
        links: list[Link] = []
        for elem in self.query("a[href]"):
            href = elem.get_attribute("href") or ""
            links.append(
                Link(url=urljoin(self._url, href), text=elem.text_content())
            )
        return links
