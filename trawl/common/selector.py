"""CSS selector values and the selector query helpers.

A Selector wraps a CSS selector string and compiles it to XPath once, using
cssselect's HTMLTranslator (the same translator lxml's ``cssselect()`` uses).
Selectors are immutable; the combinators return new Selectors so that nested
"nodes within nodes" queries can be built up from smaller pieces::

    summary = Selector("div.question-summary")
    title = summary.descendant("h3 a")
    answered = summary.with_attribute("data-answered", "true")
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Protocol

from cssselect import HTMLTranslator, SelectorError
from cssselect import parse as parse_css

from trawl.common.exceptions import InvalidSelector, NodeNotFound

if TYPE_CHECKING:
    from trawl.common.page_element import PageElement

_translator = HTMLTranslator()

ATTRIBUTE_OPERATORS = ("=", "~=", "|=", "^=", "$=", "*=")


def _quote(value: str) -> str:
    """Quote a string for use inside a CSS selector."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True)
class Selector:
    """An immutable CSS selector with an optional nth-match policy.

    Attributes:
        css: The CSS selector text. Never empty.
        nth: Optional 0-based position. When set, queries yield at most the
            single match at that position instead of every match.
        xpath: The XPath translation used to evaluate the selector.
    """

    css: str
    nth: int | None = None
    xpath: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.css, str) or not self.css.strip():
            raise InvalidSelector("CSS selector text must not be empty")
        if self.nth is not None and self.nth < 0:
            raise InvalidSelector(f"nth must be >= 0, got {self.nth}")
        try:
            xpath = _translator.css_to_xpath(self.css)
        except SelectorError as e:
            raise InvalidSelector(
                f"Invalid CSS selector '{self.css}': {e}"
            ) from e
        object.__setattr__(self, "xpath", xpath)

    def __str__(self) -> str:
        return self.css

    @classmethod
    def coerce(cls, selector: str | Selector) -> Selector:
        """Return ``selector`` as a Selector, wrapping plain strings."""
        if isinstance(selector, Selector):
            return selector
        return cls(selector)

    @property
    def is_group(self) -> bool:
        """True if the css is a comma-separated selector group."""
        return len(parse_css(self.css)) > 1

    def _composable(self, role: str) -> None:
        if self.is_group:
            raise InvalidSelector(
                f"Cannot compose selector group '{self.css}' as {role}"
            )

    def _compose(self, other: str | Selector, joiner: str) -> Selector:
        child = Selector.coerce(other)
        if self.nth is not None:
            raise InvalidSelector(
                f"Cannot compose positional selector '{self.css}' "
                f"(nth={self.nth}) as a parent"
            )
        self._composable("a parent")
        child._composable("a child")
        return Selector(f"{self.css}{joiner}{child.css}", nth=child.nth)

    def descendant(self, child: str | Selector) -> Selector:
        """Match ``child`` anywhere beneath this selector's matches."""
        return self._compose(child, " ")

    def child(self, child: str | Selector) -> Selector:
        """Match ``child`` directly beneath this selector's matches."""
        return self._compose(child, " > ")

    def with_attribute(
        self, name: str, value: str | None = None, op: str = "="
    ) -> Selector:
        """Restrict matches by an attribute predicate.

        Args:
            name: Attribute name.
            value: Attribute value. None only requires the attribute to exist.
            op: One of the CSS attribute operators (=, ~=, |=, ^=, $=, *=).

        Returns:
            A new Selector with the predicate appended.
        """
        if op not in ATTRIBUTE_OPERATORS:
            raise InvalidSelector(f"Unknown attribute operator '{op}'")
        self._composable("an attribute predicate target")
        if value is None:
            predicate = f"[{name}]"
        else:
            predicate = f"[{name}{op}{_quote(value)}]"
        return replace(self, css=f"{self.css}{predicate}")

    def containing_text(self, text: str) -> Selector:
        """Restrict matches to elements whose text contains ``text``.

        Uses the cssselect ``:contains()`` extension, which is case sensitive
        and tests the element's full text content.
        """
        self._composable("a text predicate target")
        return replace(self, css=f"{self.css}:contains({_quote(text)})")

    def at(self, nth: int | None) -> Selector:
        """Return the same selector with a different nth-match policy."""
        return replace(self, nth=nth)

    def pick(self, matches: list[PageElement]) -> list[PageElement]:
        """Apply the nth-match policy to an ordered list of matches."""
        if self.nth is None:
            return matches
        if self.nth < len(matches):
            return [matches[self.nth]]
        return []


def descendant(parent: str | Selector, child: str | Selector) -> Selector:
    """Compose ``parent`` and ``child`` into a nested query."""
    return Selector.coerce(parent).descendant(child)


# =============================================================================
# Query helpers
# =============================================================================


class Queryable(Protocol):
    """Anything that can be queried with a selector: a Document or a node."""

    def query(self, selector: str | Selector) -> list[PageElement]: ...


def match_all(
    target: Queryable, selector: str | Selector
) -> list[PageElement]:
    """Return every node matching ``selector``, in document order."""
    return target.query(selector)


def match_first(
    target: Queryable, selector: str | Selector
) -> PageElement | None:
    """Return the first node matching ``selector``, or None if nothing matches."""
    matches = target.query(selector)
    return matches[0] if matches else None


def normalize_whitespace(value: str) -> str:
    """Collapse internal runs of whitespace to one space and trim the ends."""
    return " ".join(value.split())


def attr(node: PageElement | None, name: str) -> str | None:
    """Read an attribute from ``node``.

    Raises:
        NodeNotFound: If ``node`` is None (for example a failed match_first).
    """
    if node is None:
        raise NodeNotFound(f"attribute '{name}'")
    return node.get_attribute(name)


def text(node: PageElement | None) -> str:
    """Read the whitespace-normalized text of ``node``.

    Raises:
        NodeNotFound: If ``node`` is None (for example a failed match_first).
    """
    if node is None:
        raise NodeNotFound("text")
    return node.text_content()
