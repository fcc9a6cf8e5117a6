"""Document: an immutable snapshot of one parsed HTML page.

A Document is produced by a fetcher, queried with selectors, and discarded
after extraction. It owns its lxml tree exclusively: queries return
PageElement wrappers and never expose the tree itself, and a Document taken
from a browser is a point-in-time copy of the DOM that never changes when the
live page does.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TypeAlias

from lxml import etree, html
from lxml.html import HtmlElement

from trawl.common.exceptions import MalformedMarkup, TableNotFound
from trawl.common.page_element import PageElement
from trawl.common.selector import Selector, normalize_whitespace

logger = logging.getLogger(__name__)

ExtractedRow: TypeAlias = Mapping[str, str]

_TABLE_ROWS = "./tr | ./thead/tr | ./tbody/tr | ./tfoot/tr"
_ROW_CELLS = "./th | ./td"
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def repair_names(names: Iterable[str]) -> list[str]:
    """Make column names unique and non-empty.

    The first occurrence of a name keeps it; later duplicates get ``_2``,
    ``_3``... suffixes, skipping any suffixed name already in use. Empty
    names become ``column_<position>`` (1-based).

    Example::

        >>> repair_names(["Rank & Title", "Rank & Title", "Rating"])
        ['Rank & Title', 'Rank & Title_2', 'Rating']
    """
    names = [
        name if name else f"column_{i}" for i, name in enumerate(names, 1)
    ]
    taken = set(names)
    seen: set[str] = set()
    repaired: list[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            repaired.append(name)
            continue
        suffix = 2
        while f"{name}_{suffix}" in taken:
            suffix += 1
        candidate = f"{name}_{suffix}"
        taken.add(candidate)
        seen.add(candidate)
        repaired.append(candidate)
    return repaired


class Document:
    """An immutable parsed HTML page.

    Attributes:
        url: The URL the markup was fetched from ("" if unknown).
    """

    __slots__ = ("_root", "_url")

    def __init__(self, root: HtmlElement, url: str = "") -> None:
        """Wrap an already-parsed tree. Use Document.parse() for markup."""
        self._root = root
        self._url = url

    @classmethod
    def parse(
        cls, markup: str | bytes, url: str = "", encoding: str | None = None
    ) -> Document:
        """Parse markup into a Document.

        Args:
            markup: HTML text or bytes. Fragments are wrapped in html/body.
            url: The URL the markup came from, used for error context and
                for resolving relative links.
            encoding: Character encoding of byte markup, typically the
                charset from the response headers. None lets lxml detect
                it from the markup (falling back to Latin-1).

        Returns:
            The parsed Document.

        Raises:
            MalformedMarkup: If lxml cannot produce any tree.
        """
        if not markup or not markup.strip():
            raise MalformedMarkup("document is empty", url)
        if encoding is not None and isinstance(markup, bytes):
            markup = markup.decode(encoding, errors="replace")
        if isinstance(markup, str):
            # lxml rejects text that still carries an encoding declaration
            markup = _XML_DECLARATION.sub("", markup, count=1)
        try:
            root = html.document_fromstring(markup)
        except (etree.ParserError, ValueError) as e:
            raise MalformedMarkup(str(e), url) from e
        logger.debug(
            f"Parsed document from {url or '<string>'}",
            extra={"url": url, "size": len(markup)},
        )
        return cls(root, url)

    def __repr__(self) -> str:
        return f"<Document {self._url or '<string>'}>"

    @property
    def url(self) -> str:
        return self._url

    @property
    def root(self) -> PageElement:
        """The document's root (<html>) element."""
        return PageElement(self._root, self._url)

    @property
    def title(self) -> str:
        """Normalized <title> text, or "" if the page has none."""
        node = self.query_first("title")
        return node.text_content() if node is not None else ""

    def query(self, selector: str | Selector) -> list[PageElement]:
        """Every element matching ``selector``, in document order."""
        return self.root.query(selector)

    def query_first(self, selector: str | Selector) -> PageElement | None:
        """The first element matching ``selector``, or None."""
        return self.root.query_first(selector)

    def to_html(self) -> str:
        """Serialize the snapshot back to HTML."""
        return html.tostring(self._root, encoding="unicode")

    def extract_table(
        self, selector: str | Selector = "table", skip_rows: int = 0
    ) -> list[ExtractedRow]:
        """Read a table into rows keyed by its header names.

        The first ``skip_rows`` rows of the table are dropped as non-data
        rows; the next row supplies the column names and every row after it
        becomes one ExtractedRow.

        Args:
            selector: Locates the table. If the first match is not a <table>,
                its first descendant <table> is used.
            skip_rows: Number of leading rows to drop before the header row.

        Returns:
            One read-only mapping per data row, columns in header order.

        Raises:
            TableNotFound: If no table is found, or it has no header row
                once ``skip_rows`` rows are dropped.
            ValueError: If skip_rows is negative.
        """
        if skip_rows < 0:
            raise ValueError(f"skip_rows must be >= 0, got {skip_rows}")
        selector = Selector.coerce(selector)
        table = self._find_table(selector)

        rows: list[HtmlElement] = table.xpath(_TABLE_ROWS)
        if len(rows) <= skip_rows:
            raise TableNotFound(
                selector.css,
                self._url,
                reason=(
                    f"table has {len(rows)} rows, "
                    f"no header left after skipping {skip_rows}"
                ),
            )

        header_row, *data_rows = rows[skip_rows:]
        columns = repair_names(_cell_texts(header_row))
        width = len(columns)

        extracted: list[ExtractedRow] = []
        for row in data_rows:
            cells = _cell_texts(row)
            if len(cells) > width:
                logger.debug(
                    f"Dropping {len(cells) - width} cells beyond header width",
                    extra={"url": self._url, "selector": selector.css},
                )
            cells = cells[:width] + [""] * (width - len(cells))
            extracted.append(MappingProxyType(dict(zip(columns, cells))))

        logger.debug(
            f"Extracted {len(extracted)} rows from table '{selector.css}'",
            extra={"url": self._url, "columns": columns},
        )
        return extracted

    def _find_table(self, selector: Selector) -> HtmlElement:
        match = self.query_first(selector)
        if match is None:
            raise TableNotFound(selector.css, self._url)
        element = match._element
        if element.tag == "table":
            return element
        nested = element.xpath(".//table")
        if not nested:
            raise TableNotFound(
                selector.css,
                self._url,
                reason=f"matched <{element.tag}> contains no table",
            )
        return nested[0]


def _cell_texts(row: HtmlElement) -> list[str]:
    return [
        normalize_whitespace(cell.text_content())
        for cell in row.xpath(_ROW_CELLS)
    ]
