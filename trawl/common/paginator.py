"""Click-through pagination over a browser-driven fetcher.

The Paginator drives a "read page, extract rows, click next, repeat" loop.
It stops when the ``advance`` callable reports that there is no next page,
or once ``max_iterations`` pages have been read, whichever comes first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from trawl.common.retry import (
    Classifier,
    RetryPolicy,
    is_transient_exception,
)
from trawl.common.selector import Selector

if TYPE_CHECKING:
    from trawl.common.document import Document, ExtractedRow
    from trawl.common.page_element import PageElement

logger = logging.getLogger(__name__)


class AdvanceResult(Enum):
    """Result of trying to move to the next page."""

    ADVANCED = "advanced"
    TERMINAL = "terminal"


class PageSource(Protocol):
    """The part of a browser-driven fetcher the Paginator needs."""

    def current_document(self) -> Document: ...

    def click(self, selector: str | Selector) -> None: ...


Extract = Callable[["Document"], list["ExtractedRow"]]
Advance = Callable[[PageSource], AdvanceResult]


class Paginator:
    """Accumulates extracted rows across pages.

    The Paginator borrows the fetcher for the duration of collect() and never
    opens or closes it. Rows are appended in page order and are not
    deduplicated; the extract function is responsible for any distinctness.

    Args:
        max_iterations: Maximum number of pages to read, or None to read
            until ``advance`` returns TERMINAL.
        retry_policy: Optional policy wrapping each page's read-and-extract,
            for pages that render asynchronously after the click.
        is_transient: Classifier for the retry policy.
    """

    def __init__(
        self,
        max_iterations: int | None = None,
        retry_policy: RetryPolicy | None = None,
        is_transient: Classifier = is_transient_exception,
    ) -> None:
        if max_iterations is not None and max_iterations < 1:
            raise ValueError(
                f"max_iterations must be >= 1 or None, got {max_iterations}"
            )
        self.max_iterations = max_iterations
        self.retry_policy = retry_policy
        self.is_transient = is_transient

    def _read_page(
        self, fetcher: PageSource, extract: Extract
    ) -> list[ExtractedRow]:
        def read() -> list[ExtractedRow]:
            return list(extract(fetcher.current_document()))

        if self.retry_policy is None:
            return read()
        return self.retry_policy.run_with_retry(read, self.is_transient)

    def collect(
        self, fetcher: PageSource, extract: Extract, advance: Advance
    ) -> list[ExtractedRow]:
        """Read pages until there are no more or the iteration cap is hit.

        Args:
            fetcher: A browser-driven fetcher, already on the first page.
            extract: Turns one page's Document into rows.
            advance: Moves the fetcher to the next page, or returns TERMINAL.

        Returns:
            Rows from every page read, in page order.
        """
        rows: list[ExtractedRow] = []
        page = 0

        while True:
            page += 1
            page_rows = self._read_page(fetcher, extract)
            rows.extend(page_rows)
            logger.info(
                f"Page {page}: extracted {len(page_rows)} rows "
                f"({len(rows)} total)"
            )

            cap = self.max_iterations
            if cap is not None and page >= cap:
                logger.info(f"Stopping at iteration cap of {page} pages")
                break
            if advance(fetcher) is AdvanceResult.TERMINAL:
                logger.info(f"No page after page {page}")
                break

        return rows


def is_disabled(node: PageElement) -> bool:
    """True if a pagination control is marked disabled."""
    if node.get_attribute("disabled") is not None:
        return True
    if (node.get_attribute("aria-disabled") or "").lower() == "true":
        return True
    return "disabled" in (node.get_attribute("class") or "").split()


def click_next(selector: str | Selector) -> Advance:
    """Build an advance function that clicks a "next" control.

    The live page is read first: if the control is absent or disabled the
    result is TERMINAL, otherwise it is clicked and the result is ADVANCED.
    The click does not wait for the next page to render; use a Paginator
    retry_policy when the page updates asynchronously.
    """
    selector = Selector.coerce(selector)

    def advance(fetcher: PageSource) -> AdvanceResult:
        control = fetcher.current_document().query_first(selector)
        if control is None:
            logger.debug(f"Next control '{selector.css}' not found")
            return AdvanceResult.TERMINAL
        if is_disabled(control):
            logger.debug(f"Next control '{selector.css}' is disabled")
            return AdvanceResult.TERMINAL
        fetcher.click(selector)
        return AdvanceResult.ADVANCED

    return advance
