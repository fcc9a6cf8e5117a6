"""In-memory fetchers for tests that don't need a real browser."""

from __future__ import annotations

from trawl.common.document import Document
from trawl.common.exceptions import ElementNotFound
from trawl.common.selector import Selector
from trawl.driver.fetcher import DynamicFetcher


def results_page(page: int, rows: list[str], last: bool = False) -> str:
    """A page with a one-column results table and a "next" button."""
    body = "".join(f"<tr><td>{value}</td></tr>" for value in rows)
    disabled = " disabled" if last else ""
    return (
        f"<html><head><title>Page {page}</title></head><body>"
        f'<table class="results" data-page="{page}">'
        f"<tr><th>Value</th></tr>{body}</table>"
        f'<button class="next"{disabled}>Next</button>'
        "</body></html>"
    )


class FakeBrowserFetcher(DynamicFetcher):
    """A DynamicFetcher that serves a fixed list of pages.

    Clicking the next-page selector moves to the following page. Other clicks
    and typing are recorded. Setting ``missing`` makes clicks on those
    selectors raise ElementNotFound, the way a live page would.
    """

    def __init__(
        self,
        pages: list[str],
        next_selector: str = "button.next",
        missing: tuple[str, ...] = (),
    ) -> None:
        super().__init__()
        self.pages = pages
        self.next_selector = next_selector
        self.missing = missing
        self.index = 0
        self.url: str | None = None
        self.open_calls = 0
        self.close_calls = 0
        self.clicks: list[str] = []
        self.typed: list[tuple[str, str]] = []
        self.reads = 0

    def _open(self) -> None:
        self.open_calls += 1

    def _close(self) -> None:
        self.close_calls += 1

    def navigate(self, url: str) -> None:
        self._require_open("navigate")
        self.url = url
        self.index = 0

    def click(self, selector: str | Selector) -> None:
        self._require_open("click")
        css = Selector.coerce(selector).css
        if css in self.missing:
            raise ElementNotFound(css, "click", self.url or "")
        self.clicks.append(css)
        if css == self.next_selector:
            self.index = min(self.index + 1, len(self.pages) - 1)

    def type(self, selector: str | Selector, text: str) -> None:
        self._require_open("type")
        self.typed.append((Selector.coerce(selector).css, text))

    def wait_for(
        self, selector: str | Selector, timeout_ms: int | None = None
    ) -> None:
        self._require_open("wait")

    def current_document(self) -> Document:
        self._require_open("read the current page")
        self.reads += 1
        return Document.parse(
            self.pages[self.index], self.url or "http://fake.test/"
        )

    def fetch(self, target: str) -> Document:
        self._require_open("fetch")
        if self.url is None:
            self.navigate(target)
        return self.current_document()
