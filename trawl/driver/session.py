"""ScrapeSession: one fetcher, one lifecycle, guaranteed cleanup.

A session owns exactly one fetcher from open to close and combines it with
the retry and pagination policies:

- Static sessions fetch pages with one HTTP GET each.
- Dynamic sessions drive a browser: navigate, click, type, then read the
  rendered page, retrying the read while it is still rendering.

All operations on a session are sequential and blocking. Independent
sessions share nothing and may run concurrently. The fetcher is closed on
every exit path, exactly once, including when an action fails::

    with ScrapeSession.dynamic(BrowserConfig()) as session:
        session.navigate(url)
        session.click("button.show-all")
        rows = session.read(lambda doc: doc.extract_table("table.stats"))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from trawl.common.document import Document, ExtractedRow
from trawl.common.exceptions import SessionNotOpen
from trawl.common.paginator import Advance, Extract, Paginator
from trawl.common.retry import (
    Classifier,
    RetryPolicy,
    is_transient_exception,
)
from trawl.common.selector import Selector
from trawl.driver.fetcher import BaseFetcher, DynamicFetcher

if TYPE_CHECKING:
    from trawl.driver.playwright_fetcher import BrowserConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScrapeSession:
    """Orchestrates a fetcher with retry and pagination.

    Args:
        fetcher: The fetcher this session owns. It is opened by open() or
            ``with`` and closed when the session closes.
        retry_policy: Default policy for the *_with_retry operations and
            read() (default: RetryPolicy()).
    """

    def __init__(
        self,
        fetcher: BaseFetcher,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.retry_policy = retry_policy or RetryPolicy()
        self._closed = False

    @classmethod
    @contextmanager
    def static(
        cls, retry_policy: RetryPolicy | None = None, **fetcher_kwargs: Any
    ) -> Iterator[ScrapeSession]:
        """Open a session over a StaticFetcher.

        Args:
            retry_policy: Default retry policy for the session.
            **fetcher_kwargs: Passed to StaticFetcher.

        Yields:
            An open ScrapeSession, closed on exit.
        """
        from trawl.driver.static_fetcher import StaticFetcher

        with cls(StaticFetcher(**fetcher_kwargs), retry_policy) as session:
            yield session

    @classmethod
    @contextmanager
    def dynamic(
        cls,
        config: BrowserConfig | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> Iterator[ScrapeSession]:
        """Open a session over a PlaywrightFetcher.

        Args:
            config: BrowserConfig for the browser (default: BrowserConfig()).
            retry_policy: Default retry policy for the session.

        Yields:
            An open ScrapeSession, closed on exit.
        """
        from trawl.driver.playwright_fetcher import PlaywrightFetcher

        with cls(PlaywrightFetcher(config), retry_policy) as session:
            yield session

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.fetcher.is_open and not self._closed

    def open(self) -> ScrapeSession:
        """Open the fetcher. A closed session cannot be reopened."""
        if self._closed:
            raise SessionNotOpen("open a session that was already closed")
        try:
            self.fetcher.open()
        except BaseException:
            self.close()
            raise
        return self

    def close(self) -> None:
        """Close the fetcher. Runs at most once; later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        self.fetcher.close()

    def __enter__(self) -> ScrapeSession:
        return self.open()

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc is None:
            self.close()
            return
        try:
            self.close()
        except Exception as close_error:
            # The original error wins; teardown failures are only logged.
            logger.error(
                f"Error closing session after {exc_type.__name__}: "
                f"{close_error}",
                exc_info=close_error,
            )

    def _require_open(self, operation: str) -> None:
        if not self.is_open:
            raise SessionNotOpen(operation)

    def _browser(self, operation: str) -> DynamicFetcher:
        self._require_open(operation)
        if not isinstance(self.fetcher, DynamicFetcher):
            raise TypeError(
                f"Cannot {operation}: {type(self.fetcher).__name__} "
                "does not drive a browser"
            )
        return self.fetcher

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    def fetch(self, target: str) -> Document:
        """Fetch ``target`` (or re-read the current browser page)."""
        self._require_open("fetch")
        return self.fetcher.fetch(target)

    def fetch_with_retry(
        self,
        target: str,
        is_transient: Classifier = is_transient_exception,
        retry_policy: RetryPolicy | None = None,
    ) -> Document:
        """fetch() under a RetryPolicy.

        Raises:
            RetryExhausted: If transient failures outlast the policy timeout.
        """
        self._require_open("fetch")
        policy = retry_policy or self.retry_policy
        return policy.run_with_retry(
            lambda: self.fetcher.fetch(target), is_transient
        )

    def extract_table(
        self,
        target: str,
        selector: str | Selector = "table",
        skip_rows: int = 0,
    ) -> list[ExtractedRow]:
        """Fetch ``target`` and read one table from it."""
        return self.fetch(target).extract_table(selector, skip_rows)

    # -------------------------------------------------------------------------
    # Browser actions
    # -------------------------------------------------------------------------

    def navigate(self, url: str) -> None:
        self._browser("navigate").navigate(url)

    def click(self, selector: str | Selector) -> None:
        self._browser("click").click(selector)

    def type(self, selector: str | Selector, text: str) -> None:
        self._browser("type").type(selector, text)

    def wait_for(
        self, selector: str | Selector, timeout_ms: int | None = None
    ) -> None:
        self._browser("wait").wait_for(selector, timeout_ms)

    def current_document(self) -> Document:
        return self._browser("read the current page").current_document()

    def read(
        self,
        extract: Callable[[Document], T],
        is_transient: Classifier = is_transient_exception,
        retry_policy: RetryPolicy | None = None,
    ) -> T:
        """Snapshot the current page and extract from it, with retries.

        Use after an action whose result renders asynchronously: the
        snapshot is re-taken until ``extract`` stops failing transiently.
        """
        browser = self._browser("read the current page")
        policy = retry_policy or self.retry_policy
        return policy.run_with_retry(
            lambda: extract(browser.current_document()), is_transient
        )

    def paginate(
        self,
        extract: Extract,
        advance: Advance,
        max_iterations: int | None = None,
        retry: bool = True,
        is_transient: Classifier = is_transient_exception,
    ) -> list[ExtractedRow]:
        """Collect rows from the current page and every page after it.

        Args:
            extract: Turns one page's Document into rows.
            advance: Moves to the next page or returns TERMINAL (see
                paginator.click_next).
            max_iterations: Maximum pages to read (None = until TERMINAL).
            retry: Wrap each page read in the session's retry policy.
            is_transient: Classifier for those retries.
        """
        browser = self._browser("paginate")
        paginator = Paginator(
            max_iterations=max_iterations,
            retry_policy=self.retry_policy if retry else None,
            is_transient=is_transient,
        )
        return paginator.collect(browser, extract, advance)
