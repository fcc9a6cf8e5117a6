"""Playwright fetcher for JavaScript-driven pages.

The fetcher drives one browser page and keeps scraping code pure by:

1. Rendering pages in a real browser
2. Serializing the rendered DOM to HTML on request
3. Parsing that HTML with lxml into a Document snapshot
4. Never handing live browser references to extraction code

Selectors are evaluated in the live page through their XPath translation,
so a selector matches the same elements in the browser as it does in the
Document snapshot.

Key features:
- Explicit open/close lifecycle owning the browser process
- Remote-debugging endpoint bound to a free local port (Chromium)
- navigate / click / type / wait_for primitives
- DOM snapshot via current_document()
"""

from __future__ import annotations

import logging
import socket
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Literal

from playwright.sync_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    Playwright,
    sync_playwright,
)
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import (
    TimeoutError as PlaywrightTimeoutError,
)
from pydantic import BaseModel, Field

from trawl.common.document import Document
from trawl.common.exceptions import (
    ElementNotFound,
    HTMLResponseAssumptionException,
    NavigationError,
    RequestTimeoutException,
    SessionError,
)
from trawl.common.selector import Selector
from trawl.driver.fetcher import DynamicFetcher

logger = logging.getLogger(__name__)


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("127.0.0.1", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class BrowserConfig(BaseModel):
    """Browser launch and context settings.

    Attributes:
        browser_type: "chromium", "firefox", or "webkit".
        headless: Run the browser without a window.
        viewport: Page viewport size.
        user_agent: Custom user agent (None = browser default).
        locale: Browser locale.
        timezone_id: Browser timezone.
        navigation_timeout_ms: Timeout for page loads.
        action_timeout_ms: Timeout for clicks, typing and waits.
        wait_until: Load state navigate() waits for.
        debugging_port: Local port for the Chromium remote-debugging
            endpoint. None allocates a free port when the browser opens.
    """

    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    viewport: dict[str, int] = Field(
        default_factory=lambda: {"width": 1280, "height": 720}
    )
    user_agent: str | None = None
    locale: str = "en-US"
    timezone_id: str = "America/New_York"
    navigation_timeout_ms: int = Field(default=30_000, gt=0)
    action_timeout_ms: int = Field(default=5_000, gt=0)
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = (
        "domcontentloaded"
    )
    debugging_port: int | None = Field(default=None, gt=0, lt=65536)


@dataclass
class FetcherState:
    """Everything a PlaywrightFetcher holds while open.

    Owned by exactly one fetcher and discarded when it closes.
    """

    playwright: Playwright
    browser: Browser
    context: BrowserContext
    page: Page
    port: int | None = None
    current_url: str | None = None


class PlaywrightFetcher(DynamicFetcher):
    """Browser-driven fetcher.

    Example::

        with PlaywrightFetcher(BrowserConfig(headless=True)) as fetcher:
            fetcher.navigate("https://example.com/leaderboard")
            fetcher.click("button.next")
            doc = fetcher.current_document()

    Args:
        config: Browser settings (default: BrowserConfig()).
    """

    def __init__(self, config: BrowserConfig | None = None) -> None:
        super().__init__()
        self.config = config or BrowserConfig()
        self._state: FetcherState | None = None

    @property
    def state(self) -> FetcherState:
        self._require_open("access browser state")
        assert self._state is not None
        return self._state

    @property
    def current_url(self) -> str | None:
        return self._state.current_url if self._state else None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _open(self) -> None:
        config = self.config
        port = None
        launch_args: list[str] = []
        if config.browser_type == "chromium":
            port = config.debugging_port or find_free_port()
            launch_args.append(f"--remote-debugging-port={port}")

        playwright = sync_playwright().start()
        try:
            browser_launcher = getattr(playwright, config.browser_type)
            browser: Browser = browser_launcher.launch(
                headless=config.headless, args=launch_args
            )
            try:
                context_kwargs: dict[str, Any] = {
                    "viewport": config.viewport,
                    "locale": config.locale,
                    "timezone_id": config.timezone_id,
                }
                if config.user_agent:
                    context_kwargs["user_agent"] = config.user_agent
                context = browser.new_context(**context_kwargs)
                context.set_default_timeout(config.action_timeout_ms)
                context.set_default_navigation_timeout(
                    config.navigation_timeout_ms
                )
                page = context.new_page()
            except BaseException:
                browser.close()
                raise
        except PlaywrightError as e:
            playwright.stop()
            raise SessionError(
                f"Could not launch {config.browser_type}: {e}"
            ) from e
        except BaseException:
            playwright.stop()
            raise

        self._state = FetcherState(
            playwright=playwright,
            browser=browser,
            context=context,
            page=page,
            port=port,
        )
        logger.info(
            f"Launched {config.browser_type} (headless={config.headless})",
            extra={"port": port, "browser_type": config.browser_type},
        )

    def _close(self) -> None:
        state, self._state = self._state, None
        if state is None:
            return

        first_error: Exception | None = None
        steps = (
            ("page", state.page.close),
            ("context", state.context.close),
            ("browser", state.browser.close),
            ("playwright", state.playwright.stop),
        )
        for name, step in steps:
            try:
                step()
            except Exception as e:
                logger.warning(f"Error closing {name}: {e}")
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    # -------------------------------------------------------------------------
    # Browser actions
    # -------------------------------------------------------------------------

    def navigate(self, url: str) -> None:
        """Load ``url`` in the controlled page.

        Raises:
            SessionNotOpen: If the fetcher is not open.
            HTMLResponseAssumptionException: If the server returns 5xx.
            NavigationError: If the load fails or does not finish in time.
        """
        state = self._live_state("navigate")
        logger.info(f"Navigating to {url}")
        try:
            response = state.page.goto(url, wait_until=self.config.wait_until)
        except PlaywrightTimeoutError as e:
            raise NavigationError(
                url,
                f"timed out after {self.config.navigation_timeout_ms}ms",
            ) from e
        except PlaywrightError as e:
            raise NavigationError(url, e.message) from e

        state.current_url = state.page.url
        if response is not None and response.status >= 500:
            raise HTMLResponseAssumptionException(
                status_code=response.status, expected_codes=[200], url=url
            )

    def click(self, selector: str | Selector) -> None:
        """Click the first element matching ``selector``.

        Returns as soon as the click is dispatched; it does not wait for any
        navigation or rendering the click triggers. Re-read the page with
        current_document(), under a RetryPolicy if it updates asynchronously.

        Raises:
            SessionNotOpen: If the fetcher is not open.
            ElementNotFound: If nothing matches ``selector``, or the match
                is detached from the page before the click lands.
            RequestTimeoutException: If the element never becomes clickable.
        """
        selector = Selector.coerce(selector)
        state = self._live_state("click")
        element = self._locate(state, selector, "click")
        logger.debug(f"Clicking '{selector.css}'")
        try:
            element.click(no_wait_after=True)
        except PlaywrightTimeoutError as e:
            raise RequestTimeoutException(
                url=state.page.url,
                timeout_seconds=self.config.action_timeout_ms / 1000.0,
            ) from e
        except PlaywrightError as e:
            # Detached or replaced between lookup and click
            raise ElementNotFound(selector.css, "click", state.page.url) from e
        state.current_url = state.page.url

    def type(self, selector: str | Selector, text: str) -> None:
        """Focus the element matching ``selector`` and type ``text`` into it.

        Raises:
            SessionNotOpen: If the fetcher is not open.
            ElementNotFound: If nothing matches ``selector``, or the match
                is detached from the page while typing.
        """
        selector = Selector.coerce(selector)
        state = self._live_state("type")
        element = self._locate(state, selector, "type into")
        logger.debug(f"Typing {len(text)} characters into '{selector.css}'")
        try:
            element.focus()
            state.page.keyboard.type(text)
        except PlaywrightError as e:
            raise ElementNotFound(
                selector.css, "type into", state.page.url
            ) from e

    def wait_for(
        self,
        selector: str | Selector,
        timeout_ms: int | None = None,
        state: Literal["attached", "detached", "visible", "hidden"] = "visible",
    ) -> None:
        """Block until ``selector`` reaches ``state`` in the live page.

        Raises:
            SessionNotOpen: If the fetcher is not open.
            RequestTimeoutException: If the wait times out.
        """
        selector = Selector.coerce(selector)
        live = self._live_state("wait")
        timeout_ms = timeout_ms or self.config.action_timeout_ms
        try:
            live.page.wait_for_selector(
                f"xpath={selector.xpath}", state=state, timeout=timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise RequestTimeoutException(
                url=live.page.url, timeout_seconds=timeout_ms / 1000.0
            ) from e

    def current_document(self) -> Document:
        """Snapshot the live DOM into a Document."""
        state = self._live_state("read the current page")
        html_content = state.page.content()
        state.current_url = state.page.url
        return Document.parse(html_content, state.page.url)

    def fetch(self, target: str) -> Document:
        """Return a snapshot of the current page.

        ``target`` is loaded only if nothing has been loaded yet; after
        that, fetch() re-reads whatever page the browser is on.
        """
        self._require_open("fetch")
        if self.current_url is None:
            self.navigate(target)
        return self.current_document()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _live_state(self, operation: str) -> FetcherState:
        self._require_open(operation)
        assert self._state is not None
        return self._state

    def _locate(
        self, state: FetcherState, selector: Selector, action: str
    ) -> ElementHandle:
        elements = state.page.query_selector_all(f"xpath={selector.xpath}")
        position = selector.nth or 0
        if position >= len(elements):
            raise ElementNotFound(selector.css, action, state.page.url)
        return elements[position]
