"""Playwright-based fetcher for JavaScript-heavy websites.

This module provides the browser-driven fetcher: it owns a browser process,
performs navigate/click/type actions, and snapshots the rendered DOM into
Documents.
"""

from trawl.driver.playwright_fetcher.playwright_fetcher import (
    BrowserConfig,
    FetcherState,
    PlaywrightFetcher,
    find_free_port,
)

__all__ = [
    "BrowserConfig",
    "FetcherState",
    "PlaywrightFetcher",
    "find_free_port",
]
