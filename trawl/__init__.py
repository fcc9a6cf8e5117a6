"""Scraping-session toolkit.

This package extracts structured data from web pages with a clean separation
between parsing (Document, Selector, pure and snapshot-based) and I/O
(fetchers that own an HTTP client or a browser process). ScrapeSession ties a
fetcher to the retry and pagination policies with guaranteed cleanup.
"""
