"""Base class shared by the static and browser-driven fetchers.

A fetcher owns one external resource (an HTTP client or a browser process)
between open() and close(). Every operation checks that the fetcher is open
and raises SessionNotOpen otherwise.
"""

from __future__ import annotations

import logging
from typing import Any

from trawl.common.document import Document
from trawl.common.exceptions import SessionNotOpen
from trawl.common.selector import Selector

logger = logging.getLogger(__name__)


class BaseFetcher:
    """Open/close lifecycle and the common fetch() contract.

    Subclasses implement ``_open``, ``_close`` and ``fetch``. close() is
    idempotent: the resource is released at most once.
    """

    def __init__(self) -> None:
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        """Acquire the underlying resource."""
        if self._is_open:
            return
        self._open()
        self._is_open = True
        logger.info(f"Opened {type(self).__name__}")

    def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""
        if not self._is_open:
            return
        self._is_open = False
        try:
            self._close()
        finally:
            logger.info(f"Closed {type(self).__name__}")

    def __enter__(self) -> BaseFetcher:
        self.open()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _require_open(self, operation: str) -> None:
        if not self._is_open:
            raise SessionNotOpen(operation)

    def _open(self) -> None:
        raise NotImplementedError

    def _close(self) -> None:
        raise NotImplementedError

    def fetch(self, target: str) -> Document:
        """Return a Document for ``target``."""
        raise NotImplementedError


class DynamicFetcher(BaseFetcher):
    """A fetcher driving a live, script-executing browser page.

    fetch() re-reads the page the browser is currently on; the first call
    loads ``target`` if nothing has been loaded yet.
    """

    def navigate(self, url: str) -> None:
        raise NotImplementedError

    def click(self, selector: str | Selector) -> None:
        raise NotImplementedError

    def type(self, selector: str | Selector, text: str) -> None:
        raise NotImplementedError

    def wait_for(
        self, selector: str | Selector, timeout_ms: int | None = None
    ) -> None:
        raise NotImplementedError

    def current_document(self) -> Document:
        raise NotImplementedError
