"""Static fetcher: one HTTP GET per page, no script execution.

The fetcher encapsulates the httpx.Client lifecycle and converts responses
to Documents. Server errors and timeouts are raised as transient exceptions
so a RetryPolicy can retry them; other transport failures are raised as
NavigationError.
"""

from __future__ import annotations

import logging
import ssl

import httpx

from trawl.common.document import Document
from trawl.common.exceptions import (
    HTMLResponseAssumptionException,
    NavigationError,
    RequestTimeoutException,
)
from trawl.driver.fetcher import BaseFetcher

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "trawl/0.1",
    "Accept": "text/html,application/xhtml+xml",
}


class StaticFetcher(BaseFetcher):
    """Fetches pages over plain HTTP.

    Example::

        with StaticFetcher(timeout=30.0) as fetcher:
            doc = fetcher.fetch("https://example.com/chart")
            rows = doc.extract_table("table.chart")

    Args:
        timeout: Request timeout in seconds. None means no timeout.
        headers: Headers sent with every request (default: DEFAULT_HEADERS).
        ssl_context: Optional SSL context for servers requiring specific
            cipher suites.
        follow_redirects: Follow HTTP redirects (default: True).
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        timeout: float | None = 30.0,
        headers: dict[str, str] | None = None,
        ssl_context: ssl.SSLContext | None = None,
        follow_redirects: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__()
        self.timeout = timeout
        self.headers = dict(DEFAULT_HEADERS if headers is None else headers)
        self.ssl_context = ssl_context
        self.follow_redirects = follow_redirects
        self._transport = transport
        self._client: httpx.Client | None = None

    def _open(self) -> None:
        client_kwargs: dict = {
            "timeout": self.timeout,
            "headers": self.headers,
            "follow_redirects": self.follow_redirects,
        }
        if self.ssl_context:
            client_kwargs["verify"] = self.ssl_context
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        self._client = httpx.Client(**client_kwargs)

    def _close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def fetch(self, target: str) -> Document:
        """GET ``target`` and parse the body.

        Args:
            target: Absolute URL to fetch.

        Returns:
            Document parsed from the response body, with the final URL
            after redirects. The body is decoded with the Content-Type
            charset when the server sends one.

        Raises:
            SessionNotOpen: If the fetcher is not open.
            HTMLResponseAssumptionException: If the server returns 5xx.
            RequestTimeoutException: If the request times out.
            NavigationError: On any other transport failure.
            MalformedMarkup: If the body cannot be parsed at all.
        """
        self._require_open("fetch")
        assert self._client is not None

        logger.debug(f"GET {target}")
        try:
            response = self._client.get(target)
        except httpx.TimeoutException as e:
            raise RequestTimeoutException(
                url=target, timeout_seconds=self.timeout
            ) from e
        except httpx.HTTPError as e:
            raise NavigationError(target, str(e) or type(e).__name__) from e

        # Check for server errors (5xx status codes)
        if response.status_code >= 500:
            raise HTMLResponseAssumptionException(
                status_code=response.status_code,
                expected_codes=[200],
                url=target,
            )

        final_url = str(response.url)
        logger.info(
            f"Fetched {final_url} ({response.status_code})",
            extra={"url": final_url, "status_code": response.status_code},
        )
        # httpx falls back to its default when the header charset is unknown
        encoding = response.encoding if response.charset_encoding else None
        return Document.parse(response.content, final_url, encoding)
