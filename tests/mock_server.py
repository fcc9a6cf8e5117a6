"""Mock website for fetcher tests.

Pages are small, fixed HTML documents modelled on the tutorial examples: a
chart table, a question listing, and endpoints that fail in the ways a
scraper has to cope with (server errors, slow responses, redirects).
"""

import asyncio

from aiohttp import web

CHART_HTML = """<!DOCTYPE html>
<html>
<head><title>Top Rated</title></head>
<body>
  <table class="chart">
    <tr><td colspan="3">Top 3 as rated by regular voters</td></tr>
    <tr><th>Rank &amp; Title</th><th>Rank &amp; Title</th><th>Rating</th></tr>
    <tr><td>1.</td><td>The Shawshank Redemption (1994)</td><td>9.3</td></tr>
    <tr><td>2.</td><td>The Godfather (1972)</td><td>9.2</td></tr>
    <tr><td>3.</td><td>The Dark Knight (2008)</td><td>9.0</td></tr>
  </table>
</body>
</html>"""

LISTING_HTML = """<!DOCTYPE html>
<html>
<head><title>Questions</title></head>
<body>
  <div id="questions">
    <div class="question-summary" data-answered="true">
      <h3><a class="question-hyperlink" href="/q/1">First   question</a></h3>
      <div class="tags"><a class="post-tag">css</a><a class="post-tag">html</a></div>
    </div>
    <div class="question-summary" data-answered="false">
      <h3><a class="question-hyperlink" href="/q/2">Second question</a></h3>
      <div class="tags"><a class="post-tag">python</a></div>
    </div>
  </div>
</body>
</html>"""


async def handle_chart(request: web.Request) -> web.Response:
    """Handle GET /chart - a static chart table."""
    return web.Response(text=CHART_HTML, content_type="text/html")


async def handle_listing(request: web.Request) -> web.Response:
    """Handle GET /questions - a static question listing."""
    return web.Response(text=LISTING_HTML, content_type="text/html")


async def handle_flaky(request: web.Request) -> web.Response:
    """Handle GET /flaky - 503 for the first ``?failures=N`` requests, then the chart.

    The request counter lives on the application so each test server starts
    from zero.
    """
    failures = int(request.query.get("failures", "2"))
    request.app["flaky_hits"] += 1
    if request.app["flaky_hits"] <= failures:
        return web.Response(
            text="<html><body><h1>503 Service Unavailable</h1></body></html>",
            status=503,
            content_type="text/html",
        )
    return web.Response(text=CHART_HTML, content_type="text/html")


async def handle_server_error(request: web.Request) -> web.Response:
    """Handle GET /server-error - always 500."""
    return web.Response(
        text="<html><body><h1>500 Internal Server Error</h1></body></html>",
        status=500,
        content_type="text/html",
    )


async def handle_not_found(request: web.Request) -> web.Response:
    """Handle GET /missing - a 404 page that still has a body."""
    return web.Response(
        text="<html><body><h1>404</h1><p>Not found</p></body></html>",
        status=404,
        content_type="text/html",
    )


async def handle_slow(request: web.Request) -> web.Response:
    """Handle GET /slow - respond after ``?delay=`` seconds."""
    await asyncio.sleep(float(request.query.get("delay", "2")))
    return web.Response(text=CHART_HTML, content_type="text/html")


async def handle_redirect(request: web.Request) -> web.Response:
    """Handle GET /old-chart - redirect to /chart."""
    raise web.HTTPFound("/chart")


async def handle_empty(request: web.Request) -> web.Response:
    """Handle GET /empty - a 200 response with no body."""
    return web.Response(text="", content_type="text/html")


def create_app() -> web.Application:
    """Create the aiohttp application with all routes.

    Returns:
        Configured aiohttp Application.
    """
    app = web.Application()
    app["flaky_hits"] = 0
    app.router.add_get("/chart", handle_chart)
    app.router.add_get("/questions", handle_listing)
    app.router.add_get("/flaky", handle_flaky)
    app.router.add_get("/server-error", handle_server_error)
    app.router.add_get("/missing", handle_not_found)
    app.router.add_get("/slow", handle_slow)
    app.router.add_get("/old-chart", handle_redirect)
    app.router.add_get("/empty", handle_empty)
    return app
