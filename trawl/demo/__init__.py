"""Runnable walkthroughs for trawl.

The demo site (``app``) serves four small pages, each built around one
scraping problem: a chart table with junk rows above its header, a listing
of nested question blocks, a leaderboard paged by JavaScript, and a search
box whose results appear late. ``scrapers`` solves each one with a
ScrapeSession.

The site needs FastAPI and uvicorn, installed by the ``demo`` extra::

    pip install "trawl[demo]"
"""

try:
    import fastapi  # noqa: F401
    import uvicorn  # noqa: F401
except ImportError as e:
    raise ImportError(
        f"trawl.demo needs FastAPI and uvicorn ({e.name} is missing). "
        'Install them with: pip install "trawl[demo]"'
    ) from e
