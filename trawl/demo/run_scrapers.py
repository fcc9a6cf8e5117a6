"""Run the demo scrapers against the demo website.

Requires the demo website to be running (``python -m trawl.demo.run_demo``).
Results are written to stdout as JSON lines.
"""

from __future__ import annotations

import argparse
import logging
import sys

from trawl.common.export import write_jsonl
from trawl.common.retry import RetryPolicy
from trawl.demo.scrapers import (
    scrape_leaderboard,
    scrape_questions,
    scrape_top_movies,
    search,
)
from trawl.driver.playwright_fetcher import BrowserConfig
from trawl.driver.session import ScrapeSession


def run(args: argparse.Namespace) -> None:
    retry_policy = RetryPolicy(
        timeout=args.retry_timeout, poll_interval=args.poll_interval
    )

    if args.example in ("top", "questions"):
        with ScrapeSession.static(
            retry_policy, timeout=args.timeout
        ) as session:
            if args.example == "top":
                results = scrape_top_movies(session, args.base_url)
            else:
                results = scrape_questions(session, args.base_url)
    else:
        config = BrowserConfig(
            browser_type=args.browser_type, headless=args.headless
        )
        with ScrapeSession.dynamic(config, retry_policy) as session:
            if args.example == "leaderboard":
                results = scrape_leaderboard(
                    session, args.base_url, max_pages=args.max_pages
                )
            else:
                results = search(session, args.base_url, args.query)

    write_jsonl((r.model_dump(mode="json") for r in results), sys.stdout)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run a trawl demo scraper against the demo website.",
    )
    parser.add_argument(
        "example",
        choices=["top", "questions", "leaderboard", "search"],
        help="Which demo scraper to run",
    )
    parser.add_argument(
        "--base-url",
        default="http://127.0.0.1:8080",
        help="Demo website URL (default: http://127.0.0.1:8080)",
    )
    parser.add_argument(
        "--query",
        default="table",
        help="Search term for the search example (default: table)",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Maximum leaderboard pages to read (default: until the last)",
    )
    parser.add_argument(
        "--browser-type",
        choices=["chromium", "firefox", "webkit"],
        default="chromium",
        help="Browser engine to use (default: chromium)",
    )
    parser.add_argument(
        "--no-headless",
        dest="headless",
        action="store_false",
        help="Show the browser window",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="HTTP timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--retry-timeout",
        type=float,
        default=10.0,
        help="Seconds to keep retrying transient failures (default: 10)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=0.5,
        help="Seconds between retries (default: 0.5)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    run(args)


if __name__ == "__main__":
    main()
