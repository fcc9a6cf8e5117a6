"""Serve the trawl demo site with uvicorn.

Usage::

    python -m trawl.demo.run_demo [--host 127.0.0.1] [--port 8080]

The scrapers in ``trawl.demo.run_scrapers`` expect the default address.
"""

from __future__ import annotations

import argparse

PAGES = ("/top", "/questions", "/leaderboard", "/search")


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the trawl demo site.")
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="uvicorn log level (default: info)",
    )
    args = parser.parse_args()

    import uvicorn

    from trawl.demo.app import app

    base_url = f"http://{args.host}:{args.port}"
    print(f"Serving the trawl demo at {base_url}")
    for path in PAGES:
        print(f"  {base_url}{path}")
    print("Ctrl+C stops the server.")
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
