"""Tests for the trawl demo.

Verifies that:
1. The demo website serves all expected pages.
2. The parse functions turn those pages into the fixture data.
3. The static scrapers work end to end over HTTP.
4. The browser scrapers work end to end when a browser is installed.
"""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from trawl.common.document import Document
from trawl.common.exceptions import SessionError
from trawl.common.retry import RetryPolicy
from trawl.demo import run_demo
from trawl.demo.data import (
    MOVIES,
    PLAYERS,
    QUESTIONS,
    leaderboard_page_count,
)
from trawl.demo.scrapers import (
    LeaderboardExtractor,
    PageNotReady,
    parse_players,
    parse_questions,
    parse_search_results,
    parse_top_movies,
    scrape_leaderboard,
    scrape_questions,
    scrape_top_movies,
    search,
)
from trawl.driver.playwright_fetcher import BrowserConfig, PlaywrightFetcher
from trawl.driver.session import ScrapeSession


def get_document(url: str) -> Document:
    response = httpx.get(url)
    assert response.status_code == 200
    return Document.parse(response.text, url)


# ── Website smoke tests ─────────────────────────────────────────────


class TestDemoWebsite:
    """Verify the demo website serves expected content."""

    def test_homepage(self, demo_server_url: str):
        r = httpx.get(f"{demo_server_url}/")
        assert r.status_code == 200
        assert "trawl demo" in r.text

    def test_top_rated(self, demo_server_url: str):
        r = httpx.get(f"{demo_server_url}/top")
        assert r.status_code == 200
        assert 'class="chart"' in r.text
        for movie in MOVIES:
            assert movie.title.replace("'", "&#x27;") in r.text

    def test_question_detail(self, demo_server_url: str):
        r = httpx.get(f"{demo_server_url}/questions/101")
        assert r.status_code == 200
        assert "post-text" in r.text

    def test_question_not_found(self, demo_server_url: str):
        r = httpx.get(f"{demo_server_url}/questions/999")
        assert r.status_code == 404

    def test_leaderboard_renders_client_side(self, demo_server_url: str):
        """The served leaderboard has no table until its script runs."""
        doc = get_document(f"{demo_server_url}/leaderboard")
        assert doc.query_first("#board table") is None
        assert doc.query_first("#board p.loading") is not None

    def test_leaderboard_page_count(self):
        assert leaderboard_page_count() == 3

    def test_run_demo_serves_on_requested_port(self, capsys):
        argv = ["run_demo", "--host", "0.0.0.0", "--port", "9090"]
        with patch("sys.argv", argv), patch("uvicorn.run") as run:
            run_demo.main()
        _, kwargs = run.call_args
        assert kwargs == {
            "host": "0.0.0.0",
            "port": 9090,
            "log_level": "info",
        }
        assert "http://0.0.0.0:9090/leaderboard" in capsys.readouterr().out


# ── Parse functions ─────────────────────────────────────────────────


class TestParsers:
    """Run the pure parse halves against served or hand-written pages."""

    def test_parse_top_movies(self, demo_server_url: str):
        movies = parse_top_movies(get_document(f"{demo_server_url}/top"))
        assert [(m.rank, m.title, m.year, m.rating) for m in movies] == [
            (m.rank, m.title, m.year, m.rating) for m in MOVIES
        ]

    def test_parse_questions(self, demo_server_url: str):
        url = f"{demo_server_url}/questions"
        questions = parse_questions(get_document(url))
        assert [q.question_id for q in questions] == [
            q.question_id for q in QUESTIONS
        ]
        first = questions[0]
        assert first.title == QUESTIONS[0].title
        assert first.url == f"{demo_server_url}/questions/101"
        assert first.votes == QUESTIONS[0].votes
        assert first.answers == QUESTIONS[0].answers
        assert first.excerpt == QUESTIONS[0].excerpt
        assert first.tags == QUESTIONS[0].tags

    def test_leaderboard_extractor_waits_for_new_page(self):
        """The same data-page twice means the click has not rendered yet."""
        page_one = Document.parse(
            '<div id="board"><table class="stats" data-page="1">'
            "<tr><th>Rank</th><th>Player</th><th>Team</th><th>PTS</th></tr>"
            "<tr><td>1</td><td>Ada</td><td>Analytical</td><td>31.4</td></tr>"
            "</table></div>"
        )
        loading = Document.parse(
            '<div id="board"><p class="loading">Loading...</p></div>'
        )
        extract = LeaderboardExtractor()
        rows = extract(page_one)
        assert parse_players(rows)[0].name == "Ada"
        with pytest.raises(PageNotReady):
            extract(page_one)
        with pytest.raises(PageNotReady):
            extract(loading)

    def test_parse_search_results(self):
        doc = Document.parse(
            '<ul id="results"><li class="result">'
            '<a href="/questions/102">Why?</a></li></ul>',
            "http://demo.test/search",
        )
        results = parse_search_results(doc)
        assert [(r.title, r.url) for r in results] == [
            ("Why?", "http://demo.test/questions/102")
        ]

    def test_parse_search_results_not_rendered(self):
        with pytest.raises(PageNotReady):
            parse_search_results(Document.parse("<div id='area'></div>"))

    def test_empty_search_results(self):
        doc = Document.parse('<ul id="results"></ul>')
        assert parse_search_results(doc) == []


# ── Static scrapers ─────────────────────────────────────────────────


class TestStaticScrapers:
    """Run the static scrapers over HTTP."""

    def test_scrape_top_movies(self, demo_server_url: str):
        with ScrapeSession.static() as session:
            movies = scrape_top_movies(session, demo_server_url)
        assert len(movies) == len(MOVIES)
        assert movies[0].title == "The Shawshank Redemption"
        assert movies[0].year == 1994

    def test_scrape_questions(self, demo_server_url: str):
        with ScrapeSession.static() as session:
            questions = scrape_questions(session, demo_server_url)
        assert len(questions) == len(QUESTIONS)


# ── Browser scrapers ────────────────────────────────────────────────


@pytest.fixture
def browser_session():
    """A dynamic session, skipping the test if no browser can launch."""
    policy = RetryPolicy(timeout=10.0, poll_interval=0.1)
    session = ScrapeSession(PlaywrightFetcher(BrowserConfig()), policy)
    try:
        session.open()
    except SessionError as e:
        pytest.skip(f"Browser not available: {e}")
    yield session
    session.close()


class TestBrowserScrapers:
    """Drive a real browser against the demo site."""

    def test_scrape_leaderboard(self, browser_session, demo_server_url):
        players = scrape_leaderboard(browser_session, demo_server_url)
        assert [p.name for p in players] == [p.name for p in PLAYERS]

    def test_scrape_leaderboard_with_cap(
        self, browser_session, demo_server_url
    ):
        players = scrape_leaderboard(
            browser_session, demo_server_url, max_pages=2
        )
        assert len(players) == 10

    def test_search(self, browser_session, demo_server_url):
        results = search(browser_session, demo_server_url, "table")
        assert [r.title for r in results] == [
            "Why does my scraper see an empty table?",
            "Reading an HTML table with duplicate column names",
        ]
        assert results[0].url == f"{demo_server_url}/questions/102"
