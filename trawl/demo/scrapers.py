"""Demo scrapers for the trawl demo site.

Each scraper comes in two halves: a pure ``parse_*`` function that turns a
Document into validated models, and a function that drives a ScrapeSession
to obtain the Document(s). The parse halves can be tested against any HTML
without a network or a browser.

The demo site is served by ``python -m trawl.demo.run_demo``.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

from trawl.common.document import Document, ExtractedRow
from trawl.common.exceptions import (
    ScraperAssumptionException,
    TableNotFound,
    TransientException,
)
from trawl.common.paginator import click_next
from trawl.common.retry import transient_on
from trawl.common.selector import Selector, attr, match_first, text
from trawl.demo.models import (
    MovieData,
    PlayerData,
    QuestionData,
    SearchResult,
)
from trawl.driver.session import ScrapeSession

logger = logging.getLogger(__name__)

CHART_TABLE = Selector("table.chart")
CHART_LEADING_ROWS = 2

QUESTION_SUMMARY = Selector("#questions").descendant("div.question-summary")
QUESTION_LINK = Selector("h3").child("a.question-hyperlink")
VOTE_COUNT = Selector(".votes").descendant(".count")
ANSWER_COUNT = Selector(".answers").descendant(".count")
EXCERPT = Selector(".excerpt")
TAG = Selector(".tags").descendant("a.post-tag")

LEADERBOARD_TABLE = Selector("#board").descendant("table.stats")
NEXT_BUTTON = Selector("button.next")

SEARCH_BOX = Selector("input#q")
SEARCH_BUTTON = Selector("button#go")
RESULT_LINK = Selector("ul#results").descendant("li.result > a")

_TITLE_YEAR = re.compile(r"^(?P<title>.*?)\s*\((?P<year>\d{4})\)$")


class PageNotReady(TransientException):
    """The page has not finished rendering the content being read."""


# =============================================================================
# Top-rated chart: a static table
# =============================================================================


def parse_top_movies(doc: Document) -> list[MovieData]:
    """Parse the chart table into movies.

    The chart has two leading caption rows before its header row, and both
    the rank and title columns are headed "Rank & Title".
    """
    movies = []
    for row in doc.extract_table(CHART_TABLE, skip_rows=CHART_LEADING_ROWS):
        match = _TITLE_YEAR.match(row["Rank & Title_2"])
        if match is None:
            raise ScraperAssumptionException(
                "Title cell does not end with a (year)",
                doc.url,
                {"cell": row["Rank & Title_2"]},
            )
        movies.append(
            MovieData(
                rank=int(row["Rank & Title"].rstrip(".")),
                title=match["title"],
                year=int(match["year"]),
                rating=float(row["Rating"]),
            )
        )
    return movies


def scrape_top_movies(
    session: ScrapeSession, base_url: str
) -> list[MovieData]:
    doc = session.fetch_with_retry(urljoin(base_url, "/top"))
    return parse_top_movies(doc)


# =============================================================================
# Question listing: nodes within nodes
# =============================================================================


def parse_questions(doc: Document) -> list[QuestionData]:
    """Parse each question summary block into a QuestionData."""
    questions = []
    for summary in doc.query(QUESTION_SUMMARY):
        link = match_first(summary, QUESTION_LINK)
        href = attr(link, "href") or ""
        question_id = int(
            (attr(summary, "id") or "").removeprefix("question-summary-")
        )
        questions.append(
            QuestionData(
                question_id=question_id,
                title=text(link),
                url=urljoin(doc.url, href),
                votes=int(text(match_first(summary, VOTE_COUNT))),
                answers=int(text(match_first(summary, ANSWER_COUNT))),
                excerpt=text(match_first(summary, EXCERPT)),
                tags=[tag.text_content() for tag in summary.query(TAG)],
            )
        )
    return questions


def scrape_questions(
    session: ScrapeSession, base_url: str
) -> list[QuestionData]:
    doc = session.fetch_with_retry(urljoin(base_url, "/questions"))
    return parse_questions(doc)


# =============================================================================
# Leaderboard: JavaScript paging
# =============================================================================


class LeaderboardExtractor:
    """Extract function for the leaderboard, one call per page.

    The click on "Next" returns before the page re-renders, so a read can
    still see the previous page. Each page's table carries its page number;
    seeing the same number twice raises PageNotReady so the read is retried.
    """

    def __init__(self) -> None:
        self.last_page: str | None = None

    def __call__(self, doc: Document) -> list[ExtractedRow]:
        table = match_first(doc, LEADERBOARD_TABLE)
        if table is None:
            raise PageNotReady("leaderboard table has not rendered")
        page = attr(table, "data-page")
        if page == self.last_page:
            raise PageNotReady(f"still showing page {page}")
        rows = doc.extract_table(LEADERBOARD_TABLE)
        self.last_page = page
        return rows


def parse_players(rows: list[ExtractedRow]) -> list[PlayerData]:
    return [
        PlayerData(
            rank=int(row["Rank"]),
            name=row["Player"],
            team=row["Team"],
            points=float(row["PTS"]),
        )
        for row in rows
    ]


def scrape_leaderboard(
    session: ScrapeSession,
    base_url: str,
    max_pages: int | None = None,
) -> list[PlayerData]:
    """Page through the leaderboard until "Next" is disabled."""
    session.navigate(urljoin(base_url, "/leaderboard"))
    rows = session.paginate(
        LeaderboardExtractor(),
        click_next(NEXT_BUTTON),
        max_iterations=max_pages,
        is_transient=transient_on(PageNotReady, TableNotFound),
    )
    logger.info(f"Collected {len(rows)} leaderboard rows")
    return parse_players(rows)


# =============================================================================
# Search: type, click, wait for results
# =============================================================================


def parse_search_results(doc: Document) -> list[SearchResult]:
    """Parse rendered search results; PageNotReady if none have rendered."""
    if match_first(doc, "ul#results") is None:
        raise PageNotReady("search results have not rendered")
    return [
        SearchResult(
            title=link.text_content(),
            url=urljoin(doc.url, attr(link, "href") or ""),
        )
        for link in doc.query(RESULT_LINK)
    ]


def search(
    session: ScrapeSession, base_url: str, query: str
) -> list[SearchResult]:
    """Run a search through the search box and read the results."""
    session.navigate(urljoin(base_url, "/search"))
    session.type(SEARCH_BOX, query)
    session.click(SEARCH_BUTTON)
    return session.read(parse_search_results)
