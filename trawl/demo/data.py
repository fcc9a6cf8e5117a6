"""Fixture data for the trawl demo site.

This module is the single source of truth for all demo content. Both the
demo website and the tests' expected values are derived from the
dataclasses defined here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

LEADERBOARD_PAGE_SIZE = 5


@dataclass(frozen=True)
class DemoMovie:
    """A film on the top-rated chart."""

    rank: int
    title: str
    year: int
    rating: float


@dataclass(frozen=True)
class DemoQuestion:
    """A question on the listing page."""

    question_id: int
    title: str
    votes: int
    answers: int
    excerpt: str
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DemoPlayer:
    """A leaderboard entry."""

    rank: int
    name: str
    team: str
    points: float


MOVIES: list[DemoMovie] = [
    DemoMovie(1, "The Shawshank Redemption", 1994, 9.3),
    DemoMovie(2, "The Godfather", 1972, 9.2),
    DemoMovie(3, "The Dark Knight", 2008, 9.0),
    DemoMovie(4, "The Godfather Part II", 1974, 9.0),
    DemoMovie(5, "12 Angry Men", 1957, 9.0),
    DemoMovie(6, "Schindler's List", 1993, 9.0),
    DemoMovie(7, "The Lord of the Rings: The Return of the King", 2003, 9.0),
    DemoMovie(8, "Pulp Fiction", 1994, 8.9),
]

QUESTIONS: list[DemoQuestion] = [
    DemoQuestion(
        101,
        "How do I select nested elements with a CSS selector?",
        42,
        3,
        "I can find the outer div but not the link inside it...",
        ["css", "web-scraping"],
    ),
    DemoQuestion(
        102,
        "Why does my scraper see an empty table?",
        17,
        2,
        "The table is filled in by JavaScript after the page loads...",
        ["javascript", "web-scraping", "playwright"],
    ),
    DemoQuestion(
        103,
        "Reading an HTML table with duplicate column names",
        8,
        0,
        "Two header cells are both called 'Rank & Title'...",
        ["html", "tables"],
    ),
    DemoQuestion(
        104,
        "Retrying a read until the page finishes rendering",
        5,
        1,
        "After clicking 'next' the old rows are still there for a moment...",
        ["retry", "playwright"],
    ),
]

PLAYERS: list[DemoPlayer] = [
    DemoPlayer(1, "Ada Lovelace", "Analytical", 31.4),
    DemoPlayer(2, "Grace Hopper", "Compilers", 29.8),
    DemoPlayer(3, "Alan Turing", "Bombes", 28.7),
    DemoPlayer(4, "Katherine Johnson", "Trajectories", 27.9),
    DemoPlayer(5, "Edsger Dijkstra", "Shortest Paths", 26.5),
    DemoPlayer(6, "Barbara Liskov", "Substitutes", 25.1),
    DemoPlayer(7, "Donald Knuth", "Typesetters", 24.6),
    DemoPlayer(8, "Margaret Hamilton", "Apollo", 24.0),
    DemoPlayer(9, "John McCarthy", "Lambdas", 22.3),
    DemoPlayer(10, "Frances Allen", "Optimizers", 21.9),
    DemoPlayer(11, "Ken Thompson", "Unix", 20.4),
    DemoPlayer(12, "Radia Perlman", "Spanning Trees", 19.7),
]


def leaderboard_page_count() -> int:
    """Number of leaderboard pages at LEADERBOARD_PAGE_SIZE entries each."""
    return -(-len(PLAYERS) // LEADERBOARD_PAGE_SIZE)
