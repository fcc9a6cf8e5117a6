"""Pydantic data models for the demo scrapers."""

from __future__ import annotations

from pydantic import BaseModel, Field


class MovieData(BaseModel):
    """A film from the top-rated chart."""

    rank: int = Field(..., ge=1, description="Chart position")
    title: str = Field(..., description="Film title without the year")
    year: int = Field(..., description="Release year")
    rating: float = Field(..., ge=0, le=10, description="Average rating")


class QuestionData(BaseModel):
    """A question from the listing page."""

    question_id: int = Field(..., description="Question identifier")
    title: str = Field(..., description="Question title")
    url: str = Field(..., description="Absolute question URL")
    votes: int = Field(..., description="Vote count")
    answers: int = Field(..., ge=0, description="Answer count")
    excerpt: str = Field(..., description="Summary text")
    tags: list[str] = Field(default_factory=list, description="Tag names")


class PlayerData(BaseModel):
    """A leaderboard entry."""

    rank: int = Field(..., ge=1, description="Leaderboard position")
    name: str = Field(..., description="Player name")
    team: str = Field(..., description="Team name")
    points: float = Field(..., description="Points per game")


class SearchResult(BaseModel):
    """A search hit rendered by the search page."""

    title: str = Field(..., description="Result title")
    url: str = Field(..., description="Absolute result URL")
