"""trawl demo website.

A FastAPI application with one page per scraping pattern:

- ``/top``: a server-rendered chart table with leading non-data rows and a
  duplicated header name.
- ``/questions``: a server-rendered listing of nested question summaries.
- ``/leaderboard``: a table rendered by JavaScript, paged with a "Next"
  button that is disabled on the last page.
- ``/search``: a search box whose results render after a delay.
"""

from __future__ import annotations

import html
import json

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse

from trawl.demo.data import (
    LEADERBOARD_PAGE_SIZE,
    MOVIES,
    PLAYERS,
    QUESTIONS,
)

app = FastAPI(title="trawl demo", version="1.0.0")

# ── HTML helpers ────────────────────────────────────────────────────

_CSS = """\
body { font-family: Helvetica, sans-serif; max-width: 960px; margin: 2em auto;
       padding: 0 1em; color: #222; }
nav a { margin-right: 1.5em; }
table { border-collapse: collapse; width: 100%; margin: 1em 0; }
th, td { border: 1px solid #ccc; padding: .4em .8em; text-align: left; }
.question-summary { border-bottom: 1px solid #ddd; padding: .8em 0; }
.question-summary .stats { float: left; width: 6em; color: #666; }
.post-tag { background: #e1ecf4; padding: .1em .4em; margin-right: .3em; }
.loading { color: #999; font-style: italic; }
"""


def _page(title: str, body: str) -> HTMLResponse:
    page = f"""\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{html.escape(title)} - trawl demo</title>
  <style>{_CSS}</style>
</head>
<body>
  <nav>
    <a href="/">Home</a>
    <a href="/top">Top Rated</a>
    <a href="/questions">Questions</a>
    <a href="/leaderboard">Leaderboard</a>
    <a href="/search">Search</a>
  </nav>
  {body}
</body>
</html>"""
    return HTMLResponse(content=page)


# ── Routes: Home ────────────────────────────────────────────────────


@app.get("/", response_class=HTMLResponse)
async def homepage():
    body = """\
<h1>trawl demo</h1>
<ul>
  <li><a href="/top">Top rated movies</a> (static table)</li>
  <li><a href="/questions">Newest questions</a> (nested nodes)</li>
  <li><a href="/leaderboard">Scoring leaders</a> (JavaScript paging)</li>
  <li><a href="/search">Search questions</a> (type, click, wait)</li>
</ul>
"""
    return _page("Home", body)


# ── Routes: Static pages ────────────────────────────────────────────


@app.get("/top", response_class=HTMLResponse)
async def top_rated():
    rows = "\n".join(
        f"""\
    <tr>
      <td class="rank">{movie.rank}.</td>
      <td class="title"><a href="/title/{movie.rank}">{html.escape(movie.title)}</a>
        <span class="year">({movie.year})</span></td>
      <td class="rating"><strong>{movie.rating:.1f}</strong></td>
      <td class="your-rating"></td>
    </tr>"""
        for movie in MOVIES
    )
    body = f"""\
<h1>Top Rated Movies</h1>
<table class="chart">
  <tr><td colspan="4">Top {len(MOVIES)} as rated by regular voters</td></tr>
  <tr><td colspan="4">Sorted by ranking</td></tr>
  <tr>
    <th>Rank &amp; Title</th><th>Rank &amp; Title</th>
    <th>Rating</th><th>Your Rating</th>
  </tr>
{rows}
</table>
"""
    return _page("Top Rated Movies", body)


@app.get("/questions", response_class=HTMLResponse)
async def question_list():
    summaries = []
    for q in QUESTIONS:
        tags = " ".join(
            f'<a class="post-tag" href="/questions/tagged/{t}">{t}</a>'
            for t in q.tags
        )
        answered = "true" if q.answers else "false"
        summaries.append(f"""\
  <div class="question-summary" id="question-summary-{q.question_id}"
       data-answered="{answered}">
    <div class="stats">
      <div class="votes"><span class="count">{q.votes}</span> votes</div>
      <div class="answers"><span class="count">{q.answers}</span> answers</div>
    </div>
    <div class="summary">
      <h3><a class="question-hyperlink" href="/questions/{q.question_id}">{html.escape(q.title)}</a></h3>
      <div class="excerpt">
        {html.escape(q.excerpt)}
      </div>
      <div class="tags">{tags}</div>
    </div>
  </div>""")
    body = (
        '<h1>Newest Questions</h1>\n<div id="questions">\n'
        + "\n".join(summaries)
        + "\n</div>"
    )
    return _page("Newest Questions", body)


@app.get("/questions/{question_id}", response_class=HTMLResponse)
async def question_detail(question_id: int):
    for q in QUESTIONS:
        if q.question_id == question_id:
            body = (
                f"<h1>{html.escape(q.title)}</h1>\n"
                f'<div class="post-text">{html.escape(q.excerpt)}</div>'
            )
            return _page(q.title, body)
    raise HTTPException(status_code=404, detail="Question not found")


# ── Routes: JavaScript pages ────────────────────────────────────────


@app.get("/leaderboard", response_class=HTMLResponse)
async def leaderboard(delay: int = Query(300, ge=0, le=10_000)):
    players = json.dumps(
        [
            {"rank": p.rank, "name": p.name, "team": p.team, "pts": p.points}
            for p in PLAYERS
        ]
    )
    body = f"""\
<h1>Scoring Leaders</h1>
<div id="board"><p class="loading">Loading...</p></div>
<button class="next" type="button">Next</button>
<script>
const PLAYERS = {players};
const PAGE_SIZE = {LEADERBOARD_PAGE_SIZE};
const DELAY = {delay};
const PAGES = Math.ceil(PLAYERS.length / PAGE_SIZE);
const board = document.getElementById("board");
const next = document.querySelector("button.next");
let page = 1;

function render(n) {{
  const rows = PLAYERS.slice((n - 1) * PAGE_SIZE, n * PAGE_SIZE).map(p =>
    `<tr><td>${{p.rank}}</td><td>${{p.name}}</td>` +
    `<td>${{p.team}}</td><td>${{p.pts.toFixed(1)}}</td></tr>`).join("");
  board.innerHTML =
    `<table class="stats" data-page="${{n}}">` +
    `<thead><tr><th>Rank</th><th>Player</th><th>Team</th><th>PTS</th></tr></thead>` +
    `<tbody>${{rows}}</tbody></table>`;
  next.disabled = n >= PAGES;
}}

function show(n) {{
  board.innerHTML = '<p class="loading">Loading...</p>';
  setTimeout(() => render(n), DELAY);
}}

next.addEventListener("click", () => {{
  if (next.disabled) return;
  page += 1;
  show(page);
}});
show(page);
</script>
"""
    return _page("Scoring Leaders", body)


@app.get("/search", response_class=HTMLResponse)
async def search_page(delay: int = Query(500, ge=0, le=10_000)):
    questions = json.dumps(
        [
            {"title": q.title, "url": f"/questions/{q.question_id}"}
            for q in QUESTIONS
        ]
    )
    body = f"""\
<h1>Search Questions</h1>
<input id="q" type="search" name="q" placeholder="Search...">
<button id="go" type="button">Search</button>
<div id="results-area"></div>
<script>
const QUESTIONS = {questions};
const DELAY = {delay};
const area = document.getElementById("results-area");

document.getElementById("go").addEventListener("click", () => {{
  const term = document.getElementById("q").value.toLowerCase();
  area.innerHTML = '<p class="loading">Searching...</p>';
  setTimeout(() => {{
    const hits = QUESTIONS.filter(q => q.title.toLowerCase().includes(term));
    area.innerHTML = '<ul id="results">' + hits.map(q =>
      `<li class="result"><a href="${{q.url}}">${{q.title}}</a></li>`
    ).join("") + "</ul>";
  }}, DELAY);
}});
</script>
"""
    return _page("Search Questions", body)
