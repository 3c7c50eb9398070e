# search.py — whole-word caption search with paging and grouping by video
from __future__ import annotations
import logging
import re
import sqlite3
from dataclasses import dataclass, field

from .config import PAGE_SIZE
from .db_ops import ConnectionPool

log = logging.getLogger(__name__)

# sqlite binds integers as signed 64-bit
MAX_OFFSET = 2**63 - 1


class NoCategoryError(ValueError):
    """Neither the main nor the toddler channel was selected."""


@dataclass(frozen=True)
class SearchQuery:
    keyword: str
    page: int = 1
    include_main: bool = True
    include_toddler: bool = True

    @property
    def offset(self) -> int:
        return (self.page - 1) * PAGE_SIZE


@dataclass
class SearchResult:
    results: list[dict] = field(default_factory=list)
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // PAGE_SIZE)

    def to_json(self) -> dict:
        return {"results": self.results, "totalCount": self.total_count}


def build_pattern(keyword: str) -> str:
    """
    Whole-word pattern for `keyword`: "run" hits "I run daily" but not
    "running". Metacharacters are escaped, so "a.b" only matches "a.b".
    """
    return rf"(?<!\w){re.escape(keyword)}(?!\w)"


def _category_condition(q: SearchQuery) -> str:
    if q.include_main and not q.include_toddler:
        return "AND v.toddler = 0"
    if q.include_toddler and not q.include_main:
        return "AND v.toddler = 1"
    return ""


def _where(q: SearchQuery) -> tuple[str, list]:
    # shared by the count and the page query so totals always agree
    sql = f"WHERE t.text REGEXP ? {_category_condition(q)}"
    return sql, [build_pattern(q.keyword)]


def count_matches(conn: sqlite3.Connection, q: SearchQuery) -> int:
    where, params = _where(q)
    row = conn.execute(
        f"""
        SELECT COUNT(*)
        FROM youtube_transcripts t
        JOIN youtube_videos v ON t.video_id = v.video_id
        {where}
        """,
        params,
    ).fetchone()
    return int(row[0] or 0)


def fetch_page(conn: sqlite3.Connection, q: SearchQuery) -> list[sqlite3.Row]:
    where, params = _where(q)
    return conn.execute(
        f"""
        SELECT t.video_id, t.start, t.dur, t.text, v.title, v.published_at
        FROM youtube_transcripts t
        JOIN youtube_videos v ON t.video_id = v.video_id
        {where}
        ORDER BY v.published_at DESC, t.start, t.video_id
        LIMIT ? OFFSET ?
        """,
        [*params, PAGE_SIZE, q.offset],
    ).fetchall()


def group_by_video(rows) -> list[dict]:
    """
    Fold rows into [{video_id, title, published_at, items:[{start,dur,text}]}].
    Groups appear in order of first row; items keep row order.
    """
    grouped: dict[str, dict] = {}
    for r in rows:
        vid = r["video_id"]
        g = grouped.get(vid)
        if g is None:
            g = {
                "video_id": vid,
                "title": r["title"],
                "published_at": r["published_at"],
                "items": [],
            }
            grouped[vid] = g
        g["items"].append({"start": r["start"], "dur": r["dur"], "text": r["text"]})
    return list(grouped.values())


def search_transcripts(pool: ConnectionPool, q: SearchQuery) -> SearchResult:
    if not q.include_main and not q.include_toddler:
        raise NoCategoryError("select at least one channel")
    if q.page < 1:
        raise ValueError(f"page must be >= 1, got {q.page}")

    with pool.connection() as conn:
        total = count_matches(conn, q)
        # a page that far out cannot hold rows
        rows = fetch_page(conn, q) if q.offset <= MAX_OFFSET else []

    result = SearchResult(results=group_by_video(rows), total_count=total)
    log.info(
        "search keyword=%r page=%d main=%s toddler=%s -> %d rows, %d videos",
        q.keyword, q.page, q.include_main, q.include_toddler,
        total, len(result.results),
    )
    return result
