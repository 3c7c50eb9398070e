# dbcheck.py — create the local schema or sanity-check a transcript database
import argparse
import sqlite3
from contextlib import closing
from pathlib import Path

from . import config
from .db_ops import ConnectionPool, get_ro, get_rw, init_schema
from .search import SearchQuery, search_transcripts


def print_counts(con):
    one = lambda q: con.execute(q).fetchone()[0]
    print("== Row counts ==")
    print("videos      :", one("SELECT COUNT(*) FROM youtube_videos"))
    print("  main      :", one("SELECT COUNT(*) FROM youtube_videos WHERE toddler = 0"))
    print("  toddler   :", one("SELECT COUNT(*) FROM youtube_videos WHERE toddler = 1"))
    print("segments    :", one("SELECT COUNT(*) FROM youtube_transcripts"))
    orphans = one(
        "SELECT COUNT(*) FROM youtube_transcripts t "
        "LEFT JOIN youtube_videos v ON v.video_id = t.video_id WHERE v.video_id IS NULL"
    )
    if orphans:
        print(f"(!) {orphans} segment(s) point at unknown videos and can never match")


def sample_segments(con, n=5):
    print("\n== Sample rows ==")
    rows = con.execute(
        """
        SELECT t.video_id, t.start, t.dur, t.text, v.published_at
        FROM youtube_transcripts t
        JOIN youtube_videos v ON v.video_id = t.video_id
        ORDER BY v.published_at DESC, t.start
        LIMIT ?
        """,
        (n,),
    ).fetchall()
    for r in rows:
        print(dict(r))


def sanity_search(pool, query):
    print(f"\n== Quick search (keyword={query!r}) ==")
    result = search_transcripts(pool, SearchQuery(keyword=query))
    print(f"{result.total_count} matching segment(s), {result.total_pages} page(s)")
    for g in result.results[:3]:
        first = g["items"][0]
        print(f"{g['video_id']} @{first['start']}s :: {first['text'][:120]}")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Create or inspect the transcript database")
    ap.add_argument("--db", type=Path, default=config.DB_PATH, help=f"Database file (default {config.DB_PATH})")
    ap.add_argument("--init", action="store_true", help="Create the tables if missing, then exit")
    ap.add_argument("--query", default="come up with", help="Keyword for the quick search")
    args = ap.parse_args(argv)

    if args.init:
        with closing(get_rw(args.db)) as con:
            init_schema(con)
        print(f"✓ Created/updated schema at {args.db}")
        return 0

    if not args.db.exists():
        print(f"No database at {args.db} (run with --init to create an empty one)")
        return 1

    try:
        with closing(get_ro(args.db)) as con:
            print_counts(con)
            sample_segments(con)
    except sqlite3.OperationalError as e:
        print(f"Database check failed: {e}")
        return 1

    pool = ConnectionPool(args.db, size=1)
    try:
        sanity_search(pool, args.query)
    finally:
        pool.close()
    print("\nDone.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
