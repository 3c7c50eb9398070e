"""Shared fixtures: throwaway sqlite transcript stores and app/test clients."""

from contextlib import closing
from pathlib import Path

import pytest

from lafinder.app import POOL_KEY, create_app
from lafinder.db_ops import ConnectionPool, get_rw, init_schema

VIDEOS = [
    ("vidMainNew", "Phrasal verbs &amp; you", "2024-05-03T09:00:00Z", 0),
    ("vidToddler", "Toddler talk", "2024-05-02T09:00:00Z", 1),
    ("vidMainOld", "Old lesson", "2023-01-10T09:00:00Z", 0),
]

SEGMENTS = [
    ("vidMainNew", 12.0, 3.5, "she will come up with it"),
    ("vidMainNew", 40.2, 2.0, "So I came up with an idea"),
    ("vidMainNew", 75.0, 4.0, "Come up with a plan, then COME UP WITH another"),
    ("vidToddler", 5.0, 2.0, "can you come up with a song?"),
    ("vidToddler", 9.0, 2.0, "I run every day"),
    ("vidMainOld", 3.0, 2.0, "we are running out of time"),
    ("vidMainOld", 8.0, 2.0, "run out of milk"),
]

BULK_VIDEOS = [
    ("vidA", "Planning lesson", "2024-02-01T00:00:00Z", 0),
    ("vidB", "Plans again", "2024-01-01T00:00:00Z", 1),
]


def bulk_segments() -> list[tuple]:
    """23 segments matching 'plan' (13 in vidA, 10 in vidB) plus 'planning' noise."""
    rows = [("vidA", i * 10.0, 2.0, f"the plan {i}") for i in range(13)]
    rows += [("vidA", 500.0 + i, 1.0, "planning ahead") for i in range(3)]
    rows += [("vidB", i * 5.0, 2.0, f"plan again {i}") for i in range(10)]
    return rows


def seed(db_path: Path, videos=VIDEOS, segments=SEGMENTS) -> Path:
    with closing(get_rw(db_path)) as con:
        init_schema(con)
        con.executemany(
            "INSERT INTO youtube_videos(video_id, title, published_at, toddler) VALUES (?,?,?,?)",
            videos,
        )
        con.executemany(
            "INSERT INTO youtube_transcripts(video_id, start, dur, text) VALUES (?,?,?,?)",
            segments,
        )
        con.commit()
    return db_path


@pytest.fixture
def db_path(tmp_path) -> Path:
    return seed(tmp_path / "finder.db")


@pytest.fixture
def bulk_db(tmp_path) -> Path:
    return seed(tmp_path / "bulk.db", BULK_VIDEOS, bulk_segments())


@pytest.fixture
def pool(db_path):
    p = ConnectionPool(db_path, size=2, timeout=1)
    yield p
    p.close()


@pytest.fixture
def bulk_pool(bulk_db):
    p = ConnectionPool(bulk_db, size=2, timeout=1)
    yield p
    p.close()


@pytest.fixture
def make_app():
    """Factory: app bound to a given database file; pools closed at teardown."""
    apps = []

    def _make(path: Path):
        app = create_app({
            "DB_PATH": path,
            "POOL_SIZE": 2,
            "POOL_TIMEOUT": 1,
            "TESTING": True,
        })
        apps.append(app)
        return app

    yield _make
    for app in apps:
        app.extensions[POOL_KEY].close()


@pytest.fixture
def client(make_app, db_path):
    return make_app(db_path).test_client()


@pytest.fixture
def bulk_client(make_app, bulk_db):
    return make_app(bulk_db).test_client()
