# db_ops.py — connections, schema and the read-only connection pool
from __future__ import annotations
import logging
import queue
import re
import sqlite3
import threading
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path

from . import config

log = logging.getLogger(__name__)

# Schema of the transcript store. Rows are written by the ingestion pipeline;
# this copy exists so local dev databases and tests have the same shape.
SCHEMA = """
PRAGMA foreign_keys=ON;

-- one row per video
CREATE TABLE IF NOT EXISTS youtube_videos (
  video_id     TEXT PRIMARY KEY,          -- YouTube videoId
  title        TEXT NOT NULL,             -- may carry HTML entities (&amp; &#39;)
  published_at TEXT NOT NULL,             -- RFC3339, sorts lexicographically
  toddler      INTEGER NOT NULL DEFAULT 0 CHECK(toddler IN (0,1))
);
CREATE INDEX IF NOT EXISTS idx_videos_published ON youtube_videos(published_at);
CREATE INDEX IF NOT EXISTS idx_videos_toddler ON youtube_videos(toddler);

-- caption segments, seconds
CREATE TABLE IF NOT EXISTS youtube_transcripts (
  video_id TEXT NOT NULL REFERENCES youtube_videos(video_id),
  start    REAL NOT NULL,
  dur      REAL NOT NULL,
  text     TEXT NOT NULL,
  PRIMARY KEY (video_id, start)
);
"""


# ---------- REGEXP ----------
@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def _regexp(pattern, value) -> bool:
    # sqlite calls regexp(Y, X) for "X REGEXP Y"
    if pattern is None or value is None:
        return False
    return _compiled(pattern).search(value) is not None


# ---------- Connections ----------
def get_rw(db_path: Path = config.DB_PATH) -> sqlite3.Connection:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


def get_ro(db_path: Path = config.DB_PATH) -> sqlite3.Connection:
    uri = Path(db_path).resolve().as_uri() + "?mode=ro"
    # pooled connections move between request threads, one holder at a time
    conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.create_function("REGEXP", 2, _regexp, deterministic=True)
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA)
    conn.commit()


# ---------- Pool ----------
class PoolError(RuntimeError):
    pass


class PoolTimeout(PoolError):
    pass


class PoolClosed(PoolError):
    pass


class ConnectionPool:
    """
    Fixed-size pool of read-only connections to one database file.

    Connections are opened lazily, up to `size`. A caller that finds every
    connection checked out waits up to `timeout` seconds. The pool belongs to
    whoever created it (the Flask app in production, a fixture in tests) and
    is handed to the search service explicitly.
    """

    def __init__(self, db_path: Path, size: int = config.POOL_SIZE,
                 timeout: float = config.POOL_TIMEOUT):
        if size < 1:
            raise ValueError("pool size must be >= 1")
        self.db_path = Path(db_path)
        self.size = size
        self.timeout = timeout
        self._idle: queue.LifoQueue = queue.LifoQueue(maxsize=size)
        self._opened = 0
        self._lock = threading.Lock()
        self._closed = False

    @property
    def opened(self) -> int:
        return self._opened

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self) -> sqlite3.Connection:
        if self._closed:
            raise PoolClosed(f"pool for {self.db_path} is closed")
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            pass

        with self._lock:
            if self._opened < self.size:
                conn = get_ro(self.db_path)
                self._opened += 1
                log.debug("opened connection %d/%d to %s", self._opened, self.size, self.db_path)
                return conn

        try:
            return self._idle.get(timeout=self.timeout)
        except queue.Empty:
            if self._closed:
                raise PoolClosed(f"pool for {self.db_path} closed while waiting") from None
            raise PoolTimeout(
                f"no free connection to {self.db_path} after {self.timeout:.1f}s"
            ) from None

    def release(self, conn: sqlite3.Connection) -> None:
        # closed-check and put happen under the lock close() drains with
        with self._lock:
            if not self._closed:
                self._idle.put_nowait(conn)
                return
            self._opened -= 1
        conn.close()

    @contextmanager
    def connection(self):
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def close(self) -> None:
        """Close idle connections; checked-out ones are closed on release."""
        with self._lock:
            self._closed = True
            idle = []
            while True:
                try:
                    idle.append(self._idle.get_nowait())
                except queue.Empty:
                    break
            self._opened -= len(idle)
        for conn in idle:
            conn.close()
