# config.py — paths, tunables and env overrides for Live Academy Finder
import os
from pathlib import Path

# ---------- Paths ----------
BASE_DIR = Path(__file__).resolve().parent.parent
DB_PATH = Path(os.environ.get("LAFINDER_DB_PATH", BASE_DIR / "data" / "lafinder.db"))

# ---------- Tunables ----------
PAGE_SIZE = 10          # segment rows per page (not videos)
MIN_KEYWORD_LEN = 3     # after trimming
POOL_SIZE = int(os.environ.get("LAFINDER_POOL_SIZE", 5))
POOL_TIMEOUT = float(os.environ.get("LAFINDER_POOL_TIMEOUT", 10))
LOG_LEVEL = os.environ.get("LAFINDER_LOG_LEVEL", "INFO")

# ---------- CLI client ----------
DEFAULT_BASE_URL = os.environ.get("LAFINDER_URL", "http://127.0.0.1:5000")


def defaults() -> dict:
    """Flask config mapping read by create_app()."""
    return {
        "DB_PATH": DB_PATH,
        "POOL_SIZE": POOL_SIZE,
        "POOL_TIMEOUT": POOL_TIMEOUT,
        "LOG_LEVEL": LOG_LEVEL,
    }
