# params.py — URL state, input validation and display helpers for the search page
from __future__ import annotations
import html
import re
from dataclasses import dataclass, replace
from datetime import datetime

from .config import MIN_KEYWORD_LEN
from .search import SearchQuery

MSG_KEYWORD_TOO_SHORT = f"Please enter at least {MIN_KEYWORD_LEN} characters."
MSG_NO_CATEGORY = "Select the Main channel, the Toddler channel, or both."

# explicit encoding for the two channel flags; absent/empty means default
_FLAG_VALUES = {"1": True, "0": False}


class ParamError(ValueError):
    pass


def _last(args, name: str) -> str | None:
    # hidden "0" input followed by a checked "1" checkbox -> last one wins
    vals = args.getlist(name) if hasattr(args, "getlist") else [args.get(name)]
    vals = [v for v in vals if v is not None]
    return vals[-1] if vals else None


def _flag(args, name: str, default: bool = True) -> bool:
    raw = _last(args, name)
    if raw is None or raw == "":
        return default
    if raw not in _FLAG_VALUES:
        raise ParamError(f"Invalid value for '{name}': {raw!r} (expected 1 or 0).")
    return _FLAG_VALUES[raw]


def _page(args) -> int:
    raw = _last(args, "page")
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def validate(keyword: str, include_main: bool, include_toddler: bool) -> str | None:
    """Return a user-facing message if a search must not be issued."""
    if len((keyword or "").strip()) < MIN_KEYWORD_LEN:
        return MSG_KEYWORD_TOO_SHORT
    if not include_main and not include_toddler:
        return MSG_NO_CATEGORY
    return None


@dataclass(frozen=True)
class SearchParams:
    keyword: str = ""
    page: int = 1
    main: bool = True
    toddler: bool = True

    @classmethod
    def from_args(cls, args) -> "SearchParams":
        return cls(
            keyword=(_last(args, "keyword") or "").strip(),
            page=_page(args),
            main=_flag(args, "main"),
            toddler=_flag(args, "toddler"),
        )

    def to_args(self) -> dict:
        return {
            "keyword": self.keyword,
            "page": self.page,
            "main": "1" if self.main else "0",
            "toddler": "1" if self.toddler else "0",
        }

    def with_page(self, page: int) -> "SearchParams":
        return replace(self, page=page)

    def error(self) -> str | None:
        return validate(self.keyword, self.main, self.toddler)

    def to_query(self) -> SearchQuery:
        return SearchQuery(
            keyword=self.keyword,
            page=self.page,
            include_main=self.main,
            include_toddler=self.toddler,
        )


# ---------- pagination ----------
ELLIPSIS = None


def page_window(page: int, total_pages: int, radius: int = 2) -> list[int | None]:
    """
    Page numbers to show: first, last and page±radius, with ELLIPSIS (None)
    standing in for each gap of more than one page.
      page_window(6, 12) -> [1, None, 4, 5, 6, 7, 8, None, 12]
    """
    shown = [n for n in range(1, total_pages + 1)
             if n == 1 or n == total_pages or abs(n - page) <= radius]
    out: list[int | None] = []
    for i, n in enumerate(shown):
        if i > 0 and n - shown[i - 1] > 1:
            out.append(ELLIPSIS)
        out.append(n)
    return out


@dataclass(frozen=True)
class Pagination:
    page: int
    total_pages: int

    @property
    def visible(self) -> bool:
        return self.total_pages > 1

    @property
    def prev_page(self) -> int | None:
        return self.page - 1 if self.page > 1 else None

    @property
    def next_page(self) -> int | None:
        return self.page + 1 if self.page < self.total_pages else None

    @property
    def tokens(self) -> list[int | None]:
        return page_window(self.page, self.total_pages)


# ---------- display ----------
def highlight_spans(text: str, keyword: str) -> list[tuple[str, bool]]:
    """
    Split caption text into (fragment, is_match) pairs. Every case-insensitive
    occurrence of the keyword is a match, metacharacters taken literally.
    """
    if not text:
        return []
    kw = (keyword or "").strip()
    if len(kw) < MIN_KEYWORD_LEN:
        return [(text, False)]
    spans: list[tuple[str, bool]] = []
    pos = 0
    for m in re.finditer(re.escape(kw), text, re.IGNORECASE):
        if m.start() > pos:
            spans.append((text[pos:m.start()], False))
        spans.append((m.group(0), True))
        pos = m.end()
    if pos < len(text):
        spans.append((text[pos:], False))
    return spans


def format_time(seconds: float) -> str:
    """73 -> '1:13', 3725 -> '1:02:05'"""
    s = int(seconds)
    h, m, sec = s // 3600, (s % 3600) // 60, s % 60
    if h > 0:
        return f"{h}:{m:02d}:{sec:02d}"
    return f"{m}:{sec:02d}"


def format_date(value: str) -> str:
    """RFC3339 timestamp -> YYMMDD; unparseable values pass through."""
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return dt.strftime("%y%m%d")


def decode_title(title: str | None) -> str:
    return html.unescape(title or "")


def embed_url(video_id: str, start: float) -> str:
    return f"https://www.youtube.com/embed/{video_id}?start={int(start)}"


def watch_url(video_id: str, start: float) -> str:
    return f"https://www.youtube.com/watch?v={video_id}&t={int(start)}s"
