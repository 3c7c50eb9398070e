from flask import Flask, Blueprint, current_app, jsonify, render_template, request
import argparse
import logging

from . import config
from .db_ops import ConnectionPool
from .params import (
    MSG_KEYWORD_TOO_SHORT, MSG_NO_CATEGORY, Pagination, ParamError,
    SearchParams, decode_title, embed_url,
    format_date, format_time, highlight_spans,
)
from .search import NoCategoryError, SearchQuery, SearchResult, search_transcripts

POOL_KEY = "lafinder.pool"

bp = Blueprint("finder", __name__)


def create_app(overrides: dict | None = None, pool: ConnectionPool | None = None) -> Flask:
    """
    Build the app. The connection pool is created here (or passed in) and
    lives on app.extensions for the lifetime of the app.
    """
    app = Flask(__name__)
    app.config.from_mapping(config.defaults())
    if overrides:
        app.config.update(overrides)

    if pool is None:
        pool = ConnectionPool(
            app.config["DB_PATH"],
            size=int(app.config["POOL_SIZE"]),
            timeout=float(app.config["POOL_TIMEOUT"]),
        )
    app.extensions[POOL_KEY] = pool

    app.jinja_env.filters["yymmdd"] = format_date
    app.jinja_env.filters["clock"] = format_time
    app.jinja_env.filters["unescape_title"] = decode_title
    app.jinja_env.globals.update(
        embed_url=embed_url,
        highlight=highlight_spans,
        min_keyword_len=config.MIN_KEYWORD_LEN,
        msg_short=MSG_KEYWORD_TOO_SHORT,
        msg_category=MSG_NO_CATEGORY,
    )

    app.register_blueprint(bp)
    return app


def _pool() -> ConnectionPool:
    return current_app.extensions[POOL_KEY]


# ---------- JSON API ----------
def _bool_field(body: dict, name: str) -> bool:
    val = body.get(name, True)
    if not isinstance(val, bool):
        raise ValueError(f"'{name}' must be a boolean")
    return val


def _parse_body(body) -> SearchQuery:
    if not isinstance(body, dict):
        raise ValueError("expected a JSON object")
    keyword = body.get("keyword", "")
    if not isinstance(keyword, str):
        raise ValueError("'keyword' must be a string")
    page = body.get("page", 1)
    # bool is an int subclass; reject it explicitly
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValueError("'page' must be a positive integer")
    return SearchQuery(
        keyword=keyword,
        page=page,
        include_main=_bool_field(body, "includeMain"),
        include_toddler=_bool_field(body, "includeToddler"),
    )


@bp.post("/api/search")
def api_search():
    try:
        q = _parse_body(request.get_json(silent=True))
    except ValueError as e:
        return jsonify(error=str(e)), 400

    try:
        result = search_transcripts(_pool(), q)
    except NoCategoryError:
        return jsonify(results=[], totalCount=0), 400
    except Exception:
        current_app.logger.exception("Search API error (keyword=%r)", q.keyword)
        return jsonify(results=[], totalCount=0, error="Search failed"), 500

    return jsonify(result.to_json())


# ---------- page ----------
@bp.get("/")
def index():
    """
    The search page. URL parameters are the whole state; with an
    X-Partial header only the results block is rendered (used by the
    page script when it fetches in place).
    """
    partial = request.headers.get("X-Partial") == "1"
    status = 200
    alert = None
    result = SearchResult()
    has_searched = False

    try:
        params = SearchParams.from_args(request.args)
    except ParamError as e:
        params = SearchParams(keyword=(request.args.getlist("keyword") or [""])[-1].strip())
        alert = str(e)
    else:
        if params.keyword:
            alert = params.error()
            if alert is None:
                has_searched = True
                try:
                    result = search_transcripts(_pool(), params.to_query())
                except Exception:
                    current_app.logger.exception("Search page error (keyword=%r)", params.keyword)
                    result = SearchResult()
                    status = 500

    ctx = dict(
        params=params,
        committed=params.keyword if has_searched else "",
        alert=alert,
        has_searched=has_searched,
        results=result.results,
        total_count=result.total_count,
        pagination=Pagination(params.page, result.total_pages),
    )
    template = "_results.html" if partial else "index.html"
    return render_template(template, **ctx), status


def main(argv=None) -> int:
    """Entry point for `lafinder-serve` and `python -m lafinder.app`."""
    ap = argparse.ArgumentParser(description="Run the Live Academy Finder web app.")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=5000)
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL)
    create_app().run(host=args.host, port=args.port, debug=args.debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
