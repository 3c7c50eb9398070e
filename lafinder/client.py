# client.py — search a running Live Academy Finder from the terminal
import argparse
import json
import sys

import requests

from .config import DEFAULT_BASE_URL, PAGE_SIZE
from .params import decode_title, format_date, format_time, validate, watch_url


def search(keyword: str, page: int = 1, main: bool = True, toddler: bool = True,
           base_url: str = DEFAULT_BASE_URL, session=None, timeout: float = 30) -> dict:
    """POST /api/search and return the decoded body; raises on non-2xx."""
    http = session or requests
    r = http.post(
        f"{base_url.rstrip('/')}/api/search",
        json={
            "keyword": keyword,
            "page": page,
            "includeMain": main,
            "includeToddler": toddler,
        },
        timeout=timeout,
    )
    r.raise_for_status()
    return r.json()


def render(data: dict, page: int) -> str:
    total = int(data.get("totalCount", 0))
    pages = -(-total // PAGE_SIZE)
    lines = [f"page {page}/{pages} ({total} matches)"]
    for video in data.get("results", []):
        title = decode_title(video.get("title"))
        lines.append("")
        lines.append(f"{format_date(video.get('published_at', ''))} - {title}")
        for item in video.get("items", []):
            start = float(item.get("start", 0))
            lines.append(f"  🕒 {format_time(start)} - {item.get('text', '')}")
            lines.append(f"     {watch_url(video['video_id'], start)}")
    return "\n".join(lines)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Search Live Academy captions by phrase")
    ap.add_argument("keyword", help="Phrase to find (whole words, at least 3 characters)")
    ap.add_argument("--page", type=int, default=1, help="Result page (default 1)")
    ap.add_argument("--no-main", action="store_true", help="Exclude the main channel")
    ap.add_argument("--no-toddler", action="store_true", help="Exclude the toddler channel")
    ap.add_argument("--base-url", default=DEFAULT_BASE_URL,
                    help=f"Server URL (default {DEFAULT_BASE_URL}, or set LAFINDER_URL)")
    ap.add_argument("--json", action="store_true", help="Print the raw JSON response")
    args = ap.parse_args(argv)

    keyword = args.keyword.strip()
    main_, toddler = not args.no_main, not args.no_toddler
    problem = validate(keyword, main_, toddler)
    if problem:
        print(problem, file=sys.stderr)
        return 2
    if args.page < 1:
        print("--page must be 1 or more", file=sys.stderr)
        return 2

    try:
        data = search(keyword, args.page, main_, toddler, base_url=args.base_url)
    except requests.RequestException as e:
        print(f"Search failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        print(render(data, args.page))
    return 0


if __name__ == "__main__":
    sys.exit(main())
