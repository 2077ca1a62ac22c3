"""Next/previous page links for search results."""

from typing import Optional, Tuple
from urllib.parse import quote

# Characters encodeURIComponent leaves alone beyond quote()'s defaults.
_QUERY_SAFE = "!*'()"


def search_url(base_url: str, query: str) -> str:
    """Public search URL for ``query``, without a page parameter."""
    return f"{base_url.rstrip('/')}/search/{quote(query, safe=_QUERY_SAFE)}"


def build_page_links(
    base_url: str,
    query: str,
    current_page: int,
    has_next_page: bool,
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(next_page_url, prev_page_url)`` for a search page.

    The query term is percent-encoded, the page number is not. There is no
    previous link on page 1 and no next link when upstream reports no more
    pages.
    """
    if current_page < 1:
        raise ValueError("current_page must be >= 1")

    url = search_url(base_url, query)
    next_url = f"{url}?page={current_page + 1}" if has_next_page else None
    prev_url = f"{url}?page={current_page - 1}" if current_page > 1 else None
    return next_url, prev_url
