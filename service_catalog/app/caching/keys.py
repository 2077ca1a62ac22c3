"""
Cache key scheme.

Keys are ``<namespace>:<resource>:<param>...`` joined with ``:``. Parameter
values are not escaped, so a value containing ``:`` can collide with another
key. Search keys carry the raw query where the resource tag would be, which
puts queries and resource names in the same key space (a search for
"trending" with page "tv" lands on the trending-TV key).
"""

from typing import Optional

SEPARATOR = ":"


class CacheKeyScheme:
    """Deterministic cache keys per resource class."""

    def __init__(self, namespace: str = "flixhq"):
        self.namespace = namespace

    def _join(self, *parts: str) -> str:
        return SEPARATOR.join((self.namespace,) + parts)

    def trending_tv(self) -> str:
        return self._join("trending", "tv")

    def trending_movies(self) -> str:
        return self._join("trending", "movies")

    def info(self, media_id: str) -> str:
        return self._join("info", media_id)

    def watch(self, episode_id: str, media_id: str, server: Optional[str] = None) -> str:
        return self._join("watch", episode_id, media_id, server or "")

    def search(self, query: str, page: Optional[str] = None) -> str:
        return self._join(query, "" if page is None else str(page))
