"""
Upstream catalog provider capability.

Handlers only depend on this protocol. Every method returns JSON-compatible
raw records and reports any failure (network, parse, not found) as
``ExternalServiceError``; callers cannot tell "not found" from an outage.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


class StreamingServer(str, Enum):
    """Streaming servers the upstream provider accepts for ``/watch``."""

    ASIANLOAD = "asianload"
    GOGOCDN = "gogocdn"
    STREAMSB = "streamsb"
    MIXDROP = "mixdrop"
    MP4UPLOAD = "mp4upload"
    UPCLOUD = "upcloud"
    VIDCLOUD = "vidcloud"
    STREAMTAPE = "streamtape"
    VIZCLOUD = "vizcloud"
    MYCLOUD = "mycloud"
    FILEMOON = "filemoon"
    VIDSTREAMING = "vidstreaming"
    SMASHYSTREAM = "smashystream"
    STREAMHUB = "streamhub"
    STREAMWISH = "streamwish"
    VIDMOLY = "vidmoly"
    VOE = "voe"
    MEGAUP = "megaup"

    @classmethod
    def is_known(cls, value: str) -> bool:
        return value in cls._value2member_map_


@runtime_checkable
class CatalogProvider(Protocol):
    async def fetch_trending_series(self) -> List[Dict[str, Any]]:
        ...

    async def fetch_trending_movies(self) -> List[Dict[str, Any]]:
        ...

    async def fetch_detail(self, media_id: str) -> Dict[str, Any]:
        ...

    async def fetch_stream_sources(
        self, episode_id: str, media_id: str, server: Optional[str] = None
    ) -> Dict[str, Any]:
        ...

    async def search(self, query: str, page: int = 1) -> Dict[str, Any]:
        ...
