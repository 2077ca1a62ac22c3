"""Upstream provider adapters."""

from .flixhq_client import FlixHQProviderClient
from .provider import CatalogProvider, StreamingServer

__all__ = ["CatalogProvider", "FlixHQProviderClient", "StreamingServer"]
