"""
Media catalog gateway service.

Read-through API over the FlixHQ provider: every route validates its
parameters, resolves the raw record through the cache-aside layer and
projects it into the public response schema.
"""

from typing import Any, Dict, Optional

from fastapi import Query, Request
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import (
    AuthenticationError,
    DETAIL_FAILURE_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    ServiceError,
    ValidationError,
)

from service_catalog.app.adapters import FlixHQProviderClient, StreamingServer
from service_catalog.app.auth import BearerTokenVerifier
from service_catalog.app.caching import CacheAside, CacheKeyScheme, build_cache_store
from service_catalog.app.domain import ResponseProjector

SERVICE_NAME = "catalog"

# Reachable without a bearer token.
PUBLIC_PATHS = frozenset({"/health", "/metrics"})


class CatalogGatewayService(BaseService):
    """Catalog gateway service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        config = config or get_config(SERVICE_NAME)
        self.token_verifier = BearerTokenVerifier(config.jwt_secret, config.jwt_algorithm)
        super().__init__(SERVICE_NAME, config)

        self.cache_store = build_cache_store(self.config)
        if self.cache_store is None:
            self.logger.warning("Cache store not configured, caching disabled")
        self.cache = CacheAside(
            self.cache_store,
            metrics=self.metrics,
            producer_timeout=self.config.producer_timeout_seconds,
            coalesce_misses=self.config.cache_coalesce_misses,
        )
        self.keys = CacheKeyScheme(self.config.cache_namespace)
        self.provider = FlixHQProviderClient.from_config(self.config, metrics=self.metrics)
        self.projector = ResponseProjector(self.config.base_url)

        if self.config.auth_required and not self.config.jwt_secret:
            self.logger.warning("No JWT secret configured, all authenticated requests will be rejected")

        self._setup_catalog_routes()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.provider.close()
            if self.cache_store is not None:
                await self.cache_store.close()

        # Expose service instance via app state for introspection/testing
        self.app.state.catalog_service = self

    def _setup_middleware(self):
        """Add bearer token checks inside the shared CORS and timing middleware."""

        @self.app.middleware("http")
        async def verify_bearer_token(request: Request, call_next):
            if (
                not self.config.auth_required
                or request.method == "OPTIONS"
                or request.url.path in PUBLIC_PATHS
            ):
                return await call_next(request)

            try:
                self.token_verifier.authenticate(request)
            except AuthenticationError as exc:
                self.metrics.record_error(exc.code)
                return JSONResponse(
                    status_code=exc.status_code,
                    content=exc.to_response().model_dump(exclude_none=True),
                )
            return await call_next(request)

        super()._setup_middleware()

    def _failure(self, exc: Exception, route: str, message: str = GENERIC_FAILURE_MESSAGE) -> ServiceError:
        """Log an orchestrator or projector failure and hide it behind a fixed message."""
        self.logger.error(
            "Catalog request failed",
            route=route,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return ServiceError(message, details={"route": route, "error_type": type(exc).__name__})

    def _setup_catalog_routes(self):
        """Set up catalog routes."""

        @self.app.get("/main")
        async def home():
            """Trending TV series and trending movies."""
            try:
                series = await self.cache.fetch_or_populate(
                    self.keys.trending_tv(),
                    self.config.trending_ttl_seconds,
                    self.provider.fetch_trending_series,
                    resource="trending_tv",
                )
                movies = await self.cache.fetch_or_populate(
                    self.keys.trending_movies(),
                    self.config.trending_ttl_seconds,
                    self.provider.fetch_trending_movies,
                    resource="trending_movies",
                )
                return self.projector.home(series, movies)
            except Exception as exc:
                raise self._failure(exc, "/main") from exc

        @self.app.get("/info")
        async def info(id: Optional[str] = Query(None)):
            """Movie or series detail."""
            if id is None:
                raise ValidationError("id is required")

            try:
                record = await self.cache.fetch_or_populate(
                    self.keys.info(id),
                    self.config.info_ttl_seconds,
                    lambda: self.provider.fetch_detail(id),
                    resource="info",
                )
                return self.projector.detail(record)
            except Exception as exc:
                raise self._failure(exc, "/info", DETAIL_FAILURE_MESSAGE) from exc

        @self.app.get("/watch")
        async def watch(
            episode_id: Optional[str] = Query(None, alias="episodeId"),
            media_id: Optional[str] = Query(None, alias="mediaId"),
            server: Optional[str] = Query(None),
        ):
            """Playback URL and subtitles for one episode."""
            if episode_id is None:
                raise ValidationError("episodeId is required")
            if media_id is None:
                raise ValidationError("mediaId is required")
            if server and not StreamingServer.is_known(server):
                raise ValidationError("Invalid server query", details={"server": server})

            try:
                record = await self.cache.fetch_or_populate(
                    self.keys.watch(episode_id, media_id, server),
                    self.config.watch_ttl_seconds,
                    lambda: self.provider.fetch_stream_sources(episode_id, media_id, server or None),
                    resource="watch",
                )
                return self.projector.stream(record)
            except Exception as exc:
                raise self._failure(exc, "/watch") from exc

        @self.app.get("/search/{query}")
        async def search(query: str, page: Optional[str] = Query(None)):
            """One page of search results with next/previous links."""
            page_number = _parse_page(page)

            try:
                record = await self.cache.fetch_or_populate(
                    self.keys.search(query, page),
                    self.config.search_ttl_seconds,
                    lambda: self.provider.search(query, page_number),
                    resource="search",
                )
                return self.projector.search(query, record)
            except Exception as exc:
                raise self._failure(exc, "/search") from exc

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report cache store and upstream circuit state."""
        dependencies: Dict[str, Any] = {}
        if self.cache_store is None:
            dependencies["cache"] = "disabled"
        else:
            dependencies["cache"] = "ok" if await self.cache_store.ping() else "error"
        dependencies["provider"] = "open" if self.provider.circuit_breaker.is_open() else "ok"
        return dependencies


def _parse_page(page: Optional[str]) -> int:
    if page is None:
        return 1
    if not (page.isascii() and page.isdigit()) or int(page) < 1:
        raise ValidationError("page must be a positive integer", details={"page": page})
    return int(page)


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = CatalogGatewayService(config)
    return service.app


if __name__ == "__main__":
    service = CatalogGatewayService()
    service.run()
