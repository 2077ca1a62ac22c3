"""
FlixHQ provider client.

Thin HTTP adapter over a consumet-compatible movies API. Transport errors and
5xx responses are retried and count against the circuit breaker; 4xx
answers fail the call without tripping it.
"""

from contextlib import nullcontext
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from urllib.parse import quote

import httpx

from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.errors import ExternalServiceError
from shared.logging import get_logger
from shared.retry import RetryConfig, RetryError, retry_on_exception

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.config import BaseConfig
    from shared.metrics import MetricsCollector

SERVICE_NAME = "flixhq"


class FlixHQProviderClient:
    """Fetches raw catalog records from the FlixHQ provider API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        retry_attempts: int = 3,
        metrics: Optional["MetricsCollector"] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.metrics = metrics
        self.logger = get_logger("catalog.flixhq_client")

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=30.0,
            name=SERVICE_NAME,
        )
        self.retry_config = RetryConfig(
            max_attempts=retry_attempts,
            base_delay=0.5,
            max_delay=5.0,
            exponential_base=2.0,
            jitter=True,
        )
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._send = retry_on_exception(
            (httpx.TransportError, httpx.HTTPStatusError),
            config=self.retry_config,
        )(self._send_once)

    @classmethod
    def from_config(
        cls, config: "BaseConfig", metrics: Optional["MetricsCollector"] = None
    ) -> "FlixHQProviderClient":
        return cls(
            config.provider_url,
            timeout=config.provider_timeout_seconds,
            retry_attempts=config.provider_retry_attempts,
            metrics=metrics,
        )

    async def fetch_trending_series(self) -> List[Dict[str, Any]]:
        data = await self._get("trending_tv", "/trending", {"type": "tv"})
        return _results(data)

    async def fetch_trending_movies(self) -> List[Dict[str, Any]]:
        data = await self._get("trending_movies", "/trending", {"type": "movie"})
        return _results(data)

    async def fetch_detail(self, media_id: str) -> Dict[str, Any]:
        return await self._get("info", "/info", {"id": media_id})

    async def fetch_stream_sources(
        self, episode_id: str, media_id: str, server: Optional[str] = None
    ) -> Dict[str, Any]:
        params = {"episodeId": episode_id, "mediaId": media_id}
        if server:
            params["server"] = server
        return await self._get("watch", "/watch", params)

    async def search(self, query: str, page: int = 1) -> Dict[str, Any]:
        return await self._get("search", f"/{quote(query, safe='')}", {"page": page})

    async def close(self) -> None:
        await self._client.aclose()

    async def _send_once(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        response = await self._client.get(url, params=params)
        if response.status_code >= 500:
            # Raises HTTPStatusError, which the retry decorator handles.
            response.raise_for_status()
        return response

    async def _get(self, operation: str, path: str, params: Dict[str, Any]) -> Any:
        """Execute a provider GET with circuit breaker + error handling."""
        url = f"{self.base_url}{path}"

        async def _request():
            response = await self._send(url, params)
            if response.status_code != 200:
                # 4xx answers leave the breaker as a success
                return response, None
            return response, response.json()

        timer = self.metrics.time_upstream(operation) if self.metrics else nullcontext()
        try:
            with timer:
                response, data = await self.circuit_breaker.call(_request)
                if response.status_code != 200:
                    self.logger.error(
                        "Provider request failed",
                        url=url,
                        params=params,
                        status_code=response.status_code,
                    )
                    raise ExternalServiceError(
                        service=SERVICE_NAME,
                        message=f"Unexpected status {response.status_code}",
                        details={"status_code": response.status_code, "operation": operation},
                    )
        except (RetryError, CircuitBreakerOpenException, httpx.HTTPError, ValueError) as exc:
            self.logger.error("Provider error", operation=operation, error=str(exc))
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message=str(exc),
                details={"operation": operation},
            ) from exc

        self.logger.debug("Provider record retrieved", operation=operation, url=url)
        return data


def _results(data: Any) -> List[Dict[str, Any]]:
    # Trending endpoints answer either a bare list or {"results": [...]}.
    if isinstance(data, dict):
        return data.get("results") or []
    return data
