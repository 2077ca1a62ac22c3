"""
Shared utilities for the media catalog gateway.

This package aggregates common building blocks consumed by the services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- retry: Retry decorators
- circuit_breaker: Resilient upstream call protection
- base_service: FastAPI app skeleton (health, metrics, error handlers)

Do not import from service packages into shared/.
"""
