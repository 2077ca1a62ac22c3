"""
Bearer token verification for the catalog gateway.

Tokens are JWTs signed with a shared secret. Without a configured secret
every token is rejected.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from jose import JWTError, jwt

from shared.errors import AuthenticationError
from shared.logging import get_logger


class BearerTokenVerifier:
    """Validates ``Authorization: Bearer <jwt>`` headers."""

    def __init__(self, secret: Optional[str], algorithm: str = "HS256") -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.logger = get_logger("catalog.auth")

    def verify(self, authorization: Optional[str]) -> Dict[str, Any]:
        """Return the token claims or raise ``AuthenticationError``."""
        if not self.secret:
            raise AuthenticationError("Token verification is not configured")

        if not authorization or not authorization.startswith("Bearer "):
            raise AuthenticationError("Missing or invalid Authorization header")

        token = authorization[7:].strip()
        if not token:
            raise AuthenticationError("Authorization header contained empty bearer token")

        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            self.logger.info("Rejected bearer token", error=str(exc))
            raise AuthenticationError("Invalid or expired token") from exc

    def authenticate(self, request: Request) -> Dict[str, Any]:
        claims = self.verify(request.headers.get("Authorization"))
        request.state.claims = claims
        return claims
