"""Authentication helpers for the catalog gateway."""

from .token_verifier import BearerTokenVerifier

__all__ = ["BearerTokenVerifier"]
