"""Credential acquisition package."""

from .tokens import (
    CredentialsContext,
    StaticTokenProvider,
    TokenProvider,
    build_token_provider,
)

__all__ = [
    "CredentialsContext",
    "StaticTokenProvider",
    "TokenProvider",
    "build_token_provider",
]
