"""Exceptions for the Queek client SDK."""

from __future__ import annotations

from typing import Any

from .const import ERROR_UNKNOWN


class QueekError(Exception):
    """Base exception for the Queek client SDK."""


class ConfigurationError(QueekError):
    """Invalid client configuration."""


class ApiError(QueekError):
    """Structured error reported by the Queek backend."""

    def __init__(
        self,
        message: str,
        code: str = ERROR_UNKNOWN,
        status: int = 0,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"code={self.code!r}, status={self.status!r})"
        )


class AuthenticationError(ApiError):
    """Missing, expired or rejected credentials (HTTP 401)."""


class RateLimitError(ApiError):
    """API rate limit exceeded (HTTP 429)."""
