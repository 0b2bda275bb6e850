"""Queek storefront client SDK: phone/OTP login and authenticated API access."""

from __future__ import annotations

from .api import MISSING, QueekHttpTransport
from .auth import QueekClientAuth
from .client import QueekClient, create_client
from .config import QueekClientConfig
from .exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    QueekError,
    RateLimitError,
)
from .models import (
    ClientUser,
    OtpChallenge,
    RegisterPayload,
    RequestOtpPayload,
    TokenResponse,
    VerifyOtpPayload,
)
from .storage import InMemoryStorageAdapter, StorageAdapter

__all__ = [
    "MISSING",
    "ApiError",
    "AuthenticationError",
    "ClientUser",
    "ConfigurationError",
    "InMemoryStorageAdapter",
    "OtpChallenge",
    "QueekClient",
    "QueekClientAuth",
    "QueekClientConfig",
    "QueekError",
    "QueekHttpTransport",
    "RateLimitError",
    "RegisterPayload",
    "RequestOtpPayload",
    "StorageAdapter",
    "TokenResponse",
    "VerifyOtpPayload",
    "create_client",
]
