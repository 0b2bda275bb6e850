"""Queek storefront API client."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import aiohttp

from .api import MISSING, QueekHttpTransport
from .auth import QueekClientAuth
from .config import QueekClientConfig
from .storage import StorageAdapter

_LOGGER = logging.getLogger(__name__)


class QueekClient:
    """API client for the Queek storefront backend.

    Auth operations live on ``client.auth``. The verb methods send
    arbitrary authenticated requests through the same session handling.
    """

    def __init__(
        self,
        config: QueekClientConfig,
        transport: QueekHttpTransport | None = None,
    ) -> None:
        self._config = config
        self._auth = QueekClientAuth(config, transport)

    @property
    def config(self) -> QueekClientConfig:
        """Return the client configuration."""
        return self._config

    @property
    def auth(self) -> QueekClientAuth:
        """Return the session handler."""
        return self._auth

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = MISSING,
        headers: dict[str, str] | None = None,
        retry_on_unauthorized: bool = True,
    ) -> Any:
        """Make an authenticated request and return the response envelope."""
        return await self._auth.request(
            path,
            method,
            body,
            headers=headers,
            retry_on_unauthorized=retry_on_unauthorized,
        )

    async def get(self, path: str, **options: Any) -> Any:
        """Send an authenticated GET request."""
        return await self._auth.get(path, **options)

    async def post(self, path: str, body: Any = MISSING, **options: Any) -> Any:
        """Send an authenticated POST request."""
        return await self._auth.post(path, body, **options)

    async def put(self, path: str, body: Any = MISSING, **options: Any) -> Any:
        """Send an authenticated PUT request."""
        return await self._auth.put(path, body, **options)

    async def delete(self, path: str, **options: Any) -> Any:
        """Send an authenticated DELETE request."""
        return await self._auth.delete(path, **options)

    async def close(self) -> None:
        """Close the HTTP session if the client created it."""
        await self._auth.transport.close()

    async def __aenter__(self) -> QueekClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


def create_client(
    base_url: str,
    client_key: str | None = None,
    *,
    vendor_slug: str | None = None,
    session: aiohttp.ClientSession | None = None,
    access_token_storage: StorageAdapter | None = None,
    refresh_token_storage: StorageAdapter | None = None,
    access_token_storage_key: str | None = None,
    refresh_token_storage_key: str | None = None,
    platform: str | None = None,
    mode: str | None = None,
) -> QueekClient:
    """Create a QueekClient from keyword settings.

    Settings left as None fall back to the QueekClientConfig defaults.

    Raises:
        ConfigurationError: If the settings are invalid.
    """
    overrides: dict[str, Any] = {
        "access_token_storage_key": access_token_storage_key,
        "refresh_token_storage_key": refresh_token_storage_key,
        "platform": platform,
    }
    config = QueekClientConfig(
        base_url=base_url,
        client_key=client_key,
        vendor_slug=vendor_slug,
        session=session,
        access_token_storage=access_token_storage,
        refresh_token_storage=refresh_token_storage,
        mode=mode,
        **{key: value for key, value in overrides.items() if value is not None},
    )
    _LOGGER.debug(
        "Created Queek client for %s (mode=%s, vendor=%s)",
        config.base_url,
        config.mode,
        config.vendor_slug,
    )
    return QueekClient(config)
