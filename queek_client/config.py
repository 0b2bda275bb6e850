"""Client configuration for the Queek client SDK."""

from __future__ import annotations

from dataclasses import dataclass, field

import aiohttp

from .const import (
    DEFAULT_ACCESS_STORAGE_KEY,
    DEFAULT_AUTH_PREFIX,
    DEFAULT_PLATFORM,
    DEFAULT_REFRESH_STORAGE_KEY,
    MODE_EXTERNAL_SDK,
    MODES,
)
from .exceptions import ConfigurationError
from .storage import InMemoryStorageAdapter, StorageAdapter


@dataclass(frozen=True)
class QueekClientConfig:
    """Immutable per-client settings, validated once at construction.

    Args:
        base_url: API base root, e.g. https://api.queek.com.ng/api/v1.
        client_key: Public client key. Required in external_sdk mode.
        vendor_slug: Vendor the storefront belongs to.
        session: aiohttp session used for every call. When omitted the
            transport creates (and owns) its own session.
        access_token_storage: Store for the access token slot.
        refresh_token_storage: Store for the refresh token slot.
        access_token_storage_key: Key of the access token slot.
        refresh_token_storage_key: Key of the refresh token slot.
        platform: Platform reported on login, register and refresh.
        mode: external_sdk, hosted_storefront or None.
        auth_prefix: Path prefix of the auth endpoints.
    """

    base_url: str
    client_key: str | None = None
    vendor_slug: str | None = None
    session: aiohttp.ClientSession | None = field(default=None, compare=False)
    access_token_storage: StorageAdapter | None = field(default=None, compare=False)
    refresh_token_storage: StorageAdapter | None = field(default=None, compare=False)
    access_token_storage_key: str = DEFAULT_ACCESS_STORAGE_KEY
    refresh_token_storage_key: str = DEFAULT_REFRESH_STORAGE_KEY
    platform: str = DEFAULT_PLATFORM
    mode: str | None = None
    auth_prefix: str = DEFAULT_AUTH_PREFIX

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigurationError("base_url is required.")

        if self.mode is not None and self.mode not in MODES:
            raise ConfigurationError(
                f"Unknown mode {self.mode!r}, expected one of {sorted(MODES)}."
            )

        if self.mode == MODE_EXTERNAL_SDK and not self.client_key:
            raise ConfigurationError(
                "client_key is required when mode is external_sdk."
            )

        if self.session is not None and self.session.closed:
            raise ConfigurationError(
                "The provided aiohttp session is closed. Provide an open "
                "session or omit it to let the client create one."
            )

        for name in ("access_token_storage", "refresh_token_storage"):
            if getattr(self, name) is None:
                object.__setattr__(self, name, InMemoryStorageAdapter())
            elif not isinstance(getattr(self, name), StorageAdapter):
                raise ConfigurationError(
                    f"{name} must provide get, set and remove."
                )

        # Enforce a single leading slash and no trailing slash
        prefix = self.auth_prefix.strip("/")
        object.__setattr__(self, "auth_prefix", f"/{prefix}" if prefix else "")

    def auth_path(self, path: str) -> str:
        """Return the full path of an auth endpoint."""
        return f"{self.auth_prefix}{path}"
