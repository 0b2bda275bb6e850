"""HTTP transport for the Queek client SDK."""

from __future__ import annotations

import json
import logging
from typing import Any, Final

import aiohttp
from multidict import CIMultiDict

from .config import QueekClientConfig
from .const import (
    CONTENT_TYPE_JSON,
    DEFAULT_ERROR_MESSAGE,
    ERROR_UNKNOWN,
    HEADER_ACCEPT,
    HEADER_AUTHORIZATION,
    HEADER_CLIENT_KEY,
    HEADER_CONTENT_TYPE,
    HEADER_PLATFORM,
    HEADER_PLATFORM_VALUE,
    HEADER_VENDOR_SLUG,
)
from .exceptions import ApiError, AuthenticationError, RateLimitError

_LOGGER = logging.getLogger(__name__)


class _Missing:
    """Marker for an omitted request body (None is a valid JSON body)."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def _mask_token(token: str | None) -> str:
    """Mask a token for safe logging."""
    if not token:
        return "<none>"
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}...{token[-4:]}"


def build_url(base_url: str, path: str) -> str:
    """Join the base URL and an API path."""
    base = base_url.rstrip("/")
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{base}{path}"


def error_from_response(status: int, payload: Any) -> ApiError:
    """Normalize a non-2xx response into an ApiError.

    The code comes from error_code, then error, then unknown_error. Details
    carry the body's data member, or the whole payload when it has none.
    """
    body = payload if isinstance(payload, dict) else {}
    code = body.get("error_code")
    if code is None:
        code = body.get("error")
    if code is None:
        code = ERROR_UNKNOWN
    message = body.get("message")
    if message is None:
        message = DEFAULT_ERROR_MESSAGE
    details = body.get("data")
    if details is None:
        details = payload

    if status == 401:
        error_cls: type[ApiError] = AuthenticationError
    elif status == 429:
        error_cls = RateLimitError
    else:
        error_cls = ApiError
    return error_cls(message, code=code, status=status, details=details)


class QueekHttpTransport:
    """Issue requests against the Queek API with the standard headers."""

    def __init__(self, config: QueekClientConfig) -> None:
        """Initialise the transport.

        Args:
            config: Client configuration. If it carries an aiohttp session
                the transport uses it and never closes it; otherwise a
                session is created on first use and closed by close().
        """
        self._config = config
        self._session = config.session
        self._owns_session = config.session is None

    @property
    def session(self) -> aiohttp.ClientSession | None:
        """Return the underlying aiohttp session, if one exists yet."""
        return self._session

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or (self._owns_session and self._session.closed):
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    def build_headers(
        self,
        access_token: str | None = None,
        has_body: bool = False,
        extra: dict[str, str] | None = None,
    ) -> CIMultiDict[str]:
        """Build request headers. Standard headers override caller headers."""
        headers: CIMultiDict[str] = CIMultiDict(extra or {})
        headers[HEADER_ACCEPT] = CONTENT_TYPE_JSON
        headers[HEADER_PLATFORM] = HEADER_PLATFORM_VALUE
        if self._config.client_key:
            headers[HEADER_CLIENT_KEY] = self._config.client_key
        if self._config.vendor_slug:
            headers[HEADER_VENDOR_SLUG] = self._config.vendor_slug
        if has_body:
            headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_JSON
        if access_token:
            headers[HEADER_AUTHORIZATION] = f"Bearer {access_token}"
        return headers

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = MISSING,
        access_token: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make a request and return the parsed JSON payload.

        Args:
            path: API path (appended to the base URL).
            method: HTTP method.
            body: JSON-serialisable body, or MISSING to send none.
            access_token: Bearer token to attach, if any.
            headers: Extra headers for this call.

        Returns:
            Parsed JSON payload, or None for a non-JSON response.

        Raises:
            AuthenticationError: On HTTP 401.
            RateLimitError: On HTTP 429.
            ApiError: For any other non-2xx response.
            aiohttp.ClientError: On network failure (not wrapped).
        """
        url = build_url(self._config.base_url, path)
        has_body = body is not MISSING
        request_headers = self.build_headers(access_token, has_body, headers)
        data = json.dumps(body) if has_body else None

        _LOGGER.debug(
            "API request: %s %s (token=%s)",
            method,
            path,
            _mask_token(access_token),
        )

        session = self._ensure_session()
        async with session.request(
            method, url, headers=request_headers, data=data
        ) as resp:
            payload = await self._parse_json(resp)
            status = resp.status

        if not 200 <= status < 300:
            error = error_from_response(status, payload)
            _LOGGER.debug(
                "API request %s %s failed: HTTP %s (%s)",
                method,
                path,
                status,
                error.code,
            )
            raise error

        return payload

    @staticmethod
    async def _parse_json(resp: aiohttp.ClientResponse) -> Any:
        """Return the JSON body, or None if it is absent or malformed."""
        content_type = resp.headers.get(HEADER_CONTENT_TYPE, "")
        if CONTENT_TYPE_JSON not in content_type.lower():
            return None
        try:
            return await resp.json(content_type=None)
        except ValueError:
            _LOGGER.debug("Discarding malformed JSON body (HTTP %s)", resp.status)
            return None
