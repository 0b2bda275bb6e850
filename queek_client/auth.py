"""Session handling for the Queek client SDK."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from .api import MISSING, QueekHttpTransport, _mask_token
from .config import QueekClientConfig
from .const import (
    CHANNEL_SMS,
    ERROR_INVALID_REFRESH_TOKEN,
    ERROR_UNAUTHENTICATED,
    ERROR_UNKNOWN,
    HTTP_METHODS,
    PATH_LOGOUT,
    PATH_ME,
    PATH_REGISTER,
    PATH_REQUEST_OTP,
    PATH_TOKEN_REFRESH,
    PATH_VERIFY_OTP,
    SESSION_EXPIRED_MESSAGE,
)
from .exceptions import ApiError, AuthenticationError, QueekError
from .models import (
    ClientUser,
    OtpChallenge,
    RegisterPayload,
    RequestOtpPayload,
    TokenResponse,
    VerifyOtpPayload,
)

_LOGGER = logging.getLogger(__name__)

# Failures of a backend call (backend error, network error or timeout)
_CALL_FAILURES = (QueekError, aiohttp.ClientError, asyncio.TimeoutError)


def _normalize_path(path: str) -> str:
    """Lowercase a path and strip its query string and trailing slashes."""
    path = path.lower().split("?", 1)[0].rstrip("/")
    if not path.startswith("/"):
        path = f"/{path}"
    return path


def _envelope_data(payload: Any) -> dict[str, Any]:
    """Return the data member of a success envelope."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return {}


class QueekClientAuth:
    """Handle the storefront customer session for the Queek API.

    Attaches the current access token to every call. When a call fails
    with HTTP 401 and a refresh token is held, the token pair is refreshed
    and the call is retried once. Concurrent callers share a single
    in-flight refresh.
    """

    def __init__(
        self,
        config: QueekClientConfig,
        transport: QueekHttpTransport | None = None,
    ) -> None:
        """Initialise the session handler.

        Args:
            config: Client configuration.
            transport: Transport used for every call. Defaults to a
                QueekHttpTransport built from config.
        """
        self._config = config
        self._http = transport or QueekHttpTransport(config)
        self._access_storage = config.access_token_storage
        self._refresh_storage = config.refresh_token_storage
        self._refresh_path = _normalize_path(config.auth_path(PATH_TOKEN_REFRESH))
        self._refresh_task: asyncio.Task[TokenResponse] | None = None
        # Bumped whenever the session pair is replaced or cleared
        self._session_generation = 0

        self._access_token: str | None = self._access_storage.get(
            config.access_token_storage_key
        )
        self._refresh_token: str | None = self._refresh_storage.get(
            config.refresh_token_storage_key
        )

    @property
    def transport(self) -> QueekHttpTransport:
        """Return the transport used for API calls."""
        return self._http

    def is_authenticated(self) -> bool:
        """Return True if an access or refresh token is held locally."""
        return bool(self._access_token or self._refresh_token)

    def get_access_token(self) -> str | None:
        """Return the current access token."""
        return self._access_token

    # ------------------------------------------------------------------
    # Generic requests
    # ------------------------------------------------------------------

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = MISSING,
        headers: dict[str, str] | None = None,
        retry_on_unauthorized: bool = True,
    ) -> Any:
        """Make an authenticated request and return the response envelope.

        Args:
            path: API path relative to the base URL.
            method: HTTP method.
            body: JSON-serialisable body, or MISSING to send none.
            headers: Extra headers for this call.
            retry_on_unauthorized: Set to False to disable the
                refresh-and-retry on HTTP 401 for this call.

        Raises:
            ValueError: If method is not GET, POST, PUT or DELETE.
            AuthenticationError: If the session could not be refreshed.
            ApiError: For errors reported by the backend.
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(
                f"Unsupported HTTP method {method!r}, "
                f"expected one of {sorted(HTTP_METHODS)}"
            )
        return await self._request_with_auto_refresh(
            path,
            method,
            body,
            headers,
            retry_on_unauthorized,
            can_retry=True,
        )

    async def get(self, path: str, **options: Any) -> Any:
        """Send an authenticated GET request."""
        return await self.request(path, "GET", **options)

    async def post(self, path: str, body: Any = MISSING, **options: Any) -> Any:
        """Send an authenticated POST request with an optional JSON body."""
        return await self.request(path, "POST", body, **options)

    async def put(self, path: str, body: Any = MISSING, **options: Any) -> Any:
        """Send an authenticated PUT request with an optional JSON body."""
        return await self.request(path, "PUT", body, **options)

    async def delete(self, path: str, **options: Any) -> Any:
        """Send an authenticated DELETE request."""
        return await self.request(path, "DELETE", **options)

    # ------------------------------------------------------------------
    # Auth endpoints
    # ------------------------------------------------------------------

    async def request_otp(
        self,
        phone: str,
        country_code: str | None = None,
        channel: str = CHANNEL_SMS,
    ) -> OtpChallenge:
        """Ask the backend to send an OTP code to a phone number."""
        payload = RequestOtpPayload(
            phone=phone, country_code=country_code, channel=channel
        )
        response = await self.post(
            self._config.auth_path(PATH_REQUEST_OTP), payload.to_body()
        )
        return OtpChallenge.from_dict(_envelope_data(response))

    async def verify_otp(
        self,
        phone: str,
        otp_code: str,
        country_code: str | None = None,
        platform: str | None = None,
    ) -> TokenResponse:
        """Exchange an OTP code for a token pair and start a session."""
        payload = VerifyOtpPayload(
            phone=phone,
            otp_code=otp_code,
            platform=platform or self._config.platform,
            country_code=country_code,
        )
        response = await self.post(
            self._config.auth_path(PATH_VERIFY_OTP), payload.to_body()
        )
        tokens = self._token_response(response)
        self._persist_tokens(tokens.access_token, tokens.refresh_token)
        return tokens

    async def register(
        self,
        first_name: str,
        last_name: str,
        phone: str,
        otp_code: str,
        email: str | None = None,
        country_code: str | None = None,
        username: str | None = None,
        platform: str | None = None,
    ) -> TokenResponse:
        """Create a customer account and start a session."""
        payload = RegisterPayload(
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            otp_code=otp_code,
            platform=platform or self._config.platform,
            email=email,
            country_code=country_code,
            username=username,
        )
        response = await self.post(
            self._config.auth_path(PATH_REGISTER), payload.to_body()
        )
        tokens = self._token_response(response)
        self._persist_tokens(tokens.access_token, tokens.refresh_token)
        return tokens

    async def refresh(self) -> TokenResponse:
        """Refresh the token pair.

        Joins the refresh already in flight, if any.

        Raises:
            AuthenticationError: If no refresh token is held
                (invalid_refresh_token) or the backend rejects it.
        """
        return await self._refresh_with_lock()

    async def me(self) -> ClientUser:
        """Return the authenticated customer.

        Raises:
            ApiError: If the response carries no user (unknown_error).
        """
        response = await self.get(self._config.auth_path(PATH_ME))
        user = _envelope_data(response).get("user")
        if not isinstance(user, dict):
            raise ApiError(
                "Me response is missing the user.",
                code=ERROR_UNKNOWN,
                status=200,
                details=response,
            )
        return ClientUser.from_dict(user)

    async def logout(self) -> None:
        """Revoke the session on the backend and clear it locally.

        The local session is cleared even if the backend call fails. A
        refresh still in flight when the session is cleared is discarded.
        """
        refresh_token = self._refresh_token
        body = {"refresh_token": refresh_token} if refresh_token else {}
        try:
            await self.post(self._config.auth_path(PATH_LOGOUT), body)
        except _CALL_FAILURES as err:
            _LOGGER.warning("Logout request failed, clearing session anyway: %s", err)
        finally:
            self._clear_tokens()

    # ------------------------------------------------------------------
    # Refresh handling
    # ------------------------------------------------------------------

    async def _request_with_auto_refresh(
        self,
        path: str,
        method: str,
        body: Any,
        headers: dict[str, str] | None,
        retry_on_unauthorized: bool,
        can_retry: bool,
    ) -> Any:
        try:
            return await self._http.request(
                path,
                method=method,
                body=body,
                access_token=self._access_token,
                headers=headers,
            )
        except ApiError as err:
            if not (
                can_retry
                and retry_on_unauthorized
                and self._should_refresh(err, path)
            ):
                raise

        _LOGGER.debug("%s %s returned HTTP 401, refreshing session", method, path)
        try:
            await self._refresh_with_lock()
        except _CALL_FAILURES as refresh_err:
            self._clear_tokens()
            raise AuthenticationError(
                SESSION_EXPIRED_MESSAGE,
                code=ERROR_UNAUTHENTICATED,
                status=401,
                details=refresh_err,
            ) from refresh_err

        return await self._request_with_auto_refresh(
            path,
            method,
            body,
            headers,
            retry_on_unauthorized=False,
            can_retry=False,
        )

    def _should_refresh(self, error: ApiError, path: str) -> bool:
        if not self._refresh_token or self._is_refresh_path(path):
            return False
        return error.status == 401

    def _is_refresh_path(self, path: str) -> bool:
        return _normalize_path(path) == self._refresh_path

    async def _refresh_with_lock(self) -> TokenResponse:
        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.ensure_future(self._run_refresh())
            task.add_done_callback(self._log_refresh_outcome)
            self._refresh_task = task
        else:
            _LOGGER.debug("Joining refresh already in flight")
        # Cancelling one waiter must not cancel the refresh for the others
        return await asyncio.shield(task)

    async def _run_refresh(self) -> TokenResponse:
        try:
            return await self._refresh_internal()
        finally:
            self._refresh_task = None

    async def _refresh_internal(self) -> TokenResponse:
        if not self._refresh_token:
            raise AuthenticationError(
                "Refresh token is missing.",
                code=ERROR_INVALID_REFRESH_TOKEN,
                status=401,
            )

        _LOGGER.debug(
            "Refreshing session (refresh_token=%s)",
            _mask_token(self._refresh_token),
        )
        generation = self._session_generation
        response = await self._http.request(
            self._config.auth_path(PATH_TOKEN_REFRESH),
            method="POST",
            body={
                "refresh_token": self._refresh_token,
                "platform": self._config.platform,
            },
            access_token=self._access_token,
        )
        tokens = self._token_response(response)
        if generation != self._session_generation:
            _LOGGER.debug("Session changed while refreshing, discarding new pair")
            raise AuthenticationError(
                "Session ended while refreshing.",
                code=ERROR_INVALID_REFRESH_TOKEN,
                status=401,
            )
        self._persist_tokens(tokens.access_token, tokens.refresh_token)
        return tokens

    @staticmethod
    def _log_refresh_outcome(task: asyncio.Task[TokenResponse]) -> None:
        if task.cancelled():
            _LOGGER.debug("Session refresh cancelled")
            return
        err = task.exception()
        if err is not None:
            _LOGGER.warning("Session refresh failed: %s", err)
        else:
            _LOGGER.debug("Session refreshed")

    # ------------------------------------------------------------------
    # Token state
    # ------------------------------------------------------------------

    @staticmethod
    def _token_response(payload: Any) -> TokenResponse:
        tokens = TokenResponse.from_dict(_envelope_data(payload))
        if not tokens.access_token or not tokens.refresh_token:
            raise ApiError(
                "Token response is missing the access or refresh token.",
                code=ERROR_UNKNOWN,
                status=200,
                details=payload,
            )
        return tokens

    def _persist_tokens(self, access_token: str, refresh_token: str) -> None:
        """Replace the session pair in memory, then in storage."""
        self._session_generation += 1
        self._access_token = access_token
        self._refresh_token = refresh_token

        self._access_storage.set(self._config.access_token_storage_key, access_token)
        self._refresh_storage.set(
            self._config.refresh_token_storage_key, refresh_token
        )
        _LOGGER.debug("Stored session (access_token=%s)", _mask_token(access_token))

    def _clear_tokens(self) -> None:
        self._session_generation += 1
        self._access_token = None
        self._refresh_token = None

        self._access_storage.remove(self._config.access_token_storage_key)
        self._refresh_storage.remove(self._config.refresh_token_storage_key)
        _LOGGER.debug("Cleared session")
