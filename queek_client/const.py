"""Constants for the Queek client SDK."""

from __future__ import annotations

from typing import Final

# Auth endpoints (relative to the API base URL)
DEFAULT_AUTH_PREFIX: Final = "/client/auth"
PATH_REQUEST_OTP: Final = "/phone/request-otp"
PATH_VERIFY_OTP: Final = "/phone/verify-otp"
PATH_REGISTER: Final = "/register"
PATH_TOKEN_REFRESH: Final = "/token/refresh"
PATH_ME: Final = "/me"
PATH_LOGOUT: Final = "/logout"

# Storage keys for the persisted session pair
DEFAULT_ACCESS_STORAGE_KEY: Final = "queek_client_access_token"
DEFAULT_REFRESH_STORAGE_KEY: Final = "queek_client_refresh_token"

DEFAULT_PLATFORM: Final = "client_web"

# Value of the X-Platform header sent on every request
HEADER_PLATFORM_VALUE: Final = "storefront"

HEADER_ACCEPT: Final = "Accept"
HEADER_AUTHORIZATION: Final = "Authorization"
HEADER_CLIENT_KEY: Final = "X-Client-Key"
HEADER_CONTENT_TYPE: Final = "Content-Type"
HEADER_PLATFORM: Final = "X-Platform"
HEADER_VENDOR_SLUG: Final = "X-Vendor-Slug"

CONTENT_TYPE_JSON: Final = "application/json"

# Operating modes
MODE_EXTERNAL_SDK: Final = "external_sdk"
MODE_HOSTED_STOREFRONT: Final = "hosted_storefront"
MODES: Final = frozenset({MODE_EXTERNAL_SDK, MODE_HOSTED_STOREFRONT})

# OTP delivery channels
CHANNEL_SMS: Final = "sms"
CHANNEL_WHATSAPP: Final = "whatsapp"
CHANNELS: Final = frozenset({CHANNEL_SMS, CHANNEL_WHATSAPP})

HTTP_METHODS: Final = frozenset({"GET", "POST", "PUT", "DELETE"})

# Error codes reported by the backend (or produced by the SDK)
ERROR_INVALID_PHONE: Final = "invalid_phone"
ERROR_OTP_SEND_FAILED: Final = "otp_send_failed"
ERROR_INVALID_OTP: Final = "invalid_otp"
ERROR_EXPIRED_OTP: Final = "expired_otp"
ERROR_CLIENT_NOT_ALLOWED: Final = "client_not_allowed"
ERROR_INVALID_REFRESH_TOKEN: Final = "invalid_refresh_token"
ERROR_REFRESH_TOKEN_EXPIRED: Final = "refresh_token_expired"
ERROR_UNAUTHENTICATED: Final = "unauthenticated"
ERROR_ACCOUNT_NOT_FOUND: Final = "account_not_found"
ERROR_TOO_MANY_REQUESTS: Final = "too_many_requests"
ERROR_UNKNOWN: Final = "unknown_error"

ERROR_CODES: Final = frozenset(
    {
        ERROR_INVALID_PHONE,
        ERROR_OTP_SEND_FAILED,
        ERROR_INVALID_OTP,
        ERROR_EXPIRED_OTP,
        ERROR_CLIENT_NOT_ALLOWED,
        ERROR_INVALID_REFRESH_TOKEN,
        ERROR_REFRESH_TOKEN_EXPIRED,
        ERROR_UNAUTHENTICATED,
        ERROR_ACCOUNT_NOT_FOUND,
        ERROR_TOO_MANY_REQUESTS,
        ERROR_UNKNOWN,
    }
)

DEFAULT_ERROR_MESSAGE: Final = "Request failed"
SESSION_EXPIRED_MESSAGE: Final = "Authentication required. Please login again."
