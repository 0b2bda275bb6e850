"""Data models for the Queek client SDK."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .const import CHANNEL_SMS, CHANNELS


@dataclass
class ClientUser:
    """Authenticated storefront customer."""

    id: str
    first_name: str | None = None
    last_name: str | None = None
    name: str = ""
    email: str | None = None
    phone: str | None = None
    avatar: str | None = None
    status: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientUser:
        """Create a ClientUser from API response dict."""
        return cls(
            id=str(data.get("id", "")),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            name=data.get("name") or "",
            email=data.get("email"),
            phone=data.get("phone"),
            avatar=data.get("avatar"),
            status=data.get("status"),
        )


@dataclass
class TokenResponse:
    """Token pair issued by verify-otp, register and token refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 0
    expires_at: str = ""
    refresh_expires_in: int = 0
    refresh_expires_at: str = ""
    platform: str = ""
    user: ClientUser | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TokenResponse:
        """Create a TokenResponse from API response dict."""
        user = None
        if isinstance(data.get("user"), dict):
            user = ClientUser.from_dict(data["user"])

        return cls(
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token", ""),
            token_type=data.get("token_type", "Bearer"),
            expires_in=data.get("expires_in", 0),
            expires_at=data.get("expires_at", ""),
            refresh_expires_in=data.get("refresh_expires_in", 0),
            refresh_expires_at=data.get("refresh_expires_at", ""),
            platform=data.get("platform", ""),
            user=user,
        )


@dataclass
class OtpChallenge:
    """Result of requesting an OTP code."""

    next_action: str
    phone: str
    user_exists: bool = False
    expires_in: int = 0
    resend_in: int = 0
    # Only returned by non-production backends
    debug_code: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OtpChallenge:
        """Create an OtpChallenge from API response dict."""
        return cls(
            next_action=data.get("next_action", ""),
            phone=data.get("phone", ""),
            user_exists=data.get("user_exists", False),
            expires_in=data.get("expires_in", 0),
            resend_in=data.get("resend_in", 0),
            debug_code=data.get("debug_code"),
        )


def _compact(body: dict[str, Any]) -> dict[str, Any]:
    """Drop unset optional fields from a request body."""
    return {key: value for key, value in body.items() if value is not None}


@dataclass
class RequestOtpPayload:
    """Body for the request-otp endpoint."""

    phone: str
    country_code: str | None = None
    channel: str = CHANNEL_SMS

    def __post_init__(self) -> None:
        if self.channel not in CHANNELS:
            raise ValueError(
                f"Unsupported OTP channel {self.channel!r}, "
                f"expected one of {sorted(CHANNELS)}"
            )

    def to_body(self) -> dict[str, Any]:
        return _compact(
            {
                "phone": self.phone,
                "country_code": self.country_code,
                "channel": self.channel,
            }
        )


@dataclass
class VerifyOtpPayload:
    """Body for the verify-otp endpoint."""

    phone: str
    otp_code: str
    platform: str
    country_code: str | None = None

    def to_body(self) -> dict[str, Any]:
        return _compact(
            {
                "phone": self.phone,
                "country_code": self.country_code,
                "otp_code": self.otp_code,
                "platform": self.platform,
            }
        )


@dataclass
class RegisterPayload:
    """Body for the register endpoint."""

    first_name: str
    last_name: str
    phone: str
    otp_code: str
    platform: str
    email: str | None = None
    country_code: str | None = None
    username: str | None = None

    def to_body(self) -> dict[str, Any]:
        return _compact(
            {
                "first_name": self.first_name,
                "last_name": self.last_name,
                "email": self.email,
                "phone": self.phone,
                "country_code": self.country_code,
                "otp_code": self.otp_code,
                "username": self.username,
                "platform": self.platform,
            }
        )
