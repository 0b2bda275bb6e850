"""End-to-end tests of the client against an in-process fake backend."""

from __future__ import annotations

import aiohttp
import pytest

from queek_client import (
    ApiError,
    AuthenticationError,
    InMemoryStorageAdapter,
    QueekClient,
    create_client,
)
from tests._helpers import FakeBackend, envelope, otp_challenge, token_data

AUTH = "/api/v1/client/auth"


async def login(client: QueekClient, backend: FakeBackend, access: str, refresh: str):
    backend.queue_json(200, envelope(token_data(access, refresh), "verified"))
    return await client.auth.verify_otp(phone="+14155552671", otp_code="1234")


async def test_request_otp_sends_mandatory_headers(client, backend):
    backend.queue_json(200, envelope(otp_challenge()))

    challenge = await client.auth.request_otp("+14155552671")

    assert challenge.next_action == "verify_otp"
    assert challenge.user_exists is True
    assert challenge.debug_code is None
    assert len(backend.requests) == 1
    request = backend.requests[0]
    assert request.path == f"{AUTH}/phone/request-otp"
    assert request.method == "POST"
    assert request.json == {"phone": "+14155552671", "channel": "sms"}
    assert request.headers["X-Client-Key"] == "public-key-abc"
    assert request.headers["X-Vendor-Slug"] == "vendor-one"
    assert request.headers["X-Platform"] == "storefront"
    assert request.headers["Accept"] == "application/json"
    assert request.authorization is None
    assert not client.auth.is_authenticated()


async def test_request_otp_with_country_code_and_channel(client, backend):
    backend.queue_json(200, envelope({**otp_challenge(), "debug_code": "1234"}))

    challenge = await client.auth.request_otp(
        "4155552671", country_code="+1", channel="whatsapp"
    )

    assert challenge.debug_code == "1234"
    assert backend.requests[0].json == {
        "phone": "4155552671",
        "country_code": "+1",
        "channel": "whatsapp",
    }


async def test_hosted_storefront_mode_without_client_key(backend):
    backend.queue_json(200, envelope(otp_challenge()))

    async with create_client(
        backend.base_url,
        vendor_slug="vendor-hosted",
        mode="hosted_storefront",
    ) as client:
        await client.auth.request_otp("+14155552671")

    request = backend.requests[0]
    assert "X-Client-Key" not in request.headers
    assert request.headers["X-Vendor-Slug"] == "vendor-hosted"
    assert request.headers["X-Platform"] == "storefront"


async def test_verbs_send_auth_header_after_login(client, backend):
    await login(client, backend, "access-1", "refresh-1")
    for method in ("get", "post", "put", "delete"):
        backend.queue_json(200, envelope({"method": method}))

    await client.get("/vendors")
    await client.post("/orders", {"a": 1})
    await client.put("/orders/1", {"b": 2})
    await client.delete("/orders/1")

    assert len(backend.requests) == 5
    for request in backend.requests[1:]:
        assert request.authorization == "Bearer access-1"
        assert request.headers["X-Client-Key"] == "public-key-abc"
        assert request.headers["X-Platform"] == "storefront"
    assert [request.method for request in backend.requests[1:]] == [
        "GET",
        "POST",
        "PUT",
        "DELETE",
    ]
    assert backend.requests[2].json == {"a": 1}
    assert backend.requests[3].json == {"b": 2}
    assert backend.requests[1].body == b""


async def test_verify_otp_round_trip(client, backend):
    tokens = await login(client, backend, "access-1", "refresh-1")
    backend.queue_json(200, envelope({"vendors": []}))

    response = await client.get("/vendors")

    assert tokens.access_token == "access-1"
    assert tokens.refresh_token == "refresh-1"
    assert tokens.user is not None and tokens.user.email == "a@example.com"
    assert client.auth.get_access_token() == "access-1"
    assert response == envelope({"vendors": []})
    assert backend.requests[0].json == {
        "phone": "+14155552671",
        "otp_code": "1234",
        "platform": "client_web",
    }
    assert backend.requests[1].authorization == "Bearer access-1"


async def test_register_persists_token_pair(client, backend):
    backend.queue_json(
        200,
        envelope(
            token_data("register-access-1", "register-refresh-1"),
            "Account created",
        ),
    )
    backend.queue_json(200, envelope({"user": {"id": "user-1"}}))

    result = await client.auth.register(
        first_name="Client",
        last_name="User",
        email="client@example.com",
        phone="+14155552671",
        otp_code="1234",
    )
    user = await client.auth.me()

    assert result.access_token == "register-access-1"
    assert client.auth.get_access_token() == "register-access-1"
    assert user.id == "user-1"
    assert backend.paths() == [f"{AUTH}/register", f"{AUTH}/me"]
    assert backend.requests[0].json == {
        "first_name": "Client",
        "last_name": "User",
        "email": "client@example.com",
        "phone": "+14155552671",
        "otp_code": "1234",
        "platform": "client_web",
    }
    assert backend.requests[1].authorization == "Bearer register-access-1"


async def test_auto_refresh_on_401_retries_once(client, backend):
    await login(client, backend, "old-access-token", "refresh-token-1")
    backend.queue_json(
        401,
        {"status": "failed", "error_code": "unauthenticated", "message": "Unauthenticated"},
    )
    backend.queue_json(
        200, envelope(token_data("new-access-token", "refresh-token-2"), "refreshed")
    )
    backend.queue_json(200, envelope({"value": 1}))

    response = await client.get("/vendors")

    assert response["data"]["value"] == 1
    assert backend.paths() == [
        f"{AUTH}/phone/verify-otp",
        "/api/v1/vendors",
        f"{AUTH}/token/refresh",
        "/api/v1/vendors",
    ]
    refresh = backend.requests[2]
    assert refresh.json == {"refresh_token": "refresh-token-1", "platform": "client_web"}
    assert backend.requests[3].authorization == "Bearer new-access-token"
    assert client.auth.get_access_token() == "new-access-token"


async def test_refresh_failure_returns_normalized_error(client, backend):
    await login(client, backend, "old-access-token", "refresh-token-1")
    backend.queue_json(
        401,
        {"status": "failed", "error_code": "unauthenticated", "message": "Unauthenticated"},
    )
    backend.queue_json(
        401,
        {
            "status": "failed",
            "error_code": "invalid_refresh_token",
            "message": "Refresh token is invalid.",
        },
    )

    with pytest.raises(AuthenticationError) as exc_info:
        await client.get("/vendors")

    assert exc_info.value.code == "unauthenticated"
    assert exc_info.value.status == 401
    assert isinstance(exc_info.value.__cause__, AuthenticationError)
    assert exc_info.value.__cause__.code == "invalid_refresh_token"
    assert not client.auth.is_authenticated()
    assert client.auth.get_access_token() is None
    assert len(backend.requests) == 3


async def test_backend_errors_are_passed_through(client, backend):
    backend.queue_json(
        403,
        {
            "status": "failed",
            "error_code": "client_not_allowed",
            "message": "Client domain is not allowed.",
        },
    )

    with pytest.raises(ApiError) as exc_info:
        await client.auth.request_otp("+14155552671")

    assert exc_info.value.code == "client_not_allowed"
    assert exc_info.value.status == 403
    assert exc_info.value.message == "Client domain is not allowed."
    assert len(backend.requests) == 1


async def test_logout_clears_session_when_server_fails(client, backend):
    await login(client, backend, "access-1", "refresh-1")
    backend.queue_json(500, {"message": "Server error"})

    await client.auth.logout()

    assert backend.requests[1].path == f"{AUTH}/logout"
    assert backend.requests[1].json == {"refresh_token": "refresh-1"}
    assert backend.requests[1].authorization == "Bearer access-1"
    assert not client.auth.is_authenticated()


async def test_durable_storage_survives_new_client(backend):
    storage = InMemoryStorageAdapter()
    backend.queue_json(200, envelope(token_data("access-1", "refresh-1")))
    backend.queue_json(200, envelope({}))

    async with create_client(
        backend.base_url,
        "public-key-abc",
        access_token_storage=storage,
        refresh_token_storage=storage,
    ) as first:
        await first.auth.verify_otp(phone="+14155552671", otp_code="1234")

    async with create_client(
        backend.base_url,
        "public-key-abc",
        access_token_storage=storage,
        refresh_token_storage=storage,
    ) as second:
        assert second.auth.is_authenticated()
        await second.get("/vendors")

    assert backend.requests[1].authorization == "Bearer access-1"


async def test_request_with_custom_platform(backend):
    backend.queue_json(200, envelope(token_data("access-1", "refresh-1")))

    async with create_client(
        backend.base_url, "public-key-abc", platform="client_ios"
    ) as client:
        await client.auth.verify_otp(phone="+14155552671", otp_code="1234")

    assert backend.requests[0].json["platform"] == "client_ios"


async def test_close_leaves_injected_session_open(backend):
    backend.queue_json(200, envelope({}))

    async with aiohttp.ClientSession() as session:
        async with create_client(
            backend.base_url, "public-key-abc", session=session
        ) as client:
            await client.request("/vendors", method="GET")
        assert not session.closed
