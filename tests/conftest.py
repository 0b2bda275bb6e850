"""Shared fixtures: an in-process fake Queek backend."""

from __future__ import annotations

import pytest
from aiohttp import web

from queek_client import create_client
from tests._helpers import BASE_PATH, FakeBackend


@pytest.fixture
async def backend(aiohttp_server) -> FakeBackend:
    fake = FakeBackend()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    server = await aiohttp_server(app)
    fake.base_url = str(server.make_url(BASE_PATH))
    return fake


@pytest.fixture
async def client(backend: FakeBackend):
    """Client in external SDK mode with a client key and vendor slug."""
    queek = create_client(
        backend.base_url,
        "public-key-abc",
        vendor_slug="vendor-one",
        mode="external_sdk",
    )
    yield queek
    await queek.close()
