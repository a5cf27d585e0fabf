"""Fixtures that serve the FakeHorizon over real HTTP with aiohttp."""

from __future__ import annotations

import pytest
from aiohttp import web

from tests.mocks import FakeHorizon


def make_app(fake: FakeHorizon) -> web.Application:
    async def handle(request: web.Request) -> web.Response:
        form = {}
        if request.method == "POST":
            form = dict(await request.post())
        status, body = fake.handle(request.method, request.path, dict(request.query), form)
        if isinstance(body, str):
            return web.Response(status=status, text=body)
        return web.json_response(body, status=status)

    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", handle)
    return app


@pytest.fixture
async def horizon_server():
    """Start a FakeHorizon on an ephemeral localhost port; yields (fake, base_url)."""
    fake = FakeHorizon()
    runner = web.AppRunner(make_app(fake))
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()

    host, port = runner.addresses[0][:2]
    base_url = f"http://{host}:{port}"
    fake.base_url = base_url
    try:
        yield fake, base_url
    finally:
        await runner.cleanup()
