"""Shared fixtures: a mock host application served by aiohttp."""

import contextlib
from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@contextlib.asynccontextmanager
async def _serve(routes: dict[str, Handler]) -> AsyncIterator[TestServer]:
    """Run an aiohttp app answering POST on each route."""
    app = web.Application()
    for path, handler in routes.items():
        app.router.add_post(path, handler)

    server = TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def serve() -> Callable[[dict[str, Handler]], contextlib.AbstractAsyncContextManager[TestServer]]:
    """Return an async context manager that serves a mock host application.

    Usage:
        async with serve({"/api/scheduler/trigger": handler}) as server:
            url = str(server.make_url("/api/scheduler/trigger"))
    """
    return _serve
