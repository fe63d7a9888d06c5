"""API test fixtures — app factory with known registries + httpx client.

Invariants:
    - Every test gets a fresh app (fresh pending slot and dispatch lock)
    - Registry: "foo" safe, "wipe" unsafe, "boom" safe but failing
    - Routes: "bar" registered
"""

import pytest
from httpx import ASGITransport, AsyncClient

from hash_commands.main import create_app
from hash_commands.services.command_registry import CommandRegistry, RouteTable


@pytest.fixture
def side_effects():
    return []


@pytest.fixture
def registry(side_effects):
    registry = CommandRegistry()

    def boom(args):
        raise RuntimeError("handler exploded")

    registry.register("foo", lambda args: side_effects.append(("foo", dict(args))), is_safe=True)
    registry.register("wipe", lambda args: side_effects.append(("wipe", dict(args))))
    registry.register("boom", boom, is_safe=True)
    return registry


@pytest.fixture
def routes(side_effects):
    routes = RouteTable()
    routes.register("bar", lambda args: side_effects.append(("bar", dict(args))))
    return routes


@pytest.fixture
def test_app(registry, routes):
    return create_app(registry=registry, routes=routes)


@pytest.fixture
async def client(test_app):
    async with AsyncClient(
        transport=ASGITransport(app=test_app), base_url="http://test",
    ) as c:
        yield c
