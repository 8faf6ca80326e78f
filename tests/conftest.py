from __future__ import annotations

import random

import pytest

from backend.imposter.game.catalog import parse_catalog
from backend.imposter.game.service import RoomRegistry
from backend.imposter.server import create_app

TEST_CONFIG = {
    "TESTING": True,
    "SOCKETIO_ASYNC_MODE": "threading",
    "TRUST_PROXY_HEADERS": False,
    "ROOM_IDLE_TTL_SEC": 0,
}

CATALOG_DATA = {
    "categories": [
        {
            "name": "Fruit",
            "items": [
                {"word": "Apple", "imposterHint": "Tree"},
                {"word": "Banana", "imposterHint": "Yellow"},
            ],
        },
        {
            "name": "Sports",
            "items": [{"word": "Tennis", "imposterHint": "Racket"}],
        },
    ]
}


@pytest.fixture
def catalog():
    return parse_catalog(CATALOG_DATA)


@pytest.fixture
def registry():
    return RoomRegistry(code_length=6)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def app_and_socketio(registry, catalog):
    return create_app(TEST_CONFIG, registry=registry, catalog=catalog)


@pytest.fixture
def app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture
def socketio(app_and_socketio):
    return app_and_socketio[1]


@pytest.fixture
def make_client(app, socketio):
    clients = []

    def _make():
        c = socketio.test_client(app)
        clients.append(c)
        return c

    yield _make

    for c in clients:
        if c.is_connected():
            c.disconnect()


def received(client, name: str | None = None) -> list:
    """Drain a test client's queue; returns (name, first arg) pairs or args for one event."""
    msgs = [(m["name"], m["args"][0] if m["args"] else None) for m in client.get_received()]
    if name is None:
        return msgs
    return [arg for n, arg in msgs if n == name]
