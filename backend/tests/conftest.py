import os
import random
import sys

import pytest

# Ensure the backend root (containing the `musicbingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from musicbingo.config import Config
from musicbingo.content.generator import ContentGenerator
from musicbingo.content.supplier import GenerationConfig
from musicbingo.game.cards import CardGenerator
from musicbingo.game.models import ContentEntry
from musicbingo.game.registry import SessionRegistry
from musicbingo.server import create_app


class StubSupplier:
    """Deterministic supplier: one made-up track per slot."""

    def __init__(self):
        self.calls = []

    def generate_one(self, slot_number, used_titles, config):
        self.calls.append(slot_number)
        return ContentEntry(slot_number=slot_number, title=f"Track {slot_number}", performer="Stub Band")


def inline_spawn(fn, *args):
    fn(*args)


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SOCKETIO_ASYNC_MODE = 'threading'
    TRUST_PROXY_HEADERS = False
    CONTENT_TARGET_SIZE = 5
    CONTENT_INITIAL_BATCH = 5
    CONTENT_BATCH_SIZE = 5
    CONTENT_GENERATOR_URL = ''
    DEEZER_ENABLED = False


@pytest.fixture()
def supplier():
    return StubSupplier()


@pytest.fixture()
def make_registry(supplier):
    def _make(spawn=inline_spawn, content_supplier=None, **defaults):
        config = dict(target_size=5, initial_batch=5, batch_size=5)
        config.update(defaults)
        return SessionRegistry(
            ContentGenerator(content_supplier or supplier, rng=random.Random(7)),
            card_generator=CardGenerator(rng=random.Random(42)),
            defaults=GenerationConfig(**config),
            rng=random.Random(3),
            spawn=spawn,
        )
    return _make


@pytest.fixture()
def registry(make_registry):
    return make_registry()


@pytest.fixture()
def flask_app(supplier):
    application, _ = create_app(TestConfig, supplier=supplier)
    application.extensions['musicbingo'].spawn = inline_spawn
    yield application


@pytest.fixture()
def socketio(flask_app):
    return flask_app.extensions['socketio']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app, socketio):
    clients = []

    def _make():
        c = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
