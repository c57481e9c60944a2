import os
import sys
import pytest

# Ensure the backend root (containing the `votebracket` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from votebracket import create_app, socketio
from votebracket.services.rooms import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ROOM_CODE_LENGTH = 4
    ROOM_CODE_ATTEMPTS = 100
    SOCKETIO_NAMESPACE = '/'
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    ROOM_NOT_FOUND_MESSAGE = 'Room not found!'


def sequential_codes(*codes):
    """Code generator yielding the given codes in order."""
    it = iter(codes)
    return lambda: next(it)


# Two-round bracket: m1 and m2 feed the final m3.
FOUR_PLAYER_BRACKET = [
    {'id': 'm1', 'p1': 'Alpha', 'p2': 'Bravo', 'next': 'm3'},
    {'id': 'm2', 'p1': 'Charlie', 'p2': 'Delta', 'next': 'm3'},
    {'id': 'm3', 'p1': None, 'p2': None, 'src1': 'm1', 'src2': 'm2', 'round': 'Final'},
]


@pytest.fixture()
def bracket_defs():
    # Fresh copies; the engine must not depend on callers keeping them intact
    return [dict(m) for m in FOUR_PLAYER_BRACKET]


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Build connected Socket.IO test clients; all are disconnected afterwards."""
    clients = []

    def make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield make
    for c in clients:
        if c.is_connected():
            c.disconnect()
