import json
import os
import sys
import pytest

# Ensure the backend root (containing the `cubegrid` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from cubegrid import create_app, socketio
from cubegrid.services.grid import Connection


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    GRID_X = 2
    GRID_Y = 1
    GRID_Z = 1
    RPC_UPSTREAM_URL = 'http://rpc.test/node'
    RPC_TIMEOUT_SEC = 5
    CORS_ORIGINS = ['http://localhost:3000']


class RecordingConnection(Connection):
    """In-memory connection that keeps every decoded frame it was sent."""

    def __init__(self, sid, fail=False):
        super().__init__(sid)
        self.fail = fail
        self.frames = []

    def _deliver(self, text):
        if self.fail:
            raise ConnectionError('broken pipe')
        self.frames.append(json.loads(text))

    def types(self):
        return [f['type'] for f in self.frames]

    def drain(self):
        frames, self.frames = self.frames, []
        return frames


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for extra viewers; all are disconnected on teardown."""
    created = []

    def _make():
        c = socketio.test_client(flask_app, namespace='/ws')
        created.append(c)
        return c

    yield _make
    for c in created:
        try:
            if c.is_connected('/ws'):
                c.disconnect(namespace='/ws')
        except Exception:
            pass


def received_events(test_client):
    """Decode the JSON text frames a Socket.IO test client has received."""
    events = []
    for pkt in test_client.get_received('/ws'):
        if pkt['name'] != 'message':
            continue
        data = pkt['args']
        events.append(json.loads(data) if isinstance(data, str) else data)
    return events


@pytest.fixture()
def received():
    return received_events


@pytest.fixture()
def make_conn():
    def _make(sid, fail=False):
        return RecordingConnection(sid, fail=fail)
    return _make
