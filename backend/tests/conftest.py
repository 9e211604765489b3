import os
import random
import sys
from dataclasses import dataclass
from typing import Callable

import pytest

# Ensure the backend root (containing the `sketchparty` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from sketchparty.config import Config
from sketchparty.game.engine import RoundEngine
from sketchparty.game.registry import SessionStore
from sketchparty.game.scheduler import TaskHandle
from sketchparty.server import create_app


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    TRUST_PROXY_HEADERS = False
    ROUND_DURATION_SEC = 180
    HINT_CHECKPOINTS = (120, 60)
    ROUND_COOLDOWN_SEC = 0
    MIN_PLAYERS = 1


@dataclass
class ScheduledTask:
    handle: TaskHandle
    callback: Callable[[], None]
    interval: float
    repeat: bool


class ManualScheduler:
    """Records timers instead of running them; tests fire them explicitly."""

    def __init__(self):
        self.tasks = []

    def every(self, interval, callback, name=""):
        handle = TaskHandle(name)
        self.tasks.append(ScheduledTask(handle, callback, interval, True))
        return handle

    def later(self, delay, callback, name=""):
        handle = TaskHandle(name)
        self.tasks.append(ScheduledTask(handle, callback, delay, False))
        return handle

    def pending(self, repeat=None):
        return [
            t for t in self.tasks
            if not t.handle.cancelled and (repeat is None or t.repeat == repeat)
        ]

    def run_delayed(self):
        """Fire every pending one-shot timer once; returns how many ran."""
        ran = 0
        for task in self.pending(repeat=False):
            task.handle.cancel()
            task.callback()
            ran += 1
        return ran


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def emit(self, event, payload=None, to=None, skip_sid=None):
        self.sent.append((event, payload, to, skip_sid))

    def events(self, name, to=None):
        return [p for (e, p, t, _) in self.sent if e == name and (to is None or t == to)]

    def names(self):
        return [e for (e, _, _, _) in self.sent]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def store():
    codes = iter(["ABCD", "EFGH", "JKLM", "NPQR"])
    return SessionStore(config=TestConfig, rng=random.Random(7), code_factory=lambda: next(codes))


@pytest.fixture()
def engine(store, notifier, scheduler):
    return RoundEngine(store, notifier, scheduler, config=TestConfig, rng=random.Random(11))


@pytest.fixture()
def two_player_session(store):
    session = store.create_session("alice-sid", "Alice")
    store.join_session(session.code, "bob-sid", "Bob")
    return session


@pytest.fixture()
def socket_app(scheduler):
    app, socketio = create_app(TestConfig, scheduler=scheduler, async_mode="threading")
    return app, socketio


@pytest.fixture()
def client(socket_app):
    app, _ = socket_app
    return app.test_client()


@pytest.fixture()
def sio_factory(socket_app):
    app, socketio = socket_app
    clients = []

    def _make():
        test_client = socketio.test_client(app, flask_test_client=app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
