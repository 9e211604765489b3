from __future__ import annotations

import logging

from flask_socketio import SocketIO

logger = logging.getLogger(__name__)


class SocketIONotifier:
    """Outbound side of the gateway as seen by the round engine.

    ``to`` is either a room code (broadcast to the session) or a single
    connection id.
    """

    def __init__(self, socketio: SocketIO) -> None:
        self._socketio = socketio

    def emit(self, event: str, payload=None, to: str | None = None, skip_sid: str | None = None) -> None:
        logger.debug("emit %s to=%s", event, to)
        if payload is None:
            self._socketio.emit(event, to=to, skip_sid=skip_sid)
        else:
            self._socketio.emit(event, payload, to=to, skip_sid=skip_sid)
