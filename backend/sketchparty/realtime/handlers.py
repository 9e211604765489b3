from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game.engine import RoundEngine
from ..game.errors import GameError
from ..game.models import Session
from ..game.registry import SessionStore, normalize_code
from . import events

logger = logging.getLogger(__name__)


def _payload(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


def register_socketio_handlers(socketio: SocketIO, store: SessionStore, engine: RoundEngine) -> None:
    def _room_error(exc: GameError) -> None:
        logger.debug("rejected intent from %s: %s", request.sid, exc.code)
        emit(events.ROOM_ERROR, {"message": exc.message})

    def _lookup(data: Any) -> tuple[dict, Session | None]:
        payload = _payload(data)
        room_code = normalize_code(payload.get("roomCode"))
        if not room_code:
            return payload, None
        session = store.get(room_code)
        if session is None:
            logger.debug("intent from %s for unknown room %s", request.sid, room_code)
        return payload, session

    @socketio.on(events.CREATE_ROOM)
    def create_room(data):
        payload = _payload(data)
        try:
            session = store.create_session(request.sid, payload.get("name"))
        except GameError as exc:
            _room_error(exc)
            return

        join_room(session.code)
        emit(events.ROOM_CREATED, {
            "roomCode": session.code,
            "players": session.roster(),
            "isHost": True,
        })

    @socketio.on(events.JOIN_ROOM)
    def join_room_intent(data):
        payload = _payload(data)
        try:
            session = store.join_session(payload.get("roomCode"), request.sid, payload.get("name"))
        except GameError as exc:
            _room_error(exc)
            return

        join_room(session.code)
        emit(events.ROOM_JOINED, {
            "roomCode": session.code,
            "players": session.roster(),
            "isHost": session.host_id == request.sid,
        })
        engine.announce_join(session, session.player(request.sid))

    @socketio.on(events.ADD_AI_PLAYER)
    def add_ai_player(data):
        payload, session = _lookup(data)
        if session is None:
            return

        bot = store.add_synthetic_player(session, request.sid, payload.get("difficulty"))
        if bot is None:
            return
        engine.announce_join(session, bot)

    @socketio.on(events.START_GAME)
    def start_game(data):
        payload, session = _lookup(data)
        if session is None:
            return

        try:
            engine.start_game(session, request.sid, payload.get("maxRounds"))
        except GameError as exc:
            _room_error(exc)

    @socketio.on(events.WORD_CHOSEN)
    def word_chosen(data):
        payload, session = _lookup(data)
        if session is None:
            return
        engine.choose_word(session, request.sid, payload.get("word"))

    @socketio.on(events.GUESS_WORD)
    def guess_word(data):
        payload, session = _lookup(data)
        if session is None:
            return
        engine.submit_guess(session, request.sid, payload.get("guess"))

    @socketio.on(events.DRAW_EVENT)
    def draw_event(data):
        payload, session = _lookup(data)
        if session is None:
            return
        engine.relay_draw_event(session, request.sid, payload.get("event"))

    @socketio.on(events.CLEAR_CANVAS)
    def clear_canvas(data):
        _, session = _lookup(data)
        if session is None:
            return
        engine.clear_canvas(session, request.sid)

    @socketio.on("disconnect")
    def on_disconnect(*args):
        # Remove player from any rooms where present (linear scan)
        for session in store.sessions_for(request.sid):
            leave_room(session.code)
            # Timers must not observe the shifted roster before the departure is handled.
            with session.lock:
                removal = store.remove_player(session, request.sid)
                engine.handle_departure(session, removal)
