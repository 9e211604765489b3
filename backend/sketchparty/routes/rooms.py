from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    session = current_app.extensions["sketchparty"].store.get(code)
    if not session:
        return jsonify({"error": "room_not_found"}), 404
    with session.lock:
        return jsonify(session.public_state())
