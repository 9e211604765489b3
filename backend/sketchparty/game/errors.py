from __future__ import annotations


class GameError(Exception):
    """Base for rejected player intents.

    ``code`` is a stable machine-readable tag, ``message`` is safe to show
    to the player that sent the intent.
    """

    code = "game_error"
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationRejection(GameError):
    code = "invalid_payload"
    default_message = "Invalid request."


class NotFoundRejection(GameError):
    code = "room_not_found"
    default_message = "Room not found."


class StateConflict(GameError):
    code = "state_conflict"
    default_message = "That is not possible right now."


class AlreadyJoined(StateConflict):
    code = "already_joined"
    default_message = "You are already in this room."
