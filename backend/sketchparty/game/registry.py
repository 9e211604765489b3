from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable

from ..config import Config
from .errors import AlreadyJoined, NotFoundRejection, ValidationRejection
from .models import Difficulty, Player, RoundPhase, Session

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 4
MAX_NAME_LENGTH = 16
_ROUND_PHASES = (RoundPhase.PREPARING, RoundPhase.AWAITING_WORD_CHOICE, RoundPhase.ACTIVE)


def make_room_code(rng: random.Random | None = None) -> str:
    rng = rng or random
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(raw: Any) -> str:
    return str(raw or "").strip().upper()


def validate_name(name: Any) -> str:
    n = str(name or "").strip()
    if not n or len(n) > MAX_NAME_LENGTH:
        raise ValidationRejection("Please enter a name (1-16 characters).")
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        raise ValidationRejection("Names cannot contain < or >.")
    if any(ord(ch) < 32 for ch in n):
        raise ValidationRejection("Names cannot contain control characters.")
    return n


@dataclass(frozen=True)
class Removal:
    player: Player
    index: int
    was_host: bool
    was_drawer: bool
    torn_down: bool


class SessionStore:
    """Every live session of this process, keyed by room code."""

    def __init__(
        self,
        config: type[Config] = Config,
        rng: random.Random | None = None,
        code_factory: Callable[[], str] | None = None,
    ) -> None:
        self.config = config
        self._rng = rng or random.Random()
        self._code_factory = code_factory or (lambda: make_room_code(self._rng))
        self._lock = RLock()
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return normalize_code(code) in self._sessions

    def create_session(self, host_id: str, host_name: str) -> Session:
        name = validate_name(host_name)
        with self._lock:
            code = self._code_factory()
            while code in self._sessions:
                code = self._code_factory()

            session = Session(
                code=code,
                host_id=host_id,
                players=[Player(id=host_id, name=name)],
                max_rounds=self.config.DEFAULT_MAX_ROUNDS,
            )
            session.reset_round_state(self.config.STROKE_BUFFER_SIZE)
            self._sessions[code] = session

        logger.info("session %s created by %s", code, name)
        return session

    def get(self, code: Any) -> Session | None:
        with self._lock:
            return self._sessions.get(normalize_code(code))

    def list_sessions(self) -> list[Session]:
        with self._lock:
            return list(self._sessions.values())

    def sessions_for(self, player_id: str) -> list[Session]:
        with self._lock:
            return [s for s in self._sessions.values() if s.player(player_id) is not None]

    def delete(self, code: str) -> bool:
        with self._lock:
            session = self._sessions.pop(normalize_code(code), None)
        if session is None:
            return False
        with session.lock:
            session.cancel_timers()
        logger.info("session %s torn down", session.code)
        return True

    def join_session(self, code: Any, player_id: str, name: Any) -> Session:
        clean_code = normalize_code(code)
        if not clean_code:
            raise ValidationRejection("Please enter a room code.")
        clean_name = validate_name(name)

        session = self.get(clean_code)
        if session is None:
            raise NotFoundRejection()

        with session.lock:
            if session.player(player_id) is not None:
                raise AlreadyJoined()
            session.players.append(Player(id=player_id, name=clean_name))

        logger.info("%s joined session %s", clean_name, session.code)
        return session

    def remove_player(self, session: Session, player_id: str) -> Removal | None:
        with session.lock:
            idx = session.index_of(player_id)
            if idx == -1:
                return None

            was_drawer = idx == session.drawer_index and session.phase in _ROUND_PHASES
            removed = session.players.pop(idx)
            was_host = session.host_id == player_id
            if player_id in session.correct_guessers:
                session.correct_guessers.remove(player_id)

            torn_down = not session.humans
            if not torn_down:
                if was_host:
                    session.host_id = session.humans[0].id
                # A removal at or before the drawer keeps the rotation pointing
                # at whoever would have drawn next.
                if idx <= session.drawer_index and session.drawer_index > 0:
                    session.drawer_index -= 1
                if session.drawer_index >= len(session.players):
                    session.drawer_index = 0

        if torn_down:
            self.delete(session.code)

        logger.info("%s left session %s", removed.name, session.code)
        return Removal(player=removed, index=idx, was_host=was_host, was_drawer=was_drawer, torn_down=torn_down)

    def add_synthetic_player(self, session: Session, requester_id: str, difficulty: Any = None) -> Player | None:
        with session.lock:
            if requester_id != session.host_id:
                logger.debug("non-host %s tried to add an AI player to %s", requester_id, session.code)
                return None
            if session.synthetic_player is not None:
                return None

            tier = Difficulty.parse(difficulty)
            session.ai_difficulty = tier
            bot = Player(
                id=f"AI:{session.code}",
                name=f"AI Bot ({tier.label})",
                is_ai=True,
                difficulty=tier,
            )
            session.players.append(bot)

        logger.info("AI player (%s) added to session %s", tier.value, session.code)
        return bot
