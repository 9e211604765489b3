from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from threading import RLock
from typing import Any, Literal

from .scheduler import TaskHandle


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, raw: Any) -> "Difficulty":
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.EASY

    @property
    def label(self) -> str:
        return self.value.capitalize()


class RoundPhase(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    AWAITING_WORD_CHOICE = "awaitingWordChoice"
    ACTIVE = "active"
    ENDED = "ended"
    GAME_OVER = "gameOver"


EndReason = Literal["timeUp", "allGuessed", "drawerLeft"]
StrokeKind = Literal["draw", "penUp", "penDown"]


@dataclass
class Player:
    id: str
    name: str
    score: int = 0
    is_ai: bool = False
    difficulty: Difficulty | None = None

    def to_public(self) -> dict:
        return {"id": self.id, "name": self.name, "score": self.score, "isAI": self.is_ai}

    def to_score(self) -> dict:
        return {"id": self.id, "name": self.name, "score": self.score}


@dataclass(frozen=True)
class StrokeEvent:
    kind: StrokeKind
    x: float | None = None
    y: float | None = None
    color: str | None = None
    stroke_width: float | None = None

    def to_payload(self) -> dict:
        if self.kind != "draw":
            return {"type": self.kind}
        return {
            "type": "draw",
            "x": self.x,
            "y": self.y,
            "color": self.color,
            "lineWidth": self.stroke_width,
        }

    @classmethod
    def from_payload(cls, data: Any) -> "StrokeEvent | None":
        """Parse a client ``drawEvent`` body; ``None`` when malformed."""
        if not isinstance(data, dict):
            return None
        kind = data.get("type")
        if kind in ("penUp", "penDown"):
            return cls(kind=kind)
        if kind != "draw":
            return None
        try:
            x = float(data["x"])
            y = float(data["y"])
        except (KeyError, TypeError, ValueError):
            return None
        color = data.get("color")
        width = data.get("lineWidth")
        return cls(
            kind="draw",
            x=x,
            y=y,
            color=color if isinstance(color, str) else None,
            stroke_width=width if isinstance(width, (int, float)) else None,
        )


@dataclass
class RoundHistoryEntry:
    round: int
    word: str
    drawer_name: str
    correct_guessers: list[str]

    def to_public(self) -> dict:
        return {
            "round": self.round,
            "word": self.word,
            "drawerName": self.drawer_name,
            "correctGuessers": list(self.correct_guessers),
        }


@dataclass(frozen=True)
class Round:
    """Read-only projection of the per-round fields of a Session."""

    round_number: int
    drawer_index: int
    secret_word: str | None
    mask: str | None
    time_remaining: int
    active: bool
    correct_guessers: tuple[str, ...]


@dataclass
class Session:
    code: str
    host_id: str
    players: list[Player] = field(default_factory=list)
    phase: RoundPhase = RoundPhase.IDLE
    max_rounds: int = 3
    current_round: int = 0
    drawer_index: int = 0
    current_word: str | None = None
    masked_word: str | None = None
    word_options: list[str] = field(default_factory=list)
    correct_guessers: list[str] = field(default_factory=list)
    time_left: int = 0
    history: list[RoundHistoryEntry] = field(default_factory=list)
    canvas_cleared: bool = False

    # Synthetic player bookkeeping
    ai_difficulty: Difficulty = Difficulty.EASY
    ai_guessing_active: bool = False
    ai_guess_count: int = 0
    ai_last_guess_at: int | None = None
    ai_used_guesses: set[str] = field(default_factory=set)
    stroke_samples: deque = field(default_factory=lambda: deque(maxlen=1000))
    pending_strokes: deque = field(default_factory=deque, repr=False)

    round_timer: TaskHandle | None = field(default=None, repr=False)
    draw_timer: TaskHandle | None = field(default=None, repr=False)
    cooldown_timer: TaskHandle | None = field(default=None, repr=False)
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    @property
    def active(self) -> bool:
        return self.phase == RoundPhase.ACTIVE

    @property
    def drawer(self) -> Player | None:
        if 0 <= self.drawer_index < len(self.players):
            return self.players[self.drawer_index]
        return None

    @property
    def synthetic_player(self) -> Player | None:
        return next((p for p in self.players if p.is_ai), None)

    @property
    def humans(self) -> list[Player]:
        return [p for p in self.players if not p.is_ai]

    def player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def index_of(self, player_id: str) -> int:
        for idx, p in enumerate(self.players):
            if p.id == player_id:
                return idx
        return -1

    def elapsed(self, round_duration: int) -> int:
        return max(0, round_duration - self.time_left)

    def everyone_guessed(self) -> bool:
        drawer = self.drawer
        if drawer is None:
            return False
        non_drawers = [p.id for p in self.players if p.id != drawer.id]
        return bool(non_drawers) and all(pid in self.correct_guessers for pid in non_drawers)

    def reset_round_state(self, stroke_buffer_size: int) -> None:
        self.current_word = None
        self.masked_word = None
        self.word_options = []
        self.correct_guessers = []
        self.time_left = 0
        self.ai_guessing_active = False
        self.ai_guess_count = 0
        self.ai_last_guess_at = None
        self.ai_used_guesses = set()
        self.stroke_samples = deque(maxlen=stroke_buffer_size)
        self.pending_strokes = deque()

    def cancel_timers(self, include_cooldown: bool = True) -> None:
        for name in ("round_timer", "draw_timer") + (("cooldown_timer",) if include_cooldown else ()):
            handle = getattr(self, name)
            if handle is not None:
                handle.cancel()
                setattr(self, name, None)

    def round_view(self) -> Round:
        return Round(
            round_number=self.current_round,
            drawer_index=self.drawer_index,
            secret_word=self.current_word,
            mask=self.masked_word,
            time_remaining=self.time_left,
            active=self.active,
            correct_guessers=tuple(self.correct_guessers),
        )

    def scores(self) -> list[dict]:
        return [p.to_score() for p in self.players]

    def roster(self) -> list[dict]:
        return [p.to_public() for p in self.players]

    def public_state(self) -> dict:
        drawer = self.drawer
        payload = {
            "code": self.code,
            "hostId": self.host_id,
            "phase": self.phase.value,
            "round": self.current_round,
            "maxRounds": self.max_rounds,
            "drawerName": drawer.name if drawer and self.phase != RoundPhase.IDLE else None,
            "maskedWord": self.masked_word,
            "timeLeft": self.time_left,
            "aiDifficulty": self.ai_difficulty.value,
            "players": self.roster(),
        }
        if self.phase in (RoundPhase.ENDED, RoundPhase.GAME_OVER):
            payload["history"] = [h.to_public() for h in self.history]
        return payload
