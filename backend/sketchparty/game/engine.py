"""Round state machine.

Drives one session through ``PREPARING -> AWAITING_WORD_CHOICE -> ACTIVE ->
ENDED`` until the round cap is reached, adjudicates guesses, and owns the
per-session timers. Every public method takes the session lock; intents that
are out of turn or malformed return ``False`` and change nothing.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from typing import Any, Callable, Protocol

from ..ai.drawer import stroke_sequence
from ..ai.guesser import SyntheticGuesser
from ..config import Config
from ..realtime import events
from .errors import StateConflict
from .masking import mask_word, reveal_one_letter
from .models import EndReason, Player, RoundHistoryEntry, RoundPhase, Session, StrokeEvent
from .registry import Removal, SessionStore
from .scheduler import TaskHandle
from .words import WORDS, pick_words

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def emit(self, event: str, payload: Any = None, to: str | None = None, skip_sid: str | None = None) -> None: ...


class Scheduler(Protocol):
    def every(self, interval: float, callback: Callable[[], None], name: str = "") -> TaskHandle: ...

    def later(self, delay: float, callback: Callable[[], None], name: str = "") -> TaskHandle: ...


class RoundEngine:
    def __init__(
        self,
        store: SessionStore,
        notifier: Notifier,
        scheduler: Scheduler,
        config: type[Config] = Config,
        rng: random.Random | None = None,
        guesser: SyntheticGuesser | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.scheduler = scheduler
        self.config = config
        self.rng = rng or random.Random()
        self.guesser = guesser or SyntheticGuesser(config, self.rng)

    # -- broadcasting -----------------------------------------------------

    def _emit(self, session: Session, event: str, payload: Any = None, skip_sid: str | None = None) -> None:
        self.notifier.emit(event, payload, to=session.code, skip_sid=skip_sid)

    def _emit_to(self, player_id: str, event: str, payload: Any = None) -> None:
        self.notifier.emit(event, payload, to=player_id)

    def _system(self, session: Session, text: str, to: str | None = None) -> None:
        msg = {"name": events.SYSTEM_NAME, "text": text, "type": "system"}
        if to:
            self._emit_to(to, events.CHAT_MESSAGE, msg)
        else:
            self._emit(session, events.CHAT_MESSAGE, msg)

    def _chat(self, session: Session, player: Player, text: str) -> None:
        self._emit(session, events.CHAT_MESSAGE, {"name": player.name, "text": text, "type": "chat"})

    def broadcast_scores(self, session: Session) -> None:
        self._emit(session, events.SCORES_UPDATE, {"scores": session.scores()})

    def broadcast_roster(self, session: Session) -> None:
        self._emit(session, events.PLAYER_LIST_UPDATE, session.roster())
        self.broadcast_scores(session)

    def _is_live(self, session: Session) -> bool:
        return self.store.get(session.code) is session

    # -- lobby ------------------------------------------------------------

    def announce_join(self, session: Session, player: Player) -> None:
        with session.lock:
            self.broadcast_roster(session)
            self._system(session, f"{player.name} joined the room.")
            self.sync_late_joiner(session, player.id)

    def sync_late_joiner(self, session: Session, player_id: str) -> None:
        with session.lock:
            drawer = session.drawer
            if session.active and drawer is not None:
                self._emit_to(player_id, events.ROUND_INFO, self._round_info(session))
                self._emit_to(player_id, events.TIMER_UPDATE, {"timeLeft": session.time_left})
            elif session.phase == RoundPhase.AWAITING_WORD_CHOICE and drawer is not None:
                self._emit_to(player_id, events.ROUND_PREPARING, self._round_preparing(session))

    def handle_departure(self, session: Session, removal: Removal | None) -> None:
        if removal is None or removal.torn_down:
            return
        with session.lock:
            self._system(session, f"{removal.player.name} left the room.")
            self.broadcast_roster(session)

            if removal.was_drawer:
                if session.phase == RoundPhase.AWAITING_WORD_CHOICE:
                    logger.info("drawer left %s before choosing; closing round %s", session.code, session.current_round)
                self.end_round(session, "drawerLeft", drawer_name=removal.player.name)
            elif session.active and session.everyone_guessed():
                self.end_round(session, "allGuessed")

    def sanitize_rounds(self, raw: Any) -> int:
        try:
            rounds = int(raw)
        except (TypeError, ValueError):
            return self.config.DEFAULT_MAX_ROUNDS
        if rounds < 1:
            return self.config.DEFAULT_MAX_ROUNDS
        return min(rounds, self.config.MAX_ROUNDS_CAP)

    def start_game(self, session: Session, requester_id: str, max_rounds: Any = None) -> bool:
        """Start, or restart, a game. Host only; resets rounds, history and scores."""
        with session.lock:
            if requester_id != session.host_id:
                logger.debug("non-host %s tried to start %s", requester_id, session.code)
                return False
            needed = self.config.MIN_PLAYERS
            if len(session.players) < needed:
                raise StateConflict(f"Need at least {needed} player{'s' if needed != 1 else ''}.")

            session.cancel_timers()
            session.max_rounds = self.sanitize_rounds(max_rounds)
            session.current_round = 0
            session.drawer_index = 0
            session.history = []
            session.phase = RoundPhase.IDLE
            for p in session.players:
                p.score = 0

            logger.info("game started in %s (%s rounds)", session.code, session.max_rounds)
            self._emit(session, events.GAME_STARTED)
            self.broadcast_scores(session)
            self.start_next_round(session)
            return True

    # -- round flow -------------------------------------------------------

    def _round_preparing(self, session: Session) -> dict:
        drawer = session.drawer
        return {
            "round": session.current_round,
            "maxRounds": session.max_rounds,
            "drawerName": drawer.name if drawer else "?",
        }

    def _round_info(self, session: Session) -> dict:
        payload = self._round_preparing(session)
        payload["maskedWord"] = session.masked_word
        return payload

    def start_next_round(self, session: Session) -> None:
        with session.lock:
            if not self._is_live(session) or not session.players:
                return

            session.cancel_timers()
            session.current_round += 1
            session.reset_round_state(self.config.STROKE_BUFFER_SIZE)
            session.phase = RoundPhase.PREPARING

            if session.current_round == 1:
                session.drawer_index = 0
            else:
                session.drawer_index = (session.drawer_index + 1) % len(session.players)

            drawer = session.drawer
            if drawer is None:
                logger.error(
                    "drawer index %s out of bounds in %s (%s players)",
                    session.drawer_index, session.code, len(session.players),
                )
                session.drawer_index = 0
                drawer = session.players[0]

            self._emit(session, events.ROUND_PREPARING, self._round_preparing(session))

            session.word_options = pick_words(WORDS, self.config.WORD_CHOICES_COUNT, self.rng)
            session.phase = RoundPhase.AWAITING_WORD_CHOICE

            if drawer.is_ai:
                self._begin_round(session, session.word_options[0])
            else:
                self._emit_to(drawer.id, events.CHOOSE_WORD, {
                    "roomCode": session.code,
                    "round": session.current_round,
                    "maxRounds": session.max_rounds,
                    "options": list(session.word_options),
                })

    def choose_word(self, session: Session, sender_id: str, word: Any) -> bool:
        with session.lock:
            if session.phase != RoundPhase.AWAITING_WORD_CHOICE:
                return False
            drawer = session.drawer
            if drawer is None or drawer.is_ai or drawer.id != sender_id:
                return False
            if not isinstance(word, str) or not word.strip():
                return False

            self._begin_round(session, word.strip())
            return True

    def _begin_round(self, session: Session, raw_word: str) -> None:
        drawer = session.drawer
        word = raw_word.lower()

        session.current_word = word
        session.masked_word = mask_word(word)
        session.word_options = []
        session.correct_guessers = []
        session.time_left = self.config.ROUND_DURATION_SEC
        session.phase = RoundPhase.ACTIVE
        session.ai_guessing_active = session.synthetic_player is not None and not drawer.is_ai
        # Clients wipe their canvas on roundInfo.
        session.canvas_cleared = True

        logger.info("round %s started in %s, drawer=%s", session.current_round, session.code, drawer.name)
        self._emit(session, events.ROUND_INFO, self._round_info(session))
        if not drawer.is_ai:
            self._emit_to(drawer.id, events.YOUR_WORD, {"word": raw_word})

        session.round_timer = self.scheduler.every(
            1.0, lambda: self.tick(session), name=f"round:{session.code}"
        )
        if drawer.is_ai:
            self._start_playback(session)

    def tick(self, session: Session) -> None:
        with session.lock:
            if not session.active or not self._is_live(session):
                return

            session.time_left = max(0, session.time_left - 1)
            self._emit(session, events.TIMER_UPDATE, {"timeLeft": session.time_left})

            if session.time_left in self.config.HINT_CHECKPOINTS:
                session.masked_word = reveal_one_letter(session.current_word, session.masked_word, self.rng)
                self._emit(session, events.HINT_UPDATE, {"maskedWord": session.masked_word})

            self._maybe_ai_guess(session)

            if session.active and session.time_left <= 0:
                self.end_round(session, "timeUp")

    def end_round(self, session: Session, reason: EndReason, drawer_name: str | None = None) -> bool:
        with session.lock:
            # A round whose word was never chosen still closes and is recorded.
            if session.phase not in (RoundPhase.ACTIVE, RoundPhase.AWAITING_WORD_CHOICE):
                return False

            session.phase = RoundPhase.ENDED
            session.ai_guessing_active = False
            session.cancel_timers()

            drawer = session.drawer
            name = drawer_name or (drawer.name if drawer else "?")
            guessers = []
            for pid in session.correct_guessers:
                p = session.player(pid)
                guessers.append(p.name if p else "?")

            entry = RoundHistoryEntry(
                round=session.current_round,
                word=session.current_word or "",
                drawer_name=name,
                correct_guessers=guessers,
            )
            session.history.append(entry)
            session.current_word = None
            session.masked_word = None
            session.pending_strokes = deque()
            session.word_options = []

            logger.info("round %s ended in %s (%s)", entry.round, session.code, reason)
            payload = entry.to_public()
            payload["reason"] = reason
            self._emit(session, events.ROUND_ENDED, payload)

            session.cooldown_timer = self.scheduler.later(
                self.config.ROUND_COOLDOWN_SEC,
                lambda: self.advance_after_cooldown(session),
                name=f"cooldown:{session.code}",
            )
            return True

    def advance_after_cooldown(self, session: Session) -> None:
        with session.lock:
            if not self._is_live(session) or session.phase != RoundPhase.ENDED:
                return
            session.cooldown_timer = None
            self._advance(session)

    def _advance(self, session: Session) -> None:
        if session.current_round >= session.max_rounds:
            session.cancel_timers()
            session.phase = RoundPhase.GAME_OVER
            logger.info("game over in %s after %s rounds", session.code, session.current_round)
            self._emit(session, events.GAME_OVER, {
                "scores": session.scores(),
                "history": [h.to_public() for h in session.history],
            })
            return
        self.start_next_round(session)

    # -- guessing ---------------------------------------------------------

    def submit_guess(self, session: Session, player_id: str, text: Any) -> bool:
        """Returns True only for a newly credited correct guess."""
        with session.lock:
            player = session.player(player_id)
            if player is None:
                return False
            return self._apply_guess(session, player, text)

    def _apply_guess(self, session: Session, player: Player, raw: Any, synthetic: bool = False) -> bool:
        text = raw.strip() if isinstance(raw, str) else ""
        if not text:
            return False
        normalized = text.lower()

        drawer = session.drawer
        if not session.active or not session.current_word or drawer is None:
            self._chat(session, player, text)
            return False

        is_answer = normalized == session.current_word
        if player.id == drawer.id:
            if is_answer:
                self._system(session, "The drawer can't send the answer.", to=player.id)
            else:
                self._chat(session, player, text)
            return False

        if is_answer:
            if player.id in session.correct_guessers:
                return False
            self._credit(session, player, drawer)
            return True

        self._chat(session, player, text)
        if synthetic:
            session.ai_used_guesses.add(normalized)
        return False

    def _credit(self, session: Session, guesser: Player, drawer: Player) -> None:
        session.correct_guessers.append(guesser.id)
        guesser.score += self.config.GUESSER_POINTS
        drawer.score += self.config.DRAWER_POINTS

        self._system(session, f"{guesser.name} guessed the word!")
        self.broadcast_scores(session)

        if session.everyone_guessed():
            self.end_round(session, "allGuessed")

    def _maybe_ai_guess(self, session: Session) -> None:
        if not self.guesser.should_guess(session):
            return
        bot = session.synthetic_player
        guess = self.guesser.next_guess(session)
        if not guess:
            return
        session.ai_guess_count += 1
        session.ai_last_guess_at = session.elapsed(self.config.ROUND_DURATION_SEC)
        logger.debug("AI guess #%s in %s: %s", session.ai_guess_count, session.code, guess)
        self._apply_guess(session, bot, guess, synthetic=True)

    # -- canvas -----------------------------------------------------------

    def relay_draw_event(self, session: Session, sender_id: str, data: Any) -> bool:
        with session.lock:
            if not session.active:
                return False
            drawer = session.drawer
            if drawer is None or drawer.is_ai or drawer.id != sender_id:
                return False
            event = StrokeEvent.from_payload(data)
            if event is None:
                return False

            if event.kind == "draw":
                session.stroke_samples.append((event.x, event.y))
            session.canvas_cleared = False
            self._emit(session, events.REMOTE_DRAW_EVENT, event.to_payload(), skip_sid=sender_id)
            return True

    def clear_canvas(self, session: Session, sender_id: str) -> bool:
        with session.lock:
            if session.player(sender_id) is None:
                return False
            if session.active:
                drawer = session.drawer
                if drawer is None or drawer.id != sender_id:
                    return False
            if session.canvas_cleared:
                return False
            session.canvas_cleared = True
            self._emit(session, events.CLEAR_CANVAS_ALL)
            return True

    def _start_playback(self, session: Session) -> None:
        session.pending_strokes = deque(stroke_sequence(session.current_word))
        session.draw_timer = self.scheduler.every(
            self.config.AI_DRAW_INTERVAL_MS / 1000,
            lambda: self.play_next_stroke(session),
            name=f"draw:{session.code}",
        )

    def play_next_stroke(self, session: Session) -> bool:
        with session.lock:
            if not session.active or not session.pending_strokes:
                if session.draw_timer is not None:
                    session.draw_timer.cancel()
                    session.draw_timer = None
                return False
            event = session.pending_strokes.popleft()
            session.canvas_cleared = False
            self._emit(session, events.REMOTE_DRAW_EVENT, event.to_payload())
            return True
