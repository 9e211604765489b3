"""Guess selection for the synthetic player.

The guesser never sees the drawing itself. It works from the masked word,
the time already spent, the bounding box of the sampled human strokes, and
the static word profiles, and on the hard tier it sometimes just cheats.
"""

from __future__ import annotations

import random
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..config import Config
from ..game.masking import HIDDEN, is_consistent, revealed_count
from ..game.models import Difficulty, Session
from ..game.words import WORDS, Complexity, Shape, is_catalog_word, profile_for

NONSENSE_PHASE_GUESSES = 3
JITTER = 0.2
REPEAT_BONUS = 0.5
LENGTH_BONUS = 0.5
SHAPE_BONUS = 0.75
COMPLEXITY_BONUS = 0.5


@dataclass(frozen=True)
class CheatModel:
    base: float
    gain: float
    ceiling: float

    def probability(self, known_ratio: float, time_ratio: float) -> float:
        info = max(known_ratio, time_ratio)
        return min(self.ceiling, self.base + self.gain * info)


HARD_CHEAT = CheatModel(base=0.1, gain=0.05, ceiling=0.98)


@dataclass
class GuessContext:
    target: str
    mask: str
    guess_number: int
    elapsed: int
    duration: int
    used: set[str] = field(default_factory=set)
    points: Sequence[tuple[float, float]] = ()
    catalog: Sequence[str] = WORDS
    use_shape: bool = True

    @property
    def known_ratio(self) -> float:
        return revealed_count(self.mask) / len(self.target) if self.target else 0.0

    @property
    def time_ratio(self) -> float:
        if self.duration <= 0:
            return 0.0
        return max(0.0, min(1.0, self.elapsed / self.duration))

    def unused(self, words: Iterable[str]) -> list[str]:
        return [w for w in words if w.lower() not in self.used]


@dataclass(frozen=True)
class ShapeEstimate:
    shape: Shape
    complexity: Complexity


def infer_shape(points: Sequence[tuple[float, float]]) -> ShapeEstimate | None:
    """Coarse shape class from the bounding box of sampled stroke points."""
    if not points:
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    w = max(xs) - min(xs)
    h = max(ys) - min(ys)

    if w <= 0 and h <= 0:
        return ShapeEstimate(Shape.GENERIC, Complexity.LOW)

    aspect = w / h if h > 0 else float("inf")
    if 0.8 <= aspect <= 1.25:
        shape = Shape.ROUND
    elif aspect > 1.4:
        shape = Shape.WIDE
    elif aspect < 0.7:
        shape = Shape.TALL
    else:
        shape = Shape.GENERIC

    # points per 100x100 px of bounding box
    area = max(w, 1.0) * max(h, 1.0)
    density = len(points) / (area / 10_000)
    if density < 2:
        complexity = Complexity.LOW
    elif density < 6:
        complexity = Complexity.MEDIUM
    else:
        complexity = Complexity.HIGH
    return ShapeEstimate(shape, complexity)


def letter_match_score(mask: str, word: str) -> float:
    return float(sum(1 for m, c in zip(mask, word) if m not in (HIDDEN, " ") and m == c))


def repeat_pattern_score(mask: str, word: str) -> float:
    if len(mask) != len(word):
        return 0.0
    positions: dict[str, list[int]] = {}
    for i, ch in enumerate(word):
        positions.setdefault(ch, []).append(i)
    score = 0.0
    for idxs in positions.values():
        if len(idxs) < 2:
            continue
        score += sum(REPEAT_BONUS for i in idxs if mask[i] not in (HIDDEN, " "))
    return score


def shape_score(estimate: ShapeEstimate | None, word: str) -> float:
    profile = profile_for(word)
    if estimate is None or profile is None:
        return 0.0
    score = 0.0
    if profile.shape == estimate.shape:
        score += SHAPE_BONUS
    if profile.complexity == estimate.complexity:
        score += COMPLEXITY_BONUS
    return score


def nonsense_word(target_length: int, rng: random.Random, taken: set[str] | None = None) -> str:
    """Random letters, length within target +/- 2, never a catalog word."""
    taken = taken or set()
    low = max(1, target_length - 2)
    high = max(low, target_length + 2)
    while True:
        length = rng.randint(low, high)
        w = "".join(rng.choice(string.ascii_lowercase) for _ in range(length))
        if not is_catalog_word(w) and w not in taken:
            return w


class GuessStrategy(ABC):
    difficulty: Difficulty

    @abstractmethod
    def choose(self, ctx: GuessContext, rng: random.Random) -> str | None:
        raise NotImplementedError


class EasyStrategy(GuessStrategy):
    """Deliberately bad: gibberish first, then any word of the right length."""

    difficulty = Difficulty.EASY

    def choose(self, ctx: GuessContext, rng: random.Random) -> str | None:
        if ctx.guess_number <= NONSENSE_PHASE_GUESSES:
            return nonsense_word(len(ctx.target), rng, ctx.used)

        same_len = [w for w in ctx.catalog if len(w) == len(ctx.target)]
        pool = ctx.unused(same_len) or ctx.unused(ctx.catalog)
        return rng.choice(pool) if pool else None


class MediumStrategy(GuessStrategy):
    difficulty = Difficulty.MEDIUM

    def choose(self, ctx: GuessContext, rng: random.Random) -> str | None:
        pool = ctx.unused(w for w in ctx.catalog if is_consistent(ctx.mask, w))
        return rng.choice(pool) if pool else None


class HardStrategy(GuessStrategy):
    difficulty = Difficulty.HARD

    def __init__(self, cheat: CheatModel = HARD_CHEAT) -> None:
        self.cheat = cheat

    def choose(self, ctx: GuessContext, rng: random.Random) -> str | None:
        if rng.random() < self.cheat.probability(ctx.known_ratio, ctx.time_ratio):
            return ctx.target
        return self.best_candidate(ctx, rng)

    def best_candidate(self, ctx: GuessContext, rng: random.Random) -> str | None:
        candidates = ctx.unused(w for w in ctx.catalog if is_consistent(ctx.mask, w))
        if not candidates:
            return None

        estimate = infer_shape(ctx.points) if ctx.use_shape else None
        best_word, best_score = None, float("-inf")
        for w in candidates:
            score = self.score(ctx, w, estimate) + rng.random() * JITTER
            if score > best_score:
                best_word, best_score = w, score
        return best_word

    @staticmethod
    def score(ctx: GuessContext, word: str, estimate: ShapeEstimate | None) -> float:
        score = letter_match_score(ctx.mask, word)
        score += repeat_pattern_score(ctx.mask, word)
        if len(word) == len(ctx.target):
            score += LENGTH_BONUS
        score += shape_score(estimate, word)
        return score


STRATEGIES: dict[Difficulty, GuessStrategy] = {
    Difficulty.EASY: EasyStrategy(),
    Difficulty.MEDIUM: MediumStrategy(),
    Difficulty.HARD: HardStrategy(),
}


class SyntheticGuesser:
    def __init__(self, config: type[Config] = Config, rng: random.Random | None = None) -> None:
        self.config = config
        self.rng = rng or random.Random()

    def first_guess_delay(self, difficulty: Difficulty) -> int:
        if difficulty == Difficulty.MEDIUM:
            return self.config.AI_MEDIUM_FIRST_GUESS_DELAY
        return self.config.AI_FIRST_GUESS_DELAY

    def should_guess(self, session: Session) -> bool:
        if not (session.ai_guessing_active and session.active and session.current_word):
            return False
        bot = session.synthetic_player
        drawer = session.drawer
        if bot is None or drawer is None or drawer.id == bot.id:
            return False
        if bot.id in session.correct_guessers:
            return False

        elapsed = session.elapsed(self.config.ROUND_DURATION_SEC)
        if elapsed < self.first_guess_delay(session.ai_difficulty):
            return False
        if session.ai_guess_count >= self.config.AI_MAX_GUESSES:
            return False
        if session.ai_last_guess_at is not None and elapsed - session.ai_last_guess_at < self.config.AI_GUESS_SPACING:
            return False
        return len(session.stroke_samples) >= self.config.AI_MIN_STROKES

    def context_for(self, session: Session) -> GuessContext:
        return GuessContext(
            target=session.current_word or "",
            mask=session.masked_word or "",
            guess_number=session.ai_guess_count + 1,
            elapsed=session.elapsed(self.config.ROUND_DURATION_SEC),
            duration=self.config.ROUND_DURATION_SEC,
            used=set(session.ai_used_guesses),
            points=list(session.stroke_samples),
            use_shape=self.config.AI_SHAPE_HINTS,
        )

    def next_guess(self, session: Session) -> str | None:
        strategy = STRATEGIES[session.ai_difficulty]
        return strategy.choose(self.context_for(session), self.rng)
