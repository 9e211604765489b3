from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum


class Shape(str, Enum):
    ROUND = "round"
    WIDE = "wide"
    TALL = "tall"
    GENERIC = "generic"


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class WordProfile:
    shape: Shape
    complexity: Complexity


def _p(shape: str, complexity: str) -> WordProfile:
    return WordProfile(Shape(shape), Complexity(complexity))


# Order matters: the AI guesser breaks score ties by catalog position.
WORD_PROFILES: dict[str, WordProfile] = {
    "pizza": _p("round", "medium"),
    "airplane": _p("wide", "high"),
    "cat": _p("generic", "medium"),
    "dog": _p("generic", "medium"),
    "computer": _p("wide", "medium"),
    "banana": _p("tall", "low"),
    "tree": _p("tall", "medium"),
    "car": _p("wide", "medium"),
    "house": _p("tall", "medium"),
    "phone": _p("tall", "low"),
    "book": _p("wide", "low"),
    "guitar": _p("tall", "high"),
    "mountain": _p("generic", "medium"),
    "river": _p("wide", "high"),
    "sun": _p("round", "low"),
    "moon": _p("round", "low"),
    "cloud": _p("round", "medium"),
    "umbrella": _p("tall", "medium"),
    "cookie": _p("round", "medium"),
    "pencil": _p("tall", "low"),
    "chair": _p("tall", "medium"),
    "table": _p("wide", "medium"),
    "flower": _p("tall", "high"),
    "rocket": _p("tall", "medium"),
    "fish": _p("wide", "medium"),
    "train": _p("wide", "high"),
    "shoe": _p("wide", "low"),
    "ball": _p("round", "low"),
    "camera": _p("wide", "medium"),
}

WORDS: tuple[str, ...] = tuple(WORD_PROFILES)

_CATALOG = frozenset(WORDS)


def pick_words(words: list[str] | tuple[str, ...], count: int, rng: random.Random | None = None) -> list[str]:
    """Pick up to ``count`` distinct words, keeping the first occurrence of duplicates."""
    unique = list(dict.fromkeys(w for w in words if w))
    rng = rng or random
    return rng.sample(unique, min(count, len(unique)))


def is_catalog_word(text: str) -> bool:
    return (text or "").strip().lower() in _CATALOG


def profile_for(word: str) -> WordProfile | None:
    return WORD_PROFILES.get((word or "").strip().lower())
