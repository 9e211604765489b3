"""Masked display form of the secret word and the letter-by-letter hint schedule."""

from __future__ import annotations

import random

HIDDEN = "_"


def mask_word(word: str) -> str:
    return "".join(ch if ch == " " else HIDDEN for ch in word)


def hidden_positions(word: str, mask: str) -> list[int]:
    return [i for i, ch in enumerate(word) if ch != " " and mask[i] == HIDDEN]


def reveal_one_letter(word: str, mask: str, rng: random.Random | None = None) -> str:
    """Disclose one hidden letter chosen uniformly at random.

    Spaces are never candidates. Returns ``mask`` unchanged once every
    letter is visible.
    """
    if len(mask) != len(word):
        raise ValueError("mask and word lengths differ")

    candidates = hidden_positions(word, mask)
    if not candidates:
        return mask

    idx = (rng or random).choice(candidates)
    return mask[:idx] + word[idx] + mask[idx + 1:]


def revealed_count(mask: str) -> int:
    return sum(1 for ch in mask if ch not in (HIDDEN, " "))


def is_consistent(mask: str, candidate: str) -> bool:
    """True when ``candidate`` agrees with every disclosed position of ``mask``."""
    if len(mask) != len(candidate):
        return False
    for m, c in zip(mask, candidate):
        if m == HIDDEN:
            if c == " ":
                return False
            continue
        if m != c:
            return False
    return True
