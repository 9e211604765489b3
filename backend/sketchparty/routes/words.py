from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..game.words import WORDS, pick_words, profile_for

bp = Blueprint("words", __name__)


@bp.get("/words")
def get_words():
    config = current_app.config
    try:
        count = int(request.args.get("count", config["WORD_CHOICES_COUNT"]))
    except ValueError:
        count = config["WORD_CHOICES_COUNT"]
    count = max(1, min(count, len(WORDS)))

    words = []
    for w in pick_words(WORDS, count):
        profile = profile_for(w)
        words.append({"word": w, "shape": profile.shape.value, "complexity": profile.complexity.value})
    return jsonify({"words": words})
