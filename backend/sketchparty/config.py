import os


def _int_list(raw: str) -> tuple[int, ...]:
    return tuple(int(p) for p in raw.split(",") if p.strip())


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Game
    ROUND_DURATION_SEC = int(os.environ.get("ROUND_DURATION_SEC", "180"))
    HINT_CHECKPOINTS = _int_list(os.environ.get("HINT_CHECKPOINTS", "120,60"))
    ROUND_COOLDOWN_SEC = float(os.environ.get("ROUND_COOLDOWN_SEC", "3"))
    WORD_CHOICES_COUNT = int(os.environ.get("WORD_CHOICES_COUNT", "3"))
    DEFAULT_MAX_ROUNDS = int(os.environ.get("DEFAULT_MAX_ROUNDS", "3"))
    MAX_ROUNDS_CAP = int(os.environ.get("MAX_ROUNDS_CAP", "20"))
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "1"))
    STROKE_BUFFER_SIZE = int(os.environ.get("STROKE_BUFFER_SIZE", "1000"))
    GUESSER_POINTS = 10
    DRAWER_POINTS = 5

    # Synthetic player
    AI_DRAW_INTERVAL_MS = int(os.environ.get("AI_DRAW_INTERVAL_MS", "60"))
    AI_FIRST_GUESS_DELAY = int(os.environ.get("AI_FIRST_GUESS_DELAY", "10"))
    AI_MEDIUM_FIRST_GUESS_DELAY = int(os.environ.get("AI_MEDIUM_FIRST_GUESS_DELAY", "5"))
    AI_MIN_STROKES = int(os.environ.get("AI_MIN_STROKES", "40"))
    AI_MAX_GUESSES = int(os.environ.get("AI_MAX_GUESSES", "6"))
    AI_GUESS_SPACING = int(os.environ.get("AI_GUESS_SPACING", "5"))
    AI_SHAPE_HINTS = os.environ.get("AI_SHAPE_HINTS", "1") == "1"
