"""
Single place for default server/game configuration.
Each value can be overridden with the environment variable named next to it.
"""

import os
from pathlib import Path

from quizconquest.engine import GRID_HEIGHT as DEFAULT_GRID_HEIGHT, GRID_WIDTH as DEFAULT_GRID_WIDTH


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


DATA_DIR = Path(__file__).parent / "data"

# Board size (QC_GRID_WIDTH / QC_GRID_HEIGHT)
GRID_WIDTH = _env_int("QC_GRID_WIDTH", DEFAULT_GRID_WIDTH)
GRID_HEIGHT = _env_int("QC_GRID_HEIGHT", DEFAULT_GRID_HEIGHT)

# Pause between the last answer and the result, so clients can close the question prompt (QC_SETTLE_DELAY_MS)
SETTLE_DELAY_SECONDS = _env_int("QC_SETTLE_DELAY_MS", 1000) / 1000

# Trivia bank (QC_QUESTIONS_PATH)
QUESTIONS_PATH = Path(os.environ.get("QC_QUESTIONS_PATH", DATA_DIR / "questions.json"))

# A player disconnecting mid-game forfeits their territories (QC_FORFEIT_ON_DISCONNECT). Off = territories stay owned.
FORFEIT_ON_DISCONNECT = _env_bool("QC_FORFEIT_ON_DISCONNECT", False)

# Break speed ties on client-reported response times (QC_TRUST_CLIENT_TIMING).
# Clients can lie about this; false uses server-observed elapsed time instead.
TRUST_CLIENT_TIMING = _env_bool("QC_TRUST_CLIENT_TIMING", True)

# How far a client timing claim may exceed server-observed time before it is flagged (QC_TIMING_TOLERANCE_MS)
TIMING_TOLERANCE_MS = _env_int("QC_TIMING_TOLERANCE_MS", 250)

# QC_CORS_ORIGINS, comma separated
CORS_ORIGINS = [
    o.strip() for o in os.environ.get(
        "QC_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173,http://localhost:8080"
    ).split(",") if o.strip()
]

LOG_LEVEL = os.environ.get("QC_LOG_LEVEL", "INFO").upper()

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = _env_int("PORT", 3000)
