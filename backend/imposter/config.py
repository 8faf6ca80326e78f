import os
from pathlib import Path


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Empty means "pick a sensible default for this platform" (see server.py)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Word catalog
    WORDS_PATH = os.environ.get(
        "WORDS_PATH",
        str(Path(__file__).resolve().parent / "game" / "words.json"),
    )

    # Game
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "6"))
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "4"))
    MAX_PLAYERS = int(os.environ.get("MAX_PLAYERS", "10"))
    NAME_MAX_LENGTH = int(os.environ.get("NAME_MAX_LENGTH", "20"))
    IMPOSTER_START_WEIGHT = float(os.environ.get("IMPOSTER_START_WEIGHT", "0.3"))

    # Idle rooms (0 disables the sweep)
    ROOM_IDLE_TTL_SEC = int(os.environ.get("ROOM_IDLE_TTL_SEC", "21600"))
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get("ROOM_SWEEP_INTERVAL_SEC", "60"))
