# armory/config.py

import os

DEFAULT_BASE_URL = "https://armory.warmane.com"
DEFAULT_MAX_CONCURRENT = 32
DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_DB_PATH = "data/armory.db"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


BASE_URL = os.getenv("ARMORY_BASE_URL", "").strip().rstrip("/") or DEFAULT_BASE_URL
MAX_CONCURRENT = _env_int("ARMORY_MAX_CONCURRENT", DEFAULT_MAX_CONCURRENT)
TIMEOUT_SECONDS = _env_int("ARMORY_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
DB_PATH = os.getenv("ARMORY_DB_PATH", "").strip() or DEFAULT_DB_PATH
