"""Configuration loading from environment variables and defaults."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _env_bool(key: str, default: str = "false") -> bool:
    return _env(key, default).lower() in ("true", "1", "yes")


# Suggestion cache: snapshot older than this is rebuilt before ranking
CACHE_TTL_SECONDS = float(_env("SUGGEST_CACHE_TTL_SECONDS", "300"))

# Maximum number of suggestions returned per query
RESULT_LIMIT = int(_env("SUGGEST_RESULT_LIMIT", "8"))

# Keep manually recorded contacts across a rebuild that does not re-derive them
PRESERVE_MANUAL = _env_bool("SUGGEST_PRESERVE_MANUAL")

# CLI logging
_level_name = _env("SUGGEST_LOG_LEVEL", "INFO").upper()
if isinstance(logging.getLevelName(_level_name), int):
    LOG_LEVEL = _level_name
else:
    logging.getLogger(__name__).warning(
        "Invalid SUGGEST_LOG_LEVEL %r, falling back to INFO", _level_name,
    )
    LOG_LEVEL = "INFO"
