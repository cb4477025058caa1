"""Runtime configuration.

Everything comes from environment variables (GitHub Actions secrets/vars or a
local ``.env``). Gate presets are *not* here; they live in presets.json.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Lädt lokal die .env Datei (falls vorhanden)
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MIN_TRADES = 20
DEFAULT_STATS_TEMPLATE = "{rankings_dir}/{universe}{trend_suffix}.csv"


def get_setting(key: str, default: str | None = None) -> str | None:
    v = os.getenv(key)
    if v is None or v.strip() == "":
        return default
    return v.strip()


def _int(key: str, default: int) -> int:
    raw = get_setting(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{key}={raw!r} ist keine Zahl, nutze {default}")
        return default


def _float(key: str, default: float) -> float:
    raw = get_setting(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{key}={raw!r} ist keine Zahl, nutze {default}")
        return default


@dataclass(frozen=True)
class Settings:
    data_root: str = "docs"
    manifest_path: str = "data/manifest.json"
    min_trades: int = DEFAULT_MIN_TRADES
    gate: str = "off"
    fetch_timeout: float = 15.0
    max_concurrency: int = 8
    stats_template: str = DEFAULT_STATS_TEMPLATE
    log_level: str = "INFO"
    log_path: str = "logs/tradeboard.log"

    @classmethod
    def from_env(cls) -> "Settings":
        d = cls()
        return cls(
            data_root=get_setting("TRADEBOARD_DATA_ROOT", d.data_root),
            manifest_path=get_setting("TRADEBOARD_MANIFEST", d.manifest_path),
            min_trades=_int("TRADEBOARD_MIN_TRADES", d.min_trades),
            gate=get_setting("TRADEBOARD_GATE", d.gate),
            fetch_timeout=_float("TRADEBOARD_FETCH_TIMEOUT", d.fetch_timeout),
            max_concurrency=_int("TRADEBOARD_MAX_CONCURRENCY", d.max_concurrency),
            stats_template=get_setting("TRADEBOARD_STATS_TEMPLATE", d.stats_template),
            log_level=get_setting("TRADEBOARD_LOG_LEVEL", d.log_level),
            log_path=get_setting("TRADEBOARD_LOG_PATH", d.log_path),
        )
