"""
Pytest fixtures: a small published report on disk (docs/ layout)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tradeboard.data.schema.contract import parse_json
from tradeboard.errors import FetchFailure

ACTIVE_CSV = (
    "universe,symbol,entry,stop,target,time_stop_bars\n"
    "dax,ABC,100,90,130,15\n"
    "dax,XYZ,50,45,60,10\n"
    "sp500,NEW,20,19,23,5\n"
)

DAX_RANKINGS = (
    "symbol,trades,score,mean_R,profit_factor\n"
    "ABC,30,2.1,0.12,1.4\n"
    "XYZ,40,0.3,-0.05,0.9\n"
)

DESCRIPTOR = {
    "strategy": "swing",
    "asof": "2026-10-16",
    "generated_utc": "2026-10-16T22:00:00Z",
    "paths": {
        "csv": {
            "candidates_active": "data/swing/candidates_active.csv",
            "candidates_edge": "data/swing/candidates_edge.csv",
        },
        "archive": "data/swing/archive.json",
        "rankings_dir": "data/rankings",
    },
    "trend_suffix": "",
}

ARCHIVE = {
    "plans": {
        "trade": [
            {
                "universe": "dax",
                "symbol": "ABC",
                "buy": 100,
                "sl": 90,
                "tp": 130,
                "shares": 10,
                "risk_usd": 100.0,
                "fee_usd": 1.5,
                "hold_days_min": 3,
                "hold_days_max": 10,
                "stats": {"trades": 30, "score": 2.1, "meanR": 0.12, "pf": 1.4},
            }
        ]
    }
}


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def report_dir(tmp_path: Path) -> Path:
    """docs/ folder with one strategy; the sp500 ranking file is missing on purpose."""
    root = tmp_path / "docs"
    _write(
        root / "data" / "manifest.json",
        json.dumps({"strategies": [{"id": "swing", "name": "Swing v2", "path": "data/swing/latest.json"}]}),
    )
    _write(root / "data" / "swing" / "latest.json", json.dumps(DESCRIPTOR))
    _write(root / "data" / "swing" / "candidates_active.csv", ACTIVE_CSV)
    _write(root / "data" / "swing" / "candidates_edge.csv", "universe,symbol,buy,sl,tp\n")
    _write(root / "data" / "swing" / "archive.json", json.dumps(ARCHIVE))
    _write(root / "data" / "rankings" / "dax.csv", DAX_RANKINGS)
    return root


@pytest.fixture(autouse=True)
def _reset_tradeboard_logger():
    """setup_logging() hangs handlers on the "tradeboard" logger; drop them after each test."""
    yield
    logger = logging.getLogger("tradeboard")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class FakeFetcher:
    """In-memory fetcher: location -> text; unknown locations raise FetchFailure."""

    def __init__(self, files: dict[str, str]):
        self.files = dict(files)
        self.calls: list[str] = []

    async def fetch_text(self, location: str) -> str:
        self.calls.append(location)
        if location not in self.files:
            raise FetchFailure(location, "file not found")
        return self.files[location]

    async def fetch_json(self, location: str):
        return parse_json(await self.fetch_text(location), location)


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
