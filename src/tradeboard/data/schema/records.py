from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional

from tradeboard.data.io.cells import to_text


class JoinKey(NamedTuple):
    """(universe, symbol), trimmed, compared case-sensitively."""

    universe: str
    symbol: str

    @classmethod
    def of(cls, universe: Any, symbol: Any) -> "JoinKey":
        return cls(to_text(universe), to_text(symbol))


@dataclass(frozen=True)
class RankingStats:
    """Backtest performance per symbol (pre-computed upstream)."""

    trades: Optional[int] = None
    score: Optional[float] = None
    mean_r: Optional[float] = None
    pf: Optional[float] = None  # may be math.inf (no losing trades)

    @property
    def is_empty(self) -> bool:
        return self.trades is None and self.score is None and self.mean_r is None and self.pf is None

    def to_dict(self) -> dict[str, Any]:
        return {"trades": self.trades, "score": self.score, "meanR": self.mean_r, "pf": self.pf}


@dataclass(frozen=True)
class RiskOverlay:
    risk_flag: Optional[str] = None
    events: tuple[str, ...] = ()
    news: tuple[str, ...] = ()


@dataclass(frozen=True)
class CandidateRecord:
    universe: str
    symbol: str
    buy: Optional[float] = None
    sl: Optional[float] = None
    tp: Optional[float] = None
    rr: Optional[float] = None
    hold: int | str | None = None  # bars, or a day range like "3-10d"
    shares: Optional[int] = None
    risk_usd: Optional[float] = None
    fee_usd: Optional[float] = None
    stats: Optional[RankingStats] = None
    overlay: Optional[RiskOverlay] = None

    @property
    def key(self) -> JoinKey:
        return JoinKey.of(self.universe, self.symbol)


def derive_rr(buy: float | None, sl: float | None, tp: float | None) -> float | None:
    """Reward/risk = (tp - buy) / (buy - sl); None if undefined."""
    if buy is None or sl is None or tp is None:
        return None
    risk = buy - sl
    if risk <= 0:
        return None
    rr = (tp - buy) / risk
    return rr if math.isfinite(rr) else None


STATS_FIELDS = {"trades": "trades", "score": "score", "meanR": "mean_r", "mean_R": "mean_r", "mean_r": "mean_r", "pf": "pf"}


def record_value(record: CandidateRecord, key: str) -> Any:
    """Resolve a display/sort key on a record ("score" reads the attached stats)."""
    if key in STATS_FIELDS:
        if record.stats is None:
            return None
        return getattr(record.stats, STATS_FIELDS[key])
    if key == "risk_flag":
        return record.overlay.risk_flag if record.overlay else None
    return getattr(record, key, None)
