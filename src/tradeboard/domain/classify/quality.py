"""
Quality Band für Ranking-Stats

Reine Funktion von (trades, score). Wird pro Render berechnet, nie gespeichert.
Das Trade-Gate hat Vorrang: zu wenige Trades -> NA, egal wie hoch der Score ist.
"""

from __future__ import annotations

import enum
import math
from typing import Optional

from tradeboard.config import DEFAULT_MIN_TRADES
from tradeboard.data.schema.records import RankingStats

# lower edges (inclusive) of the bands above RED
YELLOW_MIN = 0.5
GREEN_MIN = 1.5
STRONG_MIN = 3.0


class QualityBand(enum.IntEnum):
    NA = 0
    RED = 1
    YELLOW = 2
    GREEN = 3
    STRONG = 4

    @property
    def label(self) -> str:
        return self.name


def quality_band(stats: Optional[RankingStats], min_trades: int = DEFAULT_MIN_TRADES) -> QualityBand:
    if stats is None or stats.score is None:
        return QualityBand.NA
    if isinstance(stats.score, float) and math.isnan(stats.score):
        return QualityBand.NA
    if stats.trades is not None and stats.trades < min_trades:
        return QualityBand.NA

    score = stats.score
    if score < YELLOW_MIN:
        return QualityBand.RED
    if score < GREEN_MIN:
        return QualityBand.YELLOW
    if score < STRONG_MIN:
        return QualityBand.GREEN
    return QualityBand.STRONG
