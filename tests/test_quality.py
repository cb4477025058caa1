from __future__ import annotations

import pytest

from tradeboard.data.schema.records import RankingStats
from tradeboard.domain.classify.quality import QualityBand, quality_band


@pytest.mark.parametrize(
    "score, band",
    [
        (-1.0, QualityBand.RED),
        (0.49, QualityBand.RED),
        (0.5, QualityBand.YELLOW),
        (1.49, QualityBand.YELLOW),
        (1.5, QualityBand.GREEN),
        (2.99, QualityBand.GREEN),
        (3.0, QualityBand.STRONG),
    ],
)
def test_band_boundaries(score: float, band: QualityBand) -> None:
    assert quality_band(RankingStats(trades=20, score=score)) is band


def test_trade_gate_dominates_score() -> None:
    assert quality_band(RankingStats(trades=5, score=10.0)) is QualityBand.NA


def test_min_trades_is_configurable() -> None:
    stats = RankingStats(trades=5, score=10.0)
    assert quality_band(stats, min_trades=5) is QualityBand.STRONG


def test_missing_inputs() -> None:
    assert quality_band(None) is QualityBand.NA
    assert quality_band(RankingStats(trades=50)) is QualityBand.NA
    assert quality_band(RankingStats(trades=50, score=float("nan"))) is QualityBand.NA
    # no trade count: the score decides
    assert quality_band(RankingStats(score=2.0)) is QualityBand.GREEN


def test_band_order_and_labels() -> None:
    assert QualityBand.NA < QualityBand.RED < QualityBand.YELLOW < QualityBand.GREEN < QualityBand.STRONG
    assert QualityBand.GREEN.label == "GREEN"
