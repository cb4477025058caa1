from __future__ import annotations

import math

from tradeboard.data.schema.canonical import normalize_row, stats_from_mapping
from tradeboard.data.schema.records import RankingStats, RiskOverlay, derive_rr


def test_alias_priority_follows_table_order() -> None:
    rec = normalize_row({"ticker": "T", "symbol": "S", "entry_price": 11, "entry": 10})
    assert rec.symbol == "S"
    assert rec.buy == 10.0


def test_present_alias_wins_even_when_empty() -> None:
    rec = normalize_row({"symbol": "A", "buy": None, "entry": 100})
    assert rec.buy is None


def test_plan_aliases() -> None:
    rec = normalize_row(
        {"market_symbol": "dax", "ticker": "SAP", "stop_price": "90", "tp_price": "130", "buy": "100",
         "risk$": "25,5", "fee$": "1", "shares": "12"}
    )
    assert rec.universe == "dax"
    assert rec.symbol == "SAP"
    assert (rec.buy, rec.sl, rec.tp) == (100.0, 90.0, 130.0)
    assert rec.risk_usd == 25.5
    assert rec.fee_usd == 1.0
    assert rec.shares == 12


def test_rr_derived_when_absent() -> None:
    rec = normalize_row({"symbol": "ABC", "buy": 100, "sl": 90, "tp": 130})
    assert rec.rr == 3.0


def test_rr_explicit_column() -> None:
    assert normalize_row({"symbol": "A", "RR": "2", "buy": 100, "sl": 90, "tp": 130}).rr == 2.0


def test_rr_undefined() -> None:
    assert derive_rr(100, 100, 130) is None
    assert derive_rr(100, 110, 130) is None
    assert derive_rr(100, None, 130) is None


def test_hold_bars_and_day_range() -> None:
    assert normalize_row({"symbol": "A", "time_stop_bars": 12}).hold == 12
    assert normalize_row({"symbol": "A", "hold_days_min": 3, "hold_days_max": 10}).hold == "3-10d"
    assert normalize_row({"symbol": "A"}).hold is None


def test_inline_stats_columns() -> None:
    rec = normalize_row({"symbol": "A", "trades": 30, "score": 2.1, "mean_R": 0.12, "profit_factor": "inf"})
    assert rec.stats == RankingStats(trades=30, score=2.1, mean_r=0.12, pf=math.inf)


def test_nested_stats_object() -> None:
    rec = normalize_row({"symbol": "A", "stats": {"trades": 12, "score": 0.7, "meanR": 0.05, "pf": 1.2}})
    assert rec.stats == RankingStats(trades=12, score=0.7, mean_r=0.05, pf=1.2)


def test_no_stats() -> None:
    assert normalize_row({"symbol": "A", "buy": 1}).stats is None
    assert stats_from_mapping({"symbol": "A", "trades": "", "score": None}) is None


def test_garbage_becomes_none() -> None:
    rec = normalize_row({"symbol": "A", "buy": "abc", "trades": "-3", "score": "nan"})
    assert rec.buy is None
    assert rec.stats is None


def test_empty_row_never_raises() -> None:
    rec = normalize_row({})
    assert rec.universe == ""
    assert rec.symbol == ""
    assert rec.rr is None


def test_overlay() -> None:
    rec = normalize_row(
        {"symbol": "A", "overlay": {"risk_flag": "earnings", "events": ["ER 2026-10-20", ""], "news": ["n1", "n2", "n3"]}}
    )
    assert rec.overlay == RiskOverlay(risk_flag="earnings", events=("ER 2026-10-20",), news=("n1", "n2", "n3"))
