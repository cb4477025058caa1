from __future__ import annotations

from typing import Any, Mapping

from tradeboard.data.io.cells import to_int, to_number, to_text
from tradeboard.data.schema.records import CandidateRecord, RankingStats, RiskOverlay, derive_rr

# canonical -> mögliche Quellspalten (Priorität = Reihenfolge)
# The first alias that is *present* in the row wins, even when its value is empty.
COLUMN_MAP: dict[str, tuple[str, ...]] = {
    # identity
    "universe": ("universe", "market_symbol", "index"),
    "symbol": ("symbol", "ticker"),

    # setup
    "buy": ("buy", "entry", "entry_price"),
    "sl": ("sl", "stop", "stop_price"),
    "tp": ("tp", "target", "tp_price"),
    "rr": ("rr", "RR"),
    "hold": ("time_stop_bars", "hold", "hold_bars"),

    # sizing (trade/position plans)
    "shares": ("shares",),
    "risk_usd": ("risk_usd", "risk$"),
    "fee_usd": ("fee_usd", "fee$"),

    # ranking stats (inline; the join index overrides them for candidate views)
    "trades": ("trades", "n_trades", "num_trades"),
    "score": ("score",),
    "mean_r": ("mean_R", "meanR"),
    "pf": ("profit_factor", "pf"),
}

# raw text in these source columns: symbols like "005930" keep their leading zeros
IDENTITY_COLUMNS = COLUMN_MAP["universe"] + COLUMN_MAP["symbol"]

NUMERIC_CANONICAL = {"buy", "sl", "tp", "rr", "risk_usd", "fee_usd", "score", "mean_r"}
INTEGER_CANONICAL = {"shares", "trades"}
STATS_CANONICAL = ("trades", "score", "mean_r", "pf")


def resolve(row: Mapping[str, Any], canonical: str) -> tuple[bool, Any]:
    """Return (found, value) for the first alias present in ``row``."""
    for alias in COLUMN_MAP.get(canonical, ()):
        if alias in row:
            return True, row[alias]
    return False, None


def pick(row: Mapping[str, Any], canonical: str) -> Any:
    return resolve(row, canonical)[1]


def coerce(canonical: str, value: Any) -> Any:
    if canonical in INTEGER_CANONICAL:
        n = to_int(value)
        if canonical == "trades" and n is not None and n < 0:
            return None
        return n
    if canonical == "pf" or canonical in NUMERIC_CANONICAL:
        v = to_number(value, allow_inf=canonical == "pf")
        return None if v is None else float(v)
    return to_text(value)


def _hold(row: Mapping[str, Any]) -> int | str | None:
    raw = pick(row, "hold")
    if raw is not None and to_text(raw) != "":
        n = to_number(raw)
        if n is not None and float(n).is_integer():
            return int(n)
        return to_text(raw)

    # archive rows carry a day range instead of bars
    lo, hi = to_int(row.get("hold_days_min")), to_int(row.get("hold_days_max"))
    if lo is not None and hi is not None:
        return f"{lo}-{hi}d"
    return None


def stats_from_mapping(src: Mapping[str, Any]) -> RankingStats | None:
    """Build RankingStats from a row or a nested ``stats`` object; None if it carries none."""
    found_any = False
    values: dict[str, Any] = {}
    for key in STATS_CANONICAL:
        found, raw = resolve(src, key)
        found_any = found_any or found
        values[key] = coerce(key, raw)
    if not found_any:
        return None
    stats = RankingStats(**values)
    return None if stats.is_empty else stats


def _overlay(raw: Any) -> RiskOverlay | None:
    if not isinstance(raw, Mapping):
        return None

    def _texts(v: Any) -> tuple[str, ...]:
        if not isinstance(v, (list, tuple)):
            return ()
        return tuple(t for t in (to_text(x) for x in v) if t)

    flag = to_text(raw.get("risk_flag")) or None
    return RiskOverlay(risk_flag=flag, events=_texts(raw.get("events")), news=_texts(raw.get("news")))


def normalize_row(row: Mapping[str, Any]) -> CandidateRecord:
    """Map a raw parsed row (CSV or archive JSON) to a CandidateRecord.

    Total: unknown/missing/garbage values become None, nothing raises.
    """
    buy = coerce("buy", pick(row, "buy"))
    sl = coerce("sl", pick(row, "sl"))
    tp = coerce("tp", pick(row, "tp"))
    rr = coerce("rr", pick(row, "rr"))
    if rr is None:
        rr = derive_rr(buy, sl, tp)

    nested = row.get("stats")
    stats = stats_from_mapping(nested) if isinstance(nested, Mapping) else stats_from_mapping(row)

    return CandidateRecord(
        universe=coerce("universe", pick(row, "universe")),
        symbol=coerce("symbol", pick(row, "symbol")),
        buy=buy,
        sl=sl,
        tp=tp,
        rr=rr,
        hold=_hold(row),
        shares=coerce("shares", pick(row, "shares")),
        risk_usd=coerce("risk_usd", pick(row, "risk_usd")),
        fee_usd=coerce("fee_usd", pick(row, "fee_usd")),
        stats=stats,
        overlay=_overlay(row.get("overlay")),
    )


def normalize_rows(rows: list[Mapping[str, Any]]) -> list[CandidateRecord]:
    return [normalize_row(r) for r in rows]
