from __future__ import annotations

"""Declarative view schemas + one generic row builder.

Every view (active/edge candidates, trade/position plan) is a list of
columns ``{key, label, is_numeric, derive, digits}``. The same
``build_row`` formats all of them; exports go through pandas.
No HTML here: the page renders the strings it gets.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

import pandas as pd

from tradeboard.data.schema.records import RiskOverlay

DASH = "–"


def fmt(x: Any, digits: int = 2) -> str:
    """Display format: None/empty/NaN -> '–', numbers with fixed digits, inf -> 'inf'."""
    if x is None:
        return DASH
    if isinstance(x, bool):
        return str(x)
    if isinstance(x, (int, float)):
        if isinstance(x, float) and math.isnan(x):
            return DASH
        if math.isinf(x):
            return "inf" if x > 0 else "-inf"
        return f"{x:.{digits}f}"
    s = str(x)
    return s if s.strip() else DASH


def events_cell(overlay: Optional[RiskOverlay]) -> str:
    """'[flag] — event1 • event2 — news1 • news2' (max. 2 News)."""
    if overlay is None:
        return DASH
    parts: list[str] = []
    if overlay.risk_flag:
        parts.append(f"[{overlay.risk_flag}]")
    if overlay.events:
        parts.append(" • ".join(overlay.events))
    if overlay.news:
        parts.append(" • ".join(overlay.news[:2]))
    return " — ".join(parts) if parts else DASH


@dataclass(frozen=True)
class ColumnSpec:
    key: str
    label: str
    is_numeric: bool = False
    derive: Optional[Callable[[Any], Any]] = None
    digits: int = 2

    def value(self, row: Any) -> Any:
        if self.derive is not None:
            return self.derive(row)
        return row.value(self.key)

    def text(self, row: Any) -> str:
        v = self.value(row)
        if self.is_numeric and not isinstance(v, int):
            return fmt(v, self.digits)
        if v is None or (isinstance(v, str) and not v.strip()):
            return DASH
        return str(v)


def _band(row: Any) -> Any:
    return row.band.label


def _gate(row: Any) -> str:
    return "OK" if row.gate.passed else row.gate.tooltip


def _events(row: Any) -> str:
    return events_cell(row.record.overlay)


IDENTITY = (
    ColumnSpec("universe", "Universe"),
    ColumnSpec("symbol", "Symbol"),
)
SETUP = (
    ColumnSpec("buy", "Buy", True),
    ColumnSpec("sl", "SL", True),
    ColumnSpec("tp", "TP", True),
    ColumnSpec("rr", "RR", True, digits=2),
    ColumnSpec("hold", "Hold"),
)
SIZING = (
    ColumnSpec("shares", "Shares", True),
    ColumnSpec("risk_usd", "Risk $", True, digits=2),
    ColumnSpec("fee_usd", "Fee $", True, digits=2),
)
STATS = (
    ColumnSpec("trades", "Trades", True),
    ColumnSpec("score", "Score", True, digits=3),
    ColumnSpec("meanR", "meanR", True, digits=3),
    ColumnSpec("pf", "PF", True, digits=2),
    ColumnSpec("band", "Band", derive=_band),
    ColumnSpec("gate", "Gate", derive=_gate),
    ColumnSpec("events", "Events/News", derive=_events),
)


@dataclass(frozen=True)
class ViewSchema:
    name: str
    label: str
    csv_key: str
    archive_keys: tuple[tuple[str, ...], ...]
    enrichable: bool
    columns: tuple[ColumnSpec, ...] = field(default=())

    def column(self, key: str) -> Optional[ColumnSpec]:
        return next((c for c in self.columns if c.key == key), None)

    def value_of(self, row: Any, key: str) -> Any:
        """Sort accessor: column value if the view has the column, else the record field."""
        # band sorts by rank and gate by pass/fail, not by their display text
        col = self.column(key)
        if col is None or key in ("band", "gate"):
            return row.value(key)
        return col.value(row)


VIEWS: dict[str, ViewSchema] = {
    "active": ViewSchema(
        name="active",
        label="Candidates — Active",
        csv_key="candidates_active",
        archive_keys=(("active",), ("candidates", "active"), ("candidates_active",)),
        enrichable=True,
        columns=IDENTITY + SETUP + STATS,
    ),
    "edge": ViewSchema(
        name="edge",
        label="Candidates — Edge",
        csv_key="candidates_edge",
        archive_keys=(("edge",), ("candidates", "edge"), ("candidates_edge",)),
        enrichable=True,
        columns=IDENTITY + SETUP + STATS,
    ),
    "trade_plan": ViewSchema(
        name="trade_plan",
        label="Trade Plan",
        csv_key="trade_plan",
        archive_keys=(("trade_plan",), ("plans", "trade"), ("trade",)),
        enrichable=False,
        columns=IDENTITY + SETUP + SIZING + STATS,
    ),
    "position_plan": ViewSchema(
        name="position_plan",
        label="Position Plan",
        csv_key="position_plan",
        archive_keys=(("position_plan",), ("plans", "position"), ("position",)),
        enrichable=False,
        columns=IDENTITY + SETUP + SIZING + STATS,
    ),
}

DEFAULT_VIEW = "active"


def get_view(name: Optional[str]) -> ViewSchema:
    """Unknown view names fall back to the active candidates (like the page's select)."""
    return VIEWS.get((name or "").strip(), VIEWS[DEFAULT_VIEW])


def build_row(row: Any, schema: ViewSchema) -> list[str]:
    return [c.text(row) for c in schema.columns]


def build_table(rows: Sequence[Any], schema: ViewSchema) -> list[list[str]]:
    return [build_row(r, schema) for r in rows]


def rows_to_frame(rows: Sequence[Any], schema: ViewSchema) -> pd.DataFrame:
    """Raw (unformatted) values per column, one DataFrame row per view row."""
    records: list[dict[str, Any]] = []
    for r in rows:
        records.append({c.key: c.value(r) for c in schema.columns})
    df = pd.DataFrame.from_records(records, columns=[c.key for c in schema.columns])
    for c in schema.columns:
        if c.is_numeric:
            df[c.key] = pd.to_numeric(df[c.key], errors="coerce")
    return df


def to_json_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    # Ensure JSON-safe primitives (no numpy types, no NaN/inf)
    out: list[dict[str, Any]] = []
    for _, r in df.iterrows():
        row: dict[str, Any] = {}
        for k, v in r.items():
            if v is None or (not isinstance(v, str) and pd.isna(v)):
                row[k] = None
            elif isinstance(v, (bool, int, float, str)):
                row[k] = v
            else:
                # pandas / numpy scalars
                try:
                    row[k] = v.item()  # type: ignore[attr-defined]
                except (AttributeError, ValueError):
                    row[k] = str(v)
            if isinstance(row[k], float) and math.isinf(row[k]):
                row[k] = "inf" if row[k] > 0 else "-inf"
        out.append(row)
    return out


# meta / links / header texts ------------------------------------------------

def meta_line(descriptor: Optional[Mapping[str, Any]]) -> str:
    d = descriptor or {}
    asof = d.get("asof") or DASH
    strategy = d.get("strategy") or d.get("strategy_id") or DASH
    gen = d.get("generated") or d.get("generated_utc") or DASH
    return f"asof: {asof} • strategy: {strategy} • generated: {gen}"


LINK_LABELS = (
    ("candidates_active", "Candidates Active"),
    ("candidates_edge", "Candidates Edge"),
    ("trade_plan", "Trade Plan"),
    ("position_plan", "Position Plan"),
)


def descriptor_links(descriptor: Optional[Mapping[str, Any]]) -> list[tuple[str, str]]:
    """(label, href) for every CSV the descriptor publishes."""
    paths = (descriptor or {}).get("paths") or {}
    csv = paths.get("csv") if isinstance(paths, Mapping) else None
    if not isinstance(csv, Mapping):
        return []
    return [(label, str(csv[key])) for key, label in LINK_LABELS if csv.get(key)]


def table_title(strategy_name: str, schema: ViewSchema) -> str:
    return f"{(strategy_name or '').strip() or 'Strategy'} — {schema.label}"


def hint_line(shown: int, total: int) -> str:
    return f"Anzahl: {shown} (von {total})"
