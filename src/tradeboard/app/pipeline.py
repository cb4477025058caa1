from __future__ import annotations

"""tradeboard.app.pipeline (pure, synchronous).

records -> enrich (candidate views) -> band + gate -> filter -> sort

Runs in full on every display-affecting change (view, search, gate, sort).
Nothing here does I/O and nothing here raises on missing data.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from tradeboard.config import DEFAULT_MIN_TRADES
from tradeboard.data.enrich.rankings import RankingIndex, enrich
from tradeboard.data.schema.records import CandidateRecord, record_value
from tradeboard.domain.classify.gates import OFF, GatePreset, GateResult, evaluate_gate
from tradeboard.domain.classify.quality import QualityBand, quality_band
from tradeboard.presets.apply import filter_rows, parse_sort_spec, sort_rows
from tradeboard.ui.views import ViewSchema

DEFAULT_SORT = ("score", "desc")
DEFAULT_TIE_BREAKS: tuple[tuple[str, str], ...] = (("trades", "desc"), ("symbol", "asc"))


@dataclass(frozen=True)
class ViewRow:
    record: CandidateRecord
    band: QualityBand
    gate: GateResult

    def value(self, key: str) -> Any:
        if key == "band":
            return self.band
        if key == "gate":
            return self.gate.passed
        return record_value(self.record, key)


@dataclass(frozen=True)
class ViewResult:
    view: str
    rows: list[ViewRow]
    total: int
    gated_out: int = 0
    preset: str = OFF.name
    sort: tuple[str, str] = DEFAULT_SORT
    tie_breaks: tuple[tuple[str, str], ...] = field(default=DEFAULT_TIE_BREAKS)

    @property
    def shown(self) -> int:
        return len(self.rows)


def classify(
    records: Iterable[CandidateRecord],
    preset: Optional[GatePreset] = None,
    min_trades: int = DEFAULT_MIN_TRADES,
) -> list[ViewRow]:
    return [ViewRow(r, quality_band(r.stats, min_trades), evaluate_gate(r, preset)) for r in records]


def build_view(
    records: Sequence[CandidateRecord],
    schema: ViewSchema,
    *,
    index: Optional[RankingIndex] = None,
    preset: Optional[GatePreset] = None,
    query: str | None = None,
    sort: str | tuple[str, str] | None = None,
    tie_breaks: Sequence[str | tuple[str, str]] | None = None,
    min_trades: int = DEFAULT_MIN_TRADES,
    hide_gated: bool = True,
) -> ViewResult:
    """Produce the display-ready sequence for one view.

    ``hide_gated=False`` keeps gate failures in the output (with reasons) so a
    page can grey them out instead of hiding them.
    """
    preset = preset or OFF
    work = list(records)
    if schema.enrichable and index is not None:
        work = enrich(work, index)

    rows = classify(work, preset, min_trades)
    total = len(rows)

    gated_out = 0
    if hide_gated and not preset.is_off:
        kept = [r for r in rows if r.gate.passed]
        gated_out = len(rows) - len(kept)
        rows = kept

    rows = filter_rows(rows, query)

    key, direction = _as_spec(sort) if sort else DEFAULT_SORT
    tbs = tuple(_as_spec(t) for t in tie_breaks) if tie_breaks is not None else DEFAULT_TIE_BREAKS
    rows = sort_rows(rows, key, direction, tbs, value_of=schema.value_of)

    return ViewResult(
        view=schema.name,
        rows=rows,
        total=total,
        gated_out=gated_out,
        preset=preset.name,
        sort=(key, direction),
        tie_breaks=tbs,
    )


def _as_spec(spec: str | tuple[str, str]) -> tuple[str, str]:
    if isinstance(spec, tuple):
        return spec[0], spec[1]
    return parse_sort_spec(spec)
