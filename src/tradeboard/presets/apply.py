from __future__ import annotations

"""Filter + sort for display rows.

Sort semantics
--------------
- numbers compare numerically (numeric strings count as numbers)
- other strings compare case-insensitively
- missing values (None, "", "–", NaN, QualityBand.NA) always go last,
  for ascending *and* descending
- placeholder words ("NA", "n/a", "null", "-", ...) count as missing only in
  columns whose other values are numbers; next to real text ("NA" the
  ticker) they sort as text
- mixed columns: numbers before strings, in either direction
- tie-breaks each have their own direction; full ties keep input order
"""

import math
from typing import Any, Callable, Iterable, Sequence, TypeVar

from tradeboard.data.io.cells import CellKind, parse_cell
from tradeboard.data.schema.records import CandidateRecord, record_value
from tradeboard.domain.classify.quality import QualityBand

T = TypeVar("T")

MISSING_TOKENS = {"", "–"}
NA_WORDS = {"na", "n/a", "nan", "-", "—", "none", "null"}

ValueOf = Callable[[Any, str], Any]


def default_value_of(row: Any, key: str) -> Any:
    """Resolve ``key`` on a CandidateRecord or on anything wrapping one (ViewRow)."""
    if isinstance(row, CandidateRecord):
        return record_value(row, key)
    getter = getattr(row, "value", None)
    if callable(getter):
        return getter(key)
    if isinstance(row, dict):
        return row.get(key)
    return getattr(row, key, None)


def _symbol_universe(row: Any) -> tuple[str, str]:
    rec = row if isinstance(row, CandidateRecord) else getattr(row, "record", row)
    if isinstance(rec, dict):
        return str(rec.get("symbol") or ""), str(rec.get("universe") or "")
    return str(getattr(rec, "symbol", "") or ""), str(getattr(rec, "universe", "") or "")


def filter_rows(rows: Iterable[T], query: str | None) -> list[T]:
    """Keep rows whose symbol or universe contains ``query`` (case-insensitive)."""
    q = (query or "").strip().casefold()
    if not q:
        return list(rows)
    out: list[T] = []
    for r in rows:
        symbol, universe = _symbol_universe(r)
        if q in symbol.casefold() or q in universe.casefold():
            out.append(r)
    return out


# sort keys ---------------------------------------------------------------

_NUMBER, _STRING, _NA = 0, 1, 2


def sort_key_of(value: Any) -> tuple[int, Any]:
    """(kind, comparable) for one cell value."""
    if value is None:
        return _NA, None
    # a missing band, not the number 0
    if value is QualityBand.NA:
        return _NA, None
    if isinstance(value, bool):
        return _NUMBER, int(value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return _NA, None
        return _NUMBER, value

    s = str(value).strip()
    if s in MISSING_TOKENS:
        return _NA, None
    cell = parse_cell(s)
    if cell.kind is CellKind.NUMBER:
        return _NUMBER, cell.value
    return _STRING, s.casefold()


def _is_desc(direction: str | None) -> bool:
    return str(direction or "desc").strip().lower() in {"desc", "descending", "d", "-"}


def _sort_pass(rows: list[T], key: str, direction: str, value_of: ValueOf) -> list[T]:
    numbers: list[tuple[Any, T]] = []
    strings: list[tuple[Any, T]] = []
    missing: list[T] = []
    keyed = [(sort_key_of(value_of(r, key)), r) for r in rows]
    text_column = any(kind == _STRING and v not in NA_WORDS for (kind, v), _ in keyed)
    for (kind, v), r in keyed:
        if kind == _STRING and v in NA_WORDS and not text_column:
            kind = _NA
        if kind == _NUMBER:
            numbers.append((v, r))
        elif kind == _STRING:
            strings.append((v, r))
        else:
            missing.append(r)

    desc = _is_desc(direction)
    # list.sort is stable, also with reverse=True
    numbers.sort(key=lambda t: t[0], reverse=desc)
    strings.sort(key=lambda t: t[0], reverse=desc)
    return [r for _, r in numbers] + [r for _, r in strings] + missing


def sort_rows(
    rows: Iterable[T],
    key: str,
    direction: str = "desc",
    tie_breaks: Sequence[tuple[str, str]] = (),
    value_of: ValueOf = default_value_of,
) -> list[T]:
    """Stable multi-key sort (primary key, then tie-breaks in order)."""
    out = list(rows)
    # least significant key first; each stable pass keeps the previous order on ties
    for tb_key, tb_dir in reversed(list(tie_breaks)):
        out = _sort_pass(out, tb_key, tb_dir, value_of)
    return _sort_pass(out, key, direction, value_of)


def parse_sort_spec(spec: str, default_direction: str = "desc") -> tuple[str, str]:
    """'score:desc' -> ('score', 'desc'); 'symbol' -> ('symbol', default)."""
    if ":" in spec:
        name, direction = spec.split(":", 1)
    else:
        name, direction = spec, default_direction
    direction = direction.strip().lower() or default_direction
    if direction not in {"asc", "desc"}:
        direction = "desc" if _is_desc(direction) else "asc"
    return name.strip(), direction
